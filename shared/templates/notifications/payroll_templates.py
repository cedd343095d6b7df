"""Шаблон недельного отчёта по зарплате для Telegram (parse_mode=HTML)."""

from decimal import Decimal, ROUND_DOWN
from html import escape
from string import Template
from typing import Any, Iterable, List, Optional, Union

from domain.entities import DateWindow, PayrollBreakdown, StaffMember

SEPARATOR = "------------------"

Number = Union[int, float, Decimal]


def escape_html(value: Any) -> str:
    """Экранирование пользовательского текста под Telegram HTML."""
    return escape(str(value), quote=False)


def format_money(amount: Optional[Number], currency_suffix: str = "₸") -> str:
    """Целая часть без округления, пробел как разделитель тысяч: 23 000 ₸."""
    value = Decimal(str(amount or 0)).to_integral_value(rounding=ROUND_DOWN)
    text = f"{int(value):,}".replace(",", " ")
    return f"{text} {currency_suffix}" if currency_suffix else text


class WeeklyPayrollTemplates:
    """Строки шаблона. Порядок секций фиксирован."""

    HEADER = Template("📌 <b>Недельный отчёт</b>")
    NAME = Template("👤 <b>$name</b>")
    PERIOD = Template("📅 Период: <b>$date_from — $date_to</b>")
    SHIFTS = Template("📌 Смен: <b>$shifts</b>")
    BASE = Template("💼 База: <b>$amount</b>")
    AUTO_BONUS = Template("✅ Авто-бонусы: <b>+$amount</b>")
    BONUS = Template("🎁 Премии: <b>+$amount</b>")
    FINE = Template("⚠️ Штрафы: <b>−$amount</b>")
    ADVANCE = Template("💸 Авансы: <b>−$amount</b>")
    DEBT = Template("🧾 Долги: <b>−$amount</b>")
    NET = Template("💰 <b>К выплате: $amount</b>")

    NOTES_HEADER = "📝 Комментарии:"
    NOTE = Template("• $label $amount ($day): $comment")

    LAST_ITEM = Template("🛒 Сегодня в долг: <b>$name</b> x$qty = <b>$total</b>")


class WeeklyPayrollMessageFormatter:
    """Рендеринг расчёта в текст сообщения."""

    def __init__(self, currency_suffix: str = "₸", include_notes: bool = False):
        self.currency_suffix = currency_suffix
        self.include_notes = include_notes

    def money(self, amount: Optional[Number]) -> str:
        return format_money(amount, self.currency_suffix)

    def render(
        self,
        member: StaffMember,
        window: DateWindow,
        breakdown: PayrollBreakdown,
        extra_lines: Iterable[str] = (),
    ) -> str:
        """
        Args:
            extra_lines: уже готовые (экранированные) строки после периода

        Returns:
            Текст сообщения с HTML-разметкой Telegram
        """
        t = WeeklyPayrollTemplates
        lines: List[str] = [
            t.HEADER.substitute(),
            t.NAME.substitute(name=escape_html(member.display_name)),
            t.PERIOD.substitute(date_from=window.start.isoformat(), date_to=window.end.isoformat()),
        ]
        lines.extend(extra_lines)
        lines.extend([
            SEPARATOR,
            t.SHIFTS.substitute(shifts=breakdown.shift_count),
            t.BASE.substitute(amount=self.money(breakdown.base_pay)),
        ])
        if breakdown.auto_bonus_total:
            lines.append(t.AUTO_BONUS.substitute(amount=self.money(breakdown.auto_bonus_total)))
        lines.extend([
            t.BONUS.substitute(amount=self.money(breakdown.bonus_total)),
            t.FINE.substitute(amount=self.money(breakdown.fine_total)),
            t.ADVANCE.substitute(amount=self.money(breakdown.advance_total)),
            t.DEBT.substitute(amount=self.money(breakdown.combined_debt)),
        ])

        if self.include_notes:
            notes = [
                t.NOTE.substitute(
                    label=a.get_type_label(),
                    amount=self.money(a.amount),
                    day=a.date.isoformat(),
                    comment=escape_html(a.comment),
                )
                for a in breakdown.adjustments
                if a.comment
            ]
            if notes:
                lines.append(t.NOTES_HEADER)
                lines.extend(notes)

        lines.append(SEPARATOR)
        lines.append(t.NET.substitute(amount=self.money(breakdown.net_payout)))
        return "\n".join(lines)

    def render_last_item(self, name: str, qty: Number, total: Number) -> str:
        """Строка «сегодня в долг» для мгновенного снимка."""
        return WeeklyPayrollTemplates.LAST_ITEM.substitute(
            name=escape_html(name),
            qty=qty,
            total=self.money(total),
        )
