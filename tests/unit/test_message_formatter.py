"""Юнит-тесты для шаблона недельного отчёта."""

from decimal import Decimal

import pytest

from domain.entities import AdjustmentKind, PayrollBreakdown
from shared.templates.notifications.payroll_templates import (
    SEPARATOR,
    WeeklyPayrollMessageFormatter,
    escape_html,
    format_money,
)
from tests.utils.fakes import DataFactory


@pytest.fixture
def breakdown():
    return PayrollBreakdown(
        shift_count=3,
        base_pay=Decimal(24000),
        bonus_total=Decimal(2000),
        fine_total=Decimal(500),
        advance_total=Decimal(1000),
        weekly_debt=Decimal(1500),
        debt_adjustment_total=Decimal(250),
        net_payout=Decimal(22750),
    )


@pytest.mark.parametrize(
    "amount,expected",
    [
        (0, "0 ₸"),
        (None, "0 ₸"),
        (999, "999 ₸"),
        (23000, "23 000 ₸"),
        (Decimal("1234567.99"), "1 234 567 ₸"),
        (Decimal("-1500.75"), "-1 500 ₸"),
        (2500.9, "2 500 ₸"),
    ],
)
def test_format_money(amount, expected):
    assert format_money(amount) == expected


def test_format_money_without_suffix():
    assert format_money(10000, "") == "10 000"


def test_escape_html():
    assert escape_html("A&B <i>x</i>") == "A&amp;B &lt;i&gt;x&lt;/i&gt;"
    assert escape_html('"quoted"') == '"quoted"'


def test_render_section_order(window, breakdown):
    formatter = WeeklyPayrollMessageFormatter()
    member = DataFactory.staff(name="Айгерим")

    lines = formatter.render(member, window, breakdown).split("\n")

    assert lines[0] == "📌 <b>Недельный отчёт</b>"
    assert lines[1] == "👤 <b>Айгерим</b>"
    assert lines[2] == "📅 Период: <b>2026-10-05 — 2026-10-11</b>"
    assert lines[3] == SEPARATOR
    assert lines[4] == "📌 Смен: <b>3</b>"
    assert lines[5] == "💼 База: <b>24 000 ₸</b>"
    assert lines[6] == "🎁 Премии: <b>+2 000 ₸</b>"
    assert lines[7] == "⚠️ Штрафы: <b>−500 ₸</b>"
    assert lines[8] == "💸 Авансы: <b>−1 000 ₸</b>"
    assert lines[9] == "🧾 Долги: <b>−1 750 ₸</b>"
    assert lines[10] == SEPARATOR
    assert lines[11] == "💰 <b>К выплате: 22 750 ₸</b>"
    assert len(lines) == 12


def test_render_escapes_display_name(window, breakdown):
    formatter = WeeklyPayrollMessageFormatter()
    member = DataFactory.staff(name="<script>alert(1)</script> & Co")

    text = formatter.render(member, window, breakdown)

    assert "<script>" not in text
    assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; Co" in text


def test_render_prefers_short_name(window, breakdown):
    member = DataFactory.staff(name="Айгерим Серикова", short_name="Айгерим С.")

    text = WeeklyPayrollMessageFormatter().render(member, window, breakdown)

    assert "👤 <b>Айгерим С.</b>" in text


def test_render_negative_payout(window):
    formatter = WeeklyPayrollMessageFormatter()
    breakdown = PayrollBreakdown(weekly_debt=Decimal(3000), net_payout=Decimal(-3000))

    text = formatter.render(DataFactory.staff(), window, breakdown)

    assert text.endswith("💰 <b>К выплате: -3 000 ₸</b>")


def test_render_with_notes_escapes_comments(window):
    f = DataFactory
    adjustments = (
        f.adjustment("op-1", window.start, AdjustmentKind.FINE, 500, comment="опоздание <15 мин>", id="a1"),
        f.adjustment("op-1", window.start, AdjustmentKind.BONUS, 1000, id="a2"),
    )
    breakdown = PayrollBreakdown(
        fine_total=Decimal(500), bonus_total=Decimal(1000), net_payout=Decimal(500), adjustments=adjustments
    )
    formatter = WeeklyPayrollMessageFormatter(include_notes=True)

    lines = formatter.render(f.staff(), window, breakdown).split("\n")

    assert "📝 Комментарии:" in lines
    assert "• Штраф 500 ₸ (2026-10-05): опоздание &lt;15 мин&gt;" in lines
    # корректировка без комментария в заметки не попадает
    assert not any(line.startswith("• Премия") for line in lines)
    assert lines.index("📝 Комментарии:") < lines.index(SEPARATOR, 4)


def test_notes_are_hidden_by_default(window):
    adjustments = (
        DataFactory.adjustment("op-1", window.start, AdjustmentKind.FINE, 500, comment="опоздание"),
    )
    breakdown = PayrollBreakdown(fine_total=Decimal(500), adjustments=adjustments)

    text = WeeklyPayrollMessageFormatter().render(DataFactory.staff(), window, breakdown)

    assert "опоздание" not in text


def test_extra_lines_follow_period(window, breakdown):
    formatter = WeeklyPayrollMessageFormatter()
    extra = formatter.render_last_item("Кофе <большой>", 2, 1200)

    lines = formatter.render(DataFactory.staff(), window, breakdown, extra_lines=[extra]).split("\n")

    assert lines[3] == "🛒 Сегодня в долг: <b>Кофе &lt;большой&gt;</b> x2 = <b>1 200 ₸</b>"
    assert lines[4] == SEPARATOR


def test_auto_bonus_line_follows_base(window):
    breakdown = PayrollBreakdown(
        shift_count=2,
        base_pay=Decimal(18000),
        auto_bonus_total=Decimal(3000),
        net_payout=Decimal(21000),
    )

    lines = WeeklyPayrollMessageFormatter().render(DataFactory.staff(), window, breakdown).split("\n")

    assert len(lines) == 13
    assert lines[5] == "💼 База: <b>18 000 ₸</b>"
    assert lines[6] == "✅ Авто-бонусы: <b>+3 000 ₸</b>"
    assert lines[7].startswith("🎁 Премии")
    assert lines[-1] == "💰 <b>К выплате: 21 000 ₸</b>"
