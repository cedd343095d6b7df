"""Недельный расчёт выплаты сотруднику: смены, долг недели, корректировки."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional, Tuple

from core.logging.logger import logger
from domain.entities import (
    AdjustmentKind,
    AdjustmentRecord,
    DateWindow,
    DebtRecord,
    PayrollBreakdown,
    SalaryRuleBook,
    ShiftRecord,
    StaffMember,
)
from shared.services.record_store import RecordStore

NEGATIVE_PAYOUT_KEEP = "keep"
NEGATIVE_PAYOUT_CLAMP = "clamp"


def _flat_rate_pay(
    shifts: Iterable[ShiftRecord],
    base_pay_per_shift: int,
    overrides: Mapping[str, int],
) -> Tuple[int, Decimal]:
    shift_count = 0
    base_pay = Decimal(0)
    for shift in shifts:
        shift_count += 1
        base_pay += Decimal(overrides.get(shift.designation, base_pay_per_shift))
    return shift_count, base_pay


def _rule_based_pay(
    shifts: Iterable[ShiftRecord],
    rule_book: SalaryRuleBook,
    base_pay_per_shift: int,
    overrides: Mapping[str, int],
) -> Tuple[int, Decimal, Decimal]:
    """Смена = (точка, дата, тип смены) с положительной выручкой.

    Несколько записей одной смены складываются в общий оборот, по нему
    проверяются пороги авто-бонусов. Записи без известной точки не считаются.
    """
    turnover: Dict[Tuple[str, date, str], Decimal] = {}
    for shift in shifts:
        code = rule_book.company_code(shift.company_id)
        if code is None or shift.revenue <= 0:
            continue
        key = (code, shift.date, shift.designation)
        turnover[key] = turnover.get(key, Decimal(0)) + shift.revenue

    base_pay = Decimal(0)
    auto_bonus = Decimal(0)
    for (code, _, designation), amount in turnover.items():
        rule = rule_book.rule_for(code, designation)
        if rule is not None and rule.base_per_shift is not None:
            base_pay += rule.base_per_shift
        else:
            base_pay += Decimal(overrides.get(designation, base_pay_per_shift))
        if rule is not None:
            auto_bonus += rule.bonus_for(amount)
    return len(turnover), base_pay, auto_bonus


def calculate_breakdown(
    staff_id: str,
    window: DateWindow,
    shifts: Iterable[ShiftRecord],
    debt: Optional[DebtRecord],
    adjustments: Iterable[AdjustmentRecord],
    base_pay_per_shift: int,
    shift_rate_overrides: Optional[Mapping[str, int]] = None,
    negative_payout_policy: str = NEGATIVE_PAYOUT_KEEP,
    rule_book: Optional[SalaryRuleBook] = None,
) -> PayrollBreakdown:
    """Чистый расчёт по уже загруженным записям.

    net = база + авто-бонусы + премии − штрафы − авансы − долг недели − разовые долги

    Без ``rule_book`` база = число смен × ставка, авто-бонусов нет.
    """
    overrides = shift_rate_overrides or {}
    worked = [
        s for s in shifts
        if s.staff_id == staff_id and s.date in window and s.is_worked
    ]

    auto_bonus = Decimal(0)
    if rule_book is None:
        shift_count, base_pay = _flat_rate_pay(worked, base_pay_per_shift, overrides)
    else:
        shift_count, base_pay, auto_bonus = _rule_based_pay(
            worked, rule_book, base_pay_per_shift, overrides
        )

    weekly_debt = Decimal(0)
    if debt is not None and debt.is_active and debt.week_start == window.start:
        weekly_debt = debt.amount

    # по корзине на каждый тип, новый тип появится здесь автоматически
    totals: Dict[AdjustmentKind, Decimal] = {kind: Decimal(0) for kind in AdjustmentKind}
    used = []
    for adjustment in adjustments:
        if adjustment.staff_id != staff_id or adjustment.date not in window:
            continue
        totals[adjustment.kind] += adjustment.amount
        used.append(adjustment)

    net = (
        base_pay
        + auto_bonus
        + totals[AdjustmentKind.BONUS]
        - totals[AdjustmentKind.FINE]
        - totals[AdjustmentKind.ADVANCE]
        - weekly_debt
        - totals[AdjustmentKind.DEBT]
    )
    if negative_payout_policy == NEGATIVE_PAYOUT_CLAMP and net < 0:
        net = Decimal(0)

    return PayrollBreakdown(
        shift_count=shift_count,
        base_pay=base_pay,
        auto_bonus_total=auto_bonus,
        bonus_total=totals[AdjustmentKind.BONUS],
        fine_total=totals[AdjustmentKind.FINE],
        advance_total=totals[AdjustmentKind.ADVANCE],
        weekly_debt=weekly_debt,
        debt_adjustment_total=totals[AdjustmentKind.DEBT],
        net_payout=net,
        adjustments=tuple(used),
    )


class PayrollAggregator:
    """Собирает записи сотрудника за неделю и считает выплату."""

    def __init__(
        self,
        store: RecordStore,
        base_pay_per_shift: int,
        shift_rate_overrides: Optional[Mapping[str, int]] = None,
        negative_payout_policy: str = NEGATIVE_PAYOUT_KEEP,
        use_salary_rules: bool = False,
    ):
        if negative_payout_policy not in (NEGATIVE_PAYOUT_KEEP, NEGATIVE_PAYOUT_CLAMP):
            raise ValueError(f"Unknown negative payout policy: {negative_payout_policy}")
        self.store = store
        self.base_pay_per_shift = base_pay_per_shift
        self.shift_rate_overrides = dict(shift_rate_overrides or {})
        self.negative_payout_policy = negative_payout_policy
        self.use_salary_rules = use_salary_rules
        self._rule_book: Optional[SalaryRuleBook] = None

    async def get_rule_book(self) -> Optional[SalaryRuleBook]:
        """Правила и точки загружаются один раз на экземпляр (на один прогон)."""
        if not self.use_salary_rules:
            return None
        if self._rule_book is None:
            rules = await self.store.list_salary_rules()
            companies = await self.store.list_companies()
            self._rule_book = SalaryRuleBook(rules, companies)
            logger.info("Salary rules loaded", rules=len(rules), companies=len(companies))
        return self._rule_book

    async def aggregate(self, member: StaffMember, window: DateWindow) -> PayrollBreakdown:
        """
        Расчёт за неделю.

        Raises:
            UpstreamFetchError: если хранилище не отдало какую-либо выборку
        """
        rule_book = await self.get_rule_book()
        shifts = await self.store.list_shifts_in_range(member.id, window)
        debt = await self.store.find_active_debt(member.id, window.start)
        adjustments = await self.store.list_adjustments_in_range(member.id, window)

        breakdown = calculate_breakdown(
            staff_id=member.id,
            window=window,
            shifts=shifts,
            debt=debt,
            adjustments=adjustments,
            base_pay_per_shift=self.base_pay_per_shift,
            shift_rate_overrides=self.shift_rate_overrides,
            negative_payout_policy=self.negative_payout_policy,
            rule_book=rule_book,
        )

        logger.debug(
            "Payroll aggregated",
            staff_id=member.id,
            window=str(window),
            shift_count=breakdown.shift_count,
            net_payout=float(breakdown.net_payout),
        )
        return breakdown
