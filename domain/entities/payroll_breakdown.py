"""Результат недельного расчёта по одному сотруднику."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Tuple

from domain.entities.payroll_adjustment import AdjustmentRecord


@dataclass(frozen=True)
class PayrollBreakdown:
    shift_count: int = 0
    base_pay: Decimal = Decimal(0)
    auto_bonus_total: Decimal = Decimal(0)  # только при расчёте по правилам
    bonus_total: Decimal = Decimal(0)
    fine_total: Decimal = Decimal(0)
    advance_total: Decimal = Decimal(0)
    weekly_debt: Decimal = Decimal(0)
    debt_adjustment_total: Decimal = Decimal(0)
    net_payout: Decimal = Decimal(0)
    adjustments: Tuple[AdjustmentRecord, ...] = field(default=(), compare=False)

    @property
    def combined_debt(self) -> Decimal:
        """Долг недели + разовые долги из корректировок."""
        return self.weekly_debt + self.debt_adjustment_total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shift_count": self.shift_count,
            "base_pay": float(self.base_pay),
            "auto_bonus_total": float(self.auto_bonus_total),
            "bonus_total": float(self.bonus_total),
            "fine_total": float(self.fine_total),
            "advance_total": float(self.advance_total),
            "weekly_debt": float(self.weekly_debt),
            "debt_adjustment_total": float(self.debt_adjustment_total),
            "net_payout": float(self.net_payout),
        }
