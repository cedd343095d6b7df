"""Правила оплаты смены: ставка по точке и типу смены, авто-бонусы за выручку."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple

from domain.entities.base import clean_text, parse_amount


def _optional_amount(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return parse_amount(value)


@dataclass(frozen=True)
class Company:
    """Точка (компания), к которой привязана выручка смены."""
    id: str
    code: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Company":
        return cls(id=str(row["id"]), code=(clean_text(row.get("code")) or "").lower())


@dataclass(frozen=True)
class SalaryRule:
    """
    Правило для пары (точка, тип смены).

    Порог с пустым или нулевым оборотом не действует. Бонусы двух порогов
    суммируются, если выручка смены дотянула до обоих.
    """
    company_code: str
    shift_type: str
    base_per_shift: Optional[Decimal] = None
    threshold1_turnover: Optional[Decimal] = None
    threshold1_bonus: Decimal = Decimal(0)
    threshold2_turnover: Optional[Decimal] = None
    threshold2_bonus: Decimal = Decimal(0)

    def bonus_for(self, turnover: Decimal) -> Decimal:
        bonus = Decimal(0)
        for threshold, amount in (
            (self.threshold1_turnover, self.threshold1_bonus),
            (self.threshold2_turnover, self.threshold2_bonus),
        ):
            if threshold and turnover >= threshold:
                bonus += amount
        return bonus

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SalaryRule":
        return cls(
            company_code=(clean_text(row.get("company_code")) or "").lower(),
            shift_type=(clean_text(row.get("shift_type")) or "").lower(),
            base_per_shift=_optional_amount(row.get("base_per_shift")),
            threshold1_turnover=_optional_amount(row.get("threshold1_turnover")),
            threshold1_bonus=parse_amount(row.get("threshold1_bonus")),
            threshold2_turnover=_optional_amount(row.get("threshold2_turnover")),
            threshold2_bonus=parse_amount(row.get("threshold2_bonus")),
        )


class SalaryRuleBook:
    """Справочник правил и точек для расчёта по выручке."""

    def __init__(self, rules: Iterable[SalaryRule], companies: Iterable[Company]):
        self._rules: Dict[Tuple[str, str], SalaryRule] = {
            (r.company_code, r.shift_type): r for r in rules
        }
        self._codes: Dict[str, str] = {c.id: c.code for c in companies if c.code}

    def company_code(self, company_id: Optional[str]) -> Optional[str]:
        if company_id is None:
            return None
        return self._codes.get(str(company_id))

    def rule_for(self, company_code: str, shift_type: str) -> Optional[SalaryRule]:
        return self._rules.get((company_code, shift_type))

    def __len__(self) -> int:
        return len(self._rules)
