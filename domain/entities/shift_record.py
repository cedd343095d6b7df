"""Запись о смене (посещаемость) с выручкой смены."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

from domain.entities.base import clean_text, parse_amount, parse_date

REVENUE_COLUMNS = ("cash_amount", "kaspi_amount", "card_amount")


class ShiftType(str, Enum):
    DAY = "day"
    NIGHT = "night"


@dataclass(frozen=True)
class ShiftRecord:
    staff_id: str
    date: date
    shift: Optional[Union[ShiftType, str]] = None
    company_id: Optional[str] = None
    revenue: Decimal = Decimal(0)

    @property
    def designation(self) -> Optional[str]:
        """Тип смены строкой в нижнем регистре (``day``/``night``/любой другой)."""
        if self.shift is None:
            return None
        value = self.shift.value if isinstance(self.shift, ShiftType) else str(self.shift)
        return value.strip().lower() or None

    @property
    def is_worked(self) -> bool:
        """Смена засчитывается, только если тип смены указан."""
        return self.designation is not None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ShiftRecord":
        return cls(
            staff_id=str(row["operator_id"]),
            date=parse_date(row.get("date")),
            shift=clean_text(row.get("shift")),
            company_id=clean_text(row.get("company_id")),
            revenue=sum((parse_amount(row.get(column)) for column in REVENUE_COLUMNS), Decimal(0)),
        )
