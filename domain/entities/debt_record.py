"""Недельный долг сотрудника, привязанный к понедельнику недели."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from domain.entities.base import clean_text, parse_amount, parse_date, parse_datetime

DEBT_STATUS_ACTIVE = "active"


@dataclass(frozen=True)
class DebtRecord:
    id: str
    staff_id: str
    week_start: date
    amount: Decimal
    status: str = DEBT_STATUS_ACTIVE
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == DEBT_STATUS_ACTIVE

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "DebtRecord":
        return cls(
            id=str(row.get("id", "")),
            staff_id=str(row["operator_id"]),
            week_start=parse_date(row.get("week_start")),
            amount=parse_amount(row.get("amount")),
            status=clean_text(row.get("status")) or "",
            created_at=parse_datetime(row.get("created_at")),
        )
