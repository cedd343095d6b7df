"""Модель корректировки зарплаты за неделю."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from domain.entities.base import clean_text, parse_amount, parse_date


class AdjustmentKind(str, Enum):
    """
    Типы корректировок:
    - bonus: премия (плюс)
    - fine: штраф (минус)
    - advance: аванс (минус)
    - debt: разовый долг (минус)
    """
    BONUS = "bonus"
    FINE = "fine"
    ADVANCE = "advance"
    DEBT = "debt"


ADJUSTMENT_KIND_LABELS = {
    AdjustmentKind.BONUS: "Премия",
    AdjustmentKind.FINE: "Штраф",
    AdjustmentKind.ADVANCE: "Аванс",
    AdjustmentKind.DEBT: "Долг",
}


@dataclass(frozen=True)
class AdjustmentRecord:
    """Корректировка. Неизвестный ``kind`` — ошибка при создании записи."""

    id: str
    staff_id: str
    date: date
    kind: AdjustmentKind
    amount: Decimal
    comment: Optional[str] = None

    def get_type_label(self) -> str:
        return ADJUSTMENT_KIND_LABELS[self.kind]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AdjustmentRecord":
        return cls(
            id=str(row.get("id", "")),
            staff_id=str(row["operator_id"]),
            date=parse_date(row.get("date")),
            kind=AdjustmentKind(str(row.get("kind", "")).strip().lower()),
            amount=parse_amount(row.get("amount")),
            comment=clean_text(row.get("comment")),
        )

    def __repr__(self) -> str:
        return f"<AdjustmentRecord(id='{self.id}', kind='{self.kind.value}', amount={self.amount}, staff_id='{self.staff_id}')>"
