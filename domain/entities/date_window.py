"""Расчётная неделя Пн–Вс."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict

WEEK_LENGTH_DAYS = 7


@dataclass(frozen=True)
class DateWindow:
    """Включительный диапазон дат: ровно 7 дней, с понедельника по воскресенье."""

    start: date
    end: date

    def __post_init__(self):
        if self.start.weekday() != 0:
            raise ValueError(f"Window must start on Monday, got {self.start.isoformat()}")
        if self.end - self.start != timedelta(days=WEEK_LENGTH_DAYS - 1):
            raise ValueError(
                f"Window must span {WEEK_LENGTH_DAYS} days: {self.start.isoformat()}..{self.end.isoformat()}"
            )

    @classmethod
    def starting(cls, monday: date) -> "DateWindow":
        return cls(start=monday, end=monday + timedelta(days=WEEK_LENGTH_DAYS - 1))

    @classmethod
    def containing(cls, day: date) -> "DateWindow":
        return cls.starting(day - timedelta(days=day.weekday()))

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def to_dict(self) -> Dict[str, str]:
        return {"date_from": self.start.isoformat(), "date_to": self.end.isoformat()}

    def __str__(self) -> str:
        return f"{self.start.isoformat()} — {self.end.isoformat()}"
