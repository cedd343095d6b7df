"""
Схемы Pydantic для API недельной рассылки
"""
import re
from datetime import date
from decimal import Decimal
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import List, Optional

from domain.entities import PayrollBreakdown, RunReport


class PeriodSchema(BaseModel):
    date_from: date
    date_to: date


class StaffRef(BaseModel):
    id: str
    name: str


class DispatchErrorSchema(StaffRef):
    error: str


class WeeklyRunResponse(BaseModel):
    """Отчёт о прогоне рассылки."""
    ok: bool = True
    dry_run: bool
    period: PeriodSchema
    total_targets: int
    sent: int
    failed: int
    skipped_no_chat_id: List[StaffRef]
    errors: List[DispatchErrorSchema]

    @classmethod
    def from_report(cls, report: RunReport) -> "WeeklyRunResponse":
        return cls.model_validate(report.to_dict())


class LastItemSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    qty: int = Field(1, ge=1)
    total: Decimal = Field(..., ge=0)


class SalarySnapshotRequest(BaseModel):
    """Запрос мгновенного снимка зарплаты."""
    operator_id: str = Field(..., min_length=1, max_length=64, description="ID сотрудника или telegram_chat_id")
    week_start: Optional[date] = Field(
        None,
        validation_alias=AliasChoices("week_start", "date_from"),
        description="Любая дата недели, по умолчанию текущая неделя",
    )
    last_item: Optional[LastItemSchema] = None
    dry_run: bool = False

    @field_validator("operator_id")
    @classmethod
    def validate_operator_id(cls, v):
        v = v.strip()
        if not re.fullmatch(r"[A-Za-z0-9_-]+", v):
            raise ValueError("operator_id должен содержать только буквы, цифры, '-' и '_'")
        return v


class BreakdownSchema(BaseModel):
    shift_count: int
    base_pay: float
    auto_bonus_total: float = 0
    bonus_total: float
    fine_total: float
    advance_total: float
    weekly_debt: float
    debt_adjustment_total: float
    net_payout: float

    @classmethod
    def from_breakdown(cls, breakdown: PayrollBreakdown) -> "BreakdownSchema":
        return cls.model_validate(breakdown.to_dict())


class SalarySnapshotResponse(BaseModel):
    ok: bool = True
    sent: bool
    operator_id: str
    period: PeriodSchema
    breakdown: BreakdownSchema
    text: Optional[str] = None


class ErrorResponse(BaseModel):
    """Схема для ответа с ошибкой."""
    ok: bool = False
    error: str
    code: str
