"""
Фейки и фабрики данных для тестов недельной рассылки
"""
import time
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Set

from core.exceptions import DispatchError, UpstreamFetchError
from domain.entities import (
    AdjustmentKind,
    AdjustmentRecord,
    Company,
    DateWindow,
    DebtRecord,
    SalaryRule,
    ShiftRecord,
    ShiftType,
    StaffMember,
    StaffRole,
)
from shared.services.record_store import RecordStore


class DataFactory:
    """Фабрика тестовых записей"""

    @staticmethod
    def staff(
        id: str = "op-1",
        name: str = "Айгерим",
        role: Optional[StaffRole] = StaffRole.WORKER,
        chat_id: Optional[str] = "100001",
        is_active: bool = True,
        short_name: Optional[str] = None,
    ) -> StaffMember:
        return StaffMember(
            id=id,
            name=name,
            role=role,
            is_active=is_active,
            telegram_chat_id=chat_id,
            short_name=short_name,
        )

    @staticmethod
    def shift(
        staff_id: str,
        day: date,
        shift: Optional[ShiftType] = ShiftType.DAY,
        company_id: Optional[str] = None,
        revenue=0,
    ) -> ShiftRecord:
        return ShiftRecord(
            staff_id=staff_id, date=day, shift=shift, company_id=company_id, revenue=Decimal(revenue)
        )

    @staticmethod
    def company(id: str = "c-1", code: str = "arena") -> Company:
        return Company(id=id, code=code)

    @staticmethod
    def rule(
        company_code: str = "arena",
        shift_type: str = "day",
        base_per_shift=None,
        threshold1=None,
        bonus1=0,
        threshold2=None,
        bonus2=0,
    ) -> SalaryRule:
        def amount(value):
            return None if value is None else Decimal(value)

        return SalaryRule(
            company_code=company_code,
            shift_type=shift_type,
            base_per_shift=amount(base_per_shift),
            threshold1_turnover=amount(threshold1),
            threshold1_bonus=Decimal(bonus1),
            threshold2_turnover=amount(threshold2),
            threshold2_bonus=Decimal(bonus2),
        )

    @staticmethod
    def debt(staff_id: str, week_start: date, amount, id: str = "debt-1", status: str = "active") -> DebtRecord:
        return DebtRecord(id=id, staff_id=staff_id, week_start=week_start, amount=Decimal(amount), status=status)

    @staticmethod
    def adjustment(
        staff_id: str,
        day: date,
        kind: AdjustmentKind,
        amount,
        comment: Optional[str] = None,
        id: str = "adj",
    ) -> AdjustmentRecord:
        return AdjustmentRecord(
            id=id, staff_id=staff_id, date=day, kind=kind, amount=Decimal(amount), comment=comment
        )


class InMemoryRecordStore(RecordStore):
    """Хранилище в памяти с теми же фильтрами, что и PostgREST-реализация."""

    def __init__(self, staff=(), shifts=(), debts=(), adjustments=(), rules=(), companies=()):
        self.staff: List[StaffMember] = list(staff)
        self.shifts: List[ShiftRecord] = list(shifts)
        self.debts: List[DebtRecord] = list(debts)
        self.adjustments: List[AdjustmentRecord] = list(adjustments)
        self.rules: List[SalaryRule] = list(rules)
        self.companies: List[Company] = list(companies)
        self.failing_staff_ids: Set[str] = set()
        self.fail_listing = False
        self.calls: List[str] = []

    def _check(self, staff_id: str, collection: str) -> None:
        if staff_id in self.failing_staff_ids:
            raise UpstreamFetchError(collection, "connection reset", status_code=503)

    async def list_active_staff(self) -> List[StaffMember]:
        self.calls.append("list_active_staff")
        if self.fail_listing:
            raise UpstreamFetchError("operators", "service unavailable", status_code=503)
        return [m for m in self.staff if m.is_active]

    async def get_staff_member(self, staff_id: str) -> Optional[StaffMember]:
        return next((m for m in self.staff if m.id == staff_id), None)

    async def get_staff_member_by_chat_id(self, chat_id: str) -> Optional[StaffMember]:
        return next((m for m in self.staff if m.telegram_chat_id == chat_id), None)

    async def list_shifts_in_range(self, staff_id: str, window: DateWindow) -> List[ShiftRecord]:
        self.calls.append(f"shifts:{staff_id}")
        self._check(staff_id, "incomes")
        return [s for s in self.shifts if s.staff_id == staff_id and s.date in window]

    async def list_active_debts(self, staff_id: str, week_start: date) -> List[DebtRecord]:
        self._check(staff_id, "debts")
        return [
            d for d in self.debts
            if d.staff_id == staff_id and d.week_start == week_start and d.is_active
        ]

    async def list_adjustments_in_range(self, staff_id: str, window: DateWindow) -> List[AdjustmentRecord]:
        self._check(staff_id, "operator_salary_adjustments")
        return [a for a in self.adjustments if a.staff_id == staff_id and a.date in window]

    async def list_salary_rules(self) -> List[SalaryRule]:
        self.calls.append("list_salary_rules")
        return list(self.rules)

    async def list_companies(self) -> List[Company]:
        self.calls.append("list_companies")
        return list(self.companies)


class RecordingSender:
    """Отправщик, который запоминает сообщения и момент каждого вызова."""

    def __init__(self, failing_chat_ids=(), clock=time.monotonic):
        self.failing_chat_ids = set(failing_chat_ids)
        self.clock = clock
        self.messages: List[Dict[str, Any]] = []
        self.call_times: List[float] = []

    async def send_message(self, chat_id: str, text: str) -> Dict[str, Any]:
        self.call_times.append(self.clock())
        self.messages.append({"chat_id": chat_id, "text": text})
        if chat_id in self.failing_chat_ids:
            raise DispatchError(chat_id, "403: Forbidden: bot was blocked by the user", status_code=403)
        return {"message_id": len(self.messages)}

    @property
    def chat_ids(self) -> List[str]:
        return [m["chat_id"] for m in self.messages]
