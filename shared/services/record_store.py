"""Шлюз чтения к хранилищу записей (справочник сотрудников, смены, долги, корректировки)."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

import httpx

from core.exceptions import UpstreamFetchError
from core.logging.logger import logger
from domain.entities import (
    AdjustmentRecord,
    Company,
    DateWindow,
    DebtRecord,
    DEBT_STATUS_ACTIVE,
    SalaryRule,
    ShiftRecord,
    StaffMember,
)

T = TypeVar("T")

DIAGNOSTIC_MAX_LENGTH = 400

# В фильтры попадают только идентификаторы и даты, никакого свободного текста
_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def _identifier(value: Any) -> str:
    text = str(value).strip()
    if not _IDENTIFIER_RE.match(text):
        raise ValueError(f"Invalid identifier for store filter: {value!r}")
    return text


class RecordStore(ABC):
    """Узкий интерфейс к хранилищу. Ядро только читает."""

    @abstractmethod
    async def list_active_staff(self) -> List[StaffMember]:
        ...

    @abstractmethod
    async def get_staff_member(self, staff_id: str) -> Optional[StaffMember]:
        ...

    @abstractmethod
    async def get_staff_member_by_chat_id(self, chat_id: str) -> Optional[StaffMember]:
        ...

    @abstractmethod
    async def list_shifts_in_range(self, staff_id: str, window: DateWindow) -> List[ShiftRecord]:
        ...

    @abstractmethod
    async def list_active_debts(self, staff_id: str, week_start: date) -> List[DebtRecord]:
        """Активные долги на неделю, от самого нового к самому старому."""

    @abstractmethod
    async def list_adjustments_in_range(self, staff_id: str, window: DateWindow) -> List[AdjustmentRecord]:
        ...

    async def list_salary_rules(self) -> List[SalaryRule]:
        """Активные правила оплаты. Хранилище без правил отдаёт пустой список."""
        return []

    async def list_companies(self) -> List[Company]:
        return []

    async def find_active_debt(self, staff_id: str, week_start: date) -> Optional[DebtRecord]:
        """Единственный активный долг недели.

        Несколько активных строк на одну неделю — аномалия данных: берётся
        первая (самая свежая), остальные не суммируются.
        """
        debts = await self.list_active_debts(staff_id, week_start)
        if not debts:
            return None
        if len(debts) > 1:
            logger.warning(
                "Multiple active debts for one week, using the most recent",
                staff_id=staff_id,
                week_start=week_start.isoformat(),
                debt_ids=[d.id for d in debts],
            )
        return debts[0]


class PostgrestRecordStore(RecordStore):
    """Реализация поверх PostgREST (Supabase REST API) через httpx."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        staff_collection: str = "operators",
        shifts_collection: str = "incomes",
        debts_collection: str = "debts",
        adjustments_collection: str = "operator_salary_adjustments",
        salary_rules_collection: str = "operator_salary_rules",
        companies_collection: str = "companies",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.staff_collection = staff_collection
        self.shifts_collection = shifts_collection
        self.debts_collection = debts_collection
        self.adjustments_collection = adjustments_collection
        self.salary_rules_collection = salary_rules_collection
        self.companies_collection = companies_collection
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    async def __aenter__(self) -> "PostgrestRecordStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get(self, collection: str, params: Sequence[Tuple[str, str]]) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/rest/v1/{collection}"
        try:
            response = await self.client.get(url, params=list(params), headers=self._headers)
        except httpx.HTTPError as e:
            logger.error("Record store request failed", collection=collection, error=str(e))
            raise UpstreamFetchError(collection, str(e)[:DIAGNOSTIC_MAX_LENGTH]) from e

        if not response.is_success:
            logger.error(
                "Record store returned error",
                collection=collection,
                status_code=response.status_code,
            )
            raise UpstreamFetchError(
                collection, response.text[:DIAGNOSTIC_MAX_LENGTH], status_code=response.status_code
            )

        try:
            rows = response.json()
        except ValueError as e:
            raise UpstreamFetchError(collection, f"Invalid JSON: {response.text[:200]}") from e
        if not isinstance(rows, list):
            raise UpstreamFetchError(collection, f"Expected a list of rows, got {type(rows).__name__}")
        return rows

    async def _fetch(
        self,
        collection: str,
        params: Sequence[Tuple[str, str]],
        parse: Callable[[Dict[str, Any]], T],
    ) -> List[T]:
        rows = await self._get(collection, params)
        try:
            return [parse(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamFetchError(collection, f"Malformed row: {e}") from e

    async def list_active_staff(self) -> List[StaffMember]:
        return await self._fetch(
            self.staff_collection,
            [
                ("select", "id,name,short_name,role,is_active,telegram_chat_id"),
                ("is_active", "eq.true"),
                ("order", "name.asc,id.asc"),
            ],
            StaffMember.from_row,
        )

    async def _get_staff_by(self, column: str, value: str) -> Optional[StaffMember]:
        members = await self._fetch(
            self.staff_collection,
            [
                ("select", "id,name,short_name,role,is_active,telegram_chat_id"),
                (column, f"eq.{_identifier(value)}"),
                ("limit", "1"),
            ],
            StaffMember.from_row,
        )
        return members[0] if members else None

    async def get_staff_member(self, staff_id: str) -> Optional[StaffMember]:
        return await self._get_staff_by("id", staff_id)

    async def get_staff_member_by_chat_id(self, chat_id: str) -> Optional[StaffMember]:
        return await self._get_staff_by("telegram_chat_id", chat_id)

    async def list_shifts_in_range(self, staff_id: str, window: DateWindow) -> List[ShiftRecord]:
        return await self._fetch(
            self.shifts_collection,
            [
                ("select", "operator_id,date,shift,company_id,cash_amount,kaspi_amount,card_amount"),
                ("operator_id", f"eq.{_identifier(staff_id)}"),
                ("date", f"gte.{window.start.isoformat()}"),
                ("date", f"lte.{window.end.isoformat()}"),
                ("order", "date.asc"),
            ],
            ShiftRecord.from_row,
        )

    async def list_active_debts(self, staff_id: str, week_start: date) -> List[DebtRecord]:
        return await self._fetch(
            self.debts_collection,
            [
                ("select", "id,operator_id,week_start,status,amount,created_at"),
                ("operator_id", f"eq.{_identifier(staff_id)}"),
                ("week_start", f"eq.{week_start.isoformat()}"),
                ("status", f"eq.{DEBT_STATUS_ACTIVE}"),
                ("order", "created_at.desc.nullslast,id.desc"),
            ],
            DebtRecord.from_row,
        )

    async def list_adjustments_in_range(self, staff_id: str, window: DateWindow) -> List[AdjustmentRecord]:
        return await self._fetch(
            self.adjustments_collection,
            [
                ("select", "id,operator_id,date,kind,amount,comment"),
                ("operator_id", f"eq.{_identifier(staff_id)}"),
                ("date", f"gte.{window.start.isoformat()}"),
                ("date", f"lte.{window.end.isoformat()}"),
                ("order", "date.asc,id.asc"),
            ],
            AdjustmentRecord.from_row,
        )

    async def list_salary_rules(self) -> List[SalaryRule]:
        return await self._fetch(
            self.salary_rules_collection,
            [
                (
                    "select",
                    "company_code,shift_type,base_per_shift,threshold1_turnover,threshold1_bonus,"
                    "threshold2_turnover,threshold2_bonus",
                ),
                ("is_active", "eq.true"),
            ],
            SalaryRule.from_row,
        )

    async def list_companies(self) -> List[Company]:
        return await self._fetch(
            self.companies_collection,
            [("select", "id,code")],
            Company.from_row,
        )
