"""Юнит-тесты для PostgrestRecordStore (httpx.MockTransport вместо сети)."""

from datetime import date
from decimal import Decimal

import httpx
import pytest

from core.exceptions import UpstreamFetchError
from domain.entities import AdjustmentKind, StaffRole
from shared.services.record_store import PostgrestRecordStore


class StoreStub:
    """Отвечает заранее заданными строками по имени коллекции"""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        collection = request.url.path.rsplit("/", 1)[-1]
        response = self.responses.get(collection, [])
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def last_params(self):
        return self.requests[-1].url.params


def _store(stub):
    client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
    return PostgrestRecordStore("https://store.example.test/", "service-key", client=client)


@pytest.mark.asyncio
async def test_list_active_staff_parses_rows_and_sends_headers():
    stub = StoreStub({
        "operators": [
            {"id": 1, "name": "Айгерим", "role": "Worker", "is_active": True, "telegram_chat_id": 100001},
            {"id": "op-2", "name": " Данияр ", "role": None, "is_active": True, "telegram_chat_id": None},
        ]
    })

    async with _store(stub) as store:
        staff = await store.list_active_staff()

    assert [m.id for m in staff] == ["1", "op-2"]
    assert staff[0].role is StaffRole.WORKER
    assert staff[0].telegram_chat_id == "100001"
    assert staff[1].name == "Данияр"
    assert staff[1].has_chat is False

    request = stub.requests[0]
    assert str(request.url).startswith("https://store.example.test/rest/v1/operators?")
    assert request.headers["apikey"] == "service-key"
    assert request.headers["Authorization"] == "Bearer service-key"
    assert stub.last_params["is_active"] == "eq.true"


@pytest.mark.asyncio
async def test_shift_query_uses_date_range(window):
    stub = StoreStub({
        "incomes": [
            {"operator_id": "op-1", "date": "2026-10-05", "shift": "day"},
            {"operator_id": "op-1", "date": "2026-10-06", "shift": None},
        ]
    })

    shifts = await _store(stub).list_shifts_in_range("op-1", window)

    assert [s.is_worked for s in shifts] == [True, False]
    params = stub.last_params
    assert params["operator_id"] == "eq.op-1"
    assert params.get_list("date") == ["gte.2026-10-05", "lte.2026-10-11"]


@pytest.mark.asyncio
async def test_debt_query_anchors_on_week_start(window):
    stub = StoreStub({
        "debts": [
            {"id": 9, "operator_id": "op-1", "week_start": "2026-10-05", "status": "active",
             "amount": "1500.00", "created_at": "2026-10-06T08:00:00Z"},
        ]
    })
    store = _store(stub)

    debt = await store.find_active_debt("op-1", window.start)

    assert debt.amount == Decimal("1500.00")
    assert debt.id == "9"
    params = stub.last_params
    assert params["week_start"] == "eq.2026-10-05"
    assert params["status"] == "eq.active"
    assert params["order"].startswith("created_at.desc")


@pytest.mark.asyncio
async def test_find_active_debt_returns_none_when_empty(window):
    assert await _store(StoreStub()).find_active_debt("op-1", window.start) is None


@pytest.mark.asyncio
async def test_adjustments_are_parsed(window):
    stub = StoreStub({
        "operator_salary_adjustments": [
            {"id": 1, "operator_id": "op-1", "date": "2026-10-07", "kind": "BONUS", "amount": 2000, "comment": " "},
            {"id": 2, "operator_id": "op-1", "date": "2026-10-08", "kind": "fine", "amount": None, "comment": "x"},
        ]
    })

    adjustments = await _store(stub).list_adjustments_in_range("op-1", window)

    assert [a.kind for a in adjustments] == [AdjustmentKind.BONUS, AdjustmentKind.FINE]
    assert adjustments[0].comment is None
    assert adjustments[1].amount == 0
    assert adjustments[1].date == date(2026, 10, 8)


@pytest.mark.asyncio
async def test_error_status_raises_upstream_error():
    stub = StoreStub({"operators": httpx.Response(500, text="relation does not exist")})

    with pytest.raises(UpstreamFetchError) as exc_info:
        await _store(stub).list_active_staff()

    error = exc_info.value
    assert error.status_code == 500
    assert error.collection == "operators"
    assert "relation does not exist" in str(error)


@pytest.mark.asyncio
async def test_transport_error_raises_upstream_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    store = PostgrestRecordStore("https://store.example.test", "key", client=client)

    with pytest.raises(UpstreamFetchError):
        await store.list_active_staff()


@pytest.mark.asyncio
async def test_non_list_body_raises_upstream_error():
    stub = StoreStub({"operators": {"message": "unexpected"}})

    with pytest.raises(UpstreamFetchError):
        await _store(stub).list_active_staff()


@pytest.mark.asyncio
async def test_unknown_adjustment_kind_is_malformed(window):
    stub = StoreStub({
        "operator_salary_adjustments": [
            {"id": 1, "operator_id": "op-1", "date": "2026-10-07", "kind": "gift", "amount": 10},
        ]
    })

    with pytest.raises(UpstreamFetchError) as exc_info:
        await _store(stub).list_adjustments_in_range("op-1", window)

    assert "Malformed row" in str(exc_info.value)


@pytest.mark.asyncio
async def test_get_staff_member_returns_first_or_none():
    stub = StoreStub({"operators": [{"id": "op-1", "name": "Айгерим", "telegram_chat_id": "100001"}]})
    store = _store(stub)

    member = await store.get_staff_member_by_chat_id("100001")

    assert member.id == "op-1"
    assert stub.last_params["telegram_chat_id"] == "eq.100001"
    assert stub.last_params["limit"] == "1"

    stub.responses["operators"] = []
    assert await store.get_staff_member("op-9") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("staff_id", ["1,2", "op-1&is_active=eq.false", "a b", "", "x" * 65])
async def test_free_text_never_reaches_filters(staff_id, window):
    stub = StoreStub()

    with pytest.raises(ValueError):
        await _store(stub).list_shifts_in_range(staff_id, window)

    assert stub.requests == []


@pytest.mark.asyncio
async def test_unknown_role_does_not_break_staff_listing():
    stub = StoreStub({
        "operators": [
            {"id": "op-1", "name": "Айгерим", "role": "worker", "telegram_chat_id": "100001"},
            {"id": "op-2", "name": "Новенький", "role": "Operator", "telegram_chat_id": "100002"},
        ]
    })

    staff = await _store(stub).list_active_staff()

    assert staff[0].role is StaffRole.WORKER
    assert staff[1].role == "operator"
    assert staff[1].role_code == "operator"


@pytest.mark.asyncio
async def test_shift_revenue_sums_payment_columns(window):
    stub = StoreStub({
        "incomes": [
            {
                "operator_id": "op-1", "date": "2026-10-05", "shift": "Night", "company_id": 7,
                "cash_amount": 10000, "kaspi_amount": "2500.50", "card_amount": None,
            },
        ]
    })

    shifts = await _store(stub).list_shifts_in_range("op-1", window)

    assert shifts[0].designation == "night"
    assert shifts[0].company_id == "7"
    assert shifts[0].revenue == Decimal("12500.50")
    assert "cash_amount" in stub.last_params["select"]


@pytest.mark.asyncio
async def test_salary_rules_and_companies_are_parsed():
    stub = StoreStub({
        "operator_salary_rules": [
            {
                "company_code": "Arena", "shift_type": "DAY", "base_per_shift": 9000,
                "threshold1_turnover": 100000, "threshold1_bonus": 1000,
                "threshold2_turnover": None, "threshold2_bonus": None,
            },
        ],
        "companies": [{"id": 7, "code": " ARENA "}],
    })

    async with _store(stub) as store:
        rules = await store.list_salary_rules()
        assert stub.last_params["is_active"] == "eq.true"
        companies = await store.list_companies()

    assert rules[0].company_code == "arena"
    assert rules[0].shift_type == "day"
    assert rules[0].base_per_shift == Decimal(9000)
    assert rules[0].threshold2_turnover is None
    assert rules[0].bonus_for(Decimal(100000)) == Decimal(1000)
    assert companies[0].id == "7"
    assert companies[0].code == "arena"
