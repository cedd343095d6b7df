"""
Конфигурация pytest для тестов недельной рассылки
"""
from datetime import date, datetime, timezone

import pytest

from core.config.settings import Settings
from domain.entities import DateWindow
from tests.utils.fakes import DataFactory, InMemoryRecordStore, RecordingSender


# Среда, 14 октября 2026, 10:00 UTC (15:00 по UTC+5) -> прошлая неделя 5–11 октября
NOW = datetime(2026, 10, 14, 10, 0, tzinfo=timezone.utc)
WINDOW = DateWindow(start=date(2026, 10, 5), end=date(2026, 10, 11))


@pytest.fixture
def settings():
    """Полностью заполненные настройки без чтения окружения"""
    return Settings(
        _env_file=None,
        SUPABASE_URL="https://store.example.test",
        SUPABASE_SERVICE_KEY="service-key",
        cron_secret="cron-secret",
        telegram_bot_token="123:token",
        telegram_api_base="https://tg.example.test",
        base_pay_per_shift=8000,
        business_utc_offset_hours=5,
        dispatch_min_interval_ms=0,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def window():
    return WINDOW


@pytest.fixture
def factory():
    return DataFactory


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def sender():
    return RecordingSender()
