"""Настройки недельного расчёта зарплаты."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List, Literal, Optional
import os

from core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Основные настройки приложения."""

    model_config = SettingsConfigDict(
        # В production читаем .env.prod, иначе .env
        env_file=".env.prod" if os.getenv("ENVIRONMENT") == "production" else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Основные настройки
    app_name: str = "StaffPay Weekly"
    debug: bool = False
    environment: str = "development"
    version: str = "0.1.0"

    # Хранилище записей (PostgREST / Supabase)
    record_store_url: Optional[str] = Field(default=None, validation_alias="SUPABASE_URL")
    record_store_key: Optional[str] = Field(default=None, validation_alias="SUPABASE_SERVICE_KEY")
    staff_collection: str = "operators"
    shifts_collection: str = "incomes"
    debts_collection: str = "debts"
    adjustments_collection: str = "operator_salary_adjustments"
    salary_rules_collection: str = "operator_salary_rules"
    companies_collection: str = "companies"
    http_timeout_seconds: float = 10.0

    # Триггер (cron)
    cron_secret: Optional[str] = None

    # Telegram
    telegram_bot_token: Optional[str] = None
    telegram_api_base: str = "https://api.telegram.org"
    dispatch_min_interval_ms: int = 350  # антифлуд между отправками

    # Расчёт
    base_pay_per_shift: int = 8000
    shift_rate_overrides: Dict[str, int] = {}  # {"night": 9000}
    business_utc_offset_hours: int = 5  # Усть-Каменогорск, без DST
    payroll_roles: List[str] = ["admin", "worker"]
    negative_payout_policy: Literal["keep", "clamp"] = "keep"
    salary_rules_enabled: bool = False  # база и авто-бонусы по правилам точек

    # Сообщение
    currency_suffix: str = "₸"
    include_adjustment_notes: bool = False

    # Логирование
    log_level: str = "INFO"
    log_format: str = "text"  # text | json

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    @property
    def dispatch_min_interval(self) -> float:
        """Минимальная пауза между отправками в секундах."""
        return self.dispatch_min_interval_ms / 1000.0


REQUIRED_SETTINGS = {
    "record_store_url": "SUPABASE_URL",
    "record_store_key": "SUPABASE_SERVICE_KEY",
    "cron_secret": "CRON_SECRET",
    "telegram_bot_token": "TELEGRAM_BOT_TOKEN",
}


def validate_settings(current: Optional[Settings] = None) -> Settings:
    """Валидация обязательных настроек.

    Raises:
        ConfigurationError: со списком всех незаданных переменных окружения
    """
    current = current or settings
    missing_vars = [
        env_name
        for attr, env_name in REQUIRED_SETTINGS.items()
        if not (getattr(current, attr) or "").strip()
    ]
    if current.base_pay_per_shift < 0:
        missing_vars.append("BASE_PAY_PER_SHIFT (>= 0)")

    if missing_vars:
        raise ConfigurationError(missing_vars)
    return current


# Создание экземпляра настроек
settings = Settings()
