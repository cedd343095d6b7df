"""Типизированные исключения недельного расчёта зарплаты.

Иерархия:

    PayrollJobError
    +-- AuthorizationError        неверный/отсутствующий секрет триггера
    +-- ConfigurationError        не задана обязательная настройка
    +-- UpstreamFetchError        хранилище записей недоступно или ответило ошибкой
    +-- DispatchError             Telegram не принял сообщение
    +-- StaffNotFoundError        сотрудник не найден (snapshot)
    +-- RecipientUnreachableError у сотрудника нет telegram_chat_id (snapshot)

Каждое исключение несёт машиночитаемый ``code`` для API-ответов.
"""

from typing import List, Optional


class PayrollJobError(Exception):
    """Базовое исключение."""

    code: str = "PAYROLL_JOB_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthorizationError(PayrollJobError):
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "unauthorized"):
        super().__init__(message)


class ConfigurationError(PayrollJobError):
    code = "CONFIGURATION_ERROR"

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required configuration: {', '.join(self.missing)}")


class UpstreamFetchError(PayrollJobError):
    """Ошибка чтения из хранилища записей (текст диагностики хранилища в ``detail``)."""

    code = "UPSTREAM_FETCH_ERROR"

    def __init__(self, collection: str, detail: str, status_code: Optional[int] = None):
        self.collection = collection
        self.detail = detail
        self.status_code = status_code
        prefix = f"Store {status_code}" if status_code is not None else "Store error"
        super().__init__(f"{prefix} ({collection}): {detail}")


class DispatchError(PayrollJobError):
    """Сообщение не доставлено: транспортная ошибка или ok=false в ответе API."""

    code = "DISPATCH_ERROR"

    def __init__(self, chat_id: str, detail: str, status_code: Optional[int] = None):
        self.chat_id = chat_id
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"TG fail: {detail}")


class StaffNotFoundError(PayrollJobError):
    code = "STAFF_NOT_FOUND"

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Staff member not found ({reference})")


class RecipientUnreachableError(PayrollJobError):
    code = "NO_CHAT_ID"

    def __init__(self, staff_id: str):
        self.staff_id = staff_id
        super().__init__(f"Staff member {staff_id} has no telegram_chat_id")
