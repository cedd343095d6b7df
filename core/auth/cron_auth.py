"""Проверка общего секрета на входящем запросе триггера."""

import hmac
from typing import Optional

from core.exceptions import AuthorizationError
from core.logging.logger import logger

BEARER_PREFIX = "Bearer "


def verify_cron_secret(authorization: Optional[str], expected_secret: Optional[str]) -> None:
    """
    Заголовок ``Authorization: Bearer <CRON_SECRET>``.

    Raises:
        AuthorizationError: секрет не настроен, не передан или не совпал
    """
    if not expected_secret:
        logger.error("Cron secret is not configured, rejecting trigger")
        raise AuthorizationError()

    if not authorization or not authorization.startswith(BEARER_PREFIX):
        logger.warning("Trigger rejected: missing bearer token")
        raise AuthorizationError()

    provided = authorization[len(BEARER_PREFIX):].strip()
    if not hmac.compare_digest(provided.encode("utf-8"), expected_secret.encode("utf-8")):
        logger.warning("Trigger rejected: secret mismatch")
        raise AuthorizationError()
