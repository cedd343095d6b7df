"""Telegram отправщик сообщений через Bot API."""

from typing import Any, Dict, Optional

import httpx
from telegram.constants import MessageLimit, ParseMode

from core.exceptions import DispatchError
from core.logging.logger import logger

ERROR_DETAIL_MAX_LENGTH = 400


class TelegramNotificationSender:
    """Отправщик сообщений в Telegram.

    Bot API может ответить HTTP 200 и при этом ``ok: false`` — такой ответ
    тоже считается ошибкой доставки.
    """

    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            bot_token: Токен бота
            api_base: Базовый URL Bot API
            timeout: Таймаут запроса в секундах
            client: Готовый httpx-клиент (в тестах — с MockTransport)
        """
        if not bot_token:
            raise ValueError("Telegram bot token is not configured")

        self.bot_api_url = f"{api_base.rstrip('/')}/bot{bot_token}"
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "TelegramNotificationSender":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def send_message(self, chat_id: str, text: str) -> Dict[str, Any]:
        """
        Отправка сообщения.

        Returns:
            Поле ``result`` ответа Bot API

        Raises:
            DispatchError: текст длиннее лимита Bot API, транспортная ошибка,
                не-2xx статус или ok != true
        """
        if len(text) > MessageLimit.MAX_TEXT_LENGTH:
            logger.warning("Telegram message is too long", chat_id=chat_id, length=len(text))
            raise DispatchError(
                chat_id, f"message is too long: {len(text)} > {int(MessageLimit.MAX_TEXT_LENGTH)} characters"
            )

        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": ParseMode.HTML.value,
            "disable_web_page_preview": True,
        }

        try:
            response = await self.client.post(f"{self.bot_api_url}/sendMessage", json=payload)
        except httpx.HTTPError as e:
            # str(e) у httpx может содержать URL с токеном
            detail = f"{type(e).__name__}: transport error"
            logger.error("Telegram transport error", chat_id=chat_id, error_type=type(e).__name__)
            raise DispatchError(chat_id, detail) from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success or not isinstance(data, dict) or data.get("ok") is not True:
            detail = self._describe_failure(response, data)
            logger.warning(
                "Telegram rejected message",
                chat_id=chat_id,
                status_code=response.status_code,
                error=detail,
            )
            raise DispatchError(chat_id, detail, status_code=response.status_code)

        logger.info("Telegram message sent", chat_id=chat_id)
        return data.get("result") or {}

    @staticmethod
    def _describe_failure(response: httpx.Response, data: Any) -> str:
        if isinstance(data, dict) and data.get("description"):
            detail = f"{data.get('error_code', response.status_code)}: {data['description']}"
        elif data is not None:
            detail = str(data)
        else:
            detail = f"HTTP {response.status_code}: {response.text}"
        return detail[:ERROR_DETAIL_MAX_LENGTH]
