"""Диспетчер уведомлений с антифлуд-паузой между отправками."""

from typing import Any, Dict, Optional, Protocol

from core.logging.logger import logger
from core.utils.rate_limiter import SendIntervalLimiter


class MessageSender(Protocol):
    async def send_message(self, chat_id: str, text: str) -> Dict[str, Any]:
        ...


class NotificationDispatcher:
    """
    Диспетчер отправки сообщений получателям.

    Между любыми двумя отправками выдерживается минимальная пауза:
    внешний API ограничивает частоту, и превышение бьёт по всей рассылке.
    """

    def __init__(self, sender: MessageSender, limiter: Optional[SendIntervalLimiter] = None):
        self.sender = sender
        self.limiter = limiter or SendIntervalLimiter(0)

    async def dispatch(self, chat_id: str, text: str) -> Dict[str, Any]:
        """
        Отправка одного сообщения.

        Raises:
            DispatchError: сообщение не принято (пробрасывается вызывающему)
        """
        await self.limiter.wait()
        try:
            return await self.sender.send_message(chat_id, text)
        finally:
            self.limiter.mark()
            logger.debug("Dispatch attempt finished", chat_id=chat_id)
