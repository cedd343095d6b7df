"""Ограничитель частоты отправки сообщений (антифлуд)."""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from core.logging.logger import logger


class SendIntervalLimiter:
    """Выдерживает минимальную паузу между последовательными отправками.

    ``wait()`` вызывается перед отправкой, ``mark()`` — после попытки
    (успешной или нет). Пауза отсчитывается от конца предыдущей попытки.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must be >= 0")
        self.min_interval = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_attempt: Optional[float] = None

    def remaining(self) -> float:
        """Сколько ещё нужно подождать перед следующей отправкой."""
        if self._last_attempt is None:
            return 0.0
        elapsed = self._clock() - self._last_attempt
        return max(0.0, self.min_interval - elapsed)

    async def wait(self) -> float:
        """Ждёт окончания паузы. Возвращает суммарное время ожидания."""
        waited = 0.0
        delay = self.remaining()
        if delay > 0:
            logger.debug("Anti-flood pause", delay_seconds=round(delay, 3))
        # event loop может разбудить чуть раньше срока
        while delay > 0:
            await self._sleep(delay)
            waited += delay
            delay = self.remaining()
        return waited

    def mark(self) -> None:
        self._last_attempt = self._clock()

    def reset(self) -> None:
        self._last_attempt = None
