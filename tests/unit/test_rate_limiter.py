"""Unit тесты для SendIntervalLimiter"""

import pytest

from core.utils.rate_limiter import SendIntervalLimiter


class FakeClock:
    """Часы, которые двигаются только через sleep()"""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.mark.asyncio
async def test_first_send_does_not_wait():
    clock = FakeClock()
    limiter = SendIntervalLimiter(0.5, clock=clock, sleep=clock.sleep)

    waited = await limiter.wait()

    assert waited == 0
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_waits_remaining_interval_after_attempt():
    clock = FakeClock()
    limiter = SendIntervalLimiter(0.5, clock=clock, sleep=clock.sleep)

    limiter.mark()
    clock.now += 0.25
    waited = await limiter.wait()

    assert waited == 0.25
    assert limiter.remaining() == 0


@pytest.mark.asyncio
async def test_no_wait_when_interval_already_elapsed():
    clock = FakeClock()
    limiter = SendIntervalLimiter(0.5, clock=clock, sleep=clock.sleep)

    limiter.mark()
    clock.now += 1
    assert await limiter.wait() == 0


@pytest.mark.asyncio
async def test_early_wakeup_sleeps_again():
    """Если sleep проснулся раньше срока, ожидание продолжается"""
    clock = FakeClock()

    async def short_sleep(seconds):
        # первый раз просыпается на половине срока
        clock.now += seconds / 2 if not clock.sleeps else seconds
        clock.sleeps.append(seconds)

    limiter = SendIntervalLimiter(0.5, clock=clock, sleep=short_sleep)
    limiter.mark()

    await limiter.wait()

    assert clock.sleeps == [0.5, 0.25]
    assert limiter.remaining() == 0


@pytest.mark.asyncio
async def test_reset_clears_last_attempt():
    clock = FakeClock()
    limiter = SendIntervalLimiter(5, clock=clock, sleep=clock.sleep)
    limiter.mark()

    limiter.reset()

    assert limiter.remaining() == 0


def test_negative_interval_is_rejected():
    with pytest.raises(ValueError):
        SendIntervalLimiter(-1)
