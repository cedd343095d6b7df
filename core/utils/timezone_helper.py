"""Утилиты для работы с фиксированным часовым поясом бизнеса."""

from datetime import date, datetime, timedelta, tzinfo
import pytz

from domain.entities.date_window import DateWindow


def fixed_offset(offset_hours: int) -> tzinfo:
    """Фиксированное смещение от UTC без перехода на летнее время."""
    return pytz.FixedOffset(int(offset_hours * 60))


def to_business_time(moment: datetime, offset_hours: int) -> datetime:
    """Переводит момент времени в бизнес-зону. Наивное время считается UTC."""
    if moment.tzinfo is None:
        moment = pytz.UTC.localize(moment)
    return moment.astimezone(fixed_offset(offset_hours))


def previous_week_window(now: datetime, offset_hours: int) -> DateWindow:
    """
    Прошлая неделя Пн–Вс относительно ``now`` в бизнес-зоне.

    Всегда смотрит на одну полную неделю назад, в какой бы день ни запустилась
    задача: текущая (неполная) неделя не попадает в расчёт.
    """
    local_date = to_business_time(now, offset_hours).date()
    days_since_monday = local_date.weekday()  # Пн=0 .. Вс=6
    start = local_date - timedelta(days=days_since_monday + 7)
    return DateWindow.starting(start)


def week_window_for(day: date) -> DateWindow:
    """Неделя Пн–Вс, которой принадлежит ``day``."""
    return DateWindow.containing(day)


class TimezoneHelper:
    """Помощник для работы с бизнес-зоной."""

    def __init__(self, offset_hours: int):
        """
        Args:
            offset_hours: Смещение бизнес-зоны от UTC в часах
        """
        self.offset_hours = offset_hours
        self.timezone = fixed_offset(offset_hours)

    def now_local(self) -> datetime:
        return datetime.now(pytz.UTC).astimezone(self.timezone)

    def today_local(self) -> date:
        return self.now_local().date()
