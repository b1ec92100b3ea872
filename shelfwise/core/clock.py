"""
Calendar helpers

Every bucket (day, month, year) is computed in the configured reporting
timezone. Naive datetimes are assumed to already be in that timezone.
"""
from datetime import MAXYEAR, date, datetime, time, timedelta, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from .config import settings

ONE_DAY = timedelta(days=1)

# Last year whose [start, end) bounds fit in a datetime
MAX_YEAR = MAXYEAR - 1


def local_tz(name: Optional[str] = None) -> tzinfo:
    return ZoneInfo(name or settings.TIMEZONE)


def now() -> datetime:
    """Current wall-clock time, timezone-aware"""
    return datetime.now(local_tz())


def localize(moment: datetime) -> datetime:
    tz = local_tz()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def to_local_date(value) -> date:
    """Calendar day of a datetime (or date) in the reporting timezone"""
    if isinstance(value, datetime):
        return localize(value).date()
    return value


def day_start(value) -> datetime:
    """Midnight at the start of the day containing `value`"""
    return datetime.combine(to_local_date(value), time.min, tzinfo=local_tz())


def day_key(value) -> str:
    return to_local_date(value).isoformat()


def day_bounds(value) -> Tuple[datetime, datetime]:
    """Half-open [start, end) range of the day containing `value`"""
    start = day_start(value)
    return start, day_start(to_local_date(value) + ONE_DAY)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    start = datetime(year, month, 1, tzinfo=local_tz())
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=local_tz())
    else:
        end = datetime(year, month + 1, 1, tzinfo=local_tz())
    return start, end


def year_bounds(year: int) -> Tuple[datetime, datetime]:
    return datetime(year, 1, 1, tzinfo=local_tz()), datetime(year + 1, 1, 1, tzinfo=local_tz())


def month_key(value) -> str:
    return to_local_date(value).strftime("%Y-%m")
