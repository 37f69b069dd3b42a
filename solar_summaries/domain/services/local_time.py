"""
Device-local calendar helpers.

All timezone handling for the aggregators lives here. Instants are stored
in UTC; buckets are local calendar dates of the device's timezone.
"""
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import List, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..exceptions import ConfigurationException


@lru_cache(maxsize=64)
def get_zone(name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ConfigurationException: If the name is unknown.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationException(f"Unknown timezone '{name}': {e}", setting='timezone')


def _as_utc(instant: datetime) -> datetime:
    # Naive instants come from timestamp columns without zone and are UTC
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def to_local_date(instant: datetime, tz: ZoneInfo) -> date:
    """Calendar date of an instant in the given zone."""
    return _as_utc(instant).astimezone(tz).date()


def local_day_bounds(day: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """
    UTC bounds of a local calendar day as a half-open [start, end) window.

    Both ends are local midnights, so DST days are 23 or 25 hours long.
    """
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def local_range_bounds(start_day: date, end_day: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """UTC window covering local days start_day..end_day inclusive."""
    start, _ = local_day_bounds(start_day, tz)
    _, end = local_day_bounds(end_day, tz)
    return start, end


def local_today(now: datetime, tz: ZoneInfo) -> date:
    return to_local_date(now, tz)


def is_day_finalized(day: date, now: datetime, tz: ZoneInfo, cutoff: time) -> bool:
    """
    Whether a local day may be written as a final summary.

    Past days are final. Today becomes final once the local clock reaches
    the cutoff. Future days never are.
    """
    local_now = _as_utc(now).astimezone(tz)
    today = local_now.date()
    if day < today:
        return True
    if day > today:
        return False
    return local_now.time() >= cutoff


def date_range(start: date, end: date) -> List[date]:
    """Dates from start to end inclusive. Empty when end precedes start."""
    days = (end - start).days
    return [start + timedelta(days=offset) for offset in range(days + 1)]


def trailing_dates(today: date, days_back: int) -> List[date]:
    """The last days_back dates ending with today, oldest first."""
    if days_back < 1:
        return []
    return date_range(today - timedelta(days=days_back - 1), today)


def month_key(value: Union[date, datetime, str]) -> str:
    """
    Month bucket key (YYYY-MM).

    Strings are taken as ISO dates and sliced, with no timezone math.
    """
    if isinstance(value, (date, datetime)):
        value = value.isoformat()
    return str(value)[:7]
