"""매장 현지 시각 변환 유틸리티.

Shop-local time helpers. Shifts are stored as UTC instants; calendar dates,
week boundaries and time-of-day are always taken in the shop's timezone.

Usage:
    zone = get_zone(shop.timezone)
    local_date(shift.start_time, zone)       # 매장 기준 날짜 (Shop-local date)
    combine_local(date(2025, 3, 9), time(9), zone)  # 현지 09:00 -> UTC
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from shopshift.config import settings


def get_zone(name: str | ZoneInfo | None) -> ZoneInfo:
    """시간대 이름을 ZoneInfo로 변환합니다 (알 수 없으면 기본 시간대).

    Resolve a timezone name, falling back to the configured default when the
    name is empty or unknown.
    """
    if isinstance(name, ZoneInfo):
        return name
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return ZoneInfo(settings.DEFAULT_TIMEZONE)


def to_local(instant: datetime, zone: str | ZoneInfo) -> datetime:
    return instant.astimezone(get_zone(zone))


def local_date(instant: datetime, zone: str | ZoneInfo) -> date:
    """UTC 시각의 매장 기준 날짜 (Shop-local calendar date of an instant)."""
    return to_local(instant, zone).date()


def date_key(instant: datetime, zone: str | ZoneInfo) -> str:
    """그룹 키용 현지 날짜 문자열 "YYYY-MM-DD" (Local date key)."""
    return local_date(instant, zone).isoformat()


def combine_local(day: date, time_of_day: time, zone: str | ZoneInfo) -> datetime:
    """현지 날짜와 시각을 UTC 시각으로 변환합니다.

    Combine a shop-local date and wall-clock time into a UTC instant. A
    wall-clock time skipped by a DST jump resolves the way ``zoneinfo`` does
    (fold=0, the pre-transition offset).
    """
    local = datetime.combine(day, time_of_day.replace(tzinfo=None), tzinfo=get_zone(zone))
    return local.astimezone(timezone.utc)


def week_start(day: date) -> date:
    """해당 주의 일요일 (Sunday that starts the week containing ``day``)."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def parse_hhmm(value: str) -> time:
    """"HH:MM" 문자열을 time으로 변환합니다 (Raises ValueError when malformed)."""
    parts: list[str] = value.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time of day: {value!r}")
    return time(hour, minute)
