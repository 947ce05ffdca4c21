"""벌크 수정 패치 적용.

Bulk edit patch application. A bulk patch uses a tri-state encoding per
field: an absent key means no change, a key mapped to ``None`` clears the
field, any other value sets it. Callers pass only the keys the client sent.

Fields:
    start_time / end_time: 현지 "HH:MM", 삭제 불가 (Local time of day, cannot be cleared)
    position_id: 포지션 (Position, clearable)
    color: 색상 (Color override, clearable)
"""

from collections.abc import Mapping
from datetime import datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from shopshift.scheduling.timezones import combine_local, get_zone, parse_hhmm


def apply_bulk_patch(shift: Any, changes: Mapping[str, Any], zone: str | ZoneInfo | None) -> dict[str, Any]:
    """한 시프트에 대한 필드 패치를 계산합니다.

    Compute the field patch for one shift. Time-of-day changes keep the
    shift's shop-local start date; the end lands on the same local date,
    or on the next one when it is not after the start.

    Raises:
        ValueError: 시각을 null로 지정했거나 형식 오류 (Time cleared or malformed)
    """
    patch: dict[str, Any] = {}

    if "start_time" in changes or "end_time" in changes:
        tz: ZoneInfo = get_zone(zone)
        local_start: datetime = shift.start_time.astimezone(tz)
        local_end: datetime = shift.end_time.astimezone(tz)

        start_of_day: time = _time_change(changes, "start_time", local_start.time())
        end_of_day: time = _time_change(changes, "end_time", local_end.time())

        day = local_start.date()
        end_day = day if end_of_day > start_of_day else day + timedelta(days=1)
        patch["start_time"] = combine_local(day, start_of_day, tz)
        patch["end_time"] = combine_local(end_day, end_of_day, tz)

    for field in ("position_id", "color"):
        if field in changes:
            patch[field] = changes[field]

    return patch


def _time_change(changes: Mapping[str, Any], field: str, current: time) -> time:
    if field not in changes:
        return current.replace(tzinfo=None)
    value = changes[field]
    if value is None:
        raise ValueError(f"{field} cannot be cleared")
    return parse_hhmm(value)
