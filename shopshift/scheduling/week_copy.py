"""주간 복사 날짜 계산 로직.

Week-copy arithmetic. The source week is the shop-local Sunday-start week;
each copy moves the source instants forward by exactly ``k * 7 * 24h``
(not re-anchored to local time, so a copy that crosses a DST change is off
by the transition amount).
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from shopshift.scheduling.recurrence import ShiftLike
from shopshift.scheduling.timezones import combine_local, week_start

MIN_WEEKS: int = 1
MAX_WEEKS: int = 12
MAX_SOURCE_SHIFTS: int = 200


@dataclass(frozen=True)
class WeekCopy:
    """복사본 하나 (One planned copy of a source shift)."""

    source_id: UUID
    week_index: int
    values: dict[str, Any]


def validate_weeks_count(weeks_count: int) -> None:
    if not MIN_WEEKS <= weeks_count <= MAX_WEEKS:
        raise ValueError(f"Weeks count must be between {MIN_WEEKS} and {MAX_WEEKS}")


def source_week_window(source_week_start: date, zone: str | ZoneInfo) -> tuple[datetime, datetime]:
    """원본 주의 UTC 반열림 구간 [start, end).

    Return the UTC half-open window of the shop-local week (Sunday 00:00 to
    the next Sunday 00:00) containing ``source_week_start``.
    """
    sunday: date = week_start(source_week_start)
    start: datetime = combine_local(sunday, time(0, 0), zone)
    end: datetime = combine_local(sunday + timedelta(days=7), time(0, 0), zone)
    return start, end


def check_source_shifts(count: int) -> None:
    """원본 주 시프트 수를 검증합니다 (Reject empty or oversized source weeks)."""
    if count == 0:
        raise ValueError("No shifts found in the source week")
    if count > MAX_SOURCE_SHIFTS:
        raise ValueError(f"Source week has too many shifts (max {MAX_SOURCE_SHIFTS})")


def plan_week_copies(
    sources: Sequence[Any],
    weeks_count: int,
    created_by: UUID | None,
) -> list[WeekCopy]:
    """원본 시프트들의 주간 복사본을 계획합니다.

    Plan ``weeks_count`` copies of every source shift. Each copy keeps every
    field except start/end (the recurrence group included) and is a draft
    created by ``created_by``.

    Args:
        sources: 원본 주의 시프트 (Shifts of the source week)
        weeks_count: 복사할 주 수, 1~12 (Number of weeks, 1..12)
        created_by: 작성자 UUID (Actor)

    Returns:
        list[WeekCopy]: 주 순서, 원본 순서의 복사 계획 (Copies ordered by week then source)

    Raises:
        ValueError: 주 수 범위 초과, 원본 없음, 원본 200개 초과
    """
    validate_weeks_count(weeks_count)
    check_source_shifts(len(sources))

    copies: list[WeekCopy] = []
    for week in range(1, weeks_count + 1):
        delta: timedelta = timedelta(days=7 * week)
        for source in sources:
            copies.append(WeekCopy(source_id=source.id, week_index=week, values=_copy_values(source, delta, created_by)))
    return copies


def _copy_values(source: ShiftLike, delta: timedelta, created_by: UUID | None) -> dict[str, Any]:
    return {
        "shop_id": source.shop_id,
        "schedule_id": source.schedule_id,
        "user_id": source.user_id,
        "position_id": source.position_id,
        "start_time": source.start_time + delta,
        "end_time": source.end_time + delta,
        "break_minutes": source.break_minutes,
        "status": "draft",
        "is_open": source.is_open,
        "notes": source.notes,
        "color": source.color,
        "recurrence_group_id": source.recurrence_group_id,
        "created_by": created_by,
    }
