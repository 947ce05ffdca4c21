"""반복 시프트 생성 로직.

Recurring shift generation. Given an already-created anchor shift and a
recurrence pattern, produce the creation payloads for every later instance.

Rules:
    - 요일은 UTC 기준, 0=일요일 (Weekdays are taken in UTC, 0=Sunday..6=Saturday)
    - 첫 인스턴스는 항상 앵커 이후 (The first instance per weekday is strictly
      after the anchor, even when the anchor's weekday is in the pattern)
    - 간격: weekly=1주, biweekly=2주 (Step between instances)
    - 종료: never=앵커+104주, on_date=해당 날짜(UTC)까지 포함
    - 상한: 패턴 전체 합계 104개 (One 104-instance cap shared by all weekdays)
    - 길이 보존, 상태는 항상 draft (Duration preserved, status always draft)
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Literal, Protocol
from uuid import UUID

# 한 번의 반복 생성으로 만들 수 있는 최대 인스턴스 수 (Hard cap per pattern)
MAX_RECURRING_INSTANCES: int = 104

# 종료일 없는 패턴의 기본 기간 (Horizon for patterns that never end)
NEVER_END_HORIZON: timedelta = timedelta(weeks=104)


class ShiftLike(Protocol):
    shop_id: UUID
    schedule_id: UUID | None
    user_id: UUID | None
    position_id: UUID | None
    start_time: datetime
    end_time: datetime
    break_minutes: int
    is_open: bool
    notes: str | None
    color: str | None
    recurrence_group_id: UUID | None


@dataclass(frozen=True)
class RecurrencePattern:
    """반복 패턴 (저장되지 않음, 한 번 소비됨).

    Transient recurrence pattern consumed once at creation time.

    Attributes:
        frequency: weekly | biweekly
        days: 요일 집합 0=일..6=토 (Weekday indices)
        end_type: never | on_date
        end_date: on_date일 때 마지막 날짜, 포함 (Last date, inclusive)
    """

    frequency: Literal["weekly", "biweekly"]
    days: Sequence[int]
    end_type: Literal["never", "on_date"] = "never"
    end_date: date | None = None

    def __post_init__(self) -> None:
        if self.frequency not in ("weekly", "biweekly"):
            raise ValueError(f"Unknown frequency: {self.frequency}")
        if any(day < 0 or day > 6 for day in self.days):
            raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
        if self.end_type == "on_date" and self.end_date is None:
            raise ValueError("An end date is required when the pattern ends on a date")

    @property
    def week_step(self) -> int:
        return 2 if self.frequency == "biweekly" else 1


def utc_weekday(instant: datetime) -> int:
    """UTC 기준 요일, 0=일요일 (UTC weekday with Sunday as 0)."""
    return (instant.astimezone(timezone.utc).weekday() + 1) % 7


def _within_end(pattern: RecurrencePattern, base_start: datetime, current: datetime) -> bool:
    if pattern.end_type == "on_date":
        return current.astimezone(timezone.utc).date() <= pattern.end_date
    return current <= base_start + NEVER_END_HORIZON


def generate_recurring_instances(
    base: ShiftLike,
    pattern: RecurrencePattern,
    created_by: UUID | None,
) -> list[dict[str, Any]]:
    """앵커 시프트로부터 반복 인스턴스 생성 페이로드를 계산합니다.

    Compute the creation payloads for the recurring instances of ``base``.
    Weekdays are visited in ascending order; duplicates are ignored. Every
    payload copies the anchor's fields except start/end, which move by whole
    UTC days so that the anchor's duration is kept exactly.

    Args:
        base: 이미 생성된 앵커 시프트 (The anchor shift, already persisted)
        pattern: 반복 패턴 (Recurrence pattern)
        created_by: 작성자 UUID (Actor)

    Returns:
        list[dict]: 시작 시각 순이 아닌 요일 순의 생성 페이로드
                    (Creation payloads grouped by weekday, at most 104)
    """
    duration: timedelta = base.end_time - base.start_time
    step: timedelta = timedelta(weeks=pattern.week_step)
    base_day: int = utc_weekday(base.start_time)

    instances: list[dict[str, Any]] = []
    for target_day in sorted(set(pattern.days)):
        if len(instances) >= MAX_RECURRING_INSTANCES:
            break
        offset: int = target_day - base_day
        if offset <= 0:
            offset += 7
        current: datetime = base.start_time + timedelta(days=offset)
        while len(instances) < MAX_RECURRING_INSTANCES and _within_end(pattern, base.start_time, current):
            instances.append(
                {
                    "shop_id": base.shop_id,
                    "schedule_id": base.schedule_id,
                    "user_id": base.user_id,
                    "position_id": base.position_id,
                    "start_time": current,
                    "end_time": current + duration,
                    "break_minutes": base.break_minutes,
                    "status": "draft",
                    "is_open": base.is_open,
                    "notes": base.notes,
                    "color": base.color,
                    "recurrence_group_id": base.recurrence_group_id,
                    "created_by": created_by,
                }
            )
            current = current + step
    return instances
