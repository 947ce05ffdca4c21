"""드래그 앤 드롭 재배정 계산.

Drag-and-drop reassignment resolver. A drop target is a tagged value
(``OpenDropTarget`` or ``AssigneeDropTarget``); resolving it against the
dragged shift yields the minimal field patch, or ``None`` when nothing
changes.

Date moves keep the shop-local wall-clock time of both ends, so a
09:00-17:00 shift stays 09:00-17:00 on the new day across DST changes.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from shopshift.scheduling.timezones import combine_local, get_zone


@dataclass(frozen=True)
class OpenDropTarget:
    date: date
    kind: str = "open"


@dataclass(frozen=True)
class AssigneeDropTarget:
    assignee_id: UUID
    date: date
    kind: str = "assignee"


DropTarget = OpenDropTarget | AssigneeDropTarget


def resolve_drop(shift: Any, target: DropTarget, zone: str | ZoneInfo | None) -> dict[str, Any] | None:
    """드롭 대상에 대한 최소 패치를 계산합니다.

    Compute the patch that moves ``shift`` onto ``target``.

    Args:
        shift: 드래그한 시프트 (Dragged shift with user_id, is_open, start_time, end_time)
        target: 드롭 대상 (Decoded drop target)
        zone: 매장 시간대 (Shop timezone)

    Returns:
        dict | None: 변경 필드, 변경 없으면 None (Changed fields, None for a no-op)
    """
    tz: ZoneInfo = get_zone(zone)
    patch: dict[str, Any] = {}

    current_assignee: UUID | None = None if shift.is_open else shift.user_id
    target_assignee: UUID | None = target.assignee_id if isinstance(target, AssigneeDropTarget) else None
    if target_assignee != current_assignee:
        patch["user_id"] = target_assignee
        patch["is_open"] = target_assignee is None

    local_start: datetime = shift.start_time.astimezone(tz)
    local_end: datetime = shift.end_time.astimezone(tz)
    if target.date != local_start.date():
        # 종료일은 원래의 현지 날짜 차이를 유지 (End keeps its local day offset)
        day_span: int = (local_end.date() - local_start.date()).days
        patch["start_time"] = combine_local(target.date, local_start.time(), tz)
        patch["end_time"] = combine_local(target.date + timedelta(days=day_span), local_end.time(), tz)

    return patch or None
