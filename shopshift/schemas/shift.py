"""시프트 관련 Pydantic 요청/응답 스키마 정의.

Shift-related Pydantic request/response schema definitions: shift
create/update, breaks, recurrence patterns, the tri-state bulk patch, the
drag-and-drop target union, week copy and the bulk-action endpoint.
"""

from datetime import date, datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from shopshift.scheduling.drag_drop import AssigneeDropTarget, DropTarget, OpenDropTarget
from shopshift.scheduling.recurrence import RecurrencePattern

# 메모 최대 길이 (Maximum length of a shift note)
NOTES_MAX_LENGTH: int = 500


class BreakInput(BaseModel):
    """시프트 휴식 입력 스키마.

    Attributes:
        label: 휴식 이름 (Break label, default "Break")
        duration_minutes: 휴식 길이 분, 양수 (Duration in minutes, positive)
        is_paid: 유급 여부 (Whether the break is paid)
    """

    label: str = Field(default="Break", max_length=100)
    duration_minutes: int = Field(gt=0)
    is_paid: bool = False


class RecurrenceInput(BaseModel):
    """반복 패턴 입력 스키마 (Recurrence pattern, consumed once).

    Attributes:
        frequency: weekly | biweekly
        days: 요일 목록 0=일..6=토 (Weekday indices, 0=Sunday)
        end_type: never | on_date
        end_date: 마지막 날짜, on_date일 때 필수 (Last date, inclusive)
    """

    frequency: Literal["weekly", "biweekly"]
    days: list[Annotated[int, Field(ge=0, le=6)]] = Field(min_length=1)
    end_type: Literal["never", "on_date"] = "never"
    end_date: date | None = None

    @model_validator(mode="after")
    def _require_end_date(self) -> "RecurrenceInput":
        if self.end_type == "on_date" and self.end_date is None:
            raise ValueError("end_date is required when end_type is on_date")
        return self

    def to_pattern(self) -> RecurrencePattern:
        return RecurrencePattern(
            frequency=self.frequency,
            days=tuple(self.days),
            end_type=self.end_type,
            end_date=self.end_date,
        )


class ShiftCreate(BaseModel):
    """시프트 생성 요청 스키마.

    Shift creation request. ``breaks``/``tag_ids`` insert child rows,
    ``recurrence`` generates the recurring batch and ``save_as_template``
    stores a reusable template under ``template_name``.
    """

    user_id: UUID | None = None
    position_id: UUID | None = None
    schedule_id: UUID | None = None
    start_time: datetime
    end_time: datetime
    break_minutes: int = Field(default=0, ge=0)
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)
    color: str | None = Field(default=None, max_length=20)
    breaks: list[BreakInput] | None = None
    tag_ids: list[UUID] | None = None
    recurrence: RecurrenceInput | None = None
    save_as_template: bool = False
    template_name: str | None = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def _check_times(self) -> "ShiftCreate":
        if self.start_time.tzinfo is None or self.end_time.tzinfo is None:
            raise ValueError("start_time and end_time must include a UTC offset")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ShiftUpdate(BaseModel):
    """시프트 수정 요청 스키마 (부분 업데이트).

    Partial shift update. Only fields the client sent are applied; sending
    ``breaks`` or ``tag_ids`` (even empty) replaces that child set wholesale.
    """

    user_id: UUID | None = None
    position_id: UUID | None = None
    schedule_id: UUID | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    break_minutes: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)
    color: str | None = Field(default=None, max_length=20)
    breaks: list[BreakInput] | None = None
    tag_ids: list[UUID] | None = None

    @model_validator(mode="after")
    def _check_aware(self) -> "ShiftUpdate":
        for value in (self.start_time, self.end_time):
            if value is not None and value.tzinfo is None:
                raise ValueError("start_time and end_time must include a UTC offset")
        return self


class BreakResponse(BaseModel):
    id: str
    label: str
    duration_minutes: int
    is_paid: bool
    sort_order: int


class ShiftResponse(BaseModel):
    """시프트 응답 스키마 (Shift with breaks, tag ids and assignee name)."""

    id: str
    shop_id: str
    schedule_id: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    position_id: str | None = None
    start_time: datetime
    end_time: datetime
    break_minutes: int
    status: str
    is_open: bool
    notes: str | None = None
    color: str | None = None
    recurrence_group_id: str | None = None
    created_by: str | None = None
    breaks: list[BreakResponse] = []
    tag_ids: list[str] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ShiftIdsRequest(BaseModel):
    """시프트 ID 목록 요청 스키마 (publish / unpublish / bulk delete)."""

    shift_ids: list[UUID] = Field(min_length=1)


class AssignRequest(BaseModel):
    user_id: UUID


class BulkShiftPatch(BaseModel):
    """벌크 수정 패치 스키마 (3상태 인코딩).

    Tri-state bulk patch: a field missing from the JSON object means no
    change, ``null`` clears it, a value sets it. ``changes()`` returns only
    the fields the client actually sent.
    """

    start_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    end_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    position_id: UUID | None = None
    color: str | None = Field(default=None, max_length=20)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class BulkUpdateRequest(BaseModel):
    shift_ids: list[UUID] = Field(min_length=1)
    patch: BulkShiftPatch


class CopyWeekRequest(BaseModel):
    """주간 복사 요청 스키마.

    Attributes:
        source_week_start: 원본 주의 날짜, 해당 주 일요일로 맞춤 (Any date of the source week)
        weeks_count: 복사할 주 수, 1~12 (Validated by the service)
    """

    source_week_start: date
    weeks_count: int


class OpenDropTargetIn(BaseModel):
    kind: Literal["open"]
    date: date

    def to_target(self) -> DropTarget:
        return OpenDropTarget(date=self.date)


class AssigneeDropTargetIn(BaseModel):
    kind: Literal["assignee"]
    assignee_id: UUID
    date: date

    def to_target(self) -> DropTarget:
        return AssigneeDropTarget(assignee_id=self.assignee_id, date=self.date)


class MoveShiftRequest(BaseModel):
    """드래그 앤 드롭 이동 요청 스키마 (Tagged drop target)."""

    target: Annotated[OpenDropTargetIn | AssigneeDropTargetIn, Field(discriminator="kind")]


class BulkActionItem(BaseModel):
    """벌크 액션 항목 스키마 ({action, id?, data?})."""

    action: Literal["create", "update", "delete", "publish", "unpublish"]
    id: UUID | None = None
    data: dict[str, Any] | None = None


class BulkActionRequest(BaseModel):
    actions: list[BulkActionItem]


class BulkActionResult(BaseModel):
    action: str
    success: bool
    error: str | None = None


class BulkActionResponse(BaseModel):
    results: list[BulkActionResult]


class ShiftHistoryResponse(BaseModel):
    id: str
    shift_id: str
    action: str
    changed_by: str | None = None
    old_data: dict[str, Any] | None = None
    new_data: dict[str, Any] | None = None
    changed_at: datetime


class ShiftCreateResponse(BaseModel):
    """시프트 생성 응답 (Anchor shift plus number of recurring instances)."""

    shift: ShiftResponse
    recurring_count: int = 0


class MoveShiftResponse(BaseModel):
    shift: ShiftResponse
    changed: bool
