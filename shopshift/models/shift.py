"""시프트 관련 SQLAlchemy ORM 모델 정의.

Shift-related SQLAlchemy ORM model definitions.
A Shift owns its child rows (breaks and tag assignments); both child
collections are replaced wholesale whenever the shift is edited.

Tables:
    - schedules: 스케줄 묶음 (Named schedule grouping shifts)
    - shifts: 근무 시프트 (Shift instances, stored in UTC)
    - shift_breaks: 시프트 휴식 (Planned breaks inside a shift)
    - shift_tags: 시프트 태그 (Shop-scoped labels)
    - shift_tag_assignments: 시프트-태그 매핑 (Shift/tag join table)
    - shift_history: 시프트 변경 이력 (Shift audit trail)
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String, Text, Boolean, Integer, ForeignKey, UniqueConstraint, CheckConstraint, Index, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base, UTCDateTime, utcnow

# PostgreSQL에서는 JSONB, 그 외에는 JSON (JSONB on PostgreSQL, JSON elsewhere)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Schedule(Base):
    """스케줄 모델 (Named schedule that shifts can optionally belong to)."""

    __tablename__ = "schedules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#3b82f6")
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)


class Shift(Base):
    """시프트 모델.

    Shift model. ``start_time``/``end_time`` are UTC instants rendered in the
    shop's timezone. ``is_open`` is kept equal to ``user_id IS NULL`` by every
    mutation that touches either column.

    Status Flow:
        draft <-> published
        - draft: 아직 확정되지 않음 (Not yet final for the assignee)
        - published: 게시됨 (Visible as final)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        shop_id: 소속 매장 FK (Owning shop)
        schedule_id: 스케줄 FK, 선택 (Optional parent schedule)
        user_id: 배정된 직원 FK, NULL이면 오픈 시프트 (Assignee; NULL means open)
        position_id: 포지션 FK, 선택 (Optional position)
        start_time / end_time: 시작/종료 시각 UTC (Start/end instants)
        break_minutes: 휴식 합계 분 (Sum of break durations)
        status: 상태 (draft | published)
        is_open: 오픈 시프트 여부 (True iff no assignee)
        notes: 메모 (Optional note, length-bounded)
        color: 표시 색상 덮어쓰기 (Optional color override)
        recurrence_group_id: 반복 생성 묶음 ID (Shared by one recurring-creation request)
        created_by: 작성자 (Actor who created the shift)
    """

    __tablename__ = "shifts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    schedule_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("schedules.id", ondelete="SET NULL"), nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    position_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("positions.id", ondelete="SET NULL"), nullable=True)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    recurrence_group_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_shifts_time_order"),
        CheckConstraint("break_minutes >= 0", name="ck_shifts_break_minutes"),
        Index("ix_shifts_shop_start", "shop_id", "start_time"),
        Index("ix_shifts_user_start", "user_id", "start_time"),
        Index("ix_shifts_recurrence_group", "recurrence_group_id"),
    )


class ShiftBreak(Base):
    """시프트 휴식 모델.

    Planned break inside a shift. Rows are deleted and re-inserted as a set
    on every shift update; ``sort_order`` is the position in the submitted list.
    """

    __tablename__ = "shift_breaks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    label: Mapped[str] = mapped_column(String(100), nullable=False, default="Break")
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_shift_breaks_duration"),
        Index("ix_shift_breaks_shift", "shift_id"),
    )


class ShiftTag(Base):
    """시프트 태그 모델 (Shop-scoped label)."""

    __tablename__ = "shift_tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("shop_id", "name", name="uq_shift_tags_shop_name"),
    )


class ShiftTagAssignment(Base):
    """시프트-태그 매핑 모델 (Join row between Shift and ShiftTag)."""

    __tablename__ = "shift_tag_assignments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    tag_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shift_tags.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("shift_id", "tag_id", name="uq_shift_tag_assignments_shift_tag"),
    )


class ShiftHistory(Base):
    """시프트 변경 이력 모델.

    Audit trail row written on every shift mutation.

    Actions:
        create | update | delete | publish | unpublish | assign | unassign
    """

    __tablename__ = "shift_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 시프트 삭제 후에도 이력 유지 (No FK: history outlives deleted shifts)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    old_data: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    new_data: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    changed_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        Index("ix_shift_history_shift", "shift_id", "changed_at"),
    )
