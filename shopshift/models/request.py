"""요청 관련 SQLAlchemy ORM 모델 정의.

Request-like SQLAlchemy ORM model definitions. Each request entity has a
single status column whose review transitions (approve/deny) are terminal
and stamp ``reviewed_by``/``reviewed_at``.

Tables:
    - open_shift_claims: 오픈 시프트 신청 (pending -> approved | denied)
    - swap_requests: 시프트 교환 요청 (pending -> approved | denied | cancelled)
    - time_off_requests: 휴가 요청 (pending -> approved | denied | cancelled)
    - pto_balance_adjustments: PTO 잔액 수동 조정 (Manual PTO balance adjustments)
"""

import uuid
from datetime import date, datetime
from sqlalchemy import String, Text, Boolean, Float, Date, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base, UTCDateTime, utcnow


class OpenShiftClaim(Base):
    """오픈 시프트 신청 모델.

    A member's request to take an open shift. Approving one claim assigns the
    shift to its claimant and denies every other pending claim on that shift.
    """

    __tablename__ = "open_shift_claims"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_open_shift_claims_shift_status", "shift_id", "status"),
    )


class SwapRequest(Base):
    """시프트 교환 요청 모델.

    A bilateral swap (``target_shift_id`` and ``target_id`` both set) or a
    one-sided offer (no target). Only a bilateral swap exchanges assignees
    on approval. Shift references are cleared, not cascaded, when a shift is
    deleted, so a cancelled request keeps its row.
    """

    __tablename__ = "swap_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    requester_shift_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="SET NULL"), nullable=True)
    target_shift_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="SET NULL"), nullable=True)
    requester_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    target_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)


class TimeOffRequest(Base):
    """휴가 요청 모델.

    Time-off request. ``is_paid`` is decided by the reviewer on approval; paid
    approved requests draw down the PTO balance computed remotely.
    """

    __tablename__ = "time_off_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    hours_requested: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_paid: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    reviewer_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_time_off_requests_dates"),
        CheckConstraint("hours_requested > 0", name="ck_time_off_requests_hours"),
    )


class PtoBalanceAdjustment(Base):
    """PTO 잔액 조정 모델 (Signed manual adjustment in hours)."""

    __tablename__ = "pto_balance_adjustments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
