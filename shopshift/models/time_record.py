"""근태 기록 SQLAlchemy ORM 모델 정의.

Time clock SQLAlchemy ORM model definitions.

Tables:
    - time_records: 출퇴근 기록 (clocked_in -> on_break <-> clocked_in -> clocked_out)
    - breaks: 실제 휴식 기록 (Actual breaks taken during a time record)
"""

import uuid
from datetime import datetime
from sqlalchemy import String, Text, Boolean, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base, UTCDateTime, utcnow


class TimeRecord(Base):
    """출퇴근 기록 모델.

    One clock-in/clock-out pair. ``is_manual`` marks entries created by a
    manager after the fact instead of by the clock.
    """

    __tablename__ = "time_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    shift_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="SET NULL"), nullable=True)
    clock_in: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    clock_out: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="clocked_in")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_manual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_time_records_shop_user_status", "shop_id", "user_id", "status"),
    )


class ClockBreak(Base):
    """실제 휴식 기록 모델 (``end_time`` NULL while the break is running)."""

    __tablename__ = "breaks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    time_record_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("time_records.id", ondelete="CASCADE"), nullable=False)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
