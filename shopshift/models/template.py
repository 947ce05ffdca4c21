"""템플릿 관련 SQLAlchemy ORM 모델 정의.

Template SQLAlchemy ORM model definitions. Templates store shop-local
time-of-day values, not instants; they are turned into UTC shifts when
applied.

Tables:
    - shift_templates: 재사용 시프트 템플릿 (Reusable single-shift snapshot)
    - schedule_templates: 주간 스케줄 템플릿 (Reusable week layout)
    - schedule_template_entries: 주간 템플릿 항목 (One shift slot per entry)
"""

import uuid
from datetime import datetime, time
from sqlalchemy import String, Integer, Time, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base, UTCDateTime, utcnow


class ShiftTemplate(Base):
    """시프트 템플릿 모델 (name + position + local time-of-day + break total)."""

    __tablename__ = "shift_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("positions.id", ondelete="SET NULL"), nullable=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)


class ScheduleTemplate(Base):
    """주간 스케줄 템플릿 모델 (Named week layout)."""

    __tablename__ = "schedule_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)


class ScheduleTemplateEntry(Base):
    """주간 템플릿 항목 모델.

    One shift slot of a week template. ``day_of_week`` is 0=Sunday..6=Saturday;
    an entry whose end time is not after its start time ends the next day.
    """

    __tablename__ = "schedule_template_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    template_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("schedule_templates.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    position_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("positions.id", ondelete="SET NULL"), nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_schedule_template_entries_day"),
    )
