"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification SQLAlchemy ORM model definitions.

Tables:
    - notifications: 사용자 알림 (One row per recipient)
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import String, Text, Boolean, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base, UTCDateTime, utcnow
from shopshift.models.shift import JSONType


class Notification(Base):
    """알림 모델 (사용자에게 전달되는 시스템 알림).

    Notification Types (type 필드 값):
        shift_published, shift_assigned, shift_updated, shift_deleted,
        swap_requested, swap_approved, swap_denied,
        open_shift_available, open_shift_claimed, open_shift_approved,
        open_shift_denied, clock_reminder, schedule_updated, team_invite,
        time_off_requested, time_off_approved, time_off_denied

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        shop_id: 소속 매장 FK (Shop scope)
        user_id: 수신자 FK (Recipient)
        type: 알림 유형 (Notification type, see above)
        title: 제목 (Short title)
        body: 본문, 선택 (Optional body text)
        data: 참조 데이터 (Free-form reference payload, e.g. time_record_id)
        is_read: 읽음 여부 (Whether the recipient has read it)
    """

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    __table_args__ = (
        Index("ix_notifications_user_shop_read", "user_id", "shop_id", "is_read"),
    )
