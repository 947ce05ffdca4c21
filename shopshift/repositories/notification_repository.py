"""알림 레포지토리 (알림 관련 DB 쿼리 담당).

Notification Repository. Handles notification listing, unread counts,
read-status updates and recent-notification lookups for reminder dedupe.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.notification import Notification
from shopshift.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """알림 레포지토리.

    Notification repository with user-scoped queries.

    Extends:
        BaseRepository[Notification]
    """

    def __init__(self) -> None:
        super().__init__(Notification)

    async def get_user_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        shop_id: UUID,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[Notification]:
        """사용자의 알림 목록을 최신순으로 조회합니다.

        Retrieve a user's notifications in a shop, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            shop_id: 매장 UUID (Shop UUID)
            unread_only: 읽지 않은 알림만 (Only unread notifications)
            limit: 최대 개수 (Maximum number of rows)

        Returns:
            Sequence[Notification]: 알림 목록 (List of notifications)
        """
        query: Select = select(Notification).where(
            Notification.user_id == user_id,
            Notification.shop_id == shop_id,
        )
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        result = await db.execute(query.order_by(Notification.created_at.desc()).limit(limit))
        return result.scalars().all()

    async def get_unread_count(
        self,
        db: AsyncSession,
        user_id: UUID,
        shop_id: UUID,
    ) -> int:
        """읽지 않은 알림 수를 조회합니다 (Unread notification count)."""
        result = await db.execute(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.shop_id == shop_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def mark_all_read(
        self,
        db: AsyncSession,
        user_id: UUID,
        shop_id: UUID,
    ) -> int:
        """매장 내 사용자의 모든 알림을 읽음 처리합니다 (Returns updated count)."""
        result = await db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.shop_id == shop_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()
        return result.rowcount or 0

    async def get_recipients_since(
        self,
        db: AsyncSession,
        type_: str,
        since: datetime,
    ) -> set[UUID]:
        """since 이후 해당 유형 알림을 받은 사용자 (Users notified with type_ since a time)."""
        result = await db.execute(
            select(Notification.user_id).where(
                Notification.type == type_,
                Notification.created_at >= since,
            )
        )
        return set(result.scalars().all())


# 싱글턴 인스턴스 (Singleton instance)
notification_repository: NotificationRepository = NotificationRepository()
