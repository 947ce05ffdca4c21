"""알림 서비스 (알림 비즈니스 로직).

Notification Service. Handles notification listing, read/unread operations
and the fan-out helpers other services call (one row per recipient).
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.notification import Notification
from shopshift.repositories.notification_repository import notification_repository
from shopshift.repositories.shop_repository import ADMIN_ROLES, member_repository
from shopshift.utils.exceptions import NotFoundError


class NotificationService:
    """알림 서비스.

    Notification service providing read/unread operations and fan-out.
    """

    # --- 조회/읽음 처리 (Read/unread operations) ---

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        shop_id: UUID,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[Notification]:
        """사용자의 알림 목록을 조회합니다.

        List a user's notifications in a shop, newest first.
        """
        return await notification_repository.get_user_notifications(db, user_id, shop_id, unread_only, limit)

    async def get_unread_count(self, db: AsyncSession, user_id: UUID, shop_id: UUID) -> int:
        return await notification_repository.get_unread_count(db, user_id, shop_id)

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> Notification:
        """단일 알림을 읽음 처리합니다 (본인 알림만).

        Mark one of the user's own notifications as read.

        Raises:
            NotFoundError: 알림이 없거나 다른 사용자의 알림일 때
        """
        notification: Notification | None = await notification_repository.get_by_id(db, notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification not found")
        notification.is_read = True
        await db.flush()
        return notification

    async def mark_all_read(self, db: AsyncSession, user_id: UUID, shop_id: UUID) -> int:
        """매장 내 모든 알림을 읽음 처리합니다 (Returns updated count)."""
        return await notification_repository.mark_all_read(db, user_id, shop_id)

    # --- 생성 (Creation and fan-out) ---

    async def create_notification(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        type_: str,
        title: str,
        body: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        return await notification_repository.create(
            db,
            {
                "shop_id": shop_id,
                "user_id": user_id,
                "type": type_,
                "title": title,
                "body": body,
                "data": data or {},
            },
        )

    async def notify_users(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_ids: Sequence[UUID],
        type_: str,
        title: str,
        body: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> int:
        """여러 사용자에게 같은 알림을 보냅니다 (One row per distinct recipient)."""
        recipients: list[UUID] = list(dict.fromkeys(uid for uid in user_ids if uid is not None))
        await notification_repository.create_many(
            db,
            [
                {"shop_id": shop_id, "user_id": uid, "type": type_, "title": title, "body": body, "data": data or {}}
                for uid in recipients
            ],
        )
        return len(recipients)

    async def notify_shop_members(
        self,
        db: AsyncSession,
        shop_id: UUID,
        type_: str,
        title: str,
        body: str | None = None,
        exclude_user_id: UUID | None = None,
    ) -> int:
        """매장의 모든 활성 구성원에게 알림을 보냅니다.

        Notify every active member of the shop except ``exclude_user_id``
        (typically the actor).

        Returns:
            int: 생성된 알림 수 (Number of notifications created)
        """
        user_ids: list[UUID] = await member_repository.get_active_user_ids(db, shop_id)
        recipients = [uid for uid in user_ids if uid != exclude_user_id]
        return await self.notify_users(db, shop_id, recipients, type_, title, body)

    async def notify_shop_admins(
        self,
        db: AsyncSession,
        shop_id: UUID,
        type_: str,
        title: str,
        body: str | None = None,
        data: dict[str, Any] | None = None,
        exclude_user_id: UUID | None = None,
    ) -> int:
        """활성 owner/manager에게 알림을 보냅니다 (Notify active owners and managers)."""
        user_ids: list[UUID] = await member_repository.get_active_user_ids(db, shop_id, ADMIN_ROLES)
        recipients = [uid for uid in user_ids if uid != exclude_user_id]
        return await self.notify_users(db, shop_id, recipients, type_, title, body, data)

    @staticmethod
    def build_response(notification: Notification) -> dict:
        return {
            "id": str(notification.id),
            "shop_id": str(notification.shop_id),
            "type": notification.type,
            "title": notification.title,
            "body": notification.body,
            "data": notification.data or {},
            "is_read": notification.is_read,
            "created_at": notification.created_at,
        }


# 싱글턴 인스턴스 (Singleton instance)
notification_service: NotificationService = NotificationService()
