"""알림 라우터.

Notification Router, nested under /shops/{shop_id}/notifications.
Every member reads and marks only their own notifications.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.common import CountResponse
from shopshift.schemas.time_record import NotificationResponse, UnreadCountResponse
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus
from shopshift.services.notification_service import notification_service

router: APIRouter = APIRouter()


@router.get("/shops/{shop_id}/notifications", response_model=list[NotificationResponse])
async def list_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    unread_only: Annotated[bool, Query()] = False,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[dict]:
    notifications = await notification_service.list_notifications(
        db, ctx.actor_id, ctx.shop_id, unread_only, limit
    )
    return [notification_service.build_response(n) for n in notifications]


@router.get("/shops/{shop_id}/notifications/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> UnreadCountResponse:
    count: int = await notification_service.get_unread_count(db, ctx.actor_id, ctx.shop_id)
    return UnreadCountResponse(unread_count=count)


@router.post("/shops/{shop_id}/notifications/read-all", response_model=CountResponse)
async def mark_all_read(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> CountResponse:
    count: int = await notification_service.mark_all_read(db, ctx.actor_id, ctx.shop_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("notifications", ctx.shop_id))
    return CountResponse(count=count)


@router.post("/shops/{shop_id}/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    notification = await notification_service.mark_read(db, notification_id, ctx.actor_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("notifications", ctx.shop_id))
    return notification_service.build_response(notification)
