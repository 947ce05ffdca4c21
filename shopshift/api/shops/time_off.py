"""휴가/PTO 라우터.

Time Off Router, nested under /shops/{shop_id}/time-off and
/shops/{shop_id}/pto.

Permission Matrix:
    - 요청, 취소(본인), 조회: 활성 구성원 (Any active member)
    - 승인, 거절, PTO 조정: owner + manager
    - PTO 잔액/원장: 본인 또는 owner + manager (Own, or any for managers)
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.request import (
    PtoAdjustmentCreate,
    PtoAdjustmentResponse,
    TimeOffApprove,
    TimeOffCreate,
    TimeOffDeny,
    TimeOffResponse,
)
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus
from shopshift.services.time_off_service import time_off_service
from shopshift.utils.exceptions import ForbiddenError

router: APIRouter = APIRouter()


def _target_user(ctx: ShopContext, user_id: UUID | None) -> UUID:
    if user_id is None or user_id == ctx.actor_id:
        return ctx.actor_id
    if not ctx.is_admin:
        raise ForbiddenError("Manager or owner role required")
    return user_id


@router.get("/shops/{shop_id}/time-off", response_model=list[TimeOffResponse])
async def list_time_off(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    status: Annotated[str | None, Query()] = None,
) -> list[dict]:
    user_id: UUID | None = None if ctx.is_admin else ctx.actor_id
    requests = await time_off_service.list_requests(db, ctx.shop_id, status, user_id)
    return [time_off_service.build_response(r) for r in requests]


@router.post("/shops/{shop_id}/time-off", response_model=TimeOffResponse, status_code=201)
async def request_time_off(
    data: TimeOffCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    """휴가를 요청합니다 (관리자에게 알림)."""
    request = await time_off_service.request_time_off(db, ctx, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_off", ctx.shop_id))
    return time_off_service.build_response(request)


@router.post("/shops/{shop_id}/time-off/{request_id}/approve", response_model=TimeOffResponse)
async def approve_time_off(
    request_id: UUID,
    data: TimeOffApprove,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    request = await time_off_service.approve(db, ctx, request_id, data.is_paid)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_off", ctx.shop_id))
    return time_off_service.build_response(request)


@router.post("/shops/{shop_id}/time-off/{request_id}/deny", response_model=TimeOffResponse)
async def deny_time_off(
    request_id: UUID,
    data: TimeOffDeny,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    request = await time_off_service.deny(db, ctx, request_id, data.reviewer_notes)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_off", ctx.shop_id))
    return time_off_service.build_response(request)


@router.post("/shops/{shop_id}/time-off/{request_id}/cancel", response_model=TimeOffResponse)
async def cancel_time_off(
    request_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    request = await time_off_service.cancel(db, ctx, request_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_off", ctx.shop_id))
    return time_off_service.build_response(request)


# === PTO ===

@router.post("/shops/{shop_id}/pto/adjustments", response_model=PtoAdjustmentResponse, status_code=201)
async def adjust_pto(
    data: PtoAdjustmentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    adjustment = await time_off_service.adjust_balance(db, ctx, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("pto", ctx.shop_id))
    return time_off_service.build_adjustment_response(adjustment)


@router.get("/shops/{shop_id}/pto/balance")
async def get_pto_balance(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    user_id: Annotated[UUID | None, Query()] = None,
) -> Any:
    return await time_off_service.get_balance(db, ctx.shop_id, _target_user(ctx, user_id))


@router.get("/shops/{shop_id}/pto/ledger")
async def get_pto_ledger(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    user_id: Annotated[UUID | None, Query()] = None,
) -> Any:
    return await time_off_service.get_ledger(db, ctx.shop_id, _target_user(ctx, user_id))
