"""시프트 교환 라우터.

Swap Router, nested under /shops/{shop_id}/swaps.

Permission Matrix:
    - 요청, 조회, 취소(요청자): 활성 구성원 (Any active member)
    - 승인, 거절: owner + manager
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.request import SwapCreate, SwapResponse
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus
from shopshift.services.swap_service import swap_service

router: APIRouter = APIRouter()


@router.get("/shops/{shop_id}/swaps", response_model=list[SwapResponse])
async def list_swaps(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    status: Annotated[str | None, Query()] = None,
) -> list[dict]:
    user_id: UUID | None = None if ctx.is_admin else ctx.actor_id
    swaps = await swap_service.list_swaps(db, ctx.shop_id, status, user_id)
    return [swap_service.build_response(s) for s in swaps]


@router.post("/shops/{shop_id}/swaps", response_model=SwapResponse, status_code=201)
async def request_swap(
    data: SwapCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    """교환 요청 또는 오퍼를 생성합니다 (Request a swap, or offer a shift)."""
    swap = await swap_service.request_swap(db, ctx, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("swaps", ctx.shop_id))
    return swap_service.build_response(swap)


@router.post("/shops/{shop_id}/swaps/{swap_id}/approve", response_model=SwapResponse)
async def approve_swap(
    swap_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    swap = await swap_service.approve_swap(db, ctx, swap_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("swaps", ctx.shop_id))
    invalidation_bus.publish(InvalidationEvent("shifts", ctx.shop_id))
    return swap_service.build_response(swap)


@router.post("/shops/{shop_id}/swaps/{swap_id}/deny", response_model=SwapResponse)
async def deny_swap(
    swap_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    swap = await swap_service.deny_swap(db, ctx, swap_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("swaps", ctx.shop_id))
    return swap_service.build_response(swap)


@router.post("/shops/{shop_id}/swaps/{swap_id}/cancel", response_model=SwapResponse)
async def cancel_swap(
    swap_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    swap = await swap_service.cancel_swap(db, ctx, swap_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("swaps", ctx.shop_id))
    return swap_service.build_response(swap)
