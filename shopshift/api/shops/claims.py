"""오픈 시프트 신청 라우터.

Open Shift Claim Router, nested under /shops/{shop_id}/claims.

Permission Matrix:
    - 신청, 조회: 활성 구성원 (Any active member)
    - 승인, 거절: owner + manager
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.request import ClaimCreate, ClaimResponse
from shopshift.services.claim_service import claim_service
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus

router: APIRouter = APIRouter()


@router.get("/shops/{shop_id}/claims", response_model=list[ClaimResponse])
async def list_claims(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    status: Annotated[str | None, Query()] = None,
    shift_id: Annotated[UUID | None, Query()] = None,
) -> list[dict]:
    """신청 목록을 조회합니다 (일반 구성원은 본인 신청만).

    List claims. Members without a manager role only see their own.
    """
    user_id: UUID | None = None if ctx.is_admin else ctx.actor_id
    claims = await claim_service.list_claims(db, ctx.shop_id, status, shift_id, user_id)
    return await claim_service.build_responses(db, claims)


@router.post("/shops/{shop_id}/claims", response_model=ClaimResponse, status_code=201)
async def claim_shift(
    data: ClaimCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    claim = await claim_service.claim_shift(db, ctx, data.shift_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("claims", ctx.shop_id))
    return await claim_service.build_response(db, claim)


@router.post("/shops/{shop_id}/claims/{claim_id}/approve", response_model=ClaimResponse)
async def approve_claim(
    claim_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    """신청을 승인합니다 (시프트 배정, 다른 대기 신청 거절).

    Approve a claim: the shift goes to the claimant and every other pending
    claim on it is denied.
    """
    claim = await claim_service.approve_claim(db, ctx, claim_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("claims", ctx.shop_id))
    invalidation_bus.publish(InvalidationEvent("shifts", ctx.shop_id))
    return await claim_service.build_response(db, claim)


@router.post("/shops/{shop_id}/claims/{claim_id}/deny", response_model=ClaimResponse)
async def deny_claim(
    claim_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    claim = await claim_service.deny_claim(db, ctx, claim_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("claims", ctx.shop_id))
    return await claim_service.build_response(db, claim)
