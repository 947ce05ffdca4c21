"""매장 구성원 라우터.

Member Router, nested under /shops/{shop_id}/members.

Permission Matrix:
    - 목록 조회: 활성 구성원 (Any active member)
    - 부서 지정, 보관, 복원: owner + manager
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.shop import MemberDepartmentUpdate, MemberResponse
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus
from shopshift.services.member_service import member_service

router: APIRouter = APIRouter()


@router.get("/shops/{shop_id}/members", response_model=list[MemberResponse])
async def list_members(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    include_archived: Annotated[bool, Query()] = False,
) -> list[dict]:
    members = await member_service.list_members(db, ctx.shop_id, include_archived)
    return await member_service.build_responses(db, members)


@router.put("/shops/{shop_id}/members/{member_id}/department", response_model=MemberResponse)
async def assign_department(
    member_id: UUID,
    data: MemberDepartmentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    member = await member_service.assign_department(db, ctx, member_id, data.department_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("members", ctx.shop_id))
    return await member_service.build_response(db, member)


@router.post("/shops/{shop_id}/members/{member_id}/archive")
async def archive_member(
    member_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    """구성원을 보관 처리합니다.

    Archive a member. Their future shifts are deleted, pending swaps are
    cancelled and pending claims denied; past shifts stay.
    """
    counts: dict[str, int] = await member_service.archive_member(db, ctx, member_id)
    await db.commit()
    for entity in ("members", "shifts", "swaps", "claims"):
        invalidation_bus.publish(InvalidationEvent(entity, ctx.shop_id))
    return {"success": True, **counts}


@router.post("/shops/{shop_id}/members/{member_id}/restore", response_model=MemberResponse)
async def restore_member(
    member_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    """보관된 구성원을 복원합니다 (Deleted shifts are not restored)."""
    member = await member_service.restore_member(db, ctx, member_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("members", ctx.shop_id))
    return await member_service.build_response(db, member)
