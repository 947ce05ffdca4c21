"""시프트 라우터 (매장 하위 시프트 엔드포인트).

Shift Router. Endpoints for shifts under a shop, nested under
/shops/{shop_id}/shifts.

Permission Matrix:
    - 조회 (list, get, history): 활성 구성원 (Any active member)
    - 변경 (create, update, delete, publish, bulk, copy, assign, move):
      owner + manager
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.common import CountResponse, SuccessResponse
from shopshift.schemas.shift import (
    AssignRequest,
    BulkUpdateRequest,
    CopyWeekRequest,
    MoveShiftRequest,
    MoveShiftResponse,
    ShiftCreate,
    ShiftCreateResponse,
    ShiftHistoryResponse,
    ShiftIdsRequest,
    ShiftResponse,
    ShiftUpdate,
)
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus
from shopshift.services.shift_service import shift_service

router: APIRouter = APIRouter()


def _invalidate(ctx: ShopContext, start: datetime | None = None, end: datetime | None = None) -> None:
    invalidation_bus.publish(InvalidationEvent("shifts", ctx.shop_id, start, end))


@router.get("/shops/{shop_id}/shifts", response_model=list[ShiftResponse])
async def list_shifts(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    start: Annotated[datetime, Query()],
    end: Annotated[datetime, Query()],
    user_id: Annotated[UUID | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
) -> list[dict]:
    """기간 내 시프트 목록을 조회합니다 (start <= start_time <= end).

    List shifts whose start falls within the inclusive range.
    """
    shifts = await shift_service.list_shifts(db, ctx.shop_id, start, end, user_id, status)
    return await shift_service.build_responses(db, shifts)


@router.post("/shops/{shop_id}/shifts", response_model=ShiftCreateResponse, status_code=201)
async def create_shift(
    data: ShiftCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    """시프트를 생성합니다 (휴식, 태그, 반복 패턴, 템플릿 저장 포함).

    Create a draft shift with its breaks and tags, optionally generating the
    recurring batch and saving a shift template.
    """
    shift, generated = await shift_service.create_shift(db, ctx, data)
    await db.commit()
    _invalidate(ctx, shift.start_time)
    return {"shift": await shift_service.build_response(db, shift), "recurring_count": generated}


@router.post("/shops/{shop_id}/shifts/publish", response_model=CountResponse)
async def publish_shifts(
    data: ShiftIdsRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> CountResponse:
    """시프트를 게시하고 담당자에게 알립니다 (Publish and notify assignees)."""
    count: int = await shift_service.publish_shifts(db, ctx, data.shift_ids)
    await db.commit()
    _invalidate(ctx)
    return CountResponse(count=count)


@router.post("/shops/{shop_id}/shifts/unpublish", response_model=CountResponse)
async def unpublish_shifts(
    data: ShiftIdsRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> CountResponse:
    count: int = await shift_service.unpublish_shifts(db, ctx, data.shift_ids)
    await db.commit()
    _invalidate(ctx)
    return CountResponse(count=count)


@router.post("/shops/{shop_id}/shifts/bulk-update", response_model=CountResponse)
async def bulk_update_shifts(
    data: BulkUpdateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> CountResponse:
    """여러 시프트에 같은 패치를 적용합니다.

    Apply one tri-state patch to every listed shift. A field missing from
    ``patch`` is left unchanged; ``null`` clears it.
    """
    count: int = await shift_service.bulk_update(db, ctx, data.shift_ids, data.patch)
    await db.commit()
    _invalidate(ctx)
    return CountResponse(count=count)


@router.post("/shops/{shop_id}/shifts/bulk-delete", response_model=CountResponse)
async def bulk_delete_shifts(
    data: ShiftIdsRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> CountResponse:
    count: int = await shift_service.bulk_delete(db, ctx, data.shift_ids)
    await db.commit()
    _invalidate(ctx)
    return CountResponse(count=count)


@router.post("/shops/{shop_id}/shifts/copy-week", response_model=CountResponse, status_code=201)
async def copy_week(
    data: CopyWeekRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> CountResponse:
    """원본 주를 다음 N주로 복사합니다 (Copy a week forward 1..12 weeks)."""
    count: int = await shift_service.copy_week(db, ctx, data)
    await db.commit()
    _invalidate(ctx)
    return CountResponse(count=count)


@router.get("/shops/{shop_id}/shifts/{shift_id}", response_model=ShiftResponse)
async def get_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    shift = await shift_service.get_shift(db, ctx.shop_id, shift_id)
    return await shift_service.build_response(db, shift)


@router.patch("/shops/{shop_id}/shifts/{shift_id}", response_model=ShiftResponse)
async def update_shift(
    shift_id: UUID,
    data: ShiftUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
    unpublish: Annotated[bool, Query()] = False,
) -> dict:
    """시프트를 수정합니다.

    Partially update a shift. ``breaks``/``tag_ids`` replace the whole child
    set when present. ``?unpublish=true`` saves and moves the shift back to
    draft.
    """
    shift = await shift_service.update_shift(db, ctx, shift_id, data, unpublish=unpublish)
    await db.commit()
    _invalidate(ctx, shift.start_time)
    return await shift_service.build_response(db, shift)


@router.delete("/shops/{shop_id}/shifts/{shift_id}", response_model=SuccessResponse)
async def delete_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> SuccessResponse:
    await shift_service.delete_shift(db, ctx, shift_id)
    await db.commit()
    _invalidate(ctx)
    return SuccessResponse()


@router.post("/shops/{shop_id}/shifts/{shift_id}/assign", response_model=ShiftResponse)
async def assign_shift(
    shift_id: UUID,
    data: AssignRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    shift = await shift_service.assign_shift(db, ctx, shift_id, data.user_id)
    await db.commit()
    _invalidate(ctx, shift.start_time)
    return await shift_service.build_response(db, shift)


@router.post("/shops/{shop_id}/shifts/{shift_id}/unassign", response_model=ShiftResponse)
async def unassign_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    shift = await shift_service.unassign_shift(db, ctx, shift_id)
    await db.commit()
    _invalidate(ctx, shift.start_time)
    return await shift_service.build_response(db, shift)


@router.post("/shops/{shop_id}/shifts/{shift_id}/move", response_model=MoveShiftResponse)
async def move_shift(
    shift_id: UUID,
    data: MoveShiftRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    """드래그 앤 드롭으로 시프트를 이동합니다.

    Move a shift onto a drop target (open row or an assignee, on a date).
    Dropping on the current assignee and date writes nothing.
    """
    shift, changed = await shift_service.move_shift(db, ctx, shift_id, data.target.to_target())
    if changed:
        await db.commit()
        _invalidate(ctx, shift.start_time)
    return {"shift": await shift_service.build_response(db, shift), "changed": changed}


@router.get("/shops/{shop_id}/shifts/{shift_id}/history", response_model=list[ShiftHistoryResponse])
async def get_shift_history(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> list[dict]:
    """시프트 변경 이력을 조회합니다 (Newest first)."""
    entries = await shift_service.get_history(db, ctx.shop_id, shift_id)
    return [shift_service.build_history_response(e) for e in entries]
