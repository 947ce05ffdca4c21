"""매장 카탈로그 라우터 (부서, 포지션, 태그, 스케줄).

Catalog Router. Endpoints for departments, positions, shift tags and
schedules under a shop.

Permission Matrix:
    - 목록 조회: 활성 구성원 (Any active member)
    - 생성/수정/삭제: owner + manager
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.common import SuccessResponse
from shopshift.schemas.shop import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    PositionCreate,
    PositionResponse,
    PositionUpdate,
    ScheduleCreate,
    ScheduleResponse,
    TagCreate,
    TagResponse,
)
from shopshift.services.catalog_service import department_service, position_service, schedule_service, tag_service
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus

router: APIRouter = APIRouter()


# === 부서 (Departments) ===

@router.get("/shops/{shop_id}/departments", response_model=list[DepartmentResponse])
async def list_departments(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> list[DepartmentResponse]:
    return await department_service.list_departments(db, ctx.shop_id)


@router.post("/shops/{shop_id}/departments", response_model=DepartmentResponse, status_code=201)
async def create_department(
    data: DepartmentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> DepartmentResponse:
    """부서를 생성합니다 (PTO 적립률 기본값 0)."""
    result: DepartmentResponse = await department_service.create_department(db, ctx.shop_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("departments", ctx.shop_id))
    return result


@router.put("/shops/{shop_id}/departments/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: UUID,
    data: DepartmentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> DepartmentResponse:
    result: DepartmentResponse = await department_service.update_department(db, ctx.shop_id, department_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("departments", ctx.shop_id))
    return result


@router.delete("/shops/{shop_id}/departments/{department_id}", response_model=SuccessResponse)
async def delete_department(
    department_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> SuccessResponse:
    await department_service.delete_department(db, ctx.shop_id, department_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("departments", ctx.shop_id))
    return SuccessResponse()


# === 포지션 (Positions) ===

@router.get("/shops/{shop_id}/positions", response_model=list[PositionResponse])
async def list_positions(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> list[PositionResponse]:
    return await position_service.list_positions(db, ctx.shop_id)


@router.post("/shops/{shop_id}/positions", response_model=PositionResponse, status_code=201)
async def create_position(
    data: PositionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> PositionResponse:
    result: PositionResponse = await position_service.create_position(db, ctx.shop_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("positions", ctx.shop_id))
    return result


@router.put("/shops/{shop_id}/positions/{position_id}", response_model=PositionResponse)
async def update_position(
    position_id: UUID,
    data: PositionUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> PositionResponse:
    result: PositionResponse = await position_service.update_position(db, ctx.shop_id, position_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("positions", ctx.shop_id))
    return result


@router.delete("/shops/{shop_id}/positions/{position_id}", response_model=SuccessResponse)
async def delete_position(
    position_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> SuccessResponse:
    await position_service.delete_position(db, ctx.shop_id, position_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("positions", ctx.shop_id))
    return SuccessResponse()


# === 시프트 태그 (Shift tags) ===

@router.get("/shops/{shop_id}/tags", response_model=list[TagResponse])
async def list_tags(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> list[TagResponse]:
    return await tag_service.list_tags(db, ctx.shop_id)


@router.post("/shops/{shop_id}/tags", response_model=TagResponse, status_code=201)
async def create_tag(
    data: TagCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> TagResponse:
    result: TagResponse = await tag_service.create_tag(db, ctx.shop_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("tags", ctx.shop_id))
    return result


@router.delete("/shops/{shop_id}/tags/{tag_id}", response_model=SuccessResponse)
async def delete_tag(
    tag_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> SuccessResponse:
    await tag_service.delete_tag(db, ctx.shop_id, tag_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("tags", ctx.shop_id))
    return SuccessResponse()


# === 스케줄 (Schedules) ===

@router.get("/shops/{shop_id}/schedules", response_model=list[ScheduleResponse])
async def list_schedules(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> list[ScheduleResponse]:
    return await schedule_service.list_schedules(db, ctx.shop_id)


@router.post("/shops/{shop_id}/schedules", response_model=ScheduleResponse, status_code=201)
async def create_schedule(
    data: ScheduleCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> ScheduleResponse:
    result: ScheduleResponse = await schedule_service.create_schedule(db, ctx.shop_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("schedules", ctx.shop_id))
    return result


@router.delete("/shops/{shop_id}/schedules/{schedule_id}", response_model=SuccessResponse)
async def delete_schedule(
    schedule_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> SuccessResponse:
    await schedule_service.delete_schedule(db, ctx.shop_id, schedule_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("schedules", ctx.shop_id))
    return SuccessResponse()
