"""템플릿 라우터 (시프트 템플릿, 주간 스케줄 템플릿).

Template Router, nested under /shops/{shop_id}/shift-templates and
/shops/{shop_id}/schedule-templates.

Permission Matrix:
    - 조회: 활성 구성원 (Any active member)
    - 생성/수정/삭제/적용: owner + manager
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.common import CountResponse, SuccessResponse
from shopshift.schemas.shop import (
    ApplyTemplateRequest,
    ScheduleTemplateCreate,
    ScheduleTemplateResponse,
    ShiftTemplateCreate,
    ShiftTemplateResponse,
    ShiftTemplateUpdate,
    TemplateEntryCreate,
)
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus
from shopshift.services.template_service import template_service

router: APIRouter = APIRouter()


# === 시프트 템플릿 (Shift templates) ===

@router.get("/shops/{shop_id}/shift-templates", response_model=list[ShiftTemplateResponse])
async def list_shift_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> list[dict]:
    templates = await template_service.list_shift_templates(db, ctx.shop_id)
    return [template_service.build_shift_template_response(t) for t in templates]


@router.post("/shops/{shop_id}/shift-templates", response_model=ShiftTemplateResponse, status_code=201)
async def create_shift_template(
    data: ShiftTemplateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    template = await template_service.create_shift_template(db, ctx.shop_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("templates", ctx.shop_id))
    return template_service.build_shift_template_response(template)


@router.put("/shops/{shop_id}/shift-templates/{template_id}", response_model=ShiftTemplateResponse)
async def update_shift_template(
    template_id: UUID,
    data: ShiftTemplateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    template = await template_service.update_shift_template(db, ctx.shop_id, template_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("templates", ctx.shop_id))
    return template_service.build_shift_template_response(template)


@router.delete("/shops/{shop_id}/shift-templates/{template_id}", response_model=SuccessResponse)
async def delete_shift_template(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> SuccessResponse:
    await template_service.delete_shift_template(db, ctx.shop_id, template_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("templates", ctx.shop_id))
    return SuccessResponse()


# === 주간 스케줄 템플릿 (Schedule templates) ===

@router.get("/shops/{shop_id}/schedule-templates", response_model=list[ScheduleTemplateResponse])
async def list_schedule_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> list[dict]:
    templates = await template_service.list_schedule_templates(db, ctx.shop_id)
    return [await template_service.build_schedule_template_response(db, t) for t in templates]


@router.post("/shops/{shop_id}/schedule-templates", response_model=ScheduleTemplateResponse, status_code=201)
async def create_schedule_template(
    data: ScheduleTemplateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    template = await template_service.create_schedule_template(db, ctx.shop_id, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("templates", ctx.shop_id))
    return await template_service.build_schedule_template_response(db, template)


@router.delete("/shops/{shop_id}/schedule-templates/{template_id}", response_model=SuccessResponse)
async def delete_schedule_template(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> SuccessResponse:
    await template_service.delete_schedule_template(db, ctx.shop_id, template_id)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("templates", ctx.shop_id))
    return SuccessResponse()


@router.post(
    "/shops/{shop_id}/schedule-templates/{template_id}/entries",
    response_model=ScheduleTemplateResponse,
    status_code=201,
)
async def add_template_entry(
    template_id: UUID,
    data: TemplateEntryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    await template_service.add_entry(db, ctx.shop_id, template_id, data)
    await db.commit()
    template = await template_service.get_schedule_template(db, ctx.shop_id, template_id)
    return await template_service.build_schedule_template_response(db, template)


@router.post(
    "/shops/{shop_id}/schedule-templates/{template_id}/apply",
    response_model=CountResponse,
    status_code=201,
)
async def apply_schedule_template(
    template_id: UUID,
    data: ApplyTemplateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> CountResponse:
    """주간 템플릿을 대상 주에 적용해 초안 시프트를 만듭니다.

    Create draft shifts from the template in the Sunday-start week
    containing ``week_start``.
    """
    count: int = await template_service.apply_template(db, ctx, template_id, data.week_start)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("shifts", ctx.shop_id))
    return CountResponse(count=count)
