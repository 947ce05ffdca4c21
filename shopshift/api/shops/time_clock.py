"""근태(타임클럭) 라우터.

Time Clock Router, nested under /shops/{shop_id}/time-clock.

Permission Matrix:
    - 출퇴근, 휴식, 본인 상태: 활성 구성원 (Any active member, for themselves)
    - 수동 입력, 전체 기록 조회: owner + manager
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.time_record import ClockInRequest, ManualEntryCreate, TimeRecordResponse
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus
from shopshift.services.time_clock_service import time_clock_service

router: APIRouter = APIRouter()


@router.get("/shops/{shop_id}/time-clock/status", response_model=TimeRecordResponse | None)
async def get_clock_status(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict | None:
    """진행 중인 본인 기록을 조회합니다 (None when clocked out)."""
    record = await time_clock_service.get_status(db, ctx)
    return await time_clock_service.build_response(db, record) if record else None


@router.post("/shops/{shop_id}/time-clock/clock-in", response_model=TimeRecordResponse, status_code=201)
async def clock_in(
    data: ClockInRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    record = await time_clock_service.clock_in(db, ctx, data.shift_id, data.notes)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_records", ctx.shop_id))
    return await time_clock_service.build_response(db, record)


@router.post("/shops/{shop_id}/time-clock/clock-out", response_model=TimeRecordResponse)
async def clock_out(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    """퇴근합니다 (열린 휴식도 함께 종료)."""
    record = await time_clock_service.clock_out(db, ctx)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_records", ctx.shop_id))
    return await time_clock_service.build_response(db, record)


@router.post("/shops/{shop_id}/time-clock/break/start", response_model=TimeRecordResponse)
async def start_break(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    record = await time_clock_service.start_break(db, ctx)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_records", ctx.shop_id))
    return await time_clock_service.build_response(db, record)


@router.post("/shops/{shop_id}/time-clock/break/end", response_model=TimeRecordResponse)
async def end_break(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> dict:
    record = await time_clock_service.end_break(db, ctx)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_records", ctx.shop_id))
    return await time_clock_service.build_response(db, record)


@router.post("/shops/{shop_id}/time-clock/manual", response_model=TimeRecordResponse, status_code=201)
async def create_manual_entry(
    data: ManualEntryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    record = await time_clock_service.create_manual_entry(db, ctx, data)
    await db.commit()
    invalidation_bus.publish(InvalidationEvent("time_records", ctx.shop_id))
    return await time_clock_service.build_response(db, record)


@router.get("/shops/{shop_id}/time-clock/records", response_model=list[TimeRecordResponse])
async def list_records(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    user_id: Annotated[UUID | None, Query()] = None,
    start: Annotated[datetime | None, Query()] = None,
    end: Annotated[datetime | None, Query()] = None,
) -> list[dict]:
    """근태 기록을 조회합니다 (일반 구성원은 본인 기록만).

    List time records, newest first. Members without a manager role only
    see their own.
    """
    if not ctx.is_admin:
        user_id = ctx.actor_id
    records = await time_clock_service.list_records(db, ctx.shop_id, user_id, start, end)
    return await time_clock_service.build_responses(db, records)
