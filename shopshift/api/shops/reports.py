"""근무 지표 리포트 라우터.

Report Router, nested under /shops/{shop_id}/reports. Aggregation runs in
database functions; this layer only validates the range and permissions.

Permission Matrix:
    - 본인 지표: 활성 구성원 (Any active member)
    - 다른 구성원 지표, 팀 요약: owner + manager
"""

from datetime import date
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_shop_context, require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.services.report_service import report_service
from shopshift.utils.exceptions import ForbiddenError

router: APIRouter = APIRouter()


@router.get("/shops/{shop_id}/reports/workforce")
async def get_workforce_metrics(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
    user_id: Annotated[UUID | None, Query()] = None,
) -> Any:
    """직원 근무 지표를 조회합니다.

    Workforce metrics for one member over an inclusive date range.
    Defaults to the caller.

    Raises:
        ForbiddenError: 일반 구성원이 다른 사람의 지표를 요청할 때
    """
    target: UUID = user_id or ctx.actor_id
    if target != ctx.actor_id and not ctx.is_admin:
        raise ForbiddenError("Manager or owner role required")
    return await report_service.get_workforce_metrics(db, ctx.shop_id, target, start_date, end_date)


@router.get("/shops/{shop_id}/reports/team")
async def get_team_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
) -> Any:
    return await report_service.get_team_summary(db, ctx.shop_id, start_date, end_date)
