"""벌크 액션 라우터.

Bulk Action Router. Accepts a list of ``{action, id?, data?}`` items,
processes them in order and reports ``{action, success, error?}`` for each;
a failed item does not stop the others.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import require_shop_admin
from shopshift.context import ShopContext
from shopshift.database import get_db
from shopshift.schemas.shift import BulkActionRequest, BulkActionResponse
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus
from shopshift.services.shift_service import shift_service

router: APIRouter = APIRouter()


@router.post("/shops/{shop_id}/shifts/bulk", response_model=BulkActionResponse)
async def run_bulk_actions(
    data: BulkActionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[ShopContext, Depends(require_shop_admin)],
) -> dict:
    """벌크 액션을 처리합니다 (항목별 부분 성공).

    Run create/update/delete/publish/unpublish actions sequentially; each
    item succeeds or fails on its own.
    """
    results = await shift_service.run_bulk_actions(db, ctx, data.actions)
    await db.commit()
    if any(r["success"] for r in results):
        invalidation_bus.publish(InvalidationEvent("shifts", ctx.shop_id))
    return {"results": results}
