"""예약 작업 라우터.

Cron Router. Endpoints hit by an external scheduler with the
``CRON_SECRET`` bearer token; no user or shop context.

Endpoints:
    - POST /cron/cleanup-shift-history: 오래된 시프트 이력 삭제
    - POST /cron/clock-reminders: 장시간 출근 상태 알림
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import verify_cron_secret
from shopshift.database import get_db
from shopshift.services.cron_service import cron_service

router: APIRouter = APIRouter(dependencies=[Depends(verify_cron_secret)])


@router.post("/cron/cleanup-shift-history")
async def cleanup_shift_history(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, int]:
    """보존 기간이 지난 시프트 이력을 삭제합니다 (SHIFT_HISTORY_RETENTION_DAYS)."""
    deleted: int = await cron_service.cleanup_shift_history(db)
    await db.commit()
    return {"deleted": deleted}


@router.post("/cron/clock-reminders")
async def send_clock_reminders(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, int]:
    """오래 출근 상태인 직원에게 퇴근 알림을 보냅니다.

    Notify members clocked in longer than ``CLOCK_REMINDER_HOURS``, at most
    once per ``CLOCK_REMINDER_DEDUP_HOURS``.
    """
    reminded: int = await cron_service.send_clock_reminders(db)
    await db.commit()
    return {"reminded": reminded}
