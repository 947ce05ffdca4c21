"""예약 작업 서비스.

Cron Service. Jobs invoked by an external scheduler:

    - cleanup_shift_history: 보존 기간이 지난 시프트 이력 삭제
      (Delete shift history older than the retention window)
    - send_clock_reminders: 장시간 출근 상태인 직원에게 퇴근 알림
      (Remind members who have been clocked in for too long)
"""

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.config import settings
from shopshift.database import utcnow
from shopshift.repositories.notification_repository import notification_repository
from shopshift.repositories.shift_repository import shift_history_repository
from shopshift.repositories.time_record_repository import time_record_repository
from shopshift.services.notification_service import notification_service

# 퇴근 알림 유형 (Notification type used for reminders and their de-duplication)
CLOCK_REMINDER_TYPE: str = "clock_reminder"


class CronService:
    """예약 작업 서비스."""

    async def cleanup_shift_history(self, db: AsyncSession, now: datetime | None = None) -> int:
        """보존 기간이 지난 이력을 삭제합니다 (Returns deleted count)."""
        cutoff: datetime = (now or utcnow()) - timedelta(days=settings.SHIFT_HISTORY_RETENTION_DAYS)
        return await shift_history_repository.delete_older_than(db, cutoff)

    async def send_clock_reminders(self, db: AsyncSession, now: datetime | None = None) -> int:
        """장시간 출근 중인 직원에게 퇴근 알림을 보냅니다.

        Remind every member whose active record was clocked in more than
        ``CLOCK_REMINDER_HOURS`` ago, skipping members already reminded in
        the last ``CLOCK_REMINDER_DEDUP_HOURS``.

        Returns:
            int: 알림을 보낸 직원 수 (Number of members reminded)
        """
        now = now or utcnow()
        records = await time_record_repository.get_active_since(
            db, now - timedelta(hours=settings.CLOCK_REMINDER_HOURS)
        )
        already: set = await notification_repository.get_recipients_since(
            db, CLOCK_REMINDER_TYPE, now - timedelta(hours=settings.CLOCK_REMINDER_DEDUP_HOURS)
        )

        reminded: int = 0
        for record in records:
            if record.user_id in already:
                continue
            hours: float = (now - record.clock_in).total_seconds() / 3600
            await notification_service.create_notification(
                db,
                record.shop_id,
                record.user_id,
                CLOCK_REMINDER_TYPE,
                "Still clocked in?",
                f"You have been clocked in for {hours:.1f} hours. Don't forget to clock out.",
                data={"time_record_id": str(record.id)},
            )
            already.add(record.user_id)
            reminded += 1
        return reminded


# 싱글턴 인스턴스 (Singleton instance)
cron_service: CronService = CronService()
