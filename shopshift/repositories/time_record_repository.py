"""근태 기록 레포지토리 (출퇴근, 휴식 기록 DB 쿼리 담당).

Time Record Repository. Handles clock records and the breaks taken during
them.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.time_record import ClockBreak, TimeRecord
from shopshift.repositories.base import BaseRepository

# 진행 중인 근무 상태 (Statuses of a record that has not been clocked out)
ACTIVE_STATUSES: tuple[str, ...] = ("clocked_in", "on_break")


class TimeRecordRepository(BaseRepository[TimeRecord]):
    """근태 기록 레포지토리.

    Time record repository with active-record lookup for the clock state
    machine and the long-running-record query used by reminders.

    Extends:
        BaseRepository[TimeRecord]
    """

    def __init__(self) -> None:
        super().__init__(TimeRecord)

    async def get_active(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
    ) -> TimeRecord | None:
        """진행 중인 기록을 조회합니다 (clocked_in 또는 on_break).

        Return the user's record that is clocked in or on break, if any.
        """
        result = await db.execute(
            select(TimeRecord)
            .where(
                TimeRecord.shop_id == shop_id,
                TimeRecord.user_id == user_id,
                TimeRecord.status.in_(ACTIVE_STATUSES),
            )
            .order_by(TimeRecord.clock_in.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_records(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Sequence[TimeRecord]:
        query: Select = select(TimeRecord).where(TimeRecord.shop_id == shop_id)
        if user_id is not None:
            query = query.where(TimeRecord.user_id == user_id)
        if start is not None:
            query = query.where(TimeRecord.clock_in >= start)
        if end is not None:
            query = query.where(TimeRecord.clock_in <= end)
        result = await db.execute(query.order_by(TimeRecord.clock_in.desc()))
        return result.scalars().all()

    async def get_active_since(self, db: AsyncSession, cutoff: datetime) -> Sequence[TimeRecord]:
        """cutoff 이전에 출근해 아직 퇴근하지 않은 모든 매장의 기록.

        Records across all shops clocked in before cutoff and still active.
        """
        result = await db.execute(
            select(TimeRecord).where(
                TimeRecord.status.in_(ACTIVE_STATUSES),
                TimeRecord.clock_in < cutoff,
            )
        )
        return result.scalars().all()

    # === 휴식 (Clock breaks) ===

    async def get_open_breaks(self, db: AsyncSession, time_record_id: UUID) -> Sequence[ClockBreak]:
        result = await db.execute(
            select(ClockBreak).where(
                ClockBreak.time_record_id == time_record_id,
                ClockBreak.end_time.is_(None),
            )
        )
        return result.scalars().all()

    async def get_breaks(self, db: AsyncSession, record_ids: Sequence[UUID]) -> dict[UUID, list[ClockBreak]]:
        grouped: dict[UUID, list[ClockBreak]] = {}
        if not record_ids:
            return grouped
        result = await db.execute(
            select(ClockBreak)
            .where(ClockBreak.time_record_id.in_(list(record_ids)))
            .order_by(ClockBreak.start_time)
        )
        for brk in result.scalars().all():
            grouped.setdefault(brk.time_record_id, []).append(brk)
        return grouped

    async def add_break(self, db: AsyncSession, time_record_id: UUID, start: datetime) -> ClockBreak:
        brk = ClockBreak(time_record_id=time_record_id, start_time=start)
        db.add(brk)
        await db.flush()
        return brk


# 싱글턴 인스턴스 (Singleton instance)
time_record_repository: TimeRecordRepository = TimeRecordRepository()
