"""근태(타임클럭) 서비스.

Time Clock Service. Drives the clock state machine:
clocked_in -> on_break -> clocked_in -> clocked_out. A member has at most
one record that is clocked in or on break at a time. Managers may also
enter completed records manually.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.context import ShopContext
from shopshift.database import utcnow
from shopshift.models.time_record import ClockBreak, TimeRecord
from shopshift.repositories.shop_repository import member_repository
from shopshift.repositories.time_record_repository import time_record_repository
from shopshift.schemas.time_record import ManualEntryCreate
from shopshift.services.shift_service import shift_service
from shopshift.utils.exceptions import BadRequestError, NotFoundError


class TimeClockService:
    """근태 서비스 (Clock in/out, breaks, manual entries)."""

    async def clock_in(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        shift_id: UUID | None = None,
        notes: str | None = None,
    ) -> TimeRecord:
        """출근을 기록합니다.

        Raises:
            BadRequestError: 이미 출근 중이거나 휴식 중일 때
                             (When already clocked in or on break)
        """
        active: TimeRecord | None = await time_record_repository.get_active(db, ctx.shop_id, ctx.actor_id)
        if active is not None:
            if active.status == "on_break":
                raise BadRequestError("Already clocked in (on break)")
            raise BadRequestError("Already clocked in")
        if shift_id is not None:
            await shift_service.get_shift(db, ctx.shop_id, shift_id)

        return await time_record_repository.create(
            db,
            {
                "shop_id": ctx.shop_id,
                "user_id": ctx.actor_id,
                "shift_id": shift_id,
                "clock_in": utcnow(),
                "status": "clocked_in",
                "notes": notes,
                "created_by": ctx.actor_id,
            },
        )

    async def _require_active(self, db: AsyncSession, ctx: ShopContext) -> TimeRecord:
        active: TimeRecord | None = await time_record_repository.get_active(db, ctx.shop_id, ctx.actor_id)
        if active is None:
            raise BadRequestError("Not clocked in")
        return active

    async def clock_out(self, db: AsyncSession, ctx: ShopContext) -> TimeRecord:
        """퇴근을 기록합니다 (열린 휴식을 먼저 종료).

        Clock out, closing any open break at the same instant first.
        """
        record: TimeRecord = await self._require_active(db, ctx)
        now: datetime = utcnow()
        for brk in await time_record_repository.get_open_breaks(db, record.id):
            brk.end_time = now
        record.clock_out = now
        record.status = "clocked_out"
        await db.flush()
        return record

    async def start_break(self, db: AsyncSession, ctx: ShopContext) -> TimeRecord:
        record: TimeRecord = await self._require_active(db, ctx)
        if record.status == "on_break":
            raise BadRequestError("Already on break")
        await time_record_repository.add_break(db, record.id, utcnow())
        record.status = "on_break"
        await db.flush()
        return record

    async def end_break(self, db: AsyncSession, ctx: ShopContext) -> TimeRecord:
        record: TimeRecord = await self._require_active(db, ctx)
        if record.status != "on_break":
            raise BadRequestError("Not on break")
        now: datetime = utcnow()
        for brk in await time_record_repository.get_open_breaks(db, record.id):
            brk.end_time = now
        record.status = "clocked_in"
        await db.flush()
        return record

    async def create_manual_entry(self, db: AsyncSession, ctx: ShopContext, data: ManualEntryCreate) -> TimeRecord:
        """관리자가 완료된 근태 기록을 수동 입력합니다.

        Raises:
            BadRequestError: clock_in이 clock_out 이후일 때 (When clock_in >= clock_out)
            NotFoundError: 구성원이 아닐 때 (When the user is not a member)
        """
        if data.clock_in >= data.clock_out:
            raise BadRequestError("clock_in must be before clock_out")
        membership = await member_repository.get_membership(db, ctx.shop_id, data.user_id)
        if membership is None:
            raise NotFoundError("Member not found")
        if data.shift_id is not None:
            await shift_service.get_shift(db, ctx.shop_id, data.shift_id)

        return await time_record_repository.create(
            db,
            {
                "shop_id": ctx.shop_id,
                "user_id": data.user_id,
                "shift_id": data.shift_id,
                "clock_in": data.clock_in,
                "clock_out": data.clock_out,
                "status": "clocked_out",
                "notes": data.notes,
                "is_manual": True,
                "created_by": ctx.actor_id,
            },
        )

    async def list_records(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Sequence[TimeRecord]:
        return await time_record_repository.get_records(db, shop_id, user_id, start, end)

    async def get_status(self, db: AsyncSession, ctx: ShopContext) -> TimeRecord | None:
        return await time_record_repository.get_active(db, ctx.shop_id, ctx.actor_id)

    async def build_responses(self, db: AsyncSession, records: Sequence[TimeRecord]) -> list[dict]:
        breaks: dict[UUID, list[ClockBreak]] = await time_record_repository.get_breaks(db, [r.id for r in records])
        return [
            {
                "id": str(r.id),
                "shop_id": str(r.shop_id),
                "user_id": str(r.user_id),
                "shift_id": str(r.shift_id) if r.shift_id else None,
                "clock_in": r.clock_in,
                "clock_out": r.clock_out,
                "status": r.status,
                "notes": r.notes,
                "is_manual": r.is_manual,
                "breaks": [
                    {"id": str(b.id), "start_time": b.start_time, "end_time": b.end_time, "is_paid": b.is_paid}
                    for b in breaks.get(r.id, [])
                ],
            }
            for r in records
        ]

    async def build_response(self, db: AsyncSession, record: TimeRecord) -> dict:
        return (await self.build_responses(db, [record]))[0]


# 싱글턴 인스턴스 (Singleton instance)
time_clock_service: TimeClockService = TimeClockService()
