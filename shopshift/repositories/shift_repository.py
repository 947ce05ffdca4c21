"""시프트 레포지토리 (시프트 및 하위 행 관련 DB 쿼리 담당).

Shift Repository. Handles shift queries plus the child collections a shift
owns (breaks, tag assignments) and the shift audit trail.
Child collections are always replaced as a whole set, never diffed.
"""

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.shift import Schedule, Shift, ShiftBreak, ShiftHistory, ShiftTag, ShiftTagAssignment
from shopshift.repositories.base import BaseRepository


class ShiftRepository(BaseRepository[Shift]):
    """시프트 레포지토리.

    Shift repository with range and window queries, recurrence groups and
    break/tag child-row management.

    Extends:
        BaseRepository[Shift]
    """

    def __init__(self) -> None:
        super().__init__(Shift)

    async def get_by_range(
        self,
        db: AsyncSession,
        shop_id: UUID,
        start: datetime,
        end: datetime,
        user_id: UUID | None = None,
        status: str | None = None,
    ) -> Sequence[Shift]:
        """기간 내 시프트를 조회합니다 (start <= start_time <= end).

        List shifts whose start falls inside the closed range, ordered by start.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shop_id: 매장 UUID (Shop UUID)
            start: 범위 시작 UTC (Range start)
            end: 범위 종료 UTC, 포함 (Range end, inclusive)
            user_id: 담당자 필터, 선택 (Optional assignee filter)
            status: 상태 필터, 선택 (Optional status filter)

        Returns:
            Sequence[Shift]: 시작 시각 순 시프트 목록 (Shifts ordered by start)
        """
        query: Select = select(Shift).where(
            Shift.shop_id == shop_id,
            Shift.start_time >= start,
            Shift.start_time <= end,
        )
        if user_id is not None:
            query = query.where(Shift.user_id == user_id)
        if status is not None:
            query = query.where(Shift.status == status)
        result = await db.execute(query.order_by(Shift.start_time, Shift.id))
        return result.scalars().all()

    async def get_in_window(
        self,
        db: AsyncSession,
        shop_id: UUID,
        start: datetime,
        end: datetime,
    ) -> Sequence[Shift]:
        """반열림 구간 [start, end) 내 시프트를 조회합니다 (Half-open window, for week copy)."""
        result = await db.execute(
            select(Shift)
            .where(
                Shift.shop_id == shop_id,
                Shift.start_time >= start,
                Shift.start_time < end,
            )
            .order_by(Shift.start_time, Shift.id)
        )
        return result.scalars().all()

    async def get_by_recurrence_group(
        self,
        db: AsyncSession,
        recurrence_group_id: UUID,
        exclude_id: UUID | None = None,
    ) -> Sequence[Shift]:
        """같은 반복 묶음의 시프트를 조회합니다 (Instances sharing a recurrence group)."""
        query: Select = select(Shift).where(Shift.recurrence_group_id == recurrence_group_id)
        if exclude_id is not None:
            query = query.where(Shift.id != exclude_id)
        result = await db.execute(query.order_by(Shift.start_time))
        return result.scalars().all()

    async def get_future_for_user(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        now: datetime,
    ) -> Sequence[Shift]:
        """현재 이후(초과)에 시작하는 직원의 시프트 (Shifts starting strictly after now)."""
        result = await db.execute(
            select(Shift).where(
                Shift.shop_id == shop_id,
                Shift.user_id == user_id,
                Shift.start_time > now,
            )
        )
        return result.scalars().all()

    async def delete_with_children(
        self,
        db: AsyncSession,
        shop_id: UUID,
        shift_ids: Sequence[UUID],
    ) -> int:
        """시프트와 하위 행(휴식, 태그 매핑)을 함께 삭제합니다.

        Delete shifts together with their breaks and tag assignments. The
        children are removed explicitly so the result does not depend on the
        backend enforcing ON DELETE CASCADE.

        Returns:
            int: 삭제된 시프트 수 (Number of shifts deleted)
        """
        ids: list[UUID] = list(shift_ids)
        if not ids:
            return 0
        owned = await db.execute(select(Shift.id).where(Shift.shop_id == shop_id, Shift.id.in_(ids)))
        owned_ids: list[UUID] = list(owned.scalars().all())
        if not owned_ids:
            return 0
        await db.execute(delete(ShiftBreak).where(ShiftBreak.shift_id.in_(owned_ids)))
        await db.execute(delete(ShiftTagAssignment).where(ShiftTagAssignment.shift_id.in_(owned_ids)))
        return await self.delete_many(db, owned_ids, shop_id)

    # === 휴식 (Breaks) ===

    async def get_breaks(
        self,
        db: AsyncSession,
        shift_ids: Sequence[UUID],
    ) -> dict[UUID, list[ShiftBreak]]:
        """여러 시프트의 휴식을 한 번에 조회합니다 (Breaks grouped by shift, sort_order ascending)."""
        grouped: dict[UUID, list[ShiftBreak]] = {}
        if not shift_ids:
            return grouped
        result = await db.execute(
            select(ShiftBreak)
            .where(ShiftBreak.shift_id.in_(list(shift_ids)))
            .order_by(ShiftBreak.shift_id, ShiftBreak.sort_order)
        )
        for brk in result.scalars().all():
            grouped.setdefault(brk.shift_id, []).append(brk)
        return grouped

    async def insert_breaks(
        self,
        db: AsyncSession,
        shift_id: UUID,
        breaks: Sequence[dict[str, Any]],
    ) -> None:
        """휴식 목록을 삽입합니다. sort_order는 목록 위치입니다 (sort_order = list index)."""
        db.add_all(
            [
                ShiftBreak(
                    shift_id=shift_id,
                    label=b.get("label") or "Break",
                    duration_minutes=b["duration_minutes"],
                    is_paid=bool(b.get("is_paid", False)),
                    sort_order=index,
                )
                for index, b in enumerate(breaks)
            ]
        )
        await db.flush()

    async def replace_breaks(
        self,
        db: AsyncSession,
        shift_id: UUID,
        breaks: Sequence[dict[str, Any]],
    ) -> None:
        """기존 휴식을 모두 삭제하고 새 목록을 삽입합니다 (Delete all, then insert)."""
        await db.execute(delete(ShiftBreak).where(ShiftBreak.shift_id == shift_id))
        await self.insert_breaks(db, shift_id, breaks)

    # === 태그 (Tags) ===

    async def get_tag_ids(
        self,
        db: AsyncSession,
        shift_ids: Sequence[UUID],
    ) -> dict[UUID, list[UUID]]:
        """여러 시프트의 태그 ID를 한 번에 조회합니다 (Tag ids grouped by shift)."""
        grouped: dict[UUID, list[UUID]] = {}
        if not shift_ids:
            return grouped
        result = await db.execute(
            select(ShiftTagAssignment.shift_id, ShiftTagAssignment.tag_id)
            .where(ShiftTagAssignment.shift_id.in_(list(shift_ids)))
        )
        for shift_id, tag_id in result.all():
            grouped.setdefault(shift_id, []).append(tag_id)
        return grouped

    async def insert_tags(
        self,
        db: AsyncSession,
        shift_id: UUID,
        tag_ids: Sequence[UUID],
    ) -> None:
        # 중복 제거, 입력 순서 유지 (Deduplicate, keep input order)
        unique: list[UUID] = list(dict.fromkeys(tag_ids))
        db.add_all([ShiftTagAssignment(shift_id=shift_id, tag_id=tag_id) for tag_id in unique])
        await db.flush()

    async def replace_tags(
        self,
        db: AsyncSession,
        shift_id: UUID,
        tag_ids: Sequence[UUID],
    ) -> None:
        """기존 태그 매핑을 모두 삭제하고 새 목록을 삽입합니다 (Delete all, then insert)."""
        await db.execute(delete(ShiftTagAssignment).where(ShiftTagAssignment.shift_id == shift_id))
        await self.insert_tags(db, shift_id, tag_ids)

    async def copy_children(
        self,
        db: AsyncSession,
        source_id: UUID,
        target_ids: Sequence[UUID],
        breaks: Sequence[ShiftBreak],
        tag_ids: Sequence[UUID],
    ) -> None:
        """원본 시프트의 휴식/태그를 대상 시프트들에 복제합니다.

        Fan out one source shift's breaks and tag assignments onto every
        target shift derived from it.
        """
        rows: list[Any] = []
        for target_id in target_ids:
            rows.extend(
                ShiftBreak(
                    shift_id=target_id,
                    label=b.label,
                    duration_minutes=b.duration_minutes,
                    is_paid=b.is_paid,
                    sort_order=b.sort_order,
                )
                for b in breaks
            )
            rows.extend(ShiftTagAssignment(shift_id=target_id, tag_id=tag_id) for tag_id in tag_ids)
        if rows:
            db.add_all(rows)
            await db.flush()


class ShiftHistoryRepository(BaseRepository[ShiftHistory]):
    """시프트 변경 이력 레포지토리 (Shift audit trail queries)."""

    def __init__(self) -> None:
        super().__init__(ShiftHistory)

    async def get_for_shift(
        self,
        db: AsyncSession,
        shop_id: UUID,
        shift_id: UUID,
    ) -> Sequence[ShiftHistory]:
        result = await db.execute(
            select(ShiftHistory)
            .where(ShiftHistory.shop_id == shop_id, ShiftHistory.shift_id == shift_id)
            .order_by(ShiftHistory.changed_at.desc())
        )
        return result.scalars().all()

    async def delete_older_than(self, db: AsyncSession, cutoff: datetime) -> int:
        """보존 기간이 지난 이력을 삭제합니다 (Delete rows changed before cutoff)."""
        result = await db.execute(delete(ShiftHistory).where(ShiftHistory.changed_at < cutoff))
        await db.flush()
        return result.rowcount or 0


class ScheduleRepository(BaseRepository[Schedule]):
    """스케줄 레포지토리 (Named schedule groupings)."""

    def __init__(self) -> None:
        super().__init__(Schedule)


class ShiftTagRepository(BaseRepository[ShiftTag]):
    """시프트 태그 레포지토리 (Shop-scoped shift labels)."""

    def __init__(self) -> None:
        super().__init__(ShiftTag)

    async def delete_tag(self, db: AsyncSession, shop_id: UUID, tag_id: UUID) -> bool:
        """태그와 그 매핑을 삭제합니다 (Delete a tag with its assignments)."""
        tag: ShiftTag | None = await self.get_by_id(db, tag_id, shop_id)
        if tag is None:
            return False
        await db.execute(delete(ShiftTagAssignment).where(ShiftTagAssignment.tag_id == tag_id))
        await db.delete(tag)
        await db.flush()
        return True


# 싱글턴 인스턴스 (Singleton instances)
shift_repository: ShiftRepository = ShiftRepository()
shift_history_repository: ShiftHistoryRepository = ShiftHistoryRepository()
schedule_repository: ScheduleRepository = ScheduleRepository()
shift_tag_repository: ShiftTagRepository = ShiftTagRepository()
