"""템플릿 레포지토리 (시프트/주간 스케줄 템플릿 DB 쿼리 담당).

Template Repository. Handles shift templates and week schedule templates
with their entries.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.template import ScheduleTemplate, ScheduleTemplateEntry, ShiftTemplate
from shopshift.repositories.base import BaseRepository


class ShiftTemplateRepository(BaseRepository[ShiftTemplate]):
    """시프트 템플릿 레포지토리 (Reusable single-shift snapshots)."""

    def __init__(self) -> None:
        super().__init__(ShiftTemplate)


class ScheduleTemplateRepository(BaseRepository[ScheduleTemplate]):
    """주간 스케줄 템플릿 레포지토리 (Week layouts and their entries)."""

    def __init__(self) -> None:
        super().__init__(ScheduleTemplate)

    async def get_entries(self, db: AsyncSession, template_id: UUID) -> Sequence[ScheduleTemplateEntry]:
        result = await db.execute(
            select(ScheduleTemplateEntry)
            .where(ScheduleTemplateEntry.template_id == template_id)
            .order_by(ScheduleTemplateEntry.day_of_week, ScheduleTemplateEntry.start_time)
        )
        return result.scalars().all()

    async def add_entry(self, db: AsyncSession, data: dict) -> ScheduleTemplateEntry:
        entry = ScheduleTemplateEntry(**data)
        db.add(entry)
        await db.flush()
        await db.refresh(entry)
        return entry

    async def delete_template(self, db: AsyncSession, shop_id: UUID, template_id: UUID) -> bool:
        """템플릿과 항목을 함께 삭제합니다 (Delete a template with its entries)."""
        template: ScheduleTemplate | None = await self.get_by_id(db, template_id, shop_id)
        if template is None:
            return False
        await db.execute(delete(ScheduleTemplateEntry).where(ScheduleTemplateEntry.template_id == template_id))
        await db.delete(template)
        await db.flush()
        return True


# 싱글턴 인스턴스 (Singleton instances)
shift_template_repository: ShiftTemplateRepository = ShiftTemplateRepository()
schedule_template_repository: ScheduleTemplateRepository = ScheduleTemplateRepository()
