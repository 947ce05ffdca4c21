"""템플릿 서비스 (시프트 템플릿, 주간 스케줄 템플릿).

Template Service. Shift templates are reusable single-shift snapshots;
schedule templates are week layouts whose entries are turned into draft
shifts when applied to a concrete week.
"""

from datetime import date, time, timedelta
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.context import ShopContext
from shopshift.models.shift import Shift
from shopshift.models.template import ScheduleTemplate, ScheduleTemplateEntry, ShiftTemplate
from shopshift.repositories.shift_repository import shift_repository
from shopshift.repositories.template_repository import schedule_template_repository, shift_template_repository
from shopshift.scheduling.timezones import combine_local, parse_hhmm, week_start
from shopshift.schemas.shop import ScheduleTemplateCreate, ShiftTemplateCreate, ShiftTemplateUpdate, TemplateEntryCreate
from shopshift.utils.exceptions import BadRequestError, NotFoundError


def _hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def _parse(value: str) -> time:
    try:
        return parse_hhmm(value)
    except ValueError as exc:
        raise BadRequestError(str(exc)) from exc


class TemplateService:
    """템플릿 서비스."""

    # --- 시프트 템플릿 (Shift templates) ---

    async def list_shift_templates(self, db: AsyncSession, shop_id: UUID) -> Sequence[ShiftTemplate]:
        return await shift_template_repository.get_all(db, shop_id, order_by=ShiftTemplate.name)

    async def create_shift_template(self, db: AsyncSession, shop_id: UUID, data: ShiftTemplateCreate) -> ShiftTemplate:
        return await shift_template_repository.create(
            db,
            {
                "shop_id": shop_id,
                "name": data.name,
                "position_id": data.position_id,
                "start_time": _parse(data.start_time),
                "end_time": _parse(data.end_time),
                "break_minutes": data.break_minutes,
            },
        )

    async def update_shift_template(
        self,
        db: AsyncSession,
        shop_id: UUID,
        template_id: UUID,
        data: ShiftTemplateUpdate,
    ) -> ShiftTemplate:
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        # position_id만 null로 지울 수 있음 (Only position_id may be cleared)
        for key in ("name", "start_time", "end_time", "break_minutes"):
            if key in update_data and update_data[key] is None:
                del update_data[key]
        for key in ("start_time", "end_time"):
            if key in update_data:
                update_data[key] = _parse(update_data[key])
        template: ShiftTemplate | None = await shift_template_repository.update(db, template_id, update_data, shop_id)
        if template is None:
            raise NotFoundError("Shift template not found")
        return template

    async def delete_shift_template(self, db: AsyncSession, shop_id: UUID, template_id: UUID) -> None:
        if not await shift_template_repository.delete(db, template_id, shop_id):
            raise NotFoundError("Shift template not found")

    # --- 주간 스케줄 템플릿 (Schedule templates) ---

    async def list_schedule_templates(self, db: AsyncSession, shop_id: UUID) -> Sequence[ScheduleTemplate]:
        return await schedule_template_repository.get_all(db, shop_id, order_by=ScheduleTemplate.name)

    async def get_schedule_template(self, db: AsyncSession, shop_id: UUID, template_id: UUID) -> ScheduleTemplate:
        template: ScheduleTemplate | None = await schedule_template_repository.get_by_id(db, template_id, shop_id)
        if template is None:
            raise NotFoundError("Schedule template not found")
        return template

    async def create_schedule_template(
        self,
        db: AsyncSession,
        shop_id: UUID,
        data: ScheduleTemplateCreate,
    ) -> ScheduleTemplate:
        return await schedule_template_repository.create(db, {"shop_id": shop_id, "name": data.name})

    async def delete_schedule_template(self, db: AsyncSession, shop_id: UUID, template_id: UUID) -> None:
        if not await schedule_template_repository.delete_template(db, shop_id, template_id):
            raise NotFoundError("Schedule template not found")

    async def add_entry(
        self,
        db: AsyncSession,
        shop_id: UUID,
        template_id: UUID,
        data: TemplateEntryCreate,
    ) -> ScheduleTemplateEntry:
        await self.get_schedule_template(db, shop_id, template_id)
        return await schedule_template_repository.add_entry(
            db,
            {
                "template_id": template_id,
                "day_of_week": data.day_of_week,
                "position_id": data.position_id,
                "user_id": data.user_id,
                "start_time": _parse(data.start_time),
                "end_time": _parse(data.end_time),
                "break_minutes": data.break_minutes,
            },
        )

    async def apply_template(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        template_id: UUID,
        target: date,
    ) -> int:
        """주간 템플릿을 특정 주에 적용합니다.

        Turn every entry of the template into a draft shift in the
        shop-local Sunday-start week containing ``target``. An entry whose
        end time is not after its start time ends the next day.

        Returns:
            int: 생성된 시프트 수 (Number of shifts created)
        """
        await self.get_schedule_template(db, ctx.shop_id, template_id)
        entries: Sequence[ScheduleTemplateEntry] = await schedule_template_repository.get_entries(db, template_id)
        sunday: date = week_start(target)

        rows: list[dict[str, Any]] = []
        for entry in entries:
            day: date = sunday + timedelta(days=entry.day_of_week)
            end_day: date = day if entry.end_time > entry.start_time else day + timedelta(days=1)
            rows.append(
                {
                    "shop_id": ctx.shop_id,
                    "user_id": entry.user_id,
                    "position_id": entry.position_id,
                    "start_time": combine_local(day, entry.start_time, ctx.zone),
                    "end_time": combine_local(end_day, entry.end_time, ctx.zone),
                    "break_minutes": entry.break_minutes,
                    "status": "draft",
                    "is_open": entry.user_id is None,
                    "created_by": ctx.actor_id,
                }
            )
        created: list[Shift] = await shift_repository.create_many(db, rows)
        return len(created)

    # --- 응답 (Responses) ---

    @staticmethod
    def build_shift_template_response(template: ShiftTemplate) -> dict:
        return {
            "id": str(template.id),
            "shop_id": str(template.shop_id),
            "name": template.name,
            "position_id": str(template.position_id) if template.position_id else None,
            "start_time": _hhmm(template.start_time),
            "end_time": _hhmm(template.end_time),
            "break_minutes": template.break_minutes,
        }

    async def build_schedule_template_response(self, db: AsyncSession, template: ScheduleTemplate) -> dict:
        entries = await schedule_template_repository.get_entries(db, template.id)
        return {
            "id": str(template.id),
            "shop_id": str(template.shop_id),
            "name": template.name,
            "entries": [
                {
                    "id": str(e.id),
                    "day_of_week": e.day_of_week,
                    "position_id": str(e.position_id) if e.position_id else None,
                    "user_id": str(e.user_id) if e.user_id else None,
                    "start_time": _hhmm(e.start_time),
                    "end_time": _hhmm(e.end_time),
                    "break_minutes": e.break_minutes,
                }
                for e in entries
            ],
            "created_at": template.created_at,
        }


# 싱글턴 인스턴스 (Singleton instance)
template_service: TemplateService = TemplateService()
