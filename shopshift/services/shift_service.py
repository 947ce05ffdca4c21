"""시프트 서비스 (시프트 변경 비즈니스 로직).

Shift Service. Orchestrates shift create/update/delete together with the
child rows a shift owns (breaks, tag assignments), recurring generation,
week copy, publishing, bulk edits, drag-and-drop moves, the audit trail and
response building.

Every method only flushes; the router commits once, so each orchestration
is applied as a whole or not at all.
"""

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.context import ShopContext
from shopshift.models.shift import Shift, ShiftBreak, ShiftHistory
from shopshift.repositories.request_repository import swap_repository
from shopshift.repositories.shift_repository import (
    schedule_repository,
    shift_history_repository,
    shift_repository,
    shift_tag_repository,
)
from shopshift.repositories.shop_repository import member_repository, position_repository, profile_repository
from shopshift.repositories.template_repository import shift_template_repository
from shopshift.scheduling.bulk_patch import apply_bulk_patch
from shopshift.scheduling.drag_drop import DropTarget, resolve_drop
from shopshift.scheduling.recurrence import generate_recurring_instances
from shopshift.scheduling.timezones import to_local
from shopshift.scheduling.week_copy import check_source_shifts, plan_week_copies, source_week_window, validate_weeks_count
from shopshift.schemas.shift import BulkActionItem, BulkShiftPatch, CopyWeekRequest, ShiftCreate, ShiftUpdate
from shopshift.services.notification_service import notification_service
from shopshift.utils.exceptions import BadRequestError, NotFoundError


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _str(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


class ShiftService:
    """시프트 서비스.

    Shift service handling single and bulk mutations, recurrence, week copy
    and response building.
    """

    # --- 이력 (Audit trail) ---

    @staticmethod
    def snapshot(shift: Shift) -> dict[str, Any]:
        """이력 저장용 JSON 스냅샷 (JSON-serialisable snapshot of a shift)."""
        return {
            "user_id": _str(shift.user_id),
            "position_id": _str(shift.position_id),
            "schedule_id": _str(shift.schedule_id),
            "start_time": _iso(shift.start_time),
            "end_time": _iso(shift.end_time),
            "break_minutes": shift.break_minutes,
            "status": shift.status,
            "is_open": shift.is_open,
            "notes": shift.notes,
            "color": shift.color,
        }

    async def record_history(
        self,
        db: AsyncSession,
        shift: Shift,
        action: str,
        actor_id: UUID | None,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
    ) -> None:
        db.add(
            ShiftHistory(
                shift_id=shift.id,
                shop_id=shift.shop_id,
                action=action,
                changed_by=actor_id,
                old_data=old_data,
                new_data=new_data,
            )
        )
        await db.flush()

    # --- 조회 (Reads) ---

    async def get_shift(self, db: AsyncSession, shop_id: UUID, shift_id: UUID) -> Shift:
        """매장 범위로 시프트를 조회합니다.

        Raises:
            NotFoundError: 시프트가 없을 때 (When shift not found)
        """
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id, shop_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        return shift

    async def list_shifts(
        self,
        db: AsyncSession,
        shop_id: UUID,
        start: datetime,
        end: datetime,
        user_id: UUID | None = None,
        status: str | None = None,
    ) -> Sequence[Shift]:
        return await shift_repository.get_by_range(db, shop_id, start, end, user_id, status)

    async def get_history(self, db: AsyncSession, shop_id: UUID, shift_id: UUID) -> Sequence[ShiftHistory]:
        return await shift_history_repository.get_for_shift(db, shop_id, shift_id)

    async def check_references(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID | None = None,
        position_id: UUID | None = None,
        schedule_id: UUID | None = None,
        tag_ids: Sequence[UUID] | None = None,
    ) -> None:
        """시프트가 참조하는 ID가 이 매장 소속인지 확인합니다.

        Verify that every referenced id belongs to the shop: the assignee must
        be an active member, the position, schedule and tags must be the
        shop's own. ``None`` means nothing to check.

        Raises:
            BadRequestError: 활성 구성원이 아닐 때 (When the user is not an active member)
            NotFoundError: 포지션/스케줄/태그가 없을 때 (When a catalog id is unknown)
        """
        if user_id is not None:
            membership = await member_repository.get_membership(db, shop_id, user_id)
            if membership is None or not membership.is_active:
                raise BadRequestError("User is not an active member of this shop")
        if position_id is not None and not await position_repository.exists(db, {"id": position_id, "shop_id": shop_id}):
            raise NotFoundError("Position not found")
        if schedule_id is not None and not await schedule_repository.exists(db, {"id": schedule_id, "shop_id": shop_id}):
            raise NotFoundError("Schedule not found")
        if tag_ids:
            wanted: set[UUID] = set(tag_ids)
            found = await shift_tag_repository.get_many(db, list(wanted), shop_id)
            if len(found) != len(wanted):
                raise NotFoundError("Tag not found")

    # --- 생성 (Create) ---

    async def create_shift(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        data: ShiftCreate,
    ) -> tuple[Shift, int]:
        """시프트를 생성합니다 (휴식, 태그, 반복, 템플릿 포함).

        Create a draft shift, then in order: its breaks, its tag assignments,
        the recurring batch (with the anchor's breaks copied onto every
        generated instance) and optionally a reusable shift template.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            ctx: 매장 컨텍스트 (Shop context)
            data: 시프트 생성 데이터 (Shift creation data)

        Returns:
            tuple[Shift, int]: (앵커 시프트, 생성된 반복 인스턴스 수)
                               (Anchor shift, number of recurring instances)
        """
        breaks: list[dict[str, Any]] | None = (
            [b.model_dump() for b in data.breaks] if data.breaks is not None else None
        )
        break_minutes: int = sum(b["duration_minutes"] for b in breaks) if breaks else data.break_minutes
        await self.check_references(
            db, ctx.shop_id, data.user_id, data.position_id, data.schedule_id, data.tag_ids
        )

        shift: Shift = await shift_repository.create(
            db,
            {
                "shop_id": ctx.shop_id,
                "schedule_id": data.schedule_id,
                "user_id": data.user_id,
                "position_id": data.position_id,
                "start_time": data.start_time,
                "end_time": data.end_time,
                "break_minutes": break_minutes,
                "status": "draft",
                "is_open": data.user_id is None,
                "notes": data.notes,
                "color": data.color,
                "recurrence_group_id": uuid.uuid4() if data.recurrence is not None else None,
                "created_by": ctx.actor_id,
            },
        )
        await self.record_history(db, shift, "create", ctx.actor_id, new_data=self.snapshot(shift))

        if breaks:
            await shift_repository.insert_breaks(db, shift.id, breaks)
        if data.tag_ids:
            await shift_repository.insert_tags(db, shift.id, data.tag_ids)

        generated: int = 0
        if data.recurrence is not None:
            instances = generate_recurring_instances(shift, data.recurrence.to_pattern(), ctx.actor_id)
            created: list[Shift] = await shift_repository.create_many(db, instances)
            generated = len(created)
            for instance in created:
                await self.record_history(db, instance, "create", ctx.actor_id, new_data=self.snapshot(instance))
            if breaks:
                # 같은 반복 묶음의 새 인스턴스를 다시 조회해 휴식 복제
                # (Re-query the new batch by recurrence group to copy breaks)
                batch = await shift_repository.get_by_recurrence_group(db, shift.recurrence_group_id, exclude_id=shift.id)
                for instance in batch:
                    await shift_repository.insert_breaks(db, instance.id, breaks)

        if data.save_as_template:
            local_start = to_local(shift.start_time, ctx.zone)
            local_end = to_local(shift.end_time, ctx.zone)
            await shift_template_repository.create(
                db,
                {
                    "shop_id": ctx.shop_id,
                    "name": data.template_name or local_start.strftime("%H:%M") + "-" + local_end.strftime("%H:%M"),
                    "position_id": data.position_id,
                    "start_time": local_start.time().replace(second=0, microsecond=0),
                    "end_time": local_end.time().replace(second=0, microsecond=0),
                    "break_minutes": break_minutes,
                },
            )

        return shift, generated

    # --- 수정 (Update) ---

    async def update_shift(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        shift_id: UUID,
        data: ShiftUpdate,
        unpublish: bool = False,
    ) -> Shift:
        """시프트를 부분 수정합니다.

        Apply a partial update. ``breaks``/``tag_ids`` present in the payload
        replace the whole child set. With ``unpublish`` the shift is forced
        back to draft ("save & unpublish").

        Raises:
            NotFoundError: 시프트가 없을 때 (When shift not found)
            BadRequestError: 종료 시각이 시작 시각 이전일 때 (When end <= start)
        """
        shift: Shift = await self.get_shift(db, ctx.shop_id, shift_id)
        old: dict[str, Any] = self.snapshot(shift)

        fields: dict[str, Any] = data.model_dump(exclude_unset=True, exclude={"breaks", "tag_ids"})
        if "start_time" in fields and fields["start_time"] is None:
            raise BadRequestError("start_time cannot be cleared")
        if "end_time" in fields and fields["end_time"] is None:
            raise BadRequestError("end_time cannot be cleared")

        start: datetime = fields.get("start_time", shift.start_time)
        end: datetime = fields.get("end_time", shift.end_time)
        if end <= start:
            raise BadRequestError("end_time must be after start_time")

        await self.check_references(
            db,
            ctx.shop_id,
            fields.get("user_id"),
            fields.get("position_id"),
            fields.get("schedule_id"),
            data.tag_ids if "tag_ids" in data.model_fields_set else None,
        )

        if "user_id" in fields:
            fields["is_open"] = fields["user_id"] is None
        if "break_minutes" in fields and fields["break_minutes"] is None:
            fields["break_minutes"] = 0

        if "breaks" in data.model_fields_set:
            breaks: list[dict[str, Any]] = [b.model_dump() for b in data.breaks or []]
            await shift_repository.replace_breaks(db, shift.id, breaks)
            fields["break_minutes"] = sum(b["duration_minutes"] for b in breaks)
        if "tag_ids" in data.model_fields_set:
            await shift_repository.replace_tags(db, shift.id, data.tag_ids or [])

        if unpublish:
            fields["status"] = "draft"

        for field, value in fields.items():
            setattr(shift, field, value)
        await db.flush()
        await self.record_history(db, shift, "update", ctx.actor_id, old, self.snapshot(shift))
        return shift

    # --- 삭제 (Delete) ---

    async def delete_shift(self, db: AsyncSession, ctx: ShopContext, shift_id: UUID) -> None:
        """시프트를 삭제합니다.

        Unconditional delete. Pending swaps referencing the shift are
        cancelled first; its claims go with it.
        """
        shift: Shift = await self.get_shift(db, ctx.shop_id, shift_id)
        await self.record_history(db, shift, "delete", ctx.actor_id, old_data=self.snapshot(shift))
        await swap_repository.cancel_pending_for_shifts(db, ctx.shop_id, [shift.id])
        await shift_repository.delete_with_children(db, ctx.shop_id, [shift.id])

    async def bulk_delete(self, db: AsyncSession, ctx: ShopContext, shift_ids: Sequence[UUID]) -> int:
        shifts: Sequence[Shift] = await shift_repository.get_many(db, shift_ids, ctx.shop_id)
        for shift in shifts:
            await self.record_history(db, shift, "delete", ctx.actor_id, old_data=self.snapshot(shift))
        ids: list[UUID] = [s.id for s in shifts]
        await swap_repository.cancel_pending_for_shifts(db, ctx.shop_id, ids)
        return await shift_repository.delete_with_children(db, ctx.shop_id, ids)

    # --- 게시 (Publish / unpublish) ---

    async def publish_shifts(self, db: AsyncSession, ctx: ShopContext, shift_ids: Sequence[UUID]) -> int:
        """시프트를 게시하고 담당자에게 알립니다.

        Publish the shifts and notify each distinct assignee once. When any
        published shift is open, every other active member is told it can be
        claimed.

        Returns:
            int: 게시된 시프트 수 (Number of shifts published)
        """
        shifts: Sequence[Shift] = await shift_repository.get_many(db, shift_ids, ctx.shop_id)
        count: int = await self._set_status(db, ctx, shifts, "published", "publish")
        assignees: list[UUID] = [s.user_id for s in shifts if s.user_id is not None]
        if assignees:
            await notification_service.notify_users(
                db,
                ctx.shop_id,
                assignees,
                "shift_published",
                "Schedule published",
                "Your shifts have been published.",
            )
        open_count: int = sum(1 for s in shifts if s.user_id is None)
        if open_count:
            await notification_service.notify_shop_members(
                db,
                ctx.shop_id,
                "open_shift_available",
                "Open shifts available",
                f"{open_count} open shift(s) can be claimed.",
                exclude_user_id=ctx.actor_id,
            )
        return count

    async def unpublish_shifts(self, db: AsyncSession, ctx: ShopContext, shift_ids: Sequence[UUID]) -> int:
        shifts: Sequence[Shift] = await shift_repository.get_many(db, shift_ids, ctx.shop_id)
        return await self._set_status(db, ctx, shifts, "draft", "unpublish")

    async def _set_status(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        shifts: Sequence[Shift],
        status: str,
        action: str,
    ) -> int:
        for shift in shifts:
            old: dict[str, Any] = self.snapshot(shift)
            shift.status = status
            await self.record_history(db, shift, action, ctx.actor_id, old, self.snapshot(shift))
        await db.flush()
        return len(shifts)

    # --- 벌크 수정 (Bulk update) ---

    async def bulk_update(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        shift_ids: Sequence[UUID],
        patch: BulkShiftPatch,
    ) -> int:
        """여러 시프트에 같은 3상태 패치를 적용합니다.

        Apply one tri-state patch (local time of day, position, color) to
        every listed shift of the shop.

        Returns:
            int: 수정된 시프트 수 (Number of shifts updated)

        Raises:
            BadRequestError: 시각을 null로 지정했을 때 (When a time is cleared)
        """
        changes: dict[str, Any] = patch.changes()
        await self.check_references(db, ctx.shop_id, position_id=changes.get("position_id"))
        shifts: Sequence[Shift] = await shift_repository.get_many(db, shift_ids, ctx.shop_id)
        for shift in shifts:
            try:
                fields: dict[str, Any] = apply_bulk_patch(shift, changes, ctx.zone)
            except ValueError as exc:
                raise BadRequestError(str(exc)) from exc
            if not fields:
                continue
            old: dict[str, Any] = self.snapshot(shift)
            for field, value in fields.items():
                setattr(shift, field, value)
            await self.record_history(db, shift, "update", ctx.actor_id, old, self.snapshot(shift))
        await db.flush()
        return len(shifts)

    # --- 주간 복사 (Copy week) ---

    async def copy_week(self, db: AsyncSession, ctx: ShopContext, data: CopyWeekRequest) -> int:
        """원본 주의 시프트를 다음 N주로 복사합니다.

        Copy every shift of the shop-local source week forward by 1..N
        weeks as drafts, then fan out each source shift's breaks and tag
        assignments onto all of its copies.

        Returns:
            int: 생성된 시프트 수 (Number of shifts created)

        Raises:
            BadRequestError: 주 수 범위 초과, 원본 없음, 원본 200개 초과
        """
        try:
            validate_weeks_count(data.weeks_count)
        except ValueError as exc:
            raise BadRequestError(str(exc)) from exc

        window_start, window_end = source_week_window(data.source_week_start, ctx.zone)
        sources: Sequence[Shift] = await shift_repository.get_in_window(db, ctx.shop_id, window_start, window_end)
        try:
            check_source_shifts(len(sources))
            plan = plan_week_copies(sources, data.weeks_count, ctx.actor_id)
        except ValueError as exc:
            raise BadRequestError(str(exc)) from exc

        created: list[Shift] = await shift_repository.create_many(db, [copy.values for copy in plan])

        targets: dict[UUID, list[UUID]] = {}
        for copy, shift in zip(plan, created):
            targets.setdefault(copy.source_id, []).append(shift.id)

        source_ids: list[UUID] = [s.id for s in sources]
        breaks: dict[UUID, list[ShiftBreak]] = await shift_repository.get_breaks(db, source_ids)
        tags: dict[UUID, list[UUID]] = await shift_repository.get_tag_ids(db, source_ids)
        for source_id, target_ids in targets.items():
            await shift_repository.copy_children(
                db, source_id, target_ids, breaks.get(source_id, []), tags.get(source_id, [])
            )
        return len(created)

    # --- 배정 (Assign / unassign / move) ---

    async def assign_shift(self, db: AsyncSession, ctx: ShopContext, shift_id: UUID, user_id: UUID) -> Shift:
        """시프트를 직원에게 배정하고 알립니다.

        Raises:
            NotFoundError: 시프트가 없을 때 (When shift not found)
            BadRequestError: 활성 구성원이 아닐 때 (When the user is not an active member)
        """
        shift: Shift = await self.get_shift(db, ctx.shop_id, shift_id)
        await self.check_references(db, ctx.shop_id, user_id=user_id)

        old: dict[str, Any] = self.snapshot(shift)
        shift.user_id = user_id
        shift.is_open = False
        await db.flush()
        await self.record_history(db, shift, "assign", ctx.actor_id, old, self.snapshot(shift))
        await notification_service.create_notification(
            db, ctx.shop_id, user_id, "shift_assigned", "New shift assigned", data={"shift_id": str(shift.id)}
        )
        return shift

    async def unassign_shift(self, db: AsyncSession, ctx: ShopContext, shift_id: UUID) -> Shift:
        shift: Shift = await self.get_shift(db, ctx.shop_id, shift_id)
        old: dict[str, Any] = self.snapshot(shift)
        shift.user_id = None
        shift.is_open = True
        await db.flush()
        await self.record_history(db, shift, "unassign", ctx.actor_id, old, self.snapshot(shift))
        return shift

    async def move_shift(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        shift_id: UUID,
        target: DropTarget,
    ) -> tuple[Shift, bool]:
        """드래그 앤 드롭 결과를 적용합니다.

        Apply the drop resolver's patch. Nothing is written when the drop
        lands on the shift's current assignee and date.

        Returns:
            tuple[Shift, bool]: (시프트, 변경 여부) (Shift, whether anything changed)
        """
        shift: Shift = await self.get_shift(db, ctx.shop_id, shift_id)
        patch: dict[str, Any] | None = resolve_drop(shift, target, ctx.zone)
        if patch is None:
            return shift, False
        await self.check_references(db, ctx.shop_id, user_id=patch.get("user_id"))

        old: dict[str, Any] = self.snapshot(shift)
        for field, value in patch.items():
            setattr(shift, field, value)
        await db.flush()
        await self.record_history(db, shift, "update", ctx.actor_id, old, self.snapshot(shift))
        return shift, True

    # --- 벌크 액션 (Bulk action endpoint) ---

    async def run_bulk_actions(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        items: Sequence[BulkActionItem],
    ) -> list[dict[str, Any]]:
        """벌크 액션을 순서대로 처리하고 항목별 결과를 반환합니다.

        Process actions sequentially, each inside its own SAVEPOINT, and
        return one ``{action, success, error?}`` result per item. A failed
        item is rolled back alone; the others still apply.
        """
        results: list[dict[str, Any]] = []
        for item in items:
            if item.action != "create" and item.id is None:
                results.append({"action": item.action, "success": False, "error": "Missing id"})
                continue
            try:
                async with db.begin_nested():
                    await self._apply_bulk_item(db, ctx, item)
            except HTTPException as exc:
                results.append({"action": item.action, "success": False, "error": str(exc.detail)})
            except ValidationError as exc:
                results.append({"action": item.action, "success": False, "error": _validation_message(exc)})
            except SQLAlchemyError as exc:
                results.append({"action": item.action, "success": False, "error": str(getattr(exc, "orig", None) or exc)})
            else:
                results.append({"action": item.action, "success": True})
        return results

    async def _apply_bulk_item(self, db: AsyncSession, ctx: ShopContext, item: BulkActionItem) -> None:
        if item.action == "create":
            await self.create_shift(db, ctx, ShiftCreate.model_validate(item.data or {}))
        elif item.action == "update":
            await self.update_shift(db, ctx, item.id, ShiftUpdate.model_validate(item.data or {}))
        elif item.action == "delete":
            await self.delete_shift(db, ctx, item.id)
        elif item.action == "publish":
            await self._require_count(await self.publish_shifts(db, ctx, [item.id]))
        elif item.action == "unpublish":
            await self._require_count(await self.unpublish_shifts(db, ctx, [item.id]))

    @staticmethod
    async def _require_count(count: int) -> None:
        if count == 0:
            raise NotFoundError("Shift not found")

    # --- 응답 (Response building) ---

    async def build_responses(self, db: AsyncSession, shifts: Sequence[Shift]) -> list[dict]:
        """시프트 응답 목록을 구성합니다 (휴식, 태그, 담당자 이름 일괄 조회).

        Build response dicts, fetching breaks, tag ids and assignee names in
        one batched query each.
        """
        ids: list[UUID] = [s.id for s in shifts]
        breaks: dict[UUID, list[ShiftBreak]] = await shift_repository.get_breaks(db, ids)
        tags: dict[UUID, list[UUID]] = await shift_repository.get_tag_ids(db, ids)
        names: dict[UUID, str | None] = await profile_repository.get_names(
            db, [s.user_id for s in shifts if s.user_id is not None]
        )
        return [
            {
                "id": str(s.id),
                "shop_id": str(s.shop_id),
                "schedule_id": _str(s.schedule_id),
                "user_id": _str(s.user_id),
                "user_name": names.get(s.user_id) if s.user_id else None,
                "position_id": _str(s.position_id),
                "start_time": s.start_time,
                "end_time": s.end_time,
                "break_minutes": s.break_minutes,
                "status": s.status,
                "is_open": s.is_open,
                "notes": s.notes,
                "color": s.color,
                "recurrence_group_id": _str(s.recurrence_group_id),
                "created_by": _str(s.created_by),
                "breaks": [
                    {
                        "id": str(b.id),
                        "label": b.label,
                        "duration_minutes": b.duration_minutes,
                        "is_paid": b.is_paid,
                        "sort_order": b.sort_order,
                    }
                    for b in breaks.get(s.id, [])
                ],
                "tag_ids": [str(t) for t in tags.get(s.id, [])],
                "created_at": s.created_at,
                "updated_at": s.updated_at,
            }
            for s in shifts
        ]

    async def build_response(self, db: AsyncSession, shift: Shift) -> dict:
        return (await self.build_responses(db, [shift]))[0]

    @staticmethod
    def build_history_response(entry: ShiftHistory) -> dict:
        return {
            "id": str(entry.id),
            "shift_id": str(entry.shift_id),
            "action": entry.action,
            "changed_by": _str(entry.changed_by),
            "old_data": entry.old_data,
            "new_data": entry.new_data,
            "changed_at": entry.changed_at,
        }


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


# 싱글턴 인스턴스 (Singleton instance)
shift_service: ShiftService = ShiftService()
