"""매장 구성원 서비스.

Member Service. Lists shop members, assigns departments and archives or
restores members. Archiving deletes the member's future shifts and closes
their pending swaps and claims; restoring does not bring shifts back.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.context import ShopContext
from shopshift.database import utcnow
from shopshift.models.shop import ShopMember
from shopshift.repositories.request_repository import claim_repository, swap_repository
from shopshift.repositories.shift_repository import shift_repository
from shopshift.repositories.shop_repository import department_repository, member_repository, profile_repository
from shopshift.utils.exceptions import BadRequestError, NotFoundError


class MemberService:
    """매장 구성원 서비스 (List, department, archive, restore)."""

    async def list_members(
        self,
        db: AsyncSession,
        shop_id: UUID,
        include_archived: bool = False,
    ) -> Sequence[ShopMember]:
        return await member_repository.get_members(db, shop_id, include_archived)

    async def _get_member(self, db: AsyncSession, shop_id: UUID, member_id: UUID) -> ShopMember:
        member: ShopMember | None = await member_repository.get_by_id(db, member_id, shop_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member

    async def assign_department(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        member_id: UUID,
        department_id: UUID | None,
    ) -> ShopMember:
        member: ShopMember = await self._get_member(db, ctx.shop_id, member_id)
        if department_id is not None and not await department_repository.exists(
            db, {"id": department_id, "shop_id": ctx.shop_id}
        ):
            raise NotFoundError("Department not found")
        member.department_id = department_id
        await db.flush()
        return member

    async def archive_member(self, db: AsyncSession, ctx: ShopContext, member_id: UUID) -> dict[str, int]:
        """구성원을 보관 처리합니다.

        Archive a member: deactivate the membership, delete their shifts that
        start strictly after now, cancel pending swaps where they are
        requester or target, and deny their pending open-shift claims. Past
        shifts are kept for payroll history.

        Returns:
            dict[str, int]: 삭제/취소/거절 건수 (Counts of affected rows)

        Raises:
            NotFoundError: 구성원이 없을 때 (When member not found)
            BadRequestError: 소유자이거나 이미 보관된 경우
                             (When the member is an owner or already archived)
        """
        member: ShopMember = await self._get_member(db, ctx.shop_id, member_id)
        if member.role == "owner":
            raise BadRequestError("Cannot archive a shop owner")
        if not member.is_active:
            raise BadRequestError("Member is already archived")

        now = utcnow()
        member.is_active = False
        await db.flush()

        # 요청 정리는 시프트 삭제 전에 (Requests are closed before their shifts go away)
        future_ids: list[UUID] = [
            s.id for s in await shift_repository.get_future_for_user(db, ctx.shop_id, member.user_id, now)
        ]
        cancelled: int = await swap_repository.cancel_pending_for_user(db, ctx.shop_id, member.user_id)
        cancelled += await swap_repository.cancel_pending_for_shifts(db, ctx.shop_id, future_ids)
        denied: int = await claim_repository.deny_pending_for_user(db, ctx.shop_id, member.user_id, ctx.actor_id, now)
        deleted: int = await shift_repository.delete_with_children(db, ctx.shop_id, future_ids)
        return {"deleted_shifts": deleted, "cancelled_swaps": cancelled, "denied_claims": denied}

    async def restore_member(self, db: AsyncSession, ctx: ShopContext, member_id: UUID) -> ShopMember:
        """보관된 구성원을 복원합니다 (삭제된 시프트는 복원하지 않음)."""
        member: ShopMember = await self._get_member(db, ctx.shop_id, member_id)
        if member.is_active:
            raise BadRequestError("Member is already active")
        member.is_active = True
        await db.flush()
        return member

    async def build_responses(self, db: AsyncSession, members: Sequence[ShopMember]) -> list[dict]:
        names = await profile_repository.get_names(db, [m.user_id for m in members])
        return [
            {
                "id": str(m.id),
                "shop_id": str(m.shop_id),
                "user_id": str(m.user_id),
                "full_name": names.get(m.user_id),
                "role": m.role,
                "department_id": str(m.department_id) if m.department_id else None,
                "hourly_rate": m.hourly_rate,
                "max_hours_per_week": m.max_hours_per_week,
                "is_active": m.is_active,
            }
            for m in members
        ]

    async def build_response(self, db: AsyncSession, member: ShopMember) -> dict:
        return (await self.build_responses(db, [member]))[0]


# 싱글턴 인스턴스 (Singleton instance)
member_service: MemberService = MemberService()
