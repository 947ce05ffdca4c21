"""시프트 교환 서비스.

Swap Service. A bilateral swap names both a target shift and a target
member and exchanges assignees on approval; an "offer" names neither and
only flips its status.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.context import ShopContext
from shopshift.database import utcnow
from shopshift.models.request import SwapRequest
from shopshift.models.shift import Shift
from shopshift.repositories.request_repository import swap_repository
from shopshift.schemas.request import SwapCreate
from shopshift.services.notification_service import notification_service
from shopshift.services.shift_service import shift_service
from shopshift.utils.exceptions import BadRequestError, ForbiddenError, NotFoundError


class SwapService:
    """시프트 교환 서비스 (Request, list, approve, deny, cancel)."""

    async def list_swaps(
        self,
        db: AsyncSession,
        shop_id: UUID,
        status: str | None = None,
        user_id: UUID | None = None,
    ) -> Sequence[SwapRequest]:
        return await swap_repository.get_swaps(db, shop_id, status, user_id)

    async def request_swap(self, db: AsyncSession, ctx: ShopContext, data: SwapCreate) -> SwapRequest:
        """교환 요청(또는 오퍼)을 생성합니다.

        Raises:
            NotFoundError: 시프트가 없을 때 (When a referenced shift is missing)
            BadRequestError: 본인 시프트가 아닐 때 (When the requester shift is not the actor's)
        """
        shift: Shift = await shift_service.get_shift(db, ctx.shop_id, data.requester_shift_id)
        if shift.user_id != ctx.actor_id:
            raise BadRequestError("You can only swap your own shifts")

        target_id: UUID | None = data.target_id
        if data.target_shift_id is not None:
            target_shift: Shift = await shift_service.get_shift(db, ctx.shop_id, data.target_shift_id)
            if target_id is None:
                target_id = target_shift.user_id

        swap: SwapRequest = await swap_repository.create(
            db,
            {
                "shop_id": ctx.shop_id,
                "requester_shift_id": data.requester_shift_id,
                "target_shift_id": data.target_shift_id,
                "requester_id": ctx.actor_id,
                "target_id": target_id,
                "status": "pending",
                "reason": data.reason,
            },
        )
        await notification_service.notify_shop_admins(
            db,
            ctx.shop_id,
            "swap_requested",
            "Shift swap requested",
            data={"swap_id": str(swap.id)},
            exclude_user_id=ctx.actor_id,
        )
        return swap

    async def _get_pending(self, db: AsyncSession, shop_id: UUID, swap_id: UUID) -> SwapRequest:
        swap: SwapRequest | None = await swap_repository.get_by_id(db, swap_id, shop_id)
        if swap is None:
            raise NotFoundError("Swap request not found")
        if swap.status != "pending":
            raise BadRequestError("Swap request has already been reviewed")
        return swap

    async def approve_swap(self, db: AsyncSession, ctx: ShopContext, swap_id: UUID) -> SwapRequest:
        """교환을 승인합니다.

        Approve a swap. Only a bilateral swap (target shift and target member
        both set) exchanges the two shifts' assignees.
        """
        swap: SwapRequest = await self._get_pending(db, ctx.shop_id, swap_id)

        if swap.target_shift_id is not None and swap.target_id is not None:
            first: Shift = await shift_service.get_shift(db, ctx.shop_id, swap.requester_shift_id)
            second: Shift = await shift_service.get_shift(db, ctx.shop_id, swap.target_shift_id)
            old_first, old_second = shift_service.snapshot(first), shift_service.snapshot(second)
            first.user_id, second.user_id = second.user_id, first.user_id
            first.is_open = first.user_id is None
            second.is_open = second.user_id is None
            await db.flush()
            await shift_service.record_history(db, first, "assign", ctx.actor_id, old_first, shift_service.snapshot(first))
            await shift_service.record_history(db, second, "assign", ctx.actor_id, old_second, shift_service.snapshot(second))

        swap.status = "approved"
        swap.reviewed_by = ctx.actor_id
        swap.reviewed_at = utcnow()
        await db.flush()
        await notification_service.notify_users(
            db,
            ctx.shop_id,
            [swap.requester_id, swap.target_id],
            "swap_approved",
            "Shift swap approved",
            data={"swap_id": str(swap.id)},
        )
        return swap

    async def deny_swap(self, db: AsyncSession, ctx: ShopContext, swap_id: UUID) -> SwapRequest:
        swap: SwapRequest = await self._get_pending(db, ctx.shop_id, swap_id)
        swap.status = "denied"
        swap.reviewed_by = ctx.actor_id
        swap.reviewed_at = utcnow()
        await db.flush()
        await notification_service.create_notification(
            db, ctx.shop_id, swap.requester_id, "swap_denied", "Shift swap denied", data={"swap_id": str(swap.id)}
        )
        return swap

    async def cancel_swap(self, db: AsyncSession, ctx: ShopContext, swap_id: UUID) -> SwapRequest:
        """요청자가 대기 중인 교환을 취소합니다.

        Raises:
            ForbiddenError: 요청자가 아닐 때 (When the actor is not the requester)
        """
        swap: SwapRequest = await self._get_pending(db, ctx.shop_id, swap_id)
        if swap.requester_id != ctx.actor_id:
            raise ForbiddenError("Only the requester can cancel a swap request")
        swap.status = "cancelled"
        await db.flush()
        return swap

    @staticmethod
    def build_response(swap: SwapRequest) -> dict:
        return {
            "id": str(swap.id),
            "shop_id": str(swap.shop_id),
            "requester_shift_id": str(swap.requester_shift_id) if swap.requester_shift_id else None,
            "target_shift_id": str(swap.target_shift_id) if swap.target_shift_id else None,
            "requester_id": str(swap.requester_id),
            "target_id": str(swap.target_id) if swap.target_id else None,
            "status": swap.status,
            "reason": swap.reason,
            "reviewed_by": str(swap.reviewed_by) if swap.reviewed_by else None,
            "reviewed_at": swap.reviewed_at,
            "created_at": swap.created_at,
        }


# 싱글턴 인스턴스 (Singleton instance)
swap_service: SwapService = SwapService()
