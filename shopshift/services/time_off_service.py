"""휴가/PTO 서비스.

Time Off Service. Handles time-off requests and their review, manual PTO
balance adjustments, and the PTO balance/ledger computed by database-side
functions.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.context import ShopContext
from shopshift.database import utcnow
from shopshift.models.request import PtoBalanceAdjustment, TimeOffRequest
from shopshift.repositories.report_repository import report_repository
from shopshift.repositories.request_repository import pto_adjustment_repository, time_off_repository
from shopshift.repositories.shop_repository import member_repository
from shopshift.schemas.request import PtoAdjustmentCreate, TimeOffCreate
from shopshift.services.notification_service import notification_service
from shopshift.utils.exceptions import BadRequestError, ForbiddenError, NotFoundError


class TimeOffService:
    """휴가 요청 및 PTO 서비스."""

    async def list_requests(
        self,
        db: AsyncSession,
        shop_id: UUID,
        status: str | None = None,
        user_id: UUID | None = None,
    ) -> Sequence[TimeOffRequest]:
        return await time_off_repository.get_requests(db, shop_id, status, user_id)

    async def request_time_off(self, db: AsyncSession, ctx: ShopContext, data: TimeOffCreate) -> TimeOffRequest:
        """휴가를 요청하고 관리자에게 알립니다.

        Create a pending request and notify every active owner/manager
        except the requester.
        """
        request: TimeOffRequest = await time_off_repository.create(
            db,
            {
                "shop_id": ctx.shop_id,
                "user_id": ctx.actor_id,
                "start_date": data.start_date,
                "end_date": data.end_date,
                "hours_requested": data.hours_requested,
                "reason": data.reason,
                "status": "pending",
            },
        )
        await notification_service.notify_shop_admins(
            db,
            ctx.shop_id,
            "time_off_requested",
            "Time off requested",
            f"{data.start_date.isoformat()} to {data.end_date.isoformat()} ({data.hours_requested:g}h)",
            data={"time_off_request_id": str(request.id)},
            exclude_user_id=ctx.actor_id,
        )
        return request

    async def _get_pending(self, db: AsyncSession, shop_id: UUID, request_id: UUID) -> TimeOffRequest:
        request: TimeOffRequest | None = await time_off_repository.get_by_id(db, request_id, shop_id)
        if request is None:
            raise NotFoundError("Time off request not found")
        if request.status != "pending":
            raise BadRequestError("Time off request has already been reviewed")
        return request

    async def approve(self, db: AsyncSession, ctx: ShopContext, request_id: UUID, is_paid: bool) -> TimeOffRequest:
        request: TimeOffRequest = await self._get_pending(db, ctx.shop_id, request_id)
        request.status = "approved"
        request.is_paid = is_paid
        request.reviewed_by = ctx.actor_id
        request.reviewed_at = utcnow()
        await db.flush()
        await notification_service.create_notification(
            db,
            ctx.shop_id,
            request.user_id,
            "time_off_approved",
            "Time off approved",
            data={"time_off_request_id": str(request.id)},
        )
        return request

    async def deny(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        request_id: UUID,
        reviewer_notes: str | None = None,
    ) -> TimeOffRequest:
        request: TimeOffRequest = await self._get_pending(db, ctx.shop_id, request_id)
        request.status = "denied"
        request.reviewer_notes = reviewer_notes
        request.reviewed_by = ctx.actor_id
        request.reviewed_at = utcnow()
        await db.flush()
        await notification_service.create_notification(
            db,
            ctx.shop_id,
            request.user_id,
            "time_off_denied",
            "Time off denied",
            reviewer_notes,
            data={"time_off_request_id": str(request.id)},
        )
        return request

    async def cancel(self, db: AsyncSession, ctx: ShopContext, request_id: UUID) -> TimeOffRequest:
        """본인의 대기 중 요청을 취소합니다.

        Raises:
            ForbiddenError: 본인 요청이 아닐 때 (When not the requester)
        """
        request: TimeOffRequest = await self._get_pending(db, ctx.shop_id, request_id)
        if request.user_id != ctx.actor_id:
            raise ForbiddenError("You can only cancel your own requests")
        request.status = "cancelled"
        await db.flush()
        return request

    # --- PTO ---

    async def adjust_balance(
        self,
        db: AsyncSession,
        ctx: ShopContext,
        data: PtoAdjustmentCreate,
    ) -> PtoBalanceAdjustment:
        """PTO 잔액을 수동으로 조정합니다 (Signed adjustment for a member)."""
        membership = await member_repository.get_membership(db, ctx.shop_id, data.user_id)
        if membership is None:
            raise NotFoundError("Member not found")
        return await pto_adjustment_repository.create(
            db,
            {
                "shop_id": ctx.shop_id,
                "user_id": data.user_id,
                "hours": data.hours,
                "reason": data.reason,
                "created_by": ctx.actor_id,
            },
        )

    async def get_balance(self, db: AsyncSession, shop_id: UUID, user_id: UUID) -> Any:
        return await report_repository.get_pto_balance(db, shop_id, user_id)

    async def get_ledger(self, db: AsyncSession, shop_id: UUID, user_id: UUID) -> Any:
        return await report_repository.get_pto_ledger(db, shop_id, user_id)

    @staticmethod
    def build_response(request: TimeOffRequest) -> dict:
        return {
            "id": str(request.id),
            "shop_id": str(request.shop_id),
            "user_id": str(request.user_id),
            "start_date": request.start_date,
            "end_date": request.end_date,
            "hours_requested": request.hours_requested,
            "reason": request.reason,
            "is_paid": request.is_paid,
            "status": request.status,
            "reviewed_by": str(request.reviewed_by) if request.reviewed_by else None,
            "reviewed_at": request.reviewed_at,
            "reviewer_notes": request.reviewer_notes,
            "created_at": request.created_at,
        }

    @staticmethod
    def build_adjustment_response(adjustment: PtoBalanceAdjustment) -> dict:
        return {
            "id": str(adjustment.id),
            "shop_id": str(adjustment.shop_id),
            "user_id": str(adjustment.user_id),
            "hours": adjustment.hours,
            "reason": adjustment.reason,
            "created_by": str(adjustment.created_by) if adjustment.created_by else None,
            "created_at": adjustment.created_at,
        }


# 싱글턴 인스턴스 (Singleton instance)
time_off_service: TimeOffService = TimeOffService()
