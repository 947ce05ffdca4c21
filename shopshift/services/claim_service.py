"""오픈 시프트 신청 서비스.

Open Shift Claim Service. A member claims an open shift; approving one claim
assigns the shift to its claimant and denies every other pending claim on
the same shift within the same transaction.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.context import ShopContext
from shopshift.database import utcnow
from shopshift.models.request import OpenShiftClaim
from shopshift.models.shift import Shift
from shopshift.repositories.request_repository import claim_repository
from shopshift.repositories.shop_repository import profile_repository
from shopshift.services.notification_service import notification_service
from shopshift.services.shift_service import shift_service
from shopshift.utils.exceptions import BadRequestError, DuplicateError, NotFoundError


class ClaimService:
    """오픈 시프트 신청 서비스 (Claim, list, approve, deny)."""

    async def list_claims(
        self,
        db: AsyncSession,
        shop_id: UUID,
        status: str | None = None,
        shift_id: UUID | None = None,
        user_id: UUID | None = None,
    ) -> Sequence[OpenShiftClaim]:
        return await claim_repository.get_claims(db, shop_id, status, shift_id, user_id)

    async def claim_shift(self, db: AsyncSession, ctx: ShopContext, shift_id: UUID) -> OpenShiftClaim:
        """오픈 시프트를 신청합니다.

        Raises:
            NotFoundError: 시프트가 없을 때 (When shift not found)
            BadRequestError: 오픈 시프트가 아닐 때 (When the shift is not open)
            DuplicateError: 이미 대기 중인 신청이 있을 때 (When a pending claim exists)
        """
        shift: Shift = await shift_service.get_shift(db, ctx.shop_id, shift_id)
        if not shift.is_open or shift.user_id is not None:
            raise BadRequestError("Shift is not open")

        existing = await claim_repository.get_claims(db, ctx.shop_id, "pending", shift_id, ctx.actor_id)
        if existing:
            raise DuplicateError("You have already claimed this shift")

        claim: OpenShiftClaim = await claim_repository.create(
            db,
            {"shop_id": ctx.shop_id, "shift_id": shift_id, "user_id": ctx.actor_id, "status": "pending"},
        )
        await notification_service.notify_shop_admins(
            db,
            ctx.shop_id,
            "claim_requested",
            "Open shift claimed",
            data={"claim_id": str(claim.id), "shift_id": str(shift_id)},
            exclude_user_id=ctx.actor_id,
        )
        return claim

    async def _get_pending(self, db: AsyncSession, shop_id: UUID, claim_id: UUID) -> OpenShiftClaim:
        claim: OpenShiftClaim | None = await claim_repository.get_by_id(db, claim_id, shop_id)
        if claim is None:
            raise NotFoundError("Claim not found")
        if claim.status != "pending":
            raise BadRequestError("Claim has already been reviewed")
        return claim

    async def approve_claim(self, db: AsyncSession, ctx: ShopContext, claim_id: UUID) -> OpenShiftClaim:
        """신청을 승인합니다.

        Approve a claim: stamp the reviewer, assign the shift to the claimant
        and clear its open flag, then deny every other pending claim on that
        shift. All three effects share the request transaction.

        Raises:
            NotFoundError: 신청이 없을 때 (When claim not found)
            BadRequestError: 이미 검토됐거나 시프트가 이미 배정된 경우
                             (When already reviewed or the shift was assigned meanwhile)
        """
        claim: OpenShiftClaim = await self._get_pending(db, ctx.shop_id, claim_id)
        shift: Shift = await shift_service.get_shift(db, ctx.shop_id, claim.shift_id)
        if shift.user_id is not None:
            raise BadRequestError("Shift is no longer open")
        now = utcnow()

        claim.status = "approved"
        claim.reviewed_by = ctx.actor_id
        claim.reviewed_at = now

        old = shift_service.snapshot(shift)
        shift.user_id = claim.user_id
        shift.is_open = False
        await db.flush()
        await shift_service.record_history(db, shift, "assign", ctx.actor_id, old, shift_service.snapshot(shift))

        denied: list[UUID] = await claim_repository.deny_pending_siblings(db, shift.id, claim.id, ctx.actor_id, now)

        data = {"shift_id": str(shift.id)}
        await notification_service.create_notification(
            db, ctx.shop_id, claim.user_id, "claim_approved", "Your shift claim was approved", data=data
        )
        if denied:
            await notification_service.notify_users(
                db, ctx.shop_id, denied, "claim_denied", "Your shift claim was denied", data=data
            )
        return claim

    async def deny_claim(self, db: AsyncSession, ctx: ShopContext, claim_id: UUID) -> OpenShiftClaim:
        claim: OpenShiftClaim = await self._get_pending(db, ctx.shop_id, claim_id)
        claim.status = "denied"
        claim.reviewed_by = ctx.actor_id
        claim.reviewed_at = utcnow()
        await db.flush()
        await notification_service.create_notification(
            db,
            ctx.shop_id,
            claim.user_id,
            "claim_denied",
            "Your shift claim was denied",
            data={"shift_id": str(claim.shift_id)},
        )
        return claim

    async def build_responses(self, db: AsyncSession, claims: Sequence[OpenShiftClaim]) -> list[dict]:
        names = await profile_repository.get_names(db, [c.user_id for c in claims])
        return [
            {
                "id": str(c.id),
                "shop_id": str(c.shop_id),
                "shift_id": str(c.shift_id),
                "user_id": str(c.user_id),
                "user_name": names.get(c.user_id),
                "status": c.status,
                "reviewed_by": str(c.reviewed_by) if c.reviewed_by else None,
                "reviewed_at": c.reviewed_at,
                "created_at": c.created_at,
            }
            for c in claims
        ]

    async def build_response(self, db: AsyncSession, claim: OpenShiftClaim) -> dict:
        return (await self.build_responses(db, [claim]))[0]


# 싱글턴 인스턴스 (Singleton instance)
claim_service: ClaimService = ClaimService()
