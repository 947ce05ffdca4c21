"""요청 레포지토리 (오픈 시프트 신청, 교환, 휴가 요청 DB 쿼리 담당).

Request Repository. Handles open-shift claims, swap requests, time-off
requests and PTO balance adjustments.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.request import OpenShiftClaim, PtoBalanceAdjustment, SwapRequest, TimeOffRequest
from shopshift.repositories.base import BaseRepository


class ClaimRepository(BaseRepository[OpenShiftClaim]):
    """오픈 시프트 신청 레포지토리.

    Open-shift claim repository with the sibling-denial update used by the
    approval cascade.

    Extends:
        BaseRepository[OpenShiftClaim]
    """

    def __init__(self) -> None:
        super().__init__(OpenShiftClaim)

    async def get_claims(
        self,
        db: AsyncSession,
        shop_id: UUID,
        status: str | None = None,
        shift_id: UUID | None = None,
        user_id: UUID | None = None,
    ) -> Sequence[OpenShiftClaim]:
        query: Select = select(OpenShiftClaim).where(OpenShiftClaim.shop_id == shop_id)
        if status is not None:
            query = query.where(OpenShiftClaim.status == status)
        if shift_id is not None:
            query = query.where(OpenShiftClaim.shift_id == shift_id)
        if user_id is not None:
            query = query.where(OpenShiftClaim.user_id == user_id)
        result = await db.execute(query.order_by(OpenShiftClaim.created_at))
        return result.scalars().all()

    async def deny_pending_siblings(
        self,
        db: AsyncSession,
        shift_id: UUID,
        approved_claim_id: UUID,
        reviewer_id: UUID,
        reviewed_at: datetime,
    ) -> list[UUID]:
        """같은 시프트의 다른 대기 중 신청을 모두 거절합니다.

        Deny every other pending claim on the same shift and return the
        user ids of the denied claimants.

        Returns:
            list[UUID]: 거절된 신청자 ID 목록 (Denied claimants)
        """
        result = await db.execute(
            select(OpenShiftClaim).where(
                OpenShiftClaim.shift_id == shift_id,
                OpenShiftClaim.status == "pending",
                OpenShiftClaim.id != approved_claim_id,
            )
        )
        siblings: Sequence[OpenShiftClaim] = result.scalars().all()
        for claim in siblings:
            claim.status = "denied"
            claim.reviewed_by = reviewer_id
            claim.reviewed_at = reviewed_at
        await db.flush()
        return [claim.user_id for claim in siblings]

    async def deny_pending_for_user(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        reviewer_id: UUID,
        reviewed_at: datetime,
    ) -> int:
        """직원의 대기 중 신청을 모두 거절합니다 (Used by the archive cascade)."""
        result = await db.execute(
            update(OpenShiftClaim)
            .where(
                OpenShiftClaim.shop_id == shop_id,
                OpenShiftClaim.user_id == user_id,
                OpenShiftClaim.status == "pending",
            )
            .values(status="denied", reviewed_by=reviewer_id, reviewed_at=reviewed_at)
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()
        return result.rowcount or 0


class SwapRepository(BaseRepository[SwapRequest]):
    """시프트 교환 요청 레포지토리 (Swap requests and offers)."""

    def __init__(self) -> None:
        super().__init__(SwapRequest)

    async def get_swaps(
        self,
        db: AsyncSession,
        shop_id: UUID,
        status: str | None = None,
        user_id: UUID | None = None,
    ) -> Sequence[SwapRequest]:
        query: Select = select(SwapRequest).where(SwapRequest.shop_id == shop_id)
        if status is not None:
            query = query.where(SwapRequest.status == status)
        if user_id is not None:
            query = query.where(or_(SwapRequest.requester_id == user_id, SwapRequest.target_id == user_id))
        result = await db.execute(query.order_by(SwapRequest.created_at))
        return result.scalars().all()

    async def cancel_pending_for_user(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
    ) -> int:
        """직원이 요청자 또는 대상인 대기 중 교환을 취소합니다.

        Cancel pending swaps where the user is requester or target.
        """
        result = await db.execute(
            update(SwapRequest)
            .where(
                SwapRequest.shop_id == shop_id,
                SwapRequest.status == "pending",
                or_(SwapRequest.requester_id == user_id, SwapRequest.target_id == user_id),
            )
            .values(status="cancelled")
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()
        return result.rowcount or 0

    async def cancel_pending_for_shifts(
        self,
        db: AsyncSession,
        shop_id: UUID,
        shift_ids: Sequence[UUID],
    ) -> int:
        """삭제될 시프트를 참조하는 대기 중 교환을 취소합니다.

        Cancel pending swaps that reference any of the given shifts on either
        side. Must run before the shifts are deleted.
        """
        ids: list[UUID] = list(shift_ids)
        if not ids:
            return 0
        result = await db.execute(
            update(SwapRequest)
            .where(
                SwapRequest.shop_id == shop_id,
                SwapRequest.status == "pending",
                or_(SwapRequest.requester_shift_id.in_(ids), SwapRequest.target_shift_id.in_(ids)),
            )
            .values(status="cancelled")
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()
        return result.rowcount or 0


class TimeOffRepository(BaseRepository[TimeOffRequest]):
    """휴가 요청 레포지토리 (Time-off requests)."""

    def __init__(self) -> None:
        super().__init__(TimeOffRequest)

    async def get_requests(
        self,
        db: AsyncSession,
        shop_id: UUID,
        status: str | None = None,
        user_id: UUID | None = None,
    ) -> Sequence[TimeOffRequest]:
        query: Select = select(TimeOffRequest).where(TimeOffRequest.shop_id == shop_id)
        if status is not None:
            query = query.where(TimeOffRequest.status == status)
        if user_id is not None:
            query = query.where(TimeOffRequest.user_id == user_id)
        result = await db.execute(query.order_by(TimeOffRequest.start_date.desc()))
        return result.scalars().all()


class PtoAdjustmentRepository(BaseRepository[PtoBalanceAdjustment]):
    """PTO 잔액 조정 레포지토리 (Manual PTO adjustments)."""

    def __init__(self) -> None:
        super().__init__(PtoBalanceAdjustment)


# 싱글턴 인스턴스 (Singleton instances)
claim_repository: ClaimRepository = ClaimRepository()
swap_repository: SwapRepository = SwapRepository()
time_off_repository: TimeOffRepository = TimeOffRepository()
pto_adjustment_repository: PtoAdjustmentRepository = PtoAdjustmentRepository()
