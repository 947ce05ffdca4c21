"""매장 레포지토리 (매장, 구성원, 부서, 포지션 관련 DB 쿼리 담당).

Shop Repository. Handles shop, membership, department and position queries.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.shop import Department, Position, Profile, Shop, ShopMember
from shopshift.repositories.base import BaseRepository

# 관리 권한 역할 (Roles allowed to administer a shop)
ADMIN_ROLES: tuple[str, ...] = ("owner", "manager")


class ShopRepository(BaseRepository[Shop]):
    """매장 레포지토리 (Shop rows)."""

    def __init__(self) -> None:
        super().__init__(Shop)


class ProfileRepository(BaseRepository[Profile]):
    """프로필 레포지토리 (Mirror of identity-provider users)."""

    def __init__(self) -> None:
        super().__init__(Profile)

    async def get_names(self, db: AsyncSession, user_ids: Sequence[UUID]) -> dict[UUID, str | None]:
        """사용자 ID별 표시 이름을 조회합니다 (Display names keyed by user id)."""
        ids = [uid for uid in set(user_ids) if uid is not None]
        if not ids:
            return {}
        result = await db.execute(select(Profile.id, Profile.full_name).where(Profile.id.in_(ids)))
        return {uid: name for uid, name in result.all()}


class MemberRepository(BaseRepository[ShopMember]):
    """매장 구성원 레포지토리.

    Shop membership repository with active-member lookups used by the
    shop context dependency and notification fan-out.

    Extends:
        BaseRepository[ShopMember]
    """

    def __init__(self) -> None:
        super().__init__(ShopMember)

    async def get_membership(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
    ) -> ShopMember | None:
        """매장과 사용자로 구성원 행을 조회합니다 (Membership by shop + user, any state)."""
        result = await db.execute(
            select(ShopMember).where(ShopMember.shop_id == shop_id, ShopMember.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_members(
        self,
        db: AsyncSession,
        shop_id: UUID,
        include_archived: bool = False,
    ) -> Sequence[ShopMember]:
        query = select(ShopMember).where(ShopMember.shop_id == shop_id)
        if not include_archived:
            query = query.where(ShopMember.is_active.is_(True))
        result = await db.execute(query.order_by(ShopMember.created_at))
        return result.scalars().all()

    async def get_active_user_ids(
        self,
        db: AsyncSession,
        shop_id: UUID,
        roles: Sequence[str] | None = None,
    ) -> list[UUID]:
        """활성 구성원의 사용자 ID 목록 (Active member user ids, optionally by role)."""
        query = select(ShopMember.user_id).where(
            ShopMember.shop_id == shop_id,
            ShopMember.is_active.is_(True),
        )
        if roles:
            query = query.where(ShopMember.role.in_(list(roles)))
        result = await db.execute(query)
        return list(result.scalars().all())


class DepartmentRepository(BaseRepository[Department]):
    """부서 레포지토리 (Departments carrying the PTO accrual rate)."""

    def __init__(self) -> None:
        super().__init__(Department)


class PositionRepository(BaseRepository[Position]):
    """포지션 레포지토리 (Shop positions)."""

    def __init__(self) -> None:
        super().__init__(Position)


# 싱글턴 인스턴스 (Singleton instances)
shop_repository: ShopRepository = ShopRepository()
profile_repository: ProfileRepository = ProfileRepository()
member_repository: MemberRepository = MemberRepository()
department_repository: DepartmentRepository = DepartmentRepository()
position_repository: PositionRepository = PositionRepository()
