"""매장 관련 SQLAlchemy ORM 모델 정의.

Shop-related SQLAlchemy ORM model definitions.
A Shop is the tenant: every other row in the system is scoped by shop_id.

Tables:
    - shops: 매장 (Tenant shop, carries the display timezone)
    - profiles: 사용자 프로필 (Mirror of identity-provider users)
    - shop_members: 매장 구성원 (Membership with role and active flag)
    - departments: 부서 (Departments with PTO accrual rate)
    - positions: 포지션 (Work positions, e.g. technician bay, front desk)
"""

import uuid
from datetime import datetime
from sqlalchemy import String, Boolean, Float, Integer, ForeignKey, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base, UTCDateTime, utcnow


class Shop(Base):
    """매장(테넌트) 모델.

    Shop (tenant) model. Shifts are stored in UTC and displayed in the
    shop's ``timezone``; every local-date computation (week boundaries,
    grouping, drag-and-drop) uses it.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 매장 이름 (Shop name)
        address/city/state/zip/phone: 연락처 정보 (Contact details)
        timezone: IANA 시간대 이름 (IANA timezone name)
    """

    __tablename__ = "shops"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip: Mapped[str | None] = mapped_column(String(20), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # IANA 시간대 (e.g. "America/New_York")
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="America/New_York")
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)


class Profile(Base):
    """사용자 프로필 모델 (외부 인증 서비스 사용자와 동일한 ID).

    Profile mirror of an identity-provider user. ``id`` equals the ``sub``
    claim of the user's bearer token.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)


class ShopMember(Base):
    """매장 구성원 모델.

    Shop membership. ``is_active = False`` marks an archived member; archived
    members keep their past shifts for payroll history.

    Roles:
        - owner: 매장 소유자, 보관 불가 (Shop owner, cannot be archived)
        - manager: 관리자 (Manager, may review requests)
        - technician: 일반 구성원 (Regular staff member)
    """

    __tablename__ = "shop_members"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="technician")
    department_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    hourly_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_hours_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 활성 상태 (False = 보관됨, archived)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("shop_id", "user_id", name="uq_shop_members_shop_user"),
        Index("ix_shop_members_shop_active", "shop_id", "is_active"),
    )


class Department(Base):
    """부서 모델 (PTO 적립률 설정 단위).

    Department model. ``pto_accrual_rate`` is the hours of PTO accrued per
    hour worked, consumed by the remote PTO balance function.
    """

    __tablename__ = "departments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    pto_accrual_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)


class Position(Base):
    """포지션 모델 (Work position with a display color)."""

    __tablename__ = "positions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#6b7280")
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("shop_id", "name", name="uq_positions_shop_name"),
    )
