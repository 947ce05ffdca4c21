"""요청 컨텍스트 객체 정의.

Request context objects. ``ShopContext`` is the explicit "active shop"
carried from the API layer into every service that needs it; it is built
once per request by ``shopshift.api.deps.get_shop_context``.
"""

from dataclasses import dataclass
from uuid import UUID
from zoneinfo import ZoneInfo

from shopshift.scheduling.timezones import get_zone


@dataclass(frozen=True)
class CurrentUser:
    """인증된 사용자 (Identity-provider user resolved from the bearer token)."""

    id: UUID
    email: str | None = None


@dataclass(frozen=True)
class ShopContext:
    """활성 매장 컨텍스트.

    Attributes:
        shop_id: 활성 매장 UUID (Active shop)
        timezone: 매장 시간대 이름 (Shop timezone name)
        actor: 요청한 사용자 (Acting user)
        role: 요청자의 매장 역할 (owner | manager | technician)
    """

    shop_id: UUID
    timezone: str
    actor: CurrentUser
    role: str

    @property
    def actor_id(self) -> UUID:
        return self.actor.id

    @property
    def zone(self) -> ZoneInfo:
        return get_zone(self.timezone)

    @property
    def is_admin(self) -> bool:
        return self.role in ("owner", "manager")
