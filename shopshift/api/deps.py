"""FastAPI 의존성 주입 모듈 (인증, 매장 컨텍스트, 권한 검사).

FastAPI dependency injection module: authentication, shop context and
role checks.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends the identity provider's access token)
    2. decode_token()이 서명, 만료, audience를 검증
       (decode_token verifies signature, expiry and audience)
    3. 페이로드의 "sub"가 사용자 ID (The "sub" claim is the user id)

Shop Context Flow:
    1. 경로의 shop_id로 매장을 조회 (Shop looked up from the path, 404 if missing)
    2. 요청자의 활성 구성원 여부 확인 (Active membership required, 403 otherwise)
    3. ShopContext(shop_id, timezone, actor, role) 생성
"""

import secrets
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.config import settings
from shopshift.context import CurrentUser, ShopContext
from shopshift.database import get_db
from shopshift.models.shop import Shop, ShopMember
from shopshift.repositories.shop_repository import member_repository, shop_repository
from shopshift.utils.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from shopshift.utils.jwt import decode_token

# Bearer 토큰 추출기, 토큰이 없어도 직접 401 처리
# (Token extractor; missing tokens are turned into our own 401)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser:
    """Bearer 토큰에서 현재 사용자를 추출합니다.

    Verify the identity-provider JWT and return the acting user.

    Raises:
        UnauthorizedError: 토큰이 없거나 유효하지 않을 때 (Missing or invalid token)
    """
    if credentials is None:
        raise UnauthorizedError()
    try:
        payload: dict = decode_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
        raise UnauthorizedError()
    return CurrentUser(id=user_id, email=payload.get("email"))


async def get_shop_context(
    shop_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ShopContext:
    """활성 매장 컨텍스트를 생성합니다.

    Build the per-request shop context. The actor must be an active member
    of the shop.

    Raises:
        NotFoundError: 매장이 없을 때 (Shop not found)
        ForbiddenError: 활성 구성원이 아닐 때 (Not an active member)
    """
    shop: Shop | None = await shop_repository.get_by_id(db, shop_id)
    if shop is None:
        raise NotFoundError("Shop not found")
    membership: ShopMember | None = await member_repository.get_membership(db, shop_id, current_user.id)
    if membership is None or not membership.is_active:
        raise ForbiddenError("You are not a member of this shop")
    return ShopContext(shop_id=shop.id, timezone=shop.timezone, actor=current_user, role=membership.role)


async def require_shop_admin(
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> ShopContext:
    """owner 또는 manager 역할을 요구합니다 (Require the owner or manager role)."""
    if not ctx.is_admin:
        raise ForbiddenError("Manager or owner role required")
    return ctx


async def verify_cron_secret(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> None:
    """예약 작업 Bearer 비밀값을 검증합니다.

    Verify the scheduler's bearer secret. An empty ``CRON_SECRET`` disables
    the endpoints.
    """
    if (
        not settings.CRON_SECRET
        or credentials is None
        or not secrets.compare_digest(credentials.credentials, settings.CRON_SECRET)
    ):
        raise UnauthorizedError()
