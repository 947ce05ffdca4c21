"""외부 인증 서비스 JWT 검증 유틸리티 모듈.

Identity-provider JWT verification utility module.
Sessions are issued by the external identity & database service; this
module only verifies the bearer token it hands to clients.

JWT Payload Structure:
    {
        "sub": "user_uuid",        # 사용자 ID (User identifier)
        "email": "a@b.com",        # 이메일 (User email, optional)
        "aud": "authenticated",    # audience (Expected audience)
        "exp": 1234567890          # 만료 시간 UNIX timestamp (Expiration)
    }
"""

from typing import Any

import jwt

from shopshift.config import settings


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Decode and verify an identity-provider JWT.
    Raises jwt.ExpiredSignatureError if the token has expired,
    and jwt.InvalidTokenError for any other validation failure.

    Args:
        token: JWT 토큰 문자열 (Encoded JWT token string)

    Returns:
        dict[str, Any]: 디코딩된 페이로드 딕셔너리 (Decoded payload dictionary)

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (When token is invalid)
    """
    return jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
        audience=settings.AUTH_JWT_AUDIENCE,
    )
