"""JWT 세션 토큰 생성 및 검증 유틸리티 모듈.

JWT session token creation and verification utility module.
A session token is issued on login and expires after a fixed wall-clock
duration; there is no refresh token and no sliding renewal.

JWT Payload Structure:
    {
        "sub": "username",   # 로그인한 사용자 이름 (Authenticated username)
        "iat": 1234567000,   # 발급 시각 UNIX timestamp (Issued at)
        "exp": 1234567300,   # 만료 시간 UNIX timestamp (Expiration)
        "type": "session"    # 토큰 유형 (Token type discriminator)
    }
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

from app.config import settings


def create_session_token(
    data: dict[str, Any],
    issued_at: datetime | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """JWT 세션 토큰을 생성합니다.

    Generate a JWT session token with the given payload data.
    Token expires after SESSION_EXPIRE_MINUTES (default: 5 min) unless
    ``expires_delta`` is given.

    Args:
        data: JWT 페이로드 데이터, 일반적으로 {"sub": username}
              (JWT payload data)
        issued_at: 발급 시각, 기본값은 현재 UTC (Issue time, default: now)
        expires_delta: 유효 기간 (Token lifetime override)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    to_encode: dict[str, Any] = data.copy()
    issued: datetime = issued_at or datetime.now(timezone.utc)
    lifetime: timedelta = expires_delta or timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
    # exp는 초 단위 올림 — 서버가 클라이언트보다 먼저 만료되지 않도록
    # (Round exp up to a whole second so the server never expires early)
    expires: int = math.ceil((issued + lifetime).timestamp())
    to_encode.update({"iat": issued, "exp": expires, "type": "session"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Decode and verify a JWT token string.
    Raises jwt.ExpiredSignatureError if the token has expired,
    and jwt.InvalidTokenError for any other validation failure.

    Args:
        token: JWT 토큰 문자열 (Encoded JWT token string)

    Returns:
        dict[str, Any]: 디코딩된 페이로드 딕셔너리 (Decoded payload dictionary)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
