"""FastAPI 의존성 주입 모듈 — 세션 토큰 검사.

FastAPI dependency injection module — Session gate for API endpoints.
Every bug endpoint depends on ``get_current_session``, so an anonymous or
expired caller is rejected with 401 before any database query runs.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 (HTTPBearer extracts the token)
    3. decode_token()이 서명과 만료를 검증 (decode_token verifies signature and expiry)
    4. 토큰 유형이 "session"인지 확인 (Token type must be "session")
"""

from datetime import datetime, timezone
from typing import Annotated

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 헤더 누락 시 직접 401 처리
# (Extracts the bearer token; a missing header is turned into 401 below)
security: HTTPBearer = HTTPBearer(auto_error=False)


class SessionInfo(BaseModel):
    """인증된 세션 정보 (Authenticated session principal)."""

    username: str
    expires_at: datetime


async def get_current_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> SessionInfo:
    """Bearer 토큰에서 현재 세션을 추출합니다.

    Decode the session token from the Authorization header.

    Returns:
        SessionInfo: 사용자 이름과 만료 시각 (Username and expiry)

    Raises:
        UnauthorizedError: 토큰 누락, 위조, 만료 (Missing, invalid or expired token)
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")
    try:
        payload: dict = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Session expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token")

    # 토큰 타입 검증 — Reject tokens that were not issued as sessions
    if payload.get("type") != "session" or not payload.get("sub"):
        raise UnauthorizedError("Invalid token")

    return SessionInfo(
        username=payload["sub"],
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
