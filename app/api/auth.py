"""인증 라우터 — 로그인.

Auth Router — Login endpoint. Public: no bearer token required.
"""

from fastapi import APIRouter

from app.schemas.auth import LoginRequest, TokenResponse
from app.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest) -> TokenResponse:
    """로그인 — 세션 토큰 발급.

    Exchange the shared credential pair for a fixed-duration session token.
    Returns 401 on a mismatch.
    """
    return auth_service.login(data)
