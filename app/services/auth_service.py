"""인증 서비스 — 공유 자격 증명 확인 및 세션 토큰 발급.

Auth Service — Checks the single shared credential pair and issues a
fixed-duration session token. There is no refresh flow: once the session
expires the user logs in again.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from app.config import Settings, settings
from app.schemas.auth import LoginRequest, TokenResponse
from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import create_session_token

logger = logging.getLogger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    def __init__(self, config: Settings = settings) -> None:
        self._config: Settings = config

    @property
    def session_duration(self) -> timedelta:
        return timedelta(minutes=self._config.SESSION_EXPIRE_MINUTES)

    def credentials_configured(self) -> bool:
        return bool(self._config.APP_USERNAME and self._config.APP_PASSWORD)

    def check_credentials(self, username: str, password: str) -> bool:
        """설정된 자격 증명과 상수 시간 비교합니다.

        Compare against the configured pair in constant time. Always False
        when no pair is configured.
        """
        if not self.credentials_configured():
            return False
        user_ok: bool = secrets.compare_digest(username.encode("utf-8"), self._config.APP_USERNAME.encode("utf-8"))
        pass_ok: bool = secrets.compare_digest(password.encode("utf-8"), self._config.APP_PASSWORD.encode("utf-8"))
        return user_ok and pass_ok

    def login(self, data: LoginRequest, now: datetime | None = None) -> TokenResponse:
        """로그인을 처리합니다.

        Process login. On success the session starts now and expires after
        the configured duration.

        Args:
            data: 로그인 요청 데이터 (Login request data)
            now: 세션 시작 시각, 기본값은 현재 UTC (Session start, default: now)

        Returns:
            TokenResponse: 토큰과 남은 초 (Token and seconds until expiry)

        Raises:
            UnauthorizedError: 잘못된 인증 정보일 때 (Invalid credentials)
        """
        if not self.check_credentials(data.username, data.password):
            logger.warning("Rejected login attempt for user %r", data.username)
            raise UnauthorizedError("Invalid credentials")

        started: datetime = now or datetime.now(timezone.utc)
        token: str = create_session_token(
            {"sub": data.username},
            issued_at=started,
            expires_delta=self.session_duration,
        )
        return TokenResponse(token=token, expires_in=int(self.session_duration.total_seconds()))


auth_service: AuthService = AuthService()
