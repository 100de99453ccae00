"""클라이언트 세션 게이트 — 고정 만료 세션 상태 머신.

Client session gate — fixed-expiry session state machine.

States:
    Anonymous                    — context is None
    Authenticated(expires_at)    — context holds the token and the expiry

Login creates the context, logout or expiry destroys it. The context is
persisted as JSON so it survives a client restart, but it is bounded by its
wall-clock expiry: there is no renewal on activity. Every gated operation
calls ``require()``, which re-checks the expiry.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ValidationError

from app.utils.exceptions import UnauthorizedError
from app.utils.validation import now_ms

logger = logging.getLogger(__name__)

# ms epoch 시계 — 테스트에서 교체 가능 (Millisecond clock, replaceable in tests)
Clock = Callable[[], int]


class SessionContext(BaseModel):
    """인증된 세션 (An authenticated session).

    Attributes:
        username: 로그인 아이디 (Login username)
        token: Bearer 세션 토큰 (Session bearer token)
        started_at: 세션 시작 ms epoch (Session start)
        expires_at: 만료 ms epoch (Session expiry)
    """

    username: str
    token: str
    started_at: int
    expires_at: int


class SessionStore:
    """세션 파일 저장소 — 재시작 후에도 세션 유지.

    JSON file holding the current session context.
    """

    def __init__(self, path: Path) -> None:
        self.path: Path = path

    def load(self) -> SessionContext | None:
        if not self.path.exists():
            return None
        try:
            return SessionContext.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, json.JSONDecodeError):
            logger.warning("Discarding unreadable session file %s", self.path)
            self.clear()
            return None

    def save(self, context: SessionContext) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(context.model_dump_json(), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SessionGate:
    """세션 상태를 보관하고 모든 게이트 작업 전에 만료를 확인합니다.

    Holds the session context and validates it before every gated operation.

    Args:
        store: 세션 파일 저장소, None이면 메모리에만 보관 (Persistence, optional)
        clock: ms epoch 시계 (Millisecond clock)
    """

    def __init__(self, store: SessionStore | None = None, clock: Clock = now_ms) -> None:
        self._store: SessionStore | None = store
        self._clock: Clock = clock
        self._context: SessionContext | None = None
        self._timer: asyncio.TimerHandle | None = None

        restored: SessionContext | None = store.load() if store else None
        if restored is not None and self._clock() > restored.expires_at:
            logger.info("Persisted session for %s has expired", restored.username)
            store.clear()
            restored = None
        self._context = restored

    @property
    def context(self) -> SessionContext | None:
        return self._context

    @property
    def is_authenticated(self) -> bool:
        return self._context is not None and self._clock() <= self._context.expires_at

    def remaining_ms(self) -> int:
        if self._context is None:
            return 0
        return max(0, self._context.expires_at - self._clock())

    def open(self, username: str, token: str, expires_in_seconds: int) -> SessionContext:
        """로그인 성공 후 세션을 시작합니다 (Anonymous → Authenticated).

        The session starts now and expires ``expires_in_seconds`` later.
        """
        started: int = self._clock()
        self._context = SessionContext(
            username=username,
            token=token,
            started_at=started,
            expires_at=started + expires_in_seconds * 1000,
        )
        if self._store is not None:
            self._store.save(self._context)
        return self._context

    def close(self) -> None:
        """세션을 종료합니다 (Authenticated → Anonymous)."""
        self.cancel_expiry_timer()
        self._context = None
        if self._store is not None:
            self._store.clear()

    def require(self) -> SessionContext:
        """게이트 작업 전 세션 확인. 만료 시 세션을 지우고 401.

        Return the live context, or clear an expired one and raise.

        Raises:
            UnauthorizedError: 미로그인 또는 만료 (Anonymous or expired)
        """
        if self._context is None:
            raise UnauthorizedError("Not logged in")
        if self._clock() > self._context.expires_at:
            logger.info("Session for %s expired", self._context.username)
            self.close()
            raise UnauthorizedError("Session expired")
        return self._context

    def schedule_expiry(self, on_expire: Callable[[], None] | None = None) -> None:
        """남은 시간이 지나면 자동 로그아웃합니다.

        Schedule an automatic logout when the remaining time runs out.
        Requires a running event loop.
        """
        self.cancel_expiry_timer()
        if self._context is None:
            return

        def _expire() -> None:
            self._timer = None
            self.close()
            if on_expire is not None:
                on_expire()

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.remaining_ms() / 1000, _expire)

    def cancel_expiry_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
