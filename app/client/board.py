"""버그 보드 — 클라이언트 측 로컬 캐시와 화면 상태.

Bug board — the client-side state behind the risk matrix screen.

- 로컬 캐시는 서버가 쓰기를 확인한 뒤에만 변경 (The cache changes only after
  the server confirms a write; no optimistic updates)
- 요청 중에는 busy 플래그가 켜짐 (``busy`` is set while a request is pending)
- 주기적 새로고침은 캐시를 통째로 교체 — 진행 중인 편집과 경쟁할 수 있으며
  마지막 결과가 이김 (Periodic refresh replaces the cache wholesale; it can
  race with an in-flight edit and the last result wins)
- 로그아웃은 진행 중인 요청을 취소하지 않고 결과만 무시
  (Logout does not cancel in-flight requests; their results are ignored)
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar
from uuid import UUID

from fastapi import HTTPException

from app.client.api import BugTrackerClient
from app.client.session import SessionContext
from app.config import settings
from app.schemas.bug import BugCreate, BugResponse, BugUpdate
from app.services.view_service import MatrixKey, ViewState

logger = logging.getLogger(__name__)

R = TypeVar("R")


class BugBoard:
    """로컬 버그 캐시, 화면 상태, 자동 새로고침을 관리합니다.

    Args:
        client: API 클라이언트 (API client, owns the session gate)
        view: 화면 상태 (Tab, label filters and sort settings)
        refresh_interval: 자동 새로고침 주기(초) (Poll interval in seconds)
    """

    def __init__(
        self,
        client: BugTrackerClient,
        view: ViewState | None = None,
        refresh_interval: float = settings.REFRESH_INTERVAL_SECONDS,
    ) -> None:
        self.client: BugTrackerClient = client
        self.view: ViewState = view or ViewState()
        self.refresh_interval: float = refresh_interval
        self.bugs: list[BugResponse] = []
        self.busy: bool = False
        self.error: str | None = None
        self._poller: asyncio.Task | None = None

    # --- 파생 뷰 (Derived views) ---

    @property
    def displayed(self) -> list[BugResponse]:
        return self.view.displayed(self.bugs)

    @property
    def sorted_bugs(self) -> list[BugResponse]:
        return self.view.sorted_view(self.bugs)

    @property
    def matrix(self) -> dict[MatrixKey, list[BugResponse]]:
        return self.view.matrix(self.bugs)

    # --- 내부 (Internals) ---

    async def _call(self, operation: Callable[[], Awaitable[R]]) -> tuple[bool, R | None]:
        """busy 플래그와 오류 메시지를 관리하며 요청을 실행합니다.

        Run one request. Returns ``(False, None)`` when the session that
        started the request is gone by the time it finishes, so the caller
        must not touch the cache.
        """
        started: SessionContext | None = self.client.gate.context
        self.busy = True
        self.error = None
        try:
            result: R = await operation()
        except HTTPException as exc:
            self.error = str(exc.detail)
            logger.warning("Bug board request failed: %s", self.error)
            if not self.client.gate.is_authenticated:
                self._on_session_end()
            raise
        finally:
            self.busy = False
        if started is None or self.client.gate.context is not started:
            logger.info("Ignoring result of a request from an ended session")
            return False, None
        return True, result

    def _on_session_end(self) -> None:
        self.stop_polling()
        self.bugs = []

    def _replace(self, bug: BugResponse) -> None:
        self.bugs = [bug if b.id == bug.id else b for b in self.bugs]

    # --- 세션 (Session) ---

    async def login(self, username: str, password: str) -> None:
        """로그인 후 초기 로드, 자동 로그아웃 타이머, 주기 새로고침 시작."""
        self.error = None
        try:
            await self.client.login(username, password)
        except HTTPException as exc:
            self.error = str(exc.detail)
            raise
        self.client.gate.schedule_expiry(self._on_session_end)
        await self.refresh()
        self.start_polling()

    async def resume(self) -> bool:
        """저장된 세션으로 재개 — 타이머, 초기 로드, 주기 새로고침.

        Pick up a session restored from disk: schedule the automatic logout,
        load the cache and start polling. Returns False when there is no
        live session.
        """
        if not self.client.gate.is_authenticated:
            return False
        self.client.gate.schedule_expiry(self._on_session_end)
        await self.refresh()
        self.start_polling()
        return True

    def logout(self) -> None:
        self.client.logout()
        self._on_session_end()

    # --- 조회/변경 (Reads and writes) ---

    async def refresh(self) -> None:
        """서버 목록으로 캐시를 통째로 교체합니다 (Replace the cache wholesale)."""
        ok, bugs = await self._call(self.client.list_bugs)
        if ok:
            self.bugs = bugs

    async def add(self, data: BugCreate) -> BugResponse | None:
        ok, bug = await self._call(lambda: self.client.create_bug(data))
        if ok:
            self.bugs = [*self.bugs, bug]
        return bug

    async def update(self, bug_id: UUID, changes: BugUpdate) -> BugResponse | None:
        ok, bug = await self._call(lambda: self.client.update_bug(bug_id, changes))
        if ok:
            self._replace(bug)
        return bug

    async def complete(self, bug_id: UUID) -> BugResponse | None:
        ok, bug = await self._call(lambda: self.client.complete_bug(bug_id))
        if ok:
            self._replace(bug)
        return bug

    async def delete(self, bug_id: UUID | str) -> None:
        target: UUID = UUID(str(bug_id))
        ok, _ = await self._call(lambda: self.client.delete_bug(target))
        if ok:
            self.bugs = [b for b in self.bugs if b.id != target]

    async def clear_all(self) -> int | None:
        """참조 버그를 제외하고 모두 삭제. 보존 개수를 반환."""
        ok, preserved = await self._call(self.client.delete_all_non_reference)
        if ok:
            self.bugs = [b for b in self.bugs if b.reference]
        return preserved

    # --- 주기 새로고침 (Polling) ---

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            if not self.client.gate.is_authenticated:
                return
            try:
                await self.refresh()
            except HTTPException:
                # 다음 주기에 다시 시도 — 오류는 self.error와 로그에 남음
                continue
            except Exception:
                # 잘못된 응답 등 — 폴링은 계속 (e.g. a malformed payload; keep polling)
                logger.exception("Periodic refresh failed")
                self.error = "Refresh failed"

    def start_polling(self) -> None:
        if self._poller is None or self._poller.done():
            self._poller = asyncio.create_task(self._poll())

    def stop_polling(self) -> None:
        if self._poller is not None:
            self._poller.cancel()
            self._poller = None
