"""버그 트래커 HTTP 클라이언트.

Async HTTP client for the bug tracker API.
Gated calls check the session before sending anything, so an anonymous or
expired session never reaches the server. Error responses are mapped back
onto the exception classes in ``app.utils.exceptions``; transport failures
become ``StorageError``. There is no retry.
"""

from typing import Any, Iterable
from uuid import UUID

import httpx

from app.client.session import SessionContext, SessionGate
from app.models.bug import BugLabel
from app.schemas.bug import BugCreate, BugResponse, BugUpdate, MatrixResponse
from app.services.view_service import SortDirection, SortField, StatusTab
from app.utils.exceptions import EXCEPTION_BY_STATUS, StorageError, UnauthorizedError

PRESERVED_HEADER: str = "X-Reference-Preserved"


class BugTrackerClient:
    """버그 트래커 API 클라이언트.

    Args:
        base_url: 서버 주소, 예: http://localhost:8000 (Server base URL)
        gate: 세션 게이트 (Session gate, a fresh in-memory one by default)
        transport: httpx 전송 계층 — 테스트용 (Optional transport for tests)
    """

    def __init__(
        self,
        base_url: str,
        gate: SessionGate | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.gate: SessionGate = gate or SessionGate()
        self._http = httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport)

    async def __aenter__(self) -> "BugTrackerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _raise_for_status(self, resp: httpx.Response) -> None:
        try:
            detail = resp.json().get("detail", resp.text)
        except (ValueError, AttributeError):
            detail = resp.text or resp.reason_phrase
        error_cls = EXCEPTION_BY_STATUS.get(resp.status_code, StorageError)
        raise error_cls(str(detail))

    async def _request(self, method: str, path: str, gated: bool = True, **kwargs: Any) -> httpx.Response:
        headers: dict[str, str] = {}
        if gated:
            context: SessionContext = self.gate.require()
            headers["Authorization"] = f"Bearer {context.token}"
        try:
            resp = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise StorageError(f"Server unreachable: {exc}") from exc
        if resp.status_code == 401 and gated:
            # 서버가 세션을 거부 — 로컬 세션도 폐기 (Server rejected the session)
            self.gate.close()
        if resp.status_code >= 400:
            self._raise_for_status(resp)
        return resp

    # --- 세션 (Session) ---

    async def login(self, username: str, password: str) -> SessionContext:
        """로그인 — 실패 시 익명 상태 유지.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 (Invalid credentials)
        """
        resp = await self._request(
            "POST", "/api/login", gated=False, json={"username": username, "password": password}
        )
        data: dict[str, Any] = resp.json()
        if "token" not in data:
            raise UnauthorizedError("Invalid login response")
        return self.gate.open(username, data["token"], int(data.get("expiresIn", 0)))

    def logout(self) -> None:
        self.gate.close()

    async def health(self) -> bool:
        resp = await self._request("GET", "/api/health", gated=False)
        return resp.json().get("status") == "ok"

    # --- 버그 (Bugs) ---

    async def list_bugs(
        self,
        status: StatusTab | None = None,
        labels: Iterable[BugLabel] = (),
        sort: SortField = SortField.NONE,
        direction: SortDirection = SortDirection.ASC,
    ) -> list[BugResponse]:
        params: list[tuple[str, str]] = [("label", BugLabel(label).value) for label in labels]
        if status is not None:
            params.append(("status", status.value))
        if sort != SortField.NONE:
            params.extend([("sort", sort.value), ("direction", direction.value)])
        resp = await self._request("GET", "/api/bugs", params=params)
        return [BugResponse.model_validate(item) for item in resp.json()]

    async def get_matrix(
        self,
        status: StatusTab = StatusTab.OPEN,
        labels: Iterable[BugLabel] = (),
    ) -> MatrixResponse:
        params: list[tuple[str, str]] = [("status", status.value)]
        params.extend(("label", BugLabel(label).value) for label in labels)
        resp = await self._request("GET", "/api/bugs/matrix", params=params)
        return MatrixResponse.model_validate(resp.json())

    async def get_bug(self, bug_id: UUID | str) -> BugResponse:
        resp = await self._request("GET", f"/api/bugs/{bug_id}")
        return BugResponse.model_validate(resp.json())

    async def create_bug(self, data: BugCreate) -> BugResponse:
        resp = await self._request("POST", "/api/bugs", json=data.model_dump(by_alias=True, mode="json"))
        return BugResponse.model_validate(resp.json())

    async def update_bug(self, bug_id: UUID | str, changes: BugUpdate) -> BugResponse:
        payload = changes.model_dump(by_alias=True, exclude_unset=True, mode="json")
        resp = await self._request("PUT", f"/api/bugs/{bug_id}", json=payload)
        return BugResponse.model_validate(resp.json())

    async def complete_bug(self, bug_id: UUID | str) -> BugResponse:
        resp = await self._request("POST", f"/api/bugs/{bug_id}/complete")
        return BugResponse.model_validate(resp.json())

    async def delete_bug(self, bug_id: UUID | str) -> None:
        await self._request("DELETE", f"/api/bugs/{bug_id}")

    async def delete_all_non_reference(self) -> int:
        """참조 버그를 제외하고 전부 삭제. 보존된 참조 버그 수를 반환."""
        resp = await self._request("DELETE", "/api/bugs")
        return int(resp.headers.get(PRESERVED_HEADER, "0"))
