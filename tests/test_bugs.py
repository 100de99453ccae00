"""버그 API 테스트 — 생성, 수정, 완료, 삭제, 일괄 삭제, 매트릭스.

Bug API tests — create, update, complete, delete, bulk delete and the
risk matrix view.
"""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bug import BugLabel
from app.repositories.bug_repository import bug_repository
from tests.conftest import auth_header, make_bug

MISSING_ID = "00000000-0000-0000-0000-000000000000"


class TestCreateBug:

    async def test_create_full(self, client: AsyncClient, token: str):
        """생성 — 텍스트 트리밍, 리스크 파생값 포함."""
        resp = await client.post(
            "/api/bugs",
            json={
                "ticket": "  PAY-101 ",
                "description": "  Payment screen freezes  ",
                "jiraLink": " https://jira.example.com/PAY-101 ",
                "impact": 4,
                "likelihood": 3,
                "label": BugLabel.PAYMENT_ORDERS.value,
            },
            headers=auth_header(token),
        )
        assert resp.status_code == 201
        body = resp.json()
        uuid.UUID(body["id"])
        assert body["ticket"] == "PAY-101"
        assert body["description"] == "Payment screen freezes"
        assert body["jiraLink"] == "https://jira.example.com/PAY-101"
        assert body["impact"] == 4 and body["likelihood"] == 3
        assert body["label"] == "Betaalopdrachten"
        assert body["completedAt"] is None
        assert body["reference"] is False
        assert body["createdAt"] > 0
        assert body["riskScore"] == 12
        assert body["riskCategory"] == "High"
        assert body["riskColor"] == "#ffedd5"

    async def test_create_minimal_defaults(self, client: AsyncClient, token: str):
        """빈 선택 필드는 null, 등급 기본값 1."""
        resp = await client.post(
            "/api/bugs",
            json={"description": "Typo", "ticket": "   ", "jiraLink": "", "label": ""},
            headers=auth_header(token),
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["ticket"] is None
        assert body["jiraLink"] is None
        assert body["label"] is None
        assert body["impact"] == 1 and body["likelihood"] == 1
        assert body["riskCategory"] == "Low"

    async def test_create_clamps_ratings(self, client: AsyncClient, token: str):
        resp = await client.post(
            "/api/bugs",
            json={"description": "Clamp", "impact": 9, "likelihood": "abc"},
            headers=auth_header(token),
        )
        assert resp.status_code == 201
        assert resp.json()["impact"] == 5
        assert resp.json()["likelihood"] == 1

    async def test_create_huge_rating_clamped(self, client: AsyncClient, token: str):
        """float 범위를 넘는 정수도 5로 제한."""
        resp = await client.post(
            "/api/bugs",
            json={"description": "Huge", "impact": 10**400, "likelihood": -(10**400)},
            headers=auth_header(token),
        )
        assert resp.status_code == 201
        assert resp.json()["impact"] == 5
        assert resp.json()["likelihood"] == 1

    @pytest.mark.parametrize("payload", [{}, {"description": "   "}, {"description": None}])
    async def test_create_without_description(self, client: AsyncClient, token: str, payload):
        """설명 누락/공백 → 400."""
        resp = await client.post("/api/bugs", json=payload, headers=auth_header(token))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Description is required"

        listing = await client.get("/api/bugs", headers=auth_header(token))
        assert listing.json() == []

    async def test_create_invalid_label(self, client: AsyncClient, token: str):
        resp = await client.post(
            "/api/bugs",
            json={"description": "Bad label", "label": "Not A Real Label"},
            headers=auth_header(token),
        )
        assert resp.status_code == 400
        assert "Invalid label" in resp.json()["detail"]

    async def test_create_malformed_body(self, client: AsyncClient, token: str):
        """JSON이 아닌 본문 → 400."""
        resp = await client.post(
            "/api/bugs",
            content=b"not json",
            headers={**auth_header(token), "Content-Type": "application/json"},
        )
        assert resp.status_code == 400

    async def test_create_reference_bug(self, client: AsyncClient, token: str):
        resp = await client.post(
            "/api/bugs",
            json={"description": "Anchor", "reference": True},
            headers=auth_header(token),
        )
        assert resp.status_code == 201
        assert resp.json()["reference"] is True


class TestReadBugs:

    async def test_list_in_creation_order(self, client: AsyncClient, db: AsyncSession, token: str):
        await make_bug(db, description="second", created_at=2000)
        await make_bug(db, description="first", created_at=1000)
        await make_bug(db, description="third", created_at=3000)
        resp = await client.get("/api/bugs", headers=auth_header(token))
        assert resp.status_code == 200
        assert [b["description"] for b in resp.json()] == ["first", "second", "third"]

    async def test_list_filters_and_sort(self, client: AsyncClient, db: AsyncSession, token: str):
        """상태/라벨 필터 후 점수 내림차순 정렬."""
        await make_bug(db, description="low", impact=1, likelihood=2, label="TSO", created_at=1)
        await make_bug(db, description="high", impact=5, likelihood=4, label="TSO", created_at=2)
        await make_bug(db, description="other", impact=5, likelihood=5, label="Accounts / login", created_at=3)
        await make_bug(db, description="none", impact=4, likelihood=4, created_at=4)
        await make_bug(db, description="done", impact=3, likelihood=3, label="TSO", created_at=5, completed_at=10)

        resp = await client.get(
            "/api/bugs",
            params={"status": "open", "label": "TSO", "sort": "score", "direction": "desc"},
            headers=auth_header(token),
        )
        assert resp.status_code == 200
        assert [b["description"] for b in resp.json()] == ["high", "low"]

        resp = await client.get("/api/bugs", params={"status": "completed"}, headers=auth_header(token))
        assert [b["description"] for b in resp.json()] == ["done"]

    async def test_list_multiple_labels(self, client: AsyncClient, db: AsyncSession, token: str):
        await make_bug(db, description="a", label="TSO", created_at=1)
        await make_bug(db, description="b", label="Accounts / login", created_at=2)
        await make_bug(db, description="c", label="Betaalopdrachten", created_at=3)
        resp = await client.get(
            "/api/bugs",
            params=[("label", "TSO"), ("label", "Accounts / login")],
            headers=auth_header(token),
        )
        assert [b["description"] for b in resp.json()] == ["a", "b"]

    async def test_list_unknown_label_rejected(self, client: AsyncClient, token: str):
        resp = await client.get("/api/bugs", params={"label": "nope"}, headers=auth_header(token))
        assert resp.status_code == 400

    async def test_get_bug(self, client: AsyncClient, db: AsyncSession, token: str):
        bug = await make_bug(db, description="Lookup", impact=5, likelihood=5)
        resp = await client.get(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert resp.status_code == 200
        assert resp.json()["description"] == "Lookup"
        assert resp.json()["riskCategory"] == "Critical"

    async def test_get_missing_bug(self, client: AsyncClient, token: str):
        resp = await client.get(f"/api/bugs/{MISSING_ID}", headers=auth_header(token))
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Bug not found"


class TestMatrix:

    async def test_matrix_has_25_cells(self, client: AsyncClient, db: AsyncSession, token: str):
        """5x5 매트릭스 — 빈 셀 포함 25칸, 높은 영향도부터."""
        await make_bug(db, description="hot", impact=5, likelihood=5)
        await make_bug(db, description="closed", impact=5, likelihood=5, completed_at=1)
        resp = await client.get("/api/bugs/matrix", headers=auth_header(token))
        assert resp.status_code == 200
        body = resp.json()
        cells = body["cells"]
        assert len(cells) == 25
        assert (cells[0]["impact"], cells[0]["likelihood"]) == (5, 1)

        hot = next(c for c in cells if c["impact"] == 5 and c["likelihood"] == 5)
        assert [b["description"] for b in hot["bugs"]] == ["hot"]
        assert hot["riskScore"] == 25
        assert hot["riskColor"] == "#fee2e2"
        assert sum(len(c["bugs"]) for c in cells) == 1

        assert len(body["impactLabels"]) == 5
        assert len(body["likelihoodLabels"]) == 5
        assert set(body["legend"]) == {"Low", "Medium", "High", "Critical"}

    async def test_matrix_completed_tab(self, client: AsyncClient, db: AsyncSession, token: str):
        await make_bug(db, description="open", impact=2, likelihood=2)
        await make_bug(db, description="closed", impact=2, likelihood=2, completed_at=1)
        resp = await client.get(
            "/api/bugs/matrix", params={"status": "completed"}, headers=auth_header(token)
        )
        cell = next(c for c in resp.json()["cells"] if c["impact"] == 2 and c["likelihood"] == 2)
        assert [b["description"] for b in cell["bugs"]] == ["closed"]


class TestUpdateBug:

    async def test_partial_update(self, client: AsyncClient, db: AsyncSession, token: str):
        """전달된 필드만 변경, id/createdAt 불변."""
        bug = await make_bug(db, description="Old", ticket="T-1", label="TSO", created_at=1234)
        resp = await client.put(
            f"/api/bugs/{bug.id}",
            json={"description": " New ", "impact": 5},
            headers=auth_header(token),
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == str(bug.id)
        assert body["description"] == "New"
        assert body["impact"] == 5
        assert body["likelihood"] == 3
        assert body["ticket"] == "T-1"
        assert body["label"] == "TSO"
        assert body["createdAt"] == 1234
        assert body["riskScore"] == 15

    async def test_update_clears_optional_fields(self, client: AsyncClient, db: AsyncSession, token: str):
        bug = await make_bug(db, ticket="T-1", jira_link="https://jira/T-1", label="TSO")
        resp = await client.put(
            f"/api/bugs/{bug.id}",
            json={"ticket": " ", "jiraLink": None, "label": None},
            headers=auth_header(token),
        )
        body = resp.json()
        assert body["ticket"] is None
        assert body["jiraLink"] is None
        assert body["label"] is None

    async def test_update_completed_at(self, client: AsyncClient, db: AsyncSession, token: str):
        bug = await make_bug(db)
        resp = await client.put(
            f"/api/bugs/{bug.id}", json={"completedAt": 1700000000000}, headers=auth_header(token)
        )
        assert resp.status_code == 200
        assert resp.json()["completedAt"] == 1700000000000

    @pytest.mark.parametrize("value", [None, "yesterday", 1.5])
    async def test_update_invalid_completed_at(self, client: AsyncClient, db: AsyncSession, token: str, value):
        """정수가 아닌 completedAt → 400, 저장값 불변."""
        bug = await make_bug(db)
        resp = await client.put(
            f"/api/bugs/{bug.id}", json={"completedAt": value}, headers=auth_header(token)
        )
        assert resp.status_code == 400
        current = await client.get(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert current.json()["completedAt"] is None

    async def test_update_blank_description(self, client: AsyncClient, db: AsyncSession, token: str):
        bug = await make_bug(db, description="Keep")
        resp = await client.put(
            f"/api/bugs/{bug.id}", json={"description": "  "}, headers=auth_header(token)
        )
        assert resp.status_code == 400
        current = await client.get(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert current.json()["description"] == "Keep"

    async def test_update_invalid_label(self, client: AsyncClient, db: AsyncSession, token: str):
        bug = await make_bug(db)
        resp = await client.put(
            f"/api/bugs/{bug.id}", json={"label": "Nope"}, headers=auth_header(token)
        )
        assert resp.status_code == 400

    async def test_update_reference_bug_allowed(self, client: AsyncClient, db: AsyncSession, token: str):
        """참조 버그도 수정은 가능."""
        bug = await make_bug(db, reference=True)
        resp = await client.put(
            f"/api/bugs/{bug.id}", json={"likelihood": 5}, headers=auth_header(token)
        )
        assert resp.status_code == 200
        assert resp.json()["likelihood"] == 5
        assert resp.json()["reference"] is True

    async def test_update_missing_bug(self, client: AsyncClient, token: str):
        resp = await client.put(
            f"/api/bugs/{MISSING_ID}", json={"description": "x"}, headers=auth_header(token)
        )
        assert resp.status_code == 404


class TestCompleteBug:

    async def test_complete_once(self, client: AsyncClient, db: AsyncSession, token: str):
        """첫 완료 성공, 두 번째 409, completedAt 유지."""
        bug = await make_bug(db)
        first = await client.post(f"/api/bugs/{bug.id}/complete", headers=auth_header(token))
        assert first.status_code == 200
        completed_at = first.json()["completedAt"]
        assert completed_at is not None

        second = await client.post(f"/api/bugs/{bug.id}/complete", headers=auth_header(token))
        assert second.status_code == 409
        assert second.json()["detail"] == "Bug already completed"

        current = await client.get(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert current.json()["completedAt"] == completed_at

    async def test_complete_reference_forbidden(self, client: AsyncClient, db: AsyncSession, token: str):
        bug = await make_bug(db, reference=True)
        resp = await client.post(f"/api/bugs/{bug.id}/complete", headers=auth_header(token))
        assert resp.status_code == 403
        current = await client.get(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert current.json()["completedAt"] is None

    async def test_complete_missing_bug(self, client: AsyncClient, token: str):
        resp = await client.post(f"/api/bugs/{MISSING_ID}/complete", headers=auth_header(token))
        assert resp.status_code == 404


class TestDeleteBug:

    async def test_delete(self, client: AsyncClient, db: AsyncSession, token: str):
        bug = await make_bug(db)
        resp = await client.delete(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert resp.status_code == 204
        missing = await client.get(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert missing.status_code == 404

    async def test_delete_reference_forbidden(self, client: AsyncClient, db: AsyncSession, token: str):
        """참조 버그 삭제 → 403, 레코드 유지."""
        bug = await make_bug(db, reference=True)
        resp = await client.delete(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert resp.status_code == 403
        still = await client.get(f"/api/bugs/{bug.id}", headers=auth_header(token))
        assert still.status_code == 200

    async def test_delete_missing_bug(self, client: AsyncClient, token: str):
        resp = await client.delete(f"/api/bugs/{MISSING_ID}", headers=auth_header(token))
        assert resp.status_code == 404


class TestBulkDelete:

    async def test_bulk_delete_preserves_reference(self, client: AsyncClient, db: AsyncSession, token: str):
        """5개 중 참조 3개 → 2개 삭제, 헤더에 보존 개수 3."""
        for i in range(3):
            await make_bug(db, description=f"ref-{i}", reference=True, created_at=i)
        for i in range(2):
            await make_bug(db, description=f"plain-{i}", created_at=10 + i)

        resp = await client.delete("/api/bugs", headers=auth_header(token))
        assert resp.status_code == 204
        assert resp.headers["X-Reference-Preserved"] == "3"

        remaining = await client.get("/api/bugs", headers=auth_header(token))
        body = remaining.json()
        assert len(body) == 3
        assert all(b["reference"] for b in body)

    async def test_bulk_delete_all_reference_forbidden(self, client: AsyncClient, db: AsyncSession, token: str):
        await make_bug(db, reference=True)
        await make_bug(db, reference=True)
        resp = await client.delete("/api/bugs", headers=auth_header(token))
        assert resp.status_code == 403
        remaining = await client.get("/api/bugs", headers=auth_header(token))
        assert len(remaining.json()) == 2

    async def test_bulk_delete_empty_forbidden(self, client: AsyncClient, token: str):
        """비어 있으면 삭제할 것이 없으므로 403."""
        resp = await client.delete("/api/bugs", headers=auth_header(token))
        assert resp.status_code == 403

    async def test_bulk_delete_without_reference(self, client: AsyncClient, db: AsyncSession, token: str):
        await make_bug(db)
        resp = await client.delete("/api/bugs", headers=auth_header(token))
        assert resp.status_code == 204
        assert resp.headers["X-Reference-Preserved"] == "0"


class TestStorageFailure:

    async def test_database_error_returns_500(
        self, client: AsyncClient, token: str, monkeypatch: pytest.MonkeyPatch
    ):
        """DB 오류 → 500 "Storage failure", 재시도 없음."""
        calls: list[int] = []

        async def failing_list_all(db: AsyncSession):
            calls.append(1)
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(bug_repository, "list_all", failing_list_all)
        resp = await client.get("/api/bugs", headers=auth_header(token))
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Storage failure"}
        assert calls == [1]

    async def test_write_error_returns_500(
        self, client: AsyncClient, token: str, monkeypatch: pytest.MonkeyPatch
    ):
        async def failing_create(db: AsyncSession, obj_data: dict):
            raise SQLAlchemyError("insert failed")

        monkeypatch.setattr(bug_repository, "create", failing_create)
        resp = await client.post("/api/bugs", json={"description": "x"}, headers=auth_header(token))
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Storage failure"}
