"""버그 라이프사이클 서비스.

Bug lifecycle service — Business logic for creating, editing, completing
and deleting bugs.

Rules:
    - 모든 입력 검증은 저장소 호출 전에 수행 (Validation runs before any store call)
    - 완료는 한 번만 가능 (Completion is one-shot: 409 on the second call)
    - 참조 버그는 완료/삭제 불가 (Reference bugs: 403 on complete/delete)
    - 일괄 삭제는 참조 버그를 보존하고 보존 개수를 반환
      (Bulk delete keeps reference bugs and reports how many were kept)
"""

import logging
import uuid
from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bug import Bug, BugLabel
from app.repositories.bug_repository import bug_repository
from app.schemas.bug import BugCreate, BugResponse, BugUpdate, MatrixCell, MatrixResponse
from app.services.view_service import (
    SortDirection,
    SortField,
    StatusTab,
    compose,
    filter_by_labels,
    group_by_cell,
    sort_by_score,
)
from app.utils.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.utils.risk import IMPACT_LABELS, LIKELIHOOD_LABELS, RISK_LEGEND, assess_risk
from app.utils.validation import (
    coerce_rating,
    normalize_optional_text,
    now_ms,
    parse_label,
    require_description,
    validate_completed_at,
)

logger = logging.getLogger(__name__)


class BugService:

    def build_response(self, bug: Bug) -> BugResponse:
        risk = assess_risk(bug.impact, bug.likelihood)
        return BugResponse(
            id=bug.id,
            ticket=bug.ticket,
            description=bug.description,
            jira_link=bug.jira_link,
            impact=bug.impact,
            likelihood=bug.likelihood,
            label=bug.label,
            created_at=bug.created_at,
            completed_at=bug.completed_at,
            reference=bool(bug.reference),
            risk_score=risk.score,
            risk_category=risk.category.value,
            risk_color=risk.color,
        )

    def build_matrix(self, bugs: Iterable[Bug]) -> MatrixResponse:
        """25칸 매트릭스 응답을 구성합니다 (Build the 25-cell matrix response)."""
        cells: list[MatrixCell] = []
        for (impact, likelihood), members in group_by_cell(bugs).items():
            risk = assess_risk(impact, likelihood)
            cells.append(
                MatrixCell(
                    impact=impact,
                    likelihood=likelihood,
                    risk_score=risk.score,
                    risk_category=risk.category.value,
                    risk_color=risk.color,
                    bugs=[self.build_response(b) for b in members],
                )
            )
        return MatrixResponse(
            cells=cells,
            impact_labels=list(IMPACT_LABELS),
            likelihood_labels=list(LIKELIHOOD_LABELS),
            legend={category.value: text for category, text in RISK_LEGEND.items()},
        )

    # --- 조회 (Reads) ---

    async def list_bugs(
        self,
        db: AsyncSession,
        status: StatusTab | None = None,
        labels: Sequence[BugLabel] = (),
        sort: SortField = SortField.NONE,
        direction: SortDirection = SortDirection.ASC,
    ) -> list[Bug]:
        """버그 목록 — 생성 순, 선택적으로 필터/정렬 적용.

        List bugs oldest first. With ``status`` the view pipeline is applied
        (status → labels → sort); without it every bug is returned.
        """
        bugs: list[Bug] = list(await bug_repository.list_all(db))
        if status is not None:
            bugs = compose(bugs, status, labels)
        else:
            bugs = filter_by_labels(bugs, labels)
        return sort_by_score(bugs, sort, direction)

    async def get_bug(self, db: AsyncSession, bug_id: UUID) -> Bug:
        bug = await bug_repository.get_by_id(db, bug_id)
        if bug is None:
            raise NotFoundError("Bug not found")
        return bug

    # --- 변경 (Writes) ---

    async def create_bug(self, db: AsyncSession, data: BugCreate) -> Bug:
        """버그를 생성합니다.

        Create a bug. The description is required; optional text fields are
        trimmed and blank values dropped; ratings default to 1.

        Raises:
            BadRequestError: 설명 누락 또는 허용되지 않은 라벨
                             (Missing description or disallowed label)
        """
        description: str = require_description(data.description)
        label: BugLabel | None = parse_label(data.label)
        return await bug_repository.create(
            db,
            {
                "id": uuid.uuid4(),
                "ticket": normalize_optional_text(data.ticket),
                "description": description,
                "jira_link": normalize_optional_text(data.jira_link),
                "impact": coerce_rating(data.impact),
                "likelihood": coerce_rating(data.likelihood),
                "label": label.value if label else None,
                "created_at": now_ms(),
                "completed_at": None,
                "reference": data.reference,
            },
        )

    def _validate_changes(self, data: BugUpdate) -> dict[str, Any]:
        supplied: dict[str, Any] = {name: getattr(data, name) for name in data.model_fields_set}
        changes: dict[str, Any] = {}

        if "description" in supplied:
            changes["description"] = require_description(supplied["description"])
        for field in ("ticket", "jira_link"):
            if field in supplied:
                changes[field] = normalize_optional_text(supplied[field])
        for field in ("impact", "likelihood"):
            if field in supplied:
                changes[field] = coerce_rating(supplied[field])
        if "label" in supplied:
            label: BugLabel | None = parse_label(supplied["label"])
            changes["label"] = label.value if label else None
        if "completed_at" in supplied:
            changes["completed_at"] = validate_completed_at(supplied["completed_at"])
        if "reference" in supplied:
            changes["reference"] = bool(supplied["reference"])
        return changes

    async def update_bug(self, db: AsyncSession, bug_id: UUID, data: BugUpdate) -> Bug:
        """버그를 부분 수정합니다. id와 created_at은 변경 불가.

        Apply a partial update. Fields not present in the request keep their
        stored values.
        """
        changes: dict[str, Any] = self._validate_changes(data)
        updated = await bug_repository.update(db, bug_id, changes)
        if updated is None:
            raise NotFoundError("Bug not found")
        return updated

    async def complete_bug(self, db: AsyncSession, bug_id: UUID) -> Bug:
        bug: Bug = await self.get_bug(db, bug_id)
        if bug.reference:
            raise ForbiddenError("Reference bug cannot be completed")
        if bug.completed_at is not None:
            raise ConflictError("Bug already completed")
        completed = await bug_repository.update(db, bug_id, {"completed_at": now_ms()})
        if completed is None:
            raise NotFoundError("Bug not found")
        return completed

    async def delete_bug(self, db: AsyncSession, bug_id: UUID) -> None:
        bug: Bug = await self.get_bug(db, bug_id)
        if bug.reference:
            raise ForbiddenError("Reference bug cannot be deleted")
        if not await bug_repository.delete(db, bug_id):
            raise NotFoundError("Bug not found")

    async def delete_all_non_reference(self, db: AsyncSession) -> int:
        """참조 버그를 제외한 모든 버그를 삭제하고 보존 개수를 반환합니다.

        Delete every non-reference bug in one statement.

        Returns:
            int: 보존된 참조 버그 수 (Number of preserved reference bugs)

        Raises:
            ForbiddenError: 삭제할 버그가 없을 때 — 모두 참조 버그이거나 비어 있음
                            (Nothing would be deleted)
        """
        total: int = await bug_repository.count(db)
        preserved: int = await bug_repository.count_reference(db)
        if preserved == total:
            raise ForbiddenError("All bugs are reference bugs; deletion aborted")
        deleted: int = await bug_repository.delete_non_reference(db)
        logger.info("Bulk delete removed %d bugs, preserved %d reference bugs", deleted, preserved)
        return preserved


bug_service: BugService = BugService()
