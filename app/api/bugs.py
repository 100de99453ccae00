"""버그 라우터 — 버그 CRUD 및 리스크 매트릭스 API.

Bug Router — CRUD endpoints for bugs plus the risk matrix view.
Every endpoint requires a valid session token.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import SessionInfo, get_current_session
from app.database import get_db
from app.models.bug import BugLabel
from app.schemas.bug import BugCreate, BugResponse, BugUpdate, MatrixResponse
from app.services.bug_service import bug_service
from app.services.view_service import SortDirection, SortField, StatusTab

router: APIRouter = APIRouter()

# 일괄 삭제 시 보존된 참조 버그 수를 전달하는 헤더 (Side-channel header for bulk delete)
PRESERVED_HEADER: str = "X-Reference-Preserved"


@router.get("", response_model=list[BugResponse])
async def list_bugs(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionInfo, Depends(get_current_session)],
    status: StatusTab | None = Query(None),
    label: list[BugLabel] = Query(default=[]),
    sort: SortField = Query(SortField.NONE),
    direction: SortDirection = Query(SortDirection.ASC),
) -> list[BugResponse]:
    """버그 목록 조회 — 생성 순. 선택적 상태/라벨 필터와 점수 정렬."""
    bugs = await bug_service.list_bugs(db, status, label, sort, direction)
    return [bug_service.build_response(b) for b in bugs]


@router.get("/matrix", response_model=MatrixResponse)
async def get_matrix(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionInfo, Depends(get_current_session)],
    status: StatusTab = Query(StatusTab.OPEN),
    label: list[BugLabel] = Query(default=[]),
) -> MatrixResponse:
    """5x5 리스크 매트릭스 — 25칸 모두 반환."""
    bugs = await bug_service.list_bugs(db, status, label)
    return bug_service.build_matrix(bugs)


@router.post("", response_model=BugResponse, status_code=201)
async def create_bug(
    data: BugCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionInfo, Depends(get_current_session)],
) -> BugResponse:
    """버그 생성."""
    bug = await bug_service.create_bug(db, data)
    await db.commit()
    return bug_service.build_response(bug)


@router.get("/{bug_id}", response_model=BugResponse)
async def get_bug(
    bug_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionInfo, Depends(get_current_session)],
) -> BugResponse:
    """버그 상세 조회."""
    bug = await bug_service.get_bug(db, bug_id)
    return bug_service.build_response(bug)


@router.put("/{bug_id}", response_model=BugResponse)
async def update_bug(
    bug_id: UUID,
    data: BugUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionInfo, Depends(get_current_session)],
) -> BugResponse:
    """버그 수정 — 전달된 필드만 변경."""
    bug = await bug_service.update_bug(db, bug_id, data)
    await db.commit()
    return bug_service.build_response(bug)


@router.post("/{bug_id}/complete", response_model=BugResponse)
async def complete_bug(
    bug_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionInfo, Depends(get_current_session)],
) -> BugResponse:
    """버그 완료 처리. 참조 버그 403, 이미 완료 409."""
    bug = await bug_service.complete_bug(db, bug_id)
    await db.commit()
    return bug_service.build_response(bug)


@router.delete("/{bug_id}", status_code=204)
async def delete_bug(
    bug_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionInfo, Depends(get_current_session)],
) -> Response:
    """버그 삭제. 참조 버그 403."""
    await bug_service.delete_bug(db, bug_id)
    await db.commit()
    return Response(status_code=204)


@router.delete("", status_code=204)
async def delete_all_bugs(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[SessionInfo, Depends(get_current_session)],
) -> Response:
    """참조 버그를 제외한 전체 삭제. 보존 개수는 X-Reference-Preserved 헤더로 반환."""
    preserved: int = await bug_service.delete_all_non_reference(db)
    await db.commit()
    return Response(status_code=204, headers={PRESERVED_HEADER: str(preserved)})
