"""버그 Pydantic 요청/응답 스키마.

Bug request/response schemas.
JSON field names are camelCase (jiraLink, createdAt, completedAt, riskScore);
Python attribute names stay snake_case.

Request fields that the service coerces or validates itself (ratings, label,
completedAt) are typed loosely so bad values reach the service's own rules
instead of failing schema parsing.
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BugCreate(BaseModel):
    model_config = _CAMEL

    ticket: Any = None
    description: Any = None  # 필수 — 서비스에서 검증 (Required, validated by the service)
    jira_link: Any = None
    impact: Any = None  # 1~5, 변환 실패 시 1 (Defaults to 1)
    likelihood: Any = None  # 1~5, 변환 실패 시 1 (Defaults to 1)
    label: Any = None  # BugLabel 값 또는 null (BugLabel value or null)
    reference: bool = False


class BugUpdate(BaseModel):
    """버그 수정 요청 — 전달된 필드만 변경 (Partial update, unset fields keep their value)."""

    model_config = _CAMEL

    ticket: Any = None
    description: Any = None
    jira_link: Any = None
    impact: Any = None
    likelihood: Any = None
    label: Any = None
    reference: bool | None = None
    completed_at: Any = None  # 정수 ms timestamp (Integer ms timestamp)


class BugResponse(BaseModel):
    """버그 응답 스키마 — 파생 리스크 값 포함.

    Bug response schema including the derived risk values.

    Attributes:
        id: 버그 UUID (Bug identifier)
        risk_score: impact × likelihood (1~25)
        risk_category: Low / Medium / High / Critical
        risk_color: 매트릭스 셀 색상 (Matrix cell color)
    """

    model_config = _CAMEL

    id: UUID
    ticket: str | None = None
    description: str
    jira_link: str | None = None
    impact: int
    likelihood: int
    label: str | None = None
    created_at: int
    completed_at: int | None = None
    reference: bool = False
    risk_score: int
    risk_category: str
    risk_color: str


class MatrixCell(BaseModel):
    """리스크 매트릭스 셀 — (impact, likelihood) 한 칸 (One risk matrix cell)."""

    model_config = _CAMEL

    impact: int
    likelihood: int
    risk_score: int
    risk_category: str
    risk_color: str
    bugs: list[BugResponse] = []


class MatrixResponse(BaseModel):
    """5x5 리스크 매트릭스 응답 (25 cells plus axis labels and legend)."""

    model_config = _CAMEL

    cells: list[MatrixCell]
    impact_labels: list[str]
    likelihood_labels: list[str]
    legend: dict[str, str]
