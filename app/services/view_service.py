"""뷰 구성 서비스 — 상태/라벨 필터, 매트릭스 그룹핑, 점수 정렬.

View composition service — status/label filtering, matrix grouping and
score sorting of a bug set.

Works on any object exposing ``impact``, ``likelihood``, ``label`` and
``completed_at`` attributes: ORM ``Bug`` rows on the server and
``BugResponse`` models in the client cache.

Pipeline:
    1. 상태 필터 (status tab: open / completed)
    2. 라벨 필터 (label set, empty = all)
    3. 그룹핑 또는 정렬 — 서로 독립 (grouping OR sorting, never chained)
"""

from enum import Enum
from typing import Any, Iterable, Sequence, TypeVar

from pydantic import BaseModel, Field

from app.models.bug import BugLabel
from app.utils.risk import MAX_RATING, MIN_RATING, risk_score

T = TypeVar("T")

MatrixKey = tuple[int, int]


class StatusTab(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


class SortField(str, Enum):
    NONE = "none"
    SCORE = "score"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _label_value(label: Any) -> str | None:
    if isinstance(label, BugLabel):
        return label.value
    return label


def filter_by_status(bugs: Iterable[T], tab: StatusTab) -> list[T]:
    """completed_at 유무로 open/completed를 나눕니다."""
    if tab == StatusTab.OPEN:
        return [b for b in bugs if getattr(b, "completed_at", None) is None]
    return [b for b in bugs if getattr(b, "completed_at", None) is not None]


def filter_by_labels(bugs: Iterable[T], labels: Iterable[BugLabel | str]) -> list[T]:
    """선택된 라벨에 속한 버그만 남깁니다. 빈 집합이면 필터 없음.

    Keep only bugs whose label is in the selected set. An empty selection
    keeps everything; a non-empty one drops unlabeled bugs.
    """
    selected: set[str] = {_label_value(label) for label in labels}
    if not selected:
        return list(bugs)
    return [b for b in bugs if _label_value(getattr(b, "label", None)) in selected]


def compose(
    bugs: Iterable[T],
    tab: StatusTab = StatusTab.OPEN,
    labels: Iterable[BugLabel | str] = (),
) -> list[T]:
    """상태 → 라벨 순서로 필터링한 표시 대상 목록 (Displayed bug set)."""
    return filter_by_labels(filter_by_status(bugs, tab), labels)


def matrix_keys() -> list[MatrixKey]:
    """25개 고정 셀 키, impact 내림차순 → likelihood 오름차순.

    The 25 fixed cell keys, highest impact row first.
    """
    return [
        (impact, likelihood)
        for impact in range(MAX_RATING, MIN_RATING - 1, -1)
        for likelihood in range(MIN_RATING, MAX_RATING + 1)
    ]


def group_by_cell(bugs: Iterable[T]) -> dict[MatrixKey, list[T]]:
    """(impact, likelihood) 셀별로 묶습니다. 빈 셀도 항상 포함.

    Bucket bugs into the 25 matrix cells. Every cell is present, empty or not,
    and each bucket keeps the input order.
    """
    cells: dict[MatrixKey, list[T]] = {key: [] for key in matrix_keys()}
    for bug in bugs:
        cells[(bug.impact, bug.likelihood)].append(bug)
    return cells


def sort_by_score(
    bugs: Iterable[T],
    field: SortField = SortField.SCORE,
    direction: SortDirection = SortDirection.ASC,
) -> list[T]:
    """리스크 점수로 정렬합니다. 같은 점수는 원래 순서 유지 (stable).

    Sort by risk score. ``SortField.NONE`` returns the input order.
    """
    items: list[T] = list(bugs)
    if field == SortField.NONE:
        return items
    # sorted()는 stable — reverse=True도 동점 순서를 유지함
    return sorted(
        items,
        key=lambda b: risk_score(b.impact, b.likelihood),
        reverse=direction == SortDirection.DESC,
    )


class ViewState(BaseModel):
    """화면 상태 — 탭, 라벨 필터, 정렬 설정.

    Presentation state: active tab, selected labels and sort settings.
    Applying it to a bug set yields the displayed list, the sorted list and
    the matrix grouping.
    """

    tab: StatusTab = StatusTab.OPEN
    labels: list[BugLabel] = Field(default_factory=list)
    sort_field: SortField = SortField.NONE
    sort_direction: SortDirection = SortDirection.ASC

    def toggle_label(self, label: BugLabel) -> None:
        if label in self.labels:
            self.labels.remove(label)
        else:
            self.labels.append(label)

    def reset_labels(self) -> None:
        self.labels.clear()

    def displayed(self, bugs: Sequence[T]) -> list[T]:
        return compose(bugs, self.tab, self.labels)

    def sorted_view(self, bugs: Sequence[T]) -> list[T]:
        return sort_by_score(self.displayed(bugs), self.sort_field, self.sort_direction)

    def matrix(self, bugs: Sequence[T]) -> dict[MatrixKey, list[T]]:
        return group_by_cell(self.displayed(bugs))
