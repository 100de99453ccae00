"""버그 입력값 정규화 및 검증 유틸리티 모듈.

Bug input normalization and validation utility module.
Applied at the service boundary before any store call.

Rules:
    - 선택 텍스트 필드: 앞뒤 공백 제거, 빈 문자열은 None
      (Optional text: trimmed, empty becomes None)
    - 설명: 공백 제거 후 비어 있으면 400 (Description: required after trim)
    - impact/likelihood: 숫자 변환 실패 시 1, 1~5 범위로 제한
      (Ratings: default 1 on coercion failure, clamped to 1~5)
    - 라벨: BugLabel 중 하나이거나 None (Label: BugLabel member or None)
    - completedAt: 정수 timestamp (completedAt: integer timestamp)
"""

import math
from datetime import datetime, timezone
from typing import Any

from app.models.bug import BugLabel
from app.utils.exceptions import BadRequestError
from app.utils.risk import MAX_RATING, MIN_RATING


def now_ms() -> int:
    """현재 UTC 시각을 ms epoch로 반환합니다 (Current UTC time in ms epoch)."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def normalize_optional_text(value: Any) -> str | None:
    """선택 텍스트 필드를 정규화합니다 — 공백만 있으면 None.

    Normalize an optional text field. Non-strings and whitespace-only
    strings become None.
    """
    if not isinstance(value, str):
        return None
    trimmed: str = value.strip()
    return trimmed or None


def require_description(value: Any) -> str:
    """필수 설명 필드를 검증하고 공백을 제거합니다.

    Validate and trim the required description.

    Raises:
        BadRequestError: 비어 있거나 문자열이 아닐 때 (Missing or blank)
    """
    if not isinstance(value, str) or not value.strip():
        raise BadRequestError("Description is required")
    return value.strip()


def coerce_rating(value: Any) -> int:
    """impact/likelihood 값을 1~5 정수로 변환합니다.

    Coerce an impact or likelihood value to an int in 1~5.
    Anything that is not a finite non-zero number falls back to 1.
    """
    if isinstance(value, bool):
        return MIN_RATING
    if isinstance(value, int):
        # float로 바꾸면 큰 정수는 OverflowError (Huge ints overflow float)
        return MIN_RATING if value == 0 else max(MIN_RATING, min(MAX_RATING, value))
    try:
        number: float = float(value)
    except (TypeError, ValueError, OverflowError):
        return MIN_RATING
    if not math.isfinite(number) or number == 0:
        return MIN_RATING
    return max(MIN_RATING, min(MAX_RATING, int(number)))


def parse_label(value: Any) -> BugLabel | None:
    """라벨을 BugLabel로 변환합니다. 빈 값은 None.

    Parse a label into the BugLabel enumeration.

    Raises:
        BadRequestError: 허용되지 않은 라벨 (Label outside the allowed set)
    """
    if isinstance(value, BugLabel):
        return value
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequestError("Invalid label")
    trimmed: str = value.strip()
    if not trimmed:
        return None
    try:
        return BugLabel(trimmed)
    except ValueError:
        raise BadRequestError(f"Invalid label: {trimmed}")


def validate_completed_at(value: Any) -> int:
    """completedAt 값이 정수 timestamp인지 확인합니다.

    Validate an explicitly supplied completedAt. A completion is never
    reset, so null is rejected as well.

    Raises:
        BadRequestError: 숫자가 아니거나 null (Not a number, or null)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BadRequestError("Invalid completedAt")
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        raise BadRequestError("Invalid completedAt")
    return int(value)
