"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the bug tracker's
error taxonomy. Services raise them directly, FastAPI renders them as
``{"detail": "..."}`` responses, and the API client maps response status
codes back onto the same classes.

Usage:
    from app.utils.exceptions import NotFoundError, ConflictError
    raise NotFoundError("Bug not found")
    raise ConflictError("Bug already completed")
"""

from fastapi import HTTPException, status


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 입력값 검증 실패 시 사용.

    400 Bad Request exception.
    Raised when a required field is missing, a label is outside the allowed
    set, or completedAt is malformed.

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when the credential pair is wrong, or the session token is
    missing, invalid or expired.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 참조 버그 보호 시 사용.

    403 Forbidden exception.
    Raised when completing or deleting a reference bug, or when a bulk delete
    would remove nothing because every bug is a reference bug.

    Args:
        detail: 오류 메시지 (Error message, default: "Operation not allowed")
    """

    def __init__(self, detail: str = "Operation not allowed") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 버그를 찾을 수 없을 때 사용.

    404 Not Found exception.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """409 Conflict 예외 — 이미 완료된 버그를 다시 완료할 때 사용.

    409 Conflict exception.
    Raised on a second completion of the same bug; completion is one-shot.

    Args:
        detail: 오류 메시지 (Error message, default: "Conflict")
    """

    def __init__(self, detail: str = "Conflict") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class StorageError(HTTPException):
    """500 예외 — 저장소 오류 또는 접근 불가 시 사용.

    500 Internal Server Error exception for record store failures.
    There is no automatic retry; the caller re-invokes the operation.

    Args:
        detail: 오류 메시지 (Error message, default: "Storage failure")
    """

    def __init__(self, detail: str = "Storage failure") -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


# 상태 코드 → 예외 클래스 매핑 (Status code to exception class, used by the API client)
EXCEPTION_BY_STATUS: dict[int, type[HTTPException]] = {
    status.HTTP_400_BAD_REQUEST: BadRequestError,
    status.HTTP_401_UNAUTHORIZED: UnauthorizedError,
    status.HTTP_403_FORBIDDEN: ForbiddenError,
    status.HTTP_404_NOT_FOUND: NotFoundError,
    status.HTTP_409_CONFLICT: ConflictError,
}
