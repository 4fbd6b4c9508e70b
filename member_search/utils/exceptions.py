"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error patterns of
the member search service. Raised from services and repositories; FastAPI
renders them as ``{"detail": ...}`` with the matching status code.

Usage:
    from member_search.utils.exceptions import BadRequestError, StorageError
    raise BadRequestError("Page limit must be greater than 0")
    raise StorageError("search_page", "count")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised for single-record lookups only. An empty search result is a
    successful outcome, never a NotFoundError.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when attempting to create a resource that violates a uniqueness
    constraint (e.g. duplicate team name).

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised for caller-correctable input such as a non-positive page limit,
    a negative offset, or an unknown sort property. Always raised before
    any query runs.

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class StorageError(HTTPException):
    """503 Service Unavailable 예외 — 저장소 쿼리 실패 시 사용.

    503 storage failure exception.
    Raised when the store is unreachable, rejects a query, or a call times
    out. ``sub_query`` tells which part of a paged search failed
    ("content", "count" or "timeout") so callers can tell them apart.

    Args:
        operation: 실패한 작업 이름 (Failed operation, e.g. "search_page")
        sub_query: 실패한 하위 쿼리 (Failed sub-query, e.g. "count")
        reason: 원인 요약 (Short cause description, optional)
    """

    def __init__(self, operation: str, sub_query: str, reason: str | None = None) -> None:
        self.operation: str = operation
        self.sub_query: str = sub_query
        detail: str = f"Storage failure in {operation} ({sub_query})"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
