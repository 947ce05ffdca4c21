"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error taxonomy
used across services: authorization, not-found, validation, duplicate and
remote store failures. The application exception handler renders every one
of them as ``{"error": detail}``.

Usage:
    from shopshift.utils.exceptions import NotFoundError, BadRequestError
    raise NotFoundError("Claim not found")
    raise BadRequestError("Weeks count must be between 1 and 12")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 (요청한 리소스를 찾을 수 없을 때).

    Raised when a referenced entity (shift, claim, swap, member, ...) does
    not exist at lookup time. Raised before any write is performed.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 (중복 리소스 생성 시도 시).

    Raised when attempting to create a resource that already exists
    (e.g. a second pending claim by the same user on the same shift).

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 (권한 부족 시).

    Raised when the authenticated user is not an active member of the shop,
    or lacks the owner/manager role for an administrative operation.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 (인증된 사용자가 없을 때).

    Raised when no authenticated actor can be resolved from the request.
    Every mutating operation checks this first and short-circuits.

    Args:
        detail: 오류 메시지 (Error message, default: "Unauthorized")
    """

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 (비즈니스 검증 실패 시).

    Raised when caller-supplied constraints are violated beyond what Pydantic
    validation catches (week-copy bounds, invalid state transitions,
    archiving an owner, ...). Always raised before any write.

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class StoreError(HTTPException):
    """502 예외 (데이터 저장소 자체가 오류를 보고했을 때).

    Raised when the data store reports an error (constraint violation,
    connectivity). The driver message is surfaced verbatim; no retry.

    Args:
        detail: 저장소 오류 메시지 (Store error message)
    """

    def __init__(self, detail: str = "Data store error") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
