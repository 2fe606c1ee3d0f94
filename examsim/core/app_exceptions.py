"""Application-specific exceptions for consistent error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Application error with standardized error code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        """Initialize application error."""
        super().__init__(
            status_code=status_code,
            detail={
                "code": code,
                "message": message,
                "details": details,
            },
        )
        self.code = code
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class InsufficientQuestionsError(AppError):
    """The bank cannot supply the requested number of unique questions."""

    def __init__(self, requested: int, available: int):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            code="INSUFFICIENT_QUESTIONS",
            message=(
                "Not enough questions in the bank to create a unique session. "
                f"Requested: {requested}, Available: {available}"
            ),
            details={"requested": requested, "available": available},
        )
        self.requested = requested
        self.available = available


class NotFoundError(AppError):
    """Unknown session, attempt, question or position."""

    def __init__(self, kind: str, identifier: Any):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            message=f"{kind} not found: {identifier}",
            details={"kind": kind, "id": str(identifier)},
        )
        self.kind = kind
        self.identifier = identifier


class InvalidStateError(AppError):
    """Operation not allowed in the entity's current state."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="INVALID_STATE",
            message=message,
            details=details,
        )


class SessionCreationError(AppError):
    """Persisting a session or attempt violated a uniqueness constraint.

    Indicates a selection defect. Callers must not retry automatically.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="SESSION_CREATION_FAILED",
            message=message,
            details=details,
        )
