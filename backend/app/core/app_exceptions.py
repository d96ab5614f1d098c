"""Application-specific exceptions for consistent error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Application error with standardized error code."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "APP_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        """Initialize application error."""
        status_code = status_code or self.default_status
        code = code or self.default_code
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


class NotFoundError(AppError):
    """Requested entity does not exist."""

    default_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


# ============================================================================
# Test session state errors
# ============================================================================


class InvalidSessionStateError(AppError):
    """Operation is not valid in the current session state."""

    default_status = status.HTTP_409_CONFLICT
    default_code = "INVALID_SESSION_STATE"


class NoActiveSessionError(InvalidSessionStateError):
    """No test session is in progress."""

    default_code = "NO_ACTIVE_SESSION"

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot {operation}: no test session is active",
            details={"operation": operation},
        )


class SessionAlreadyActiveError(InvalidSessionStateError):
    """A test session is already in progress."""

    default_code = "SESSION_ALREADY_ACTIVE"

    def __init__(self, test_id: str):
        super().__init__(
            "A test session is already active; submit or cancel it first",
            details={"test_id": test_id},
        )


class InvalidAnswerError(AppError):
    """Answer index outside the option range of the current question."""

    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = "INVALID_ANSWER"


class EmptyTestError(AppError):
    """A test cannot be started without questions."""

    default_code = "EMPTY_TEST"


class AlreadySubmittedError(AppError):
    """Practice test session was already submitted."""

    default_status = status.HTTP_409_CONFLICT
    default_code = "ALREADY_SUBMITTED"


class AchievementNotUnlockedError(AppError):
    """Achievement reward requested before unlock."""

    default_code = "ACHIEVEMENT_NOT_UNLOCKED"


class SessionExpiredError(InvalidSessionStateError):
    """The session ran past its time limit and was auto-submitted."""

    default_code = "SESSION_EXPIRED"

    def __init__(self, test_id: str, operation: str):
        super().__init__(
            f"Cannot {operation}: the test ran out of time and was submitted automatically",
            details={"test_id": test_id, "operation": operation},
        )
