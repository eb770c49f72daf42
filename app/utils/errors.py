"""Custom exception hierarchy for the voting API."""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Any = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error in the API standard shape."""
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} not found", code="NOT_FOUND", status_code=404)


class ForbiddenError(AppError):
    """Raised when the user lacks permission for the action."""

    def __init__(self, reason: str = "You don't have permission") -> None:
        super().__init__(message=reason, code="FORBIDDEN", status_code=403)


class ConflictError(AppError):
    """Raised on duplicate/conflicting operations."""

    def __init__(self, reason: str, code: str = "CONFLICT") -> None:
        super().__init__(message=reason, code=code, status_code=409)


class DuplicateRecordError(ConflictError):
    """Raised when an insert or update hits a unique constraint."""

    def __init__(self, reason: str = "Record already exists") -> None:
        super().__init__(reason, code="DUPLICATE")


class UnauthorizedError(AppError):
    """Raised when the caller is not authenticated."""

    def __init__(self, reason: str = "Unauthorized") -> None:
        super().__init__(message=reason, code="UNAUTHORIZED", status_code=401)


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str, details: Any = None) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=422, details=details)


class LedgerUnconfirmedError(AppError):
    """Raised when the ledger has not confirmed (or has failed) a transaction."""

    def __init__(self, status: str, raw_status: Any = None) -> None:
        super().__init__(
            message="Signature not found or failed",
            code="LEDGER_UNCONFIRMED",
            status_code=400,
            details={"status": status, "ledger": raw_status},
        )


class PersistenceError(AppError):
    """Raised for storage failures other than constraint violations."""

    def __init__(self, reason: str = "Database request failed") -> None:
        super().__init__(message=reason, code="PERSISTENCE_ERROR", status_code=500)
