"""Custom exceptions for the circulation engine."""
from typing import Any, Optional


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Referenced book, request, loan or fine is absent."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} with id {resource_id} not found",
            error_code="NOT_FOUND",
            details={"resource": resource, "id": resource_id},
        )


class InvalidStateTransitionError(AppException):
    """Operation attempted on a record that is not in the required state."""

    def __init__(self, resource: str, resource_id: Any, current: str, action: str):
        super().__init__(
            f"Cannot {action} {resource} {resource_id} in status '{current}'",
            error_code="INVALID_STATE_TRANSITION",
            details={
                "resource": resource,
                "id": resource_id,
                "status": current,
                "action": action,
            },
        )


class InventoryExhaustedError(AppException):
    """No copy of the title is left to reserve."""

    def __init__(self, isbn: str):
        super().__init__(
            f"No copies of {isbn} available",
            error_code="INVENTORY_EXHAUSTED",
            details={"isbn": isbn},
        )


class InvalidCountError(AppException):
    """Copy count outside the allowed bound."""

    def __init__(self, isbn: str, count: int, limit: int):
        super().__init__(
            f"Count {count} for {isbn} must be between 1 and {limit}",
            error_code="INVALID_COUNT",
            details={"isbn": isbn, "count": count, "limit": limit},
        )


class ValidationError(AppException):
    """Validation errors."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else {},
        )


class WriteConflictError(AppException):
    """A document changed between read and commit."""

    def __init__(self, keys: list[str]):
        super().__init__(
            f"Concurrent modification of {', '.join(keys)}",
            error_code="WRITE_CONFLICT",
            details={"documents": keys},
        )


class StoreUnavailableError(AppException):
    """Backing store failed and retries were exhausted."""

    def __init__(self, message: str = "Document store unavailable", attempts: int = 0):
        super().__init__(
            message,
            error_code="STORE_UNAVAILABLE",
            details={"attempts": attempts} if attempts else {},
        )


class ConflictError(AppException):
    """Resource conflicts with an existing resource (e.g., duplicate ISBN)."""

    def __init__(self, message: str):
        super().__init__(message, error_code="CONFLICT")
