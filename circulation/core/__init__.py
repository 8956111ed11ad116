"""Core utilities."""
from circulation.core.exceptions import (
    AppException,
    ConflictError,
    InvalidCountError,
    InvalidStateTransitionError,
    InventoryExhaustedError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
    WriteConflictError,
)
from circulation.core.logging import get_logger, setup_logging

__all__ = [
    # Exceptions
    "AppException",
    "ConflictError",
    "NotFoundError",
    "InvalidStateTransitionError",
    "InventoryExhaustedError",
    "InvalidCountError",
    "ValidationError",
    "WriteConflictError",
    "StoreUnavailableError",
    # Logging
    "get_logger",
    "setup_logging",
]
