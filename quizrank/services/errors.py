"""Typed failures raised by the ranking and reward engine."""

from __future__ import annotations

from typing import Optional


class EngineError(Exception):
    """Base class for engine failures with a caller-facing message."""

    status_code = 500

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class ValidationError(EngineError):
    """Malformed input; never retried and never leaves side effects."""

    status_code = 400


class NotFoundError(EngineError):
    """A referenced game (or other catalog row) does not exist."""

    status_code = 404


class ConflictError(EngineError):
    """Two writers collided on the same partition."""

    status_code = 409

    def __init__(self, operation: str, attempts: int = 1, details: Optional[str] = None):
        message = f"Serialization conflict during {operation} after {attempts} attempt(s)"
        if details:
            message = f"{message}: {details}"
        super().__init__(message, "Score could not be saved right now. Please try again.")
        self.operation = operation
        self.attempts = attempts


class StorageError(EngineError):
    """The backing store failed; nothing from the unit was persisted."""

    status_code = 503

    def __init__(self, operation: str, details: Optional[str] = None):
        super().__init__(
            f"Storage error during {operation}: {details}",
            "A storage error occurred. Please try again later.",
        )
        self.operation = operation


__all__ = [
    "ConflictError",
    "EngineError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
