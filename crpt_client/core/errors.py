"""Client-level exception types.

This module defines the errors raised across adapters and services, enabling
consistent error handling, logging, and mapping into ``ApiResult`` values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and callers.

    Fields are optional to keep shapes stable while allowing each error to
    carry only what is relevant to it.
    """

    code: str
    message: str
    hint: str
    capacity: int
    window_seconds: float
    http_status: int
    url: str
    operation_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for client failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class InvalidConfigurationError(AppError):
    """Raised at construction time when limiter or client config is invalid."""


class AdmissionCancelledError(AppError):
    """Raised when a caller blocked in ``acquire()`` is cancelled."""


class SerializationAppError(AppError):
    """Raised when a document cannot be serialized into a request body."""


class TransportAppError(AppError):
    """Raised when the HTTP exchange fails before a status code is received."""


@dataclass
class RemoteRejectionError(AppError):
    """Raised when the remote API answers with a non-2xx status."""

    status_code: int = 0
