"""Centralized internal error hierarchy.

These exceptions give the UI layer semantic categories to branch on. Only
raise these at the transport boundary: never surface raw aiohttp / JSON
errors to callers, wrap them instead.

Classes:
  InternalError          – Base for all internal errors.
  NetworkError           – No response received (timeout, connection failure).
  ParsingError           – Response body missing required fields / not JSON.
  ApiError               – Non-2xx response carrying an error envelope.
  CredentialsError       – Login endpoint rejected the credentials (401).
  SessionExpiredError    – Session could not be recovered; user must log in.
  PermissionDeniedError  – 403.
  NotFoundError          – 404.
  RequestValidationError – 422, or 400 carrying field errors.
  ServerError            – 5xx.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .handling import ErrorEnvelope


class InternalError(Exception):
    """Base class for all internal errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised when no HTTP response was received.

    Covers timeouts, refused connections and resets. The core never retries
    these; a caller-level retry policy may.
    """


class ParsingError(InternalError):
    """Exception raised for response parsing or schema validation errors."""


@dataclass(frozen=True)
class FieldError:
    """Validation messages for one request field.

    Attributes:
        field: camelCase field name (last segment of a dotted path).
        messages: Messages reported for the field.
    """

    field: str
    messages: list[str] = field(default_factory=list)


class ApiError(InternalError):
    """Exception raised for a non-2xx response.

    Attributes:
        status: Status code taken from the envelope's StatusCode, or the
            HTTP status when the body carries no envelope.
        envelope: Parsed error envelope, if the body had one.
        field_errors: Field-level validation messages, if any.
        path: Endpoint path of the failing request.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int,
        envelope: ErrorEnvelope | None = None,
        field_errors: Sequence[FieldError] | None = None,
        path: str | None = None,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, data=data)
        self.status = status
        self.envelope = envelope
        self.field_errors = list(field_errors or [])
        self.path = path

    @property
    def error_code(self) -> str | None:
        return self.envelope.error_code if self.envelope else None

    @property
    def error_type(self) -> str | None:
        return self.envelope.error_type if self.envelope else None


class CredentialsError(ApiError):
    """Login endpoint returned 401. Surfaced verbatim; never retried."""


class SessionExpiredError(ApiError):
    """The session could not be recovered and has been torn down.

    Raised when the refresh endpoint itself answers 401, when the refresh
    attempt for a failed request fails, or when a request that was already
    retried with a fresh token is rejected again. Also raised to requests
    whose refresh completed after logout had already ended the session.
    """


class PermissionDeniedError(ApiError):
    """403: authenticated but not allowed."""


class NotFoundError(ApiError):
    """404: resource not found."""


class RequestValidationError(ApiError):
    """422 (or 400 with field errors): request payload rejected."""


class ServerError(ApiError):
    """5xx: server failed or is unavailable."""


__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "FieldError",
    "ApiError",
    "CredentialsError",
    "SessionExpiredError",
    "PermissionDeniedError",
    "NotFoundError",
    "RequestValidationError",
    "ServerError",
]
