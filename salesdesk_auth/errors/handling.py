from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..logging_config import log_structured_error
from .internal import (
    ApiError,
    CredentialsError,
    FieldError,
    InternalError,
    NetworkError,
    NotFoundError,
    ParsingError,
    PermissionDeniedError,
    RequestValidationError,
    ServerError,
    SessionExpiredError,
)

# Human hints per status, logged alongside the classified error.
STATUS_HINTS: dict[int, str] = {
    401: "🔒 Unauthorized: please login again",
    403: "🚫 Forbidden: no permission to access this resource",
    404: "🔍 Not Found: the requested resource was not found",
    422: "⚠️ Validation Error",
    500: "💥 Server Error: something went wrong on the server",
    503: "⏸️ Service Unavailable: the server is temporarily unavailable",
}


class ErrorEnvelope(BaseModel):
    """Backend error body: ``{StatusCode, ErrorCode, ErrorType, ErrorMessage}``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status_code: int | None = Field(default=None, alias="StatusCode")
    error_code: str | None = Field(default=None, alias="ErrorCode")
    error_type: str | None = Field(default=None, alias="ErrorType")
    error_message: str | None = Field(default=None, alias="ErrorMessage")

    @field_validator("error_code", mode="before")
    @classmethod
    def _coerce_code(cls, v: Any) -> str | None:
        return None if v is None else str(v)

    @classmethod
    def from_body(cls, body: Any) -> ErrorEnvelope | None:
        """Parse an envelope out of a response body, or None if it is not one."""
        if not isinstance(body, Mapping):
            return None
        if "ErrorMessage" not in body and "StatusCode" not in body:
            return None
        try:
            return cls.model_validate(dict(body))
        except ValidationError:
            return None

    def describe(self) -> str:
        return (
            f"Error Type: {self.error_type} | Error Code: {self.error_code} "
            f"| Message: {self.error_message}"
        )


def is_validation_problem(body: Any) -> bool:
    """True for ASP.NET Core problem details carrying field ``errors``."""
    return (
        isinstance(body, Mapping)
        and isinstance(body.get("errors"), Mapping)
        and body.get("status") == 400
    )


def parse_validation_errors(body: Mapping[str, Any]) -> list[FieldError]:
    """Flatten ``errors: {"Province.Country": [...]}`` into field errors.

    Nested paths keep their last segment and the first letter is lower-cased
    (``Province.Country`` -> ``country``).
    """
    field_errors: list[FieldError] = []
    errors = body.get("errors")
    if not isinstance(errors, Mapping):
        return field_errors
    for field_path, messages in errors.items():
        name = str(field_path).split(".")[-1]
        normalized = name[:1].lower() + name[1:]
        if isinstance(messages, str):
            msgs = [messages]
        elif isinstance(messages, list | tuple):
            msgs = [str(m) for m in messages]
        else:
            msgs = []
        field_errors.append(FieldError(field=normalized, messages=msgs))
    return field_errors


def format_field_errors(field_errors: list[FieldError]) -> str:
    """Join every field message into one newline-separated string."""
    return "\n".join(m for fe in field_errors for m in fe.messages)


def get_field_errors(field_errors: list[FieldError], field_name: str) -> list[str]:
    wanted = field_name.lower()
    for fe in field_errors:
        if fe.field.lower() == wanted:
            return fe.messages
    return []


def has_field_error(field_errors: list[FieldError], field_name: str) -> bool:
    return bool(get_field_errors(field_errors, field_name))


def _message_for(status: int, body: Any, envelope: ErrorEnvelope | None) -> str:
    if envelope and envelope.error_message:
        return envelope.error_message
    if isinstance(body, Mapping):
        for key in ("message", "title", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(body, str) and body.strip():
        return body.strip()[:200]
    return f"HTTP {status}"


def classify_response(
    http_status: int,
    body: Any,
    *,
    path: str | None = None,
    is_login: bool = False,
) -> ApiError:
    """Build the typed error for a non-2xx response.

    Classification matches on the envelope's ``StatusCode`` and falls back to
    the HTTP status when the body carries no envelope.

    Args:
        http_status: Status line of the response.
        body: Decoded JSON body, raw text, or None.
        path: Endpoint path, kept on the error for logging.
        is_login: True when the failing request was the login call, which
            turns a 401 into a credentials failure.

    Returns:
        An ApiError subclass instance (not raised).
    """
    envelope = ErrorEnvelope.from_body(body)
    status = envelope.status_code if envelope and envelope.status_code else http_status
    field_errors = parse_validation_errors(body) if is_validation_problem(body) else []
    message = _message_for(status, body, envelope)
    if field_errors:
        message = format_field_errors(field_errors) or message
    kwargs: dict[str, Any] = {
        "status": status,
        "envelope": envelope,
        "field_errors": field_errors,
        "path": path,
        "data": {"http_status": http_status},
    }
    if status == 401:
        if is_login:
            return CredentialsError(message, **kwargs)
        return SessionExpiredError(message, **kwargs)
    if status == 403:
        return PermissionDeniedError(message, **kwargs)
    if status == 404:
        return NotFoundError(message, **kwargs)
    if status == 422 or field_errors:
        return RequestValidationError(message, **kwargs)
    if status >= 500:
        return ServerError(message, **kwargs)
    return ApiError(message, **kwargs)


def error_category(error: BaseException) -> str:
    if isinstance(error, NetworkError | OSError | ConnectionError):
        return "network"
    if isinstance(error, CredentialsError | SessionExpiredError):
        return "auth"
    if isinstance(error, PermissionDeniedError):
        return "permission"
    if isinstance(error, RequestValidationError):
        return "validation"
    if isinstance(error, ServerError):
        return "server"
    if isinstance(error, ParsingError):
        return "parsing"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(message: str, error: Exception, context: dict[str, Any] | None = None) -> None:
    """Log an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    log_structured_error(
        error_type=error_category(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


def log_api_error(error: ApiError, method: str) -> None:
    """Log a classified API error; 4xx at WARNING, 5xx at ERROR."""
    hint = STATUS_HINTS.get(error.status, f"⚠️ Error {error.status}")
    level = logging.ERROR if error.status >= 500 else logging.WARNING
    context: dict[str, Any] = {"method": method, "path": error.path, "status": error.status}
    if error.error_code:
        context["code"] = error.error_code
    log_structured_error(
        error_type=error_category(error),
        message=f"{hint}: {str(error)}",
        context=context,
        level=level,
    )
