"""Error hierarchy and response classification."""

from .handling import (
    ErrorEnvelope,
    classify_response,
    format_field_errors,
    get_field_errors,
    has_field_error,
    log_error,
    parse_validation_errors,
)
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

__all__ = [
    "ApiError",
    "CredentialsError",
    "ErrorEnvelope",
    "FieldError",
    "InternalError",
    "NetworkError",
    "NotFoundError",
    "ParsingError",
    "PermissionDeniedError",
    "RequestValidationError",
    "ServerError",
    "SessionExpiredError",
    "classify_response",
    "format_field_errors",
    "get_field_errors",
    "has_field_error",
    "log_error",
    "parse_validation_errors",
]
