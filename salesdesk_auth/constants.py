"""
Configuration constants for the SalesDesk auth client

This module contains all configurable constants used throughout the package.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_str(name: str, default: str) -> str:
    """Retrieve a non-empty string value from an environment variable."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


# Backend location
API_BASE_URL = _get_env_str(
    "API_BASE_URL", "http://localhost:3000/api"
)  # Prefix for every endpoint path
API_TIMEOUT_MS = _get_env_int("API_TIMEOUT_MS", 15000)  # Per-request timeout

# Auth endpoint paths (relative to API_BASE_URL)
LOGIN_PATH = _get_env_str("AUTH_LOGIN_PATH", "/dreamsoftapi/Login/Login")
LOGOUT_PATH = _get_env_str("AUTH_LOGOUT_PATH", "/dreamsoftapi/Login/Logout")
REFRESH_TOKEN_PATH = _get_env_str(
    "AUTH_REFRESH_TOKEN_PATH", "/dreamsoftapi/Login/RefreshToken"
)
FORGOT_PASSWORD_PATH = _get_env_str(
    "AUTH_FORGOT_PASSWORD_PATH", "/dreamsoftapi/Login/ForgotPassword"
)
RESET_PASSWORD_PATH = _get_env_str(
    "AUTH_RESET_PASSWORD_PATH", "/dreamsoftapi/Login/ResetPassword"
)

# Account registration (email verification, then account creation)
SEND_VERIFICATION_CODE_PATH = _get_env_str(
    "ACCOUNT_SEND_VERIFICATION_CODE_PATH", "/dreamsoftapi/Account/SendVerificationCode"
)
VERIFY_EMAIL_CODE_PATH = _get_env_str(
    "ACCOUNT_VERIFY_EMAIL_CODE_PATH", "/dreamsoftapi/Account/VerifyEmailCode"
)
CREATE_ACCOUNT_PATH = _get_env_str(
    "ACCOUNT_CREATE_ACCOUNT_PATH", "/dreamsoftapi/Account/CreateAccount"
)

# Durable (non-sensitive) profile cache; empty means in-memory only
AUTH_PROFILE_CACHE_FILE = os.getenv("AUTH_PROFILE_CACHE_FILE", "")

# Accept cookies from bare IP hosts (local development backends)
AUTH_ALLOW_IP_COOKIES = _get_env_bool("AUTH_ALLOW_IP_COOKIES", False)

# Request/response tracing
DEBUG = _get_env_bool("DEBUG", False)
