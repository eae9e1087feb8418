from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .. import constants


class EndpointPaths(BaseModel):
    """Paths of the auth endpoints, relative to ``ClientSettings.base_url``.

    Attributes:
        login: POST ``{email, userName, password}`` -> ``{accessToken, user}``.
        refresh_token: POST, no body -> ``{accessToken}``.
        logout: POST, no body -> ``{message}``.
        forgot_password: POST ``{email}``.
        reset_password: POST ``{token, newPassword, confirmPassword}``.
        send_verification_code: POST ``{email}``.
        verify_email_code: POST ``{email, code}`` -> ``{success, verified, message}``.
        create_account: POST the full account record.
    """

    login: str = constants.LOGIN_PATH
    refresh_token: str = constants.REFRESH_TOKEN_PATH
    logout: str = constants.LOGOUT_PATH
    forgot_password: str = constants.FORGOT_PASSWORD_PATH
    reset_password: str = constants.RESET_PASSWORD_PATH
    send_verification_code: str = constants.SEND_VERIFICATION_CODE_PATH
    verify_email_code: str = constants.VERIFY_EMAIL_CODE_PATH
    create_account: str = constants.CREATE_ACCOUNT_PATH

    @field_validator("*", mode="after")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("/"):
            raise ValueError("endpoint paths must start with '/'")
        return v.rstrip("/") or "/"


class ClientSettings(BaseModel):
    """Runtime settings for the auth client.

    Attributes:
        base_url: API prefix every endpoint path is appended to.
        timeout_seconds: Total per-request timeout.
        endpoints: Auth endpoint paths.
        profile_cache_file: JSON file for the non-sensitive profile cache;
            None keeps it in memory.
        allow_ip_cookies: Accept cookies from bare IP hosts (aiohttp's
            ``CookieJar(unsafe=True)``), needed for local backends.
        debug: Log every request and response.
    """

    base_url: str = constants.API_BASE_URL
    timeout_seconds: float = Field(default=constants.API_TIMEOUT_MS / 1000, gt=0)
    endpoints: EndpointPaths = Field(default_factory=EndpointPaths)
    profile_cache_file: str | None = constants.AUTH_PROFILE_CACHE_FILE or None
    allow_ip_cookies: bool = constants.AUTH_ALLOW_IP_COOKIES
    debug: bool = constants.DEBUG

    @field_validator("base_url", mode="before")
    @classmethod
    def normalize_base_url(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("base_url must be a non-empty string")
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v

    @field_validator("profile_cache_file", mode="before")
    @classmethod
    def empty_path_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def url_for(self, path: str) -> str:
        """Join the base URL and an endpoint path (absolute URLs pass through)."""
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientSettings:
        """Build settings from the environment-derived constants plus overrides."""
        return cls(**overrides)
