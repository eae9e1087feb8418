"""Shared types for the auth_token package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SessionState(Enum):
    """Enumeration of session controller states.

    Attributes:
        ANONYMOUS: No session; protected views redirect to login.
        PENDING: Login, logout or startup restoration in progress.
        AUTHENTICATED: Access token held and profile known.
    """

    ANONYMOUS = "anonymous"
    PENDING = "pending"
    AUTHENTICATED = "authenticated"


class Credentials(BaseModel):
    """Login request body."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    user_name: str = Field(default="", alias="userName")
    password: str = Field(repr=False)

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class UserProfile(BaseModel):
    """Non-sensitive user data returned by login and cached durably.

    Unknown keys (account, role, ...) are kept as-is; a ``password`` key is
    always dropped before the profile is stored anywhere.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    user_id: int | str | None = Field(default=None, alias="userId")
    user_name: str | None = Field(default=None, alias="userName")
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    active: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_secrets(cls, data: Any) -> Any:
        if isinstance(data, dict) and "password" in data:
            data = {k: v for k, v in data.items() if k != "password"}
        return data

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(alias="accessToken", min_length=1)
    user: UserProfile | None = None


class RefreshResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(alias="accessToken", min_length=1)


class MessageResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str | None = None


class OperationResponse(BaseModel):
    """Result of forgot-password / reset-password calls."""

    model_config = ConfigDict(extra="ignore")

    success: bool = True
    message: str | None = None


class EmailVerificationResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    verified: bool = False
    message: str | None = None


class AccountCreate(BaseModel):
    """Registration record posted once the email address is verified.

    Lookup fields (country, province, municipality, gender, id type) carry
    the backend's objects as-is, e.g. ``{"countryId": 1, "name": "Cuba"}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    username: str
    password: str = Field(repr=False)
    phone: str = ""
    address: str = ""
    dob: str | None = None
    id_number: str = Field(default="", alias="idNumber")
    country: dict[str, Any] | None = None
    province: dict[str, Any] | None = None
    municipality: dict[str, Any] | None = None
    gender: dict[str, Any] | None = None
    id_type: dict[str, Any] | None = Field(default=None, alias="idType")
    email_verified: bool = Field(default=False, alias="emailVerified")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SavedIdentity(BaseModel):
    """Remember-me data: identifies the user on the login form, nothing more."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    user_name: str = Field(default="", alias="userName")


@dataclass(frozen=True)
class Session:
    """Snapshot of the client-side session."""

    user: UserProfile | None
    authenticated: bool
