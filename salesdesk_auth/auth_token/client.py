"""Auth endpoint client.

Thin typed layer over :class:`AuthTransport` for the login, refresh,
logout, password-recovery and registration endpoints.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors.internal import ParsingError
from .types import (
    AccountCreate,
    Credentials,
    EmailVerificationResponse,
    LoginResponse,
    MessageResponse,
    OperationResponse,
    RefreshResponse,
)

if TYPE_CHECKING:
    from ..api.transport import AuthTransport
    from ..config.model import EndpointPaths

M = TypeVar("M", bound=BaseModel)


class AuthClient:
    """Client for the backend's authentication endpoints.

    The refresh token never passes through this class: the backend sets it
    as an HttpOnly cookie on login/refresh and the transport's cookie jar
    sends it back.
    """

    def __init__(self, transport: AuthTransport, endpoints: EndpointPaths):
        """Initialize the auth client.

        Args:
            transport: Authenticating transport used for every call.
            endpoints: Endpoint paths.
        """
        self.transport = transport
        self.endpoints = endpoints

    async def login(self, credentials: Credentials) -> LoginResponse:
        """POST credentials; the backend answers with the access token and profile.

        Raises:
            CredentialsError: Credentials rejected (401).
            ParsingError: Response lacks an access token.
        """
        resp = await self.transport.post(self.endpoints.login, json=credentials.to_payload())
        return self._parse(LoginResponse, resp.data, "login")

    async def refresh_access_token(self) -> str:
        """POST to the refresh endpoint with no body; the cookie authenticates.

        Returns:
            The new access token.

        Raises:
            SessionExpiredError: Refresh cookie missing, expired or revoked.
            ParsingError: Response lacks an access token.
        """
        resp = await self.transport.post(self.endpoints.refresh_token)
        return self._parse(RefreshResponse, resp.data, "refresh").access_token

    async def logout(self) -> MessageResponse:
        """Ask the backend to revoke the refresh token and delete its cookie.

        A 401 here is not recovered: there is nothing left to log out of.
        """
        resp = await self.transport.post(self.endpoints.logout, recover=False)
        if resp.data in (None, ""):
            return MessageResponse()
        return self._parse(MessageResponse, resp.data, "logout")

    async def forgot_password(self, email: str) -> OperationResponse:
        """Request a password reset link.

        The backend answers success whether or not the address exists.
        """
        resp = await self.transport.post(
            self.endpoints.forgot_password, json={"email": email}, recover=False
        )
        return self._parse_operation(resp.data, "forgot_password")

    async def reset_password(
        self, token: str, new_password: str, confirm_password: str
    ) -> OperationResponse:
        resp = await self.transport.post(
            self.endpoints.reset_password,
            json={
                "token": token,
                "newPassword": new_password,
                "confirmPassword": confirm_password,
            },
            recover=False,
        )
        return self._parse_operation(resp.data, "reset_password")

    async def send_verification_code(self, email: str) -> OperationResponse:
        """Email a one-time code to an address about to be registered."""
        resp = await self.transport.post(
            self.endpoints.send_verification_code, json={"email": email}, recover=False
        )
        return self._parse_operation(resp.data, "send_verification_code")

    async def verify_email_code(self, email: str, code: str) -> EmailVerificationResponse:
        resp = await self.transport.post(
            self.endpoints.verify_email_code,
            json={"email": email, "code": code},
            recover=False,
        )
        if resp.data in (None, ""):
            return EmailVerificationResponse()
        return self._parse(EmailVerificationResponse, resp.data, "verify_email_code")

    async def create_account(self, account: AccountCreate) -> dict[str, Any]:
        """Register a new account. Nothing is stored locally; the user logs in next.

        Returns:
            The created account record as the backend returns it (may be empty).

        Raises:
            RequestValidationError: The backend rejected one or more fields.
        """
        resp = await self.transport.post(
            self.endpoints.create_account, json=account.to_payload(), recover=False
        )
        if isinstance(resp.data, dict):
            return resp.data
        return {}

    def _parse_operation(self, data: Any, operation: str) -> OperationResponse:
        if data in (None, ""):
            return OperationResponse()
        return self._parse(OperationResponse, data, operation)

    @staticmethod
    def _parse(model: type[M], data: Any, operation: str) -> M:
        if not isinstance(data, dict):
            raise ParsingError(
                f"Unexpected {operation} response body type={type(data).__name__}",
                data={"operation": operation},
            )
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logging.warning(f"❌ Invalid {operation} response fields={[err['loc'] for err in e.errors()]}")
            raise ParsingError(
                f"Missing or invalid fields in {operation} response", data={"operation": operation}
            ) from e
