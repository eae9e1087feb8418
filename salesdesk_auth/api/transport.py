"""Authenticating HTTP transport.

Every API call goes through :class:`AuthTransport`, which runs two explicit
stages around the aiohttp request:

* ``_before_request`` attaches the in-memory access token as a bearer
  credential and remembers which token was sent.
* ``_after_error`` classifies non-2xx responses and, for a 401 on an ordinary
  request, recovers through the refresh coordinator and retries once.

Cookies (the HttpOnly refresh token) ride along automatically through the
shared session's cookie jar.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import aiohttp

from ..errors.handling import classify_response, log_api_error, log_error
from ..errors.internal import ApiError, InternalError, NetworkError, SessionExpiredError
from ..routes import Navigator

if TYPE_CHECKING:
    from ..auth_token.hook_manager import HookManager
    from ..auth_token.profile_cache import ProfileCache
    from ..auth_token.refresh_coordinator import RefreshCoordinator
    from ..auth_token.store import TokenStore
    from ..config.model import ClientSettings


@dataclass
class RequestContext:
    """One logical API call, possibly sent twice.

    Attributes:
        method: HTTP method, upper case.
        path: Endpoint path relative to the base URL (or absolute URL).
        json: JSON body, if any.
        params: Query parameters, if any.
        recover: Whether a 401 may trigger a refresh.
        retried: Set on the second send; a retried request never refreshes.
        sent_token: Access token attached on the latest send.
        generation: Session generation the retry was sent in.
    """

    method: str
    path: str
    json: Any = None
    params: Mapping[str, Any] | None = None
    recover: bool = True
    retried: bool = False
    sent_token: str | None = None
    generation: int | None = None


@dataclass
class ApiResponse:
    status: int
    data: Any
    headers: dict[str, str] = field(default_factory=dict)


class AuthTransport:
    """HTTP client wrapper adding bearer auth and 401 recovery.

    Args:
        session: Shared aiohttp session; its cookie jar carries the refresh cookie.
        settings: Base URL, timeout and endpoint paths.
        store: In-memory access token holder.
        hooks: Receives "session ended" notifications.
        navigator: Performs the login redirect.
        profile_cache: Cached profile, cleared when the session ends.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: ClientSettings,
        store: TokenStore,
        hooks: HookManager,
        navigator: Navigator | None = None,
        profile_cache: ProfileCache | None = None,
    ) -> None:
        if session is None:
            raise TypeError("session cannot be None")
        self.session = session
        self.settings = settings
        self.store = store
        self.hooks = hooks
        self.navigator = navigator or Navigator()
        self.profile_cache = profile_cache
        self._coordinator: RefreshCoordinator | None = None

    def attach_coordinator(self, coordinator: RefreshCoordinator) -> None:
        """Wire the refresh coordinator (built after the auth client)."""
        self._coordinator = coordinator

    # ------------------------------ public API ------------------------------ #
    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
        recover: bool = True,
    ) -> ApiResponse:
        """Send an API request.

        Args:
            method: HTTP method.
            path: Endpoint path.
            json: Optional JSON body.
            params: Optional query parameters.
            recover: Allow refresh-and-retry on 401.

        Returns:
            The successful response.

        Raises:
            ApiError: Subclass matching the failure status.
            NetworkError: No response received.
        """
        ctx = RequestContext(
            method=method.upper(), path=path, json=json, params=params, recover=recover
        )
        return await self._dispatch(ctx)

    async def get(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", path, **kwargs)

    async def end_session(self, reason: str, generation: int | None = None) -> None:
        """Tear the client-side session down after an irrecoverable 401.

        Clears the token and cached profile, notifies session-ended hooks and
        redirects to login (at most once while on the login view). Any refresh
        still in flight for this session has its token discarded.

        Args:
            reason: Short tag passed to the hooks.
            generation: Session generation the failure was observed in. When
                given and that session has already ended, nothing happens.
        """
        if self._coordinator is not None and not self._coordinator.invalidate(expected=generation):
            logging.debug(f"🔒 Session already ended, skipping teardown reason={reason}")
            return
        logging.warning(f"🔒 Session ended reason={reason}")
        self.store.clear()
        if self.profile_cache is not None:
            try:
                self.profile_cache.clear_user()
            except OSError as e:
                log_error("Failed to clear cached profile", e, context={"reason": reason})
        await self.hooks.fire_session_ended(reason)
        self.navigator.redirect_to_login()

    # -------------------------------- stages -------------------------------- #
    def _is_endpoint(self, path: str, endpoint: str) -> bool:
        return self.settings.url_for(path).rstrip("/") == self.settings.url_for(endpoint).rstrip("/")

    def is_login(self, path: str) -> bool:
        return self._is_endpoint(path, self.settings.endpoints.login)

    def is_refresh(self, path: str) -> bool:
        return self._is_endpoint(path, self.settings.endpoints.refresh_token)

    def _before_request(self, ctx: RequestContext) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.store.get()
        ctx.sent_token = token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if self.settings.debug:
            logging.debug(
                f"🚀 API Request: {ctx.method} {ctx.path} retried={ctx.retried} auth={bool(token)}"
            )
        return headers

    async def _dispatch(self, ctx: RequestContext) -> ApiResponse:
        headers = self._before_request(ctx)
        status, body, resp_headers = await self._send(ctx, headers)
        if 200 <= status < 300:
            if self.settings.debug:
                logging.debug(f"✅ API Response: {ctx.method} {ctx.path} status={status}")
            return ApiResponse(status, body, resp_headers)
        return await self._after_error(ctx, status, body)

    async def _send(
        self, ctx: RequestContext, headers: dict[str, str]
    ) -> tuple[int, Any, dict[str, str]]:
        url = self.settings.url_for(ctx.path)
        timeout = aiohttp.ClientTimeout(total=self.settings.timeout_seconds)
        try:
            async with self.session.request(
                ctx.method,
                url,
                json=ctx.json,
                params=ctx.params,
                headers=headers,
                timeout=timeout,
            ) as resp:
                body = await self._read_body(resp)
                return resp.status, body, dict(resp.headers)
        except TimeoutError as e:
            error = NetworkError(f"Request timeout {ctx.method} {ctx.path}", data={"path": ctx.path})
            log_error("Request timed out", error, context={"method": ctx.method, "path": ctx.path})
            raise error from e
        except aiohttp.ClientError as e:
            error = NetworkError(
                f"Network error during {ctx.method} {ctx.path}: {e}", data={"path": ctx.path}
            )
            log_error("Request failed without response", error, context={"method": ctx.method, "path": ctx.path})
            raise error from e

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse) -> Any:
        try:
            return await resp.json(content_type=None)
        except ValueError:
            return await resp.text(errors="replace")

    async def _after_error(self, ctx: RequestContext, status: int, body: Any) -> ApiResponse:
        error = classify_response(status, body, path=ctx.path, is_login=self.is_login(ctx.path))
        if error.status != 401:
            log_api_error(error, ctx.method)
            raise error
        if self.is_login(ctx.path):
            logging.info(f"🔑 Login rejected status={error.status} code={error.error_code}")
            raise error
        if self.is_refresh(ctx.path):
            await self.end_session("refresh_rejected")
            raise error
        if ctx.retried:
            await self.end_session("retry_rejected", generation=ctx.generation)
            raise error
        if not ctx.recover:
            # Nothing was torn down, so this is a plain 401 rather than an expiry.
            error = ApiError(
                str(error),
                status=error.status,
                envelope=error.envelope,
                field_errors=error.field_errors,
                path=error.path,
                data=error.data,
            )
            log_api_error(error, ctx.method)
            raise error
        return await self._recover(ctx, error)

    async def _recover(self, ctx: RequestContext, error: ApiError) -> ApiResponse:
        current = self.store.get()
        if current and current != ctx.sent_token:
            # Another request already refreshed while this one was in flight.
            logging.debug(f"🔁 Token rotated meanwhile, retrying {ctx.method} {ctx.path}")
            if self._coordinator is not None:
                ctx.generation = self._coordinator.generation
        else:
            if self._coordinator is None:
                await self.end_session("no_refresh_available")
                raise error
            generation = self._coordinator.generation
            logging.info(f"🔄 Access token rejected, refreshing path={ctx.path}")
            try:
                await self._coordinator.refresh()
            except SessionExpiredError:
                raise
            except InternalError as e:
                await self.end_session("refresh_failed", generation=generation)
                raise SessionExpiredError(
                    "Session expired. Please login again.",
                    status=401,
                    path=ctx.path,
                    data={"cause": type(e).__name__},
                ) from e
            ctx.generation = generation
        ctx.retried = True
        return await self._dispatch(ctx)
