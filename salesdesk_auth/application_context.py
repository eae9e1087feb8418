"""Central application context wiring the auth components together."""

from __future__ import annotations

import logging

import aiohttp

from .api.transport import AuthTransport
from .auth_token.client import AuthClient
from .auth_token.hook_manager import HookManager
from .auth_token.profile_cache import ProfileCache
from .auth_token.refresh_coordinator import RefreshCoordinator
from .auth_token.session import SessionController
from .auth_token.store import TokenStore
from .config import load_settings
from .config.model import ClientSettings
from .routes import Navigator


class AuthContext:
    """Holds the shared HTTP session and the auth components for one app run.

    The token store is created here and torn down in :meth:`shutdown`; nothing
    survives the context.
    """

    # Class / instance attribute type declarations (helps mypy)
    settings: ClientSettings
    http_session: aiohttp.ClientSession
    token_store: TokenStore
    navigator: Navigator
    profile_cache: ProfileCache
    hooks: HookManager
    transport: AuthTransport
    auth_client: AuthClient
    coordinator: RefreshCoordinator
    session: SessionController

    def __init__(self, settings: ClientSettings) -> None:
        self.settings = settings
        self._owns_http_session = False
        self._closed = False

    # ------------------------- Construction ------------------------- #
    @classmethod
    async def create(
        cls,
        settings: ClientSettings | None = None,
        *,
        http_session: aiohttp.ClientSession | None = None,
        navigator: Navigator | None = None,
    ) -> AuthContext:
        """Create and wire a new AuthContext.

        Args:
            settings: Client settings; loaded from the environment when omitted.
            http_session: Existing session to use (not closed on shutdown).
            navigator: Navigation state; a fresh one at ``/`` when omitted.

        Returns:
            A ready-to-use context.
        """
        ctx = cls(settings or load_settings())
        logging.debug("🧪 Creating auth context")
        if http_session is None:
            jar = aiohttp.CookieJar(unsafe=ctx.settings.allow_ip_cookies)
            http_session = aiohttp.ClientSession(cookie_jar=jar)
            ctx._owns_http_session = True
            logging.debug("🔗 HTTP session created")
        ctx.http_session = http_session
        ctx.token_store = TokenStore()
        ctx.navigator = navigator or Navigator()
        ctx.profile_cache = ProfileCache(ctx.settings.profile_cache_file)
        ctx.hooks = HookManager()
        ctx.transport = AuthTransport(
            http_session,
            ctx.settings,
            ctx.token_store,
            ctx.hooks,
            navigator=ctx.navigator,
            profile_cache=ctx.profile_cache,
        )
        ctx.auth_client = AuthClient(ctx.transport, ctx.settings.endpoints)
        ctx.coordinator = RefreshCoordinator(ctx.token_store, ctx.auth_client.refresh_access_token)
        ctx.transport.attach_coordinator(ctx.coordinator)
        ctx.session = SessionController(
            ctx.token_store,
            ctx.auth_client,
            ctx.coordinator,
            ctx.profile_cache,
            hooks=ctx.hooks,
        )
        return ctx

    # --------------------------- Lifecycle -------------------------- #
    async def shutdown(self) -> None:
        """Drop the in-memory token and close the HTTP session if we own it."""
        if self._closed:
            return
        self._closed = True
        self.token_store.clear()
        if self._owns_http_session:
            try:
                await self.http_session.close()
            except (aiohttp.ClientError, OSError) as e:
                logging.error(f"💥 Error closing HTTP session: {str(e)}")
        logging.debug("✅ Auth context shutdown complete")

    async def __aenter__(self) -> AuthContext:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.shutdown()
