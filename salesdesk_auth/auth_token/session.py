"""Session state machine (anonymous / pending / authenticated)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..errors.handling import log_error
from ..errors.internal import InternalError
from ..routes import is_public_route
from .types import Credentials, SavedIdentity, Session, SessionState, UserProfile

if TYPE_CHECKING:
    from .client import AuthClient
    from .hook_manager import HookManager
    from .profile_cache import ProfileCache
    from .refresh_coordinator import RefreshCoordinator
    from .store import TokenStore

StateListener = Callable[[SessionState], None]


class SessionController:
    """Application-facing session state.

    Wraps login, logout and startup restoration; token handling is delegated
    to the token store, the auth client and the refresh coordinator. Routing
    guards only read :attr:`is_authenticated`.
    """

    def __init__(
        self,
        store: TokenStore,
        client: AuthClient,
        coordinator: RefreshCoordinator,
        profile_cache: ProfileCache,
        hooks: HookManager | None = None,
    ) -> None:
        self.store = store
        self.client = client
        self.coordinator = coordinator
        self.profile_cache = profile_cache
        self._state = SessionState.ANONYMOUS
        self._user: UserProfile | None = None
        self._error: str | None = None
        self._listeners: list[StateListener] = []
        if hooks is not None:
            hooks.register_session_ended_hook(self._on_session_ended)

    # ------------------------------ state ------------------------------ #
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> UserProfile | None:
        return self._user

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self._state is SessionState.PENDING

    def snapshot(self) -> Session:
        return Session(user=self._user, authenticated=self.is_authenticated)

    def clear_error(self) -> None:
        self._error = None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with the new state on every transition.

        Returns:
            A function removing the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def saved_identity(self) -> SavedIdentity | None:
        """Remember-me identity for pre-filling the login form."""
        return self.profile_cache.get_saved_identity()

    def _transition(self, new_state: SessionState) -> None:
        old = self._state
        self._state = new_state
        if old is new_state:
            return
        logging.debug(f"🔀 Session state {old.value} -> {new_state.value}")
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:  # noqa: BLE001
                logging.warning(f"⚠️ Session listener error type={type(e).__name__} error={str(e)}")

    def _become_anonymous(self) -> None:
        self._user = None
        self._transition(SessionState.ANONYMOUS)

    async def _on_session_ended(self, reason: str) -> None:
        if self._state is SessionState.PENDING:
            # The running operation settles the final state itself.
            self._user = None
            return
        self._become_anonymous()

    # ---------------------------- operations ---------------------------- #
    async def login(
        self, credentials: Credentials, remember_me: bool = False
    ) -> UserProfile | None:
        """Log in and make the session authenticated.

        Invalid credentials are not retried: the error is stored, the state
        returns to anonymous and the exception is re-raised.

        Args:
            credentials: Email / user name / password.
            remember_me: Keep email and user name for the next login form.

        Returns:
            The user profile returned by the backend.

        Raises:
            CredentialsError: Credentials rejected.
            InternalError: Any other classified failure.
        """
        self._error = None
        self._transition(SessionState.PENDING)
        try:
            response = await self.client.login(credentials)
        except BaseException as e:
            if isinstance(e, Exception):
                self._error = str(e) or type(e).__name__
            self._become_anonymous()
            raise

        self.store.set(response.access_token)
        self._store_profile(response.user)
        self._apply_remember_me(credentials, remember_me)
        self._user = response.user
        self._transition(SessionState.AUTHENTICATED)
        logging.info(f"✅ User logged in user={credentials.user_name or credentials.email}")
        return response.user

    async def logout(self) -> None:
        """Log out; never raises.

        The backend call is best-effort. Local teardown (token, cached
        profile) happens whether or not it succeeded. The remember-me
        identity is kept. A refresh still in flight, or one started while
        the logout call runs, never stores its token.
        """
        self._transition(SessionState.PENDING)
        self.coordinator.invalidate()
        try:
            await self.client.logout()
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            log_error("Logout request failed; clearing local session anyway", e)
        finally:
            self.coordinator.invalidate()
            self.store.clear()
            try:
                self.profile_cache.clear_user()
            except OSError as e:
                log_error("Failed to clear cached profile", e)
            self._error = None
            self._become_anonymous()
        logging.info("✅ User logged out")

    async def restore_session(self, path: str | None = None) -> bool:
        """Try to resume a session at startup using only the refresh cookie.

        Skipped entirely (no network call) when ``path`` is a public route.
        Failure just means there is no session.

        Args:
            path: Current view path.

        Returns:
            True if the session is now authenticated.
        """
        if path is not None and is_public_route(path):
            logging.info(f"ℹ️ Public route detected - skipping session restore path={path}")
            self._become_anonymous()
            return False

        self._transition(SessionState.PENDING)
        try:
            await self.coordinator.refresh()
        except InternalError as e:
            logging.info(f"ℹ️ No valid session found - please login reason={type(e).__name__}")
            self.store.clear()
            self._become_anonymous()
            return False
        except BaseException:
            self._become_anonymous()
            raise

        user = self.profile_cache.get_user()
        if user is None:
            logging.info("ℹ️ Session cookie valid but no cached profile - please login")
            self.store.clear()
            self._become_anonymous()
            return False

        self._user = user
        self._transition(SessionState.AUTHENTICATED)
        logging.info("✅ Auth session restored via refresh token")
        return True

    # ------------------------------ helpers ------------------------------ #
    def _store_profile(self, user: UserProfile | None) -> None:
        if user is None:
            return
        try:
            self.profile_cache.set_user(user)
        except OSError as e:
            log_error("Failed to cache user profile", e)

    def _apply_remember_me(self, credentials: Credentials, remember_me: bool) -> None:
        try:
            if remember_me:
                self.profile_cache.set_saved_identity(
                    SavedIdentity(email=credentials.email, user_name=credentials.user_name)
                )
            else:
                self.profile_cache.clear_saved_identity()
        except OSError as e:
            log_error("Failed to update remember-me data", e)
