"""Single-flight access token refresh."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable

from ..errors.internal import SessionExpiredError
from .store import TokenStore


class RefreshCoordinator:
    """Ensures at most one refresh call is in flight at any time.

    The first caller to arrive while idle performs the refresh; everyone who
    arrives while it is running is queued and receives the same outcome (the
    new token, or the same exception). The queue is drained and the
    ``refreshing`` flag reset together, under the lock, once per cycle, so a
    later expiry starts a fresh cycle.

    Every session carries a generation number. Ending the session advances
    it, so a refresh that completes for an older generation has its token
    discarded instead of stored.

    Args:
        store: Token store updated on success and cleared on failure.
        refresh_call: Coroutine function hitting the refresh endpoint and
            returning the new access token.
    """

    def __init__(
        self, store: TokenStore, refresh_call: Callable[[], Awaitable[str]]
    ) -> None:
        self._store = store
        self._refresh_call = refresh_call
        self._lock = threading.Lock()
        self._refreshing = False
        self._waiters: list[asyncio.Future[str]] = []
        self._generation = 0
        # Diagnostics
        self.refresh_count = 0
        self.last_error: BaseException | None = None

    @property
    def refreshing(self) -> bool:
        with self._lock:
            return self._refreshing

    @property
    def waiter_count(self) -> int:
        with self._lock:
            return len(self._waiters)

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def invalidate(self, expected: int | None = None) -> bool:
        """Advance the session generation.

        Args:
            expected: Only advance if the generation still equals this value.
                Concurrent failures of one session then end it once.

        Returns:
            True if this call advanced the generation.
        """
        with self._lock:
            if expected is not None and expected != self._generation:
                return False
            self._generation += 1
            return True

    async def refresh(self) -> str:
        """Obtain a new access token, joining an in-flight refresh if any.

        Returns:
            The new access token (already stored in the token store).

        Raises:
            Whatever the refresh call raised; every queued caller receives
            the same exception. SessionExpiredError if the session was
            ended while the refresh was in flight.
        """
        waiter: asyncio.Future[str] | None = None
        with self._lock:
            if self._refreshing:
                waiter = asyncio.get_running_loop().create_future()
                self._waiters.append(waiter)
                queued = len(self._waiters)
            else:
                self._refreshing = True
                self.refresh_count += 1
                generation = self._generation
        if waiter is not None:
            logging.debug(f"⏳ Refresh in flight, waiting queued={queued}")
            return await waiter
        return await self._run_refresh(generation)

    async def _run_refresh(self, generation: int) -> str:
        token: str | None = None
        error: BaseException | None = None
        try:
            token = await self._refresh_call()
            with self._lock:
                stale = generation != self._generation
                if not stale:
                    self._store.set(token)
            if stale:
                token = None
                logging.info("🚫 Discarding refreshed token, session ended meanwhile")
                raise SessionExpiredError(
                    "Session ended while the access token was being refreshed",
                    status=401,
                    data={"reason": "invalidated"},
                )
            self.last_error = None
            logging.info(f"🔄 Access token refreshed cycle={self.refresh_count}")
            return token
        except BaseException as e:
            error = e
            self.last_error = e
            with self._lock:
                # Leave the store alone once a newer session owns it.
                if generation == self._generation:
                    self._store.clear()
            if not isinstance(e, asyncio.CancelledError):
                logging.warning(
                    f"❌ Access token refresh failed type={type(e).__name__} error={str(e)}"
                )
            raise
        finally:
            self._settle(token, error)

    def _settle(self, token: str | None, error: BaseException | None) -> None:
        with self._lock:
            waiters, self._waiters = self._waiters, []
            self._refreshing = False
        if waiters:
            logging.debug(f"📣 Releasing refresh waiters count={len(waiters)} ok={error is None}")
        for fut in waiters:
            if fut.done():
                continue
            if isinstance(error, asyncio.CancelledError):
                fut.cancel()
            elif error is not None:
                fut.set_exception(error)
            else:
                fut.set_result(token)  # type: ignore[arg-type]
