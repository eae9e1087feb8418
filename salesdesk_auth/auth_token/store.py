"""In-memory access token holder."""

from __future__ import annotations

import threading


class TokenStore:
    """Single mutable cell holding the current access token.

    The token lives only in process memory: it is never written to disk and
    is gone after a restart, logout or failed refresh. One instance is built
    per application context and injected into the transport, the refresh
    coordinator and the session controller.

    All operations are total and guarded by a lock so reads never observe a
    partially applied write, even if called from worker threads.
    """

    def __init__(self) -> None:
        self._token: str | None = None
        self._lock = threading.Lock()

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token

    def get(self) -> str | None:
        with self._lock:
            return self._token

    def clear(self) -> None:
        with self._lock:
            self._token = None

    def has(self) -> bool:
        """True when a non-empty token is held."""
        with self._lock:
            return bool(self._token)

    def __repr__(self) -> str:  # never leak the token into logs
        return f"TokenStore(has_token={self.has()})"
