"""Hook management for session lifecycle events."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

SessionHook = Callable[[str], Awaitable[None] | None]


class HookManager:
    """Manages registration and firing of session-ended hooks.

    Hooks receive the reason string (``"refresh_rejected"``,
    ``"refresh_failed"``, ``"retry_rejected"``). Plain callables and coroutine
    functions are both accepted; coroutines are awaited in registration order
    so that every subscriber has observed the teardown before the failing
    request's error reaches its caller.
    """

    def __init__(self) -> None:
        self._session_ended_hooks: list[SessionHook] = []
        self.fired_count = 0

    def register_session_ended_hook(self, hook: SessionHook) -> None:
        """Register a hook invoked each time the session is torn down.

        Hooks are additive (multiple hooks can be registered).
        """
        self._session_ended_hooks.append(hook)

    def unregister_session_ended_hook(self, hook: SessionHook) -> None:
        try:
            self._session_ended_hooks.remove(hook)
        except ValueError:
            pass

    async def fire_session_ended(self, reason: str) -> None:
        """Invoke every session-ended hook.

        A failing hook is logged and does not stop the others.

        Args:
            reason: Why the session ended.
        """
        self.fired_count += 1
        for hook in list(self._session_ended_hooks):
            try:
                result = hook(reason)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:  # noqa: BLE001
                logging.warning(
                    f"⚠️ Session-ended hook error reason={reason} type={type(e).__name__} error={str(e)}"
                )
