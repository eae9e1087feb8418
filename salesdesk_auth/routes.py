"""Route table and navigation state.

The auth core only needs two things from routing: whether a path requires a
session (startup restoration is skipped on public routes) and a way to send
the user to the login view when the session ends.
"""

from __future__ import annotations

import logging
from collections.abc import Callable


class ROUTES:
    # Public
    LOGIN = "/login"
    REGISTER = "/register"
    FORGOT_PASSWORD = "/forgot-password"
    RESET_PASSWORD = "/reset-password"

    # Protected
    ROOT = "/"
    DASHBOARD = "/dashboard"
    SALES = "/sales"
    INVENTORY = "/inventory"
    CUSTOMERS = "/customers"
    REPORTS = "/reports"


# Login is deliberately absent: restoring a session on the login view lets an
# already signed-in user skip the form.
PUBLIC_ROUTES: tuple[str, ...] = (
    ROUTES.REGISTER,
    ROUTES.FORGOT_PASSWORD,
    ROUTES.RESET_PASSWORD,
)

PROTECTED_ROUTES: tuple[str, ...] = (
    ROUTES.DASHBOARD,
    ROUTES.SALES,
    ROUTES.INVENTORY,
    ROUTES.CUSTOMERS,
    ROUTES.REPORTS,
)


def is_public_route(path: str) -> bool:
    """Return True if ``path`` is (or is below) a route usable without a session."""
    return any(path.startswith(route) for route in PUBLIC_ROUTES)


def is_protected_route(path: str) -> bool:
    return any(path.startswith(route) for route in PROTECTED_ROUTES)


class Navigator:
    """Holds the current view path and performs the login redirect.

    ``redirect_to_login`` is a no-op while the current path is already the
    login view, so any number of simultaneous session failures produce a
    single redirect.
    """

    def __init__(
        self,
        current_path: str = ROUTES.ROOT,
        on_navigate: Callable[[str], None] | None = None,
    ) -> None:
        self.current_path = current_path
        self.history: list[str] = []
        self._on_navigate = on_navigate

    def navigate(self, path: str) -> None:
        self.current_path = path
        self.history.append(path)
        if self._on_navigate is not None:
            self._on_navigate(path)

    def redirect_to_login(self) -> bool:
        """Navigate to the login view unless already there.

        Returns:
            True if a navigation happened.
        """
        if ROUTES.LOGIN in self.current_path:
            return False
        logging.info(f"🔒 Redirecting to login from={self.current_path}")
        self.navigate(ROUTES.LOGIN)
        return True
