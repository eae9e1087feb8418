"""
Unit tests for the route table and Navigator.
"""

import pytest

from salesdesk_auth.routes import ROUTES, Navigator, is_protected_route, is_public_route


@pytest.mark.parametrize(
    "path",
    ["/register", "/forgot-password", "/reset-password", "/reset-password?token=abc"],
)
def test_public_routes(path):
    assert is_public_route(path) is True


@pytest.mark.parametrize("path", ["/login", "/", "/dashboard", "/sales/42"])
def test_non_public_routes(path):
    assert is_public_route(path) is False


def test_protected_routes():
    assert is_protected_route("/sales/42") is True
    assert is_protected_route(ROUTES.REPORTS) is True
    assert is_protected_route("/register") is False


class TestNavigator:
    def test_redirect_happens_once(self):
        visited = []
        nav = Navigator("/sales", on_navigate=visited.append)

        assert nav.redirect_to_login() is True
        assert nav.redirect_to_login() is False
        assert nav.redirect_to_login() is False

        assert nav.current_path == ROUTES.LOGIN
        assert visited == [ROUTES.LOGIN]
        assert nav.history == [ROUTES.LOGIN]

    def test_no_redirect_from_login_view(self):
        nav = Navigator("/login?next=/sales")
        assert nav.redirect_to_login() is False
        assert nav.history == []

    def test_navigate_records_history(self):
        nav = Navigator()
        nav.navigate("/dashboard")
        nav.navigate("/sales")
        assert nav.current_path == "/sales"
        assert nav.history == ["/dashboard", "/sales"]
