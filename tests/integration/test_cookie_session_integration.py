"""
Integration tests against a real aiohttp web server that issues the refresh
token as an HttpOnly cookie, exercising the client's cookie jar end to end.
"""

import asyncio
import itertools

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from salesdesk_auth.application_context import AuthContext
from salesdesk_auth.auth_token.types import Credentials, SessionState
from salesdesk_auth.config.model import ClientSettings
from salesdesk_auth.errors.internal import ServerError, SessionExpiredError
from salesdesk_auth.routes import Navigator
from tests.fixtures.api_responses import (
    ACCESS_EXPIRED,
    INVALID_CREDENTIALS,
    REFRESH_REJECTED,
    USER_PROFILE,
)

COOKIE = "refreshToken"
PASSWORD = "secret"


class CookieBackend:
    """Minimal auth server: rotating refresh cookies, bearer-checked resources."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.refresh_tokens: set[str] = set()
        self.access_tokens: set[str] = set()
        self.refresh_calls = 0

    def _mint(self) -> tuple[str, str]:
        access = f"at-{next(self._ids)}"
        refresh = f"rt-{next(self._ids)}"
        self.access_tokens.add(access)
        self.refresh_tokens.add(refresh)
        return access, refresh

    @staticmethod
    def _set_refresh_cookie(response: web.Response, refresh: str) -> None:
        response.set_cookie(
            COOKIE,
            refresh,
            httponly=True,
            samesite="Strict",
            path="/",
            max_age=7 * 24 * 60 * 60,
        )

    async def login(self, request: web.Request) -> web.Response:
        body = await request.json()
        if body.get("password") != PASSWORD:
            return web.json_response(INVALID_CREDENTIALS, status=401)
        access, refresh = self._mint()
        response = web.json_response({"accessToken": access, "user": USER_PROFILE})
        self._set_refresh_cookie(response, refresh)
        return response

    async def refresh(self, request: web.Request) -> web.Response:
        self.refresh_calls += 1
        await asyncio.sleep(0.01)
        presented = request.cookies.get(COOKIE)
        if presented not in self.refresh_tokens:
            return web.json_response(REFRESH_REJECTED, status=401)
        self.refresh_tokens.discard(presented)
        access, refresh = self._mint()
        response = web.json_response({"accessToken": access})
        self._set_refresh_cookie(response, refresh)
        return response

    async def logout(self, request: web.Request) -> web.Response:
        self.refresh_tokens.discard(request.cookies.get(COOKIE))
        response = web.json_response({"message": "Logged out successfully"})
        response.del_cookie(COOKIE, path="/")
        return response

    async def sales(self, request: web.Request) -> web.Response:
        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if token not in self.access_tokens:
            return web.json_response(ACCESS_EXPIRED, status=401)
        return web.json_response({"items": [], "token": token})

    async def broken_gateway(self, _request: web.Request) -> web.Response:
        # Not valid UTF-8 despite the declared charset.
        return web.Response(
            status=502,
            body=b"\xc3\x28 bad gateway \xff",
            content_type="text/plain",
            charset="utf-8",
        )

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/api/dreamsoftapi/Login/Login", self.login)
        app.router.add_post("/api/dreamsoftapi/Login/RefreshToken", self.refresh)
        app.router.add_post("/api/dreamsoftapi/Login/Logout", self.logout)
        app.router.add_get("/api/sales", self.sales)
        app.router.add_get("/api/broken", self.broken_gateway)
        return app


@pytest.fixture
def cookie_backend():
    return CookieBackend()


@pytest_asyncio.fixture
async def server(cookie_backend):
    srv = TestServer(cookie_backend.app())
    await srv.start_server()
    yield srv
    await srv.close()


@pytest_asyncio.fixture
async def live_context(server, tmp_path):
    settings = ClientSettings(
        base_url=str(server.make_url("/api")),
        timeout_seconds=5,
        profile_cache_file=str(tmp_path / "profile.json"),
        allow_ip_cookies=True,
    )
    ctx = await AuthContext.create(settings, navigator=Navigator("/dashboard"))
    yield ctx
    await ctx.shutdown()


def _refresh_cookie(ctx, server):
    cookies = ctx.http_session.cookie_jar.filter_cookies(server.make_url("/api"))
    morsel = cookies.get(COOKIE)
    return morsel.value if morsel else None


@pytest.mark.integration
class TestCookieSessionIntegration:
    @pytest.mark.asyncio
    async def test_login_stores_token_and_cookie(self, live_context, server):
        creds = Credentials(email="j@x.com", user_name="jdoe", password=PASSWORD)

        await live_context.session.login(creds)

        assert live_context.token_store.has() is True
        assert live_context.session.state is SessionState.AUTHENTICATED
        assert _refresh_cookie(live_context, server) is not None

    @pytest.mark.asyncio
    async def test_expired_access_token_recovers_through_cookie(
        self, live_context, server, cookie_backend
    ):
        await live_context.session.login(
            Credentials(email="j@x.com", user_name="jdoe", password=PASSWORD)
        )
        first_cookie = _refresh_cookie(live_context, server)
        cookie_backend.access_tokens.clear()

        results = await asyncio.gather(*(live_context.transport.get("/sales") for _ in range(5)))

        assert cookie_backend.refresh_calls == 1
        assert {r.data["token"] for r in results} == {live_context.token_store.get()}
        assert _refresh_cookie(live_context, server) != first_cookie

    @pytest.mark.asyncio
    async def test_restore_then_logout_revokes(self, live_context, server, cookie_backend):
        await live_context.session.login(
            Credentials(email="j@x.com", user_name="jdoe", password=PASSWORD)
        )
        # Simulate a reload: the in-memory token is gone, the cookie is not.
        live_context.token_store.clear()

        assert await live_context.session.restore_session("/dashboard") is True
        assert live_context.session.user.user_name == "jdoe"

        await live_context.session.logout()
        assert live_context.token_store.has() is False
        assert cookie_backend.refresh_tokens == set()

        assert await live_context.session.restore_session("/dashboard") is False
        assert live_context.session.state is SessionState.ANONYMOUS

    @pytest.mark.asyncio
    async def test_revoked_cookie_ends_session(self, live_context, cookie_backend):
        await live_context.session.login(
            Credentials(email="j@x.com", user_name="jdoe", password=PASSWORD)
        )
        cookie_backend.refresh_tokens.clear()
        cookie_backend.access_tokens.clear()

        with pytest.raises(SessionExpiredError):
            await live_context.transport.get("/sales")

        assert live_context.navigator.history == ["/login"]
        assert live_context.session.state is SessionState.ANONYMOUS

    @pytest.mark.asyncio
    async def test_undecodable_error_body_is_server_error(self, live_context, cookie_backend):
        with pytest.raises(ServerError) as exc_info:
            await live_context.transport.get("/broken")

        assert exc_info.value.status == 502
        assert "bad gateway" in str(exc_info.value)
        assert cookie_backend.refresh_calls == 0
