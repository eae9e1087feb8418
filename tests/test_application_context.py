"""Tests for salesdesk_auth/application_context.py."""

import aiohttp
import pytest

from salesdesk_auth.application_context import AuthContext
from salesdesk_auth.config.model import ClientSettings


@pytest.mark.asyncio
async def test_create_wires_shared_components(settings, backend):
    ctx = await AuthContext.create(settings, http_session=backend)
    try:
        assert ctx.transport.store is ctx.token_store
        assert ctx.coordinator is ctx.session.coordinator
        assert ctx.session.store is ctx.token_store
        assert ctx.transport.profile_cache is ctx.profile_cache
        assert ctx.navigator.current_path == "/"
    finally:
        await ctx.shutdown()


@pytest.mark.asyncio
async def test_injected_session_is_not_closed(settings, backend):
    ctx = await AuthContext.create(settings, http_session=backend)
    ctx.token_store.set("t")

    await ctx.shutdown()
    await ctx.shutdown()  # idempotent

    assert backend.closed is False
    assert ctx.token_store.has() is False


@pytest.mark.asyncio
async def test_owned_session_uses_cookie_jar_and_is_closed(tmp_path):
    settings = ClientSettings(
        base_url="http://127.0.0.1:9",
        profile_cache_file=str(tmp_path / "p.json"),
        allow_ip_cookies=True,
    )
    async with await AuthContext.create(settings) as ctx:
        assert isinstance(ctx.http_session, aiohttp.ClientSession)
        assert isinstance(ctx.http_session.cookie_jar, aiohttp.CookieJar)
        session = ctx.http_session
    assert session.closed

