"""
Unit tests for main.py
"""

from unittest.mock import patch

import pytest

from main import main
from salesdesk_auth.application_context import AuthContext
from salesdesk_auth.auth_token.types import Credentials
from tests.fixtures.fake_backend import PASSWORD


def _create_with(backend):
    real_create = AuthContext.create

    async def create(settings, **kwargs):
        return await real_create(settings, http_session=backend, **kwargs)

    return create


class TestMain:
    @pytest.mark.asyncio
    async def test_main_without_session_returns_2(self, settings, backend):
        with patch("main.load_settings", return_value=settings), patch(
            "main.AuthContext.create", side_effect=_create_with(backend)
        ):
            assert await main("/dashboard") == 2
        assert backend.refresh_calls == 1

    @pytest.mark.asyncio
    async def test_main_restores_existing_session(self, settings, backend):
        ctx = await AuthContext.create(settings, http_session=backend)
        await ctx.session.login(Credentials(email="j@x.com", user_name="jdoe", password=PASSWORD))
        await ctx.shutdown()

        with patch("main.load_settings", return_value=settings), patch(
            "main.AuthContext.create", side_effect=_create_with(backend)
        ):
            assert await main("/sales") == 0

    @pytest.mark.asyncio
    async def test_main_on_public_route_makes_no_requests(self, settings, backend):
        with patch("main.load_settings", return_value=settings), patch(
            "main.AuthContext.create", side_effect=_create_with(backend)
        ):
            assert await main("/forgot-password") == 2
        assert backend.requests == []
