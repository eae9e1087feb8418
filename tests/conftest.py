import logging

import pytest
import pytest_asyncio

from salesdesk_auth.application_context import AuthContext
from salesdesk_auth.config.model import ClientSettings
from salesdesk_auth.logging_config import error_aggregator
from salesdesk_auth.routes import Navigator
from tests.fixtures.fake_backend import BASE_URL, FakeBackend


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    """Keep error statistics from leaking between tests."""
    error_aggregator.reset()
    yield
    error_aggregator.reset()


@pytest.fixture
def settings(tmp_path) -> ClientSettings:
    return ClientSettings(
        base_url=BASE_URL,
        timeout_seconds=5,
        profile_cache_file=str(tmp_path / "profile.json"),
        debug=True,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def auth_context(settings, backend):
    """AuthContext wired to the fake backend, starting on the dashboard."""
    root = logging.getLogger()
    previous = root.level
    root.setLevel(logging.DEBUG)
    ctx = await AuthContext.create(
        settings, http_session=backend, navigator=Navigator("/dashboard")
    )
    yield ctx
    await ctx.shutdown()
    root.setLevel(previous)
