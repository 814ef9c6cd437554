"""Root conftest: shared fixtures for all tests.

Provides:
- A fake activity fetcher (no network access in any test)
- API client with the GitHub fetcher dependency overridden
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from tests.helpers.fake_fetcher import FakeFetcher


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
async def api_client(fake_fetcher: FakeFetcher):
    """HTTP client against the app with the fetcher replaced by ``fake_fetcher``."""
    from eod_report.api.deps import get_github_fetcher
    from eod_report.main import app

    app.dependency_overrides[get_github_fetcher] = lambda: fake_fetcher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
