"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from pt_scheduler.config import settings
from pt_scheduler.main import app, build_resolver
from pt_scheduler.matching.schemas import MatchCandidate


@pytest.fixture
def candidates() -> list[MatchCandidate]:
    """Sample patient list for testing."""
    return [
        MatchCandidate(id="1", full_name="Robert Johnson", nicknames=["Rob"]),
        MatchCandidate(id="2", full_name="William Smith", nicknames=["Bill"]),
        MatchCandidate(
            id="3", full_name="Margaret Davis", nicknames=["Maggie", "Peggy"]
        ),
    ]


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Create async test client for FastAPI app with a local-only resolver."""
    app.state.patient_resolver = build_resolver(settings, http_client=None)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up app state
    del app.state.patient_resolver
