"""Tests for API endpoints."""

import json
from pathlib import Path

import httpx
import pytest
from httpx import AsyncClient

from pt_scheduler.config import Settings
from pt_scheduler.main import build_resolver
from pt_scheduler.matching.aliases import AliasTableError
from pt_scheduler.matching.schemas import MatchCandidate, MatchTier


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test basic health check endpoint."""
    response = await client.get("/health/")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert data["version"] == "0.1.0"
    assert set(data) == {"status", "timestamp", "version"}


@pytest.mark.asyncio
async def test_liveness(client: AsyncClient) -> None:
    """Test liveness probe endpoint."""
    response = await client.get("/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


@pytest.mark.asyncio
async def test_readiness(client: AsyncClient) -> None:
    """Test readiness probe endpoint."""
    response = await client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["api"] == "ok"
    assert data["checks"]["resolver"] == "ok"


@pytest.mark.asyncio
async def test_resolve_through_app(client: AsyncClient) -> None:
    """Full app resolves a nickname locally."""
    response = await client.post(
        "/match/resolve",
        json={
            "names": ["Bob Johnson"],
            "candidates": [
                {"id": "1", "fullName": "Robert Johnson", "nicknames": ["Rob"]}
            ],
            "skipRemoteFallback": True,
        },
    )
    assert response.status_code == 200
    result = response.json()["results"][0]
    assert result["candidate"]["id"] == "1"
    assert result["tier"] == "auto"


@pytest.mark.asyncio
async def test_build_resolver_loads_alias_file(tmp_path: Path) -> None:
    """Configured alias file replaces the bundled table."""
    path = tmp_path / "aliases.json"
    path.write_text(json.dumps({"edward": ["ted"]}))
    resolver = build_resolver(Settings(alias_table_path=str(path)))
    patients = [MatchCandidate(id="1", full_name="Edward Nolan")]

    ted = await resolver.resolve("Ted Nolan", patients)
    bob = await resolver.resolve("Bob", [MatchCandidate(id="2", full_name="Robert")])

    assert ted.confidence == 100
    assert ted.tier == MatchTier.AUTO
    assert bob.candidate is None


def test_build_resolver_rejects_bad_alias_file(tmp_path: Path) -> None:
    path = tmp_path / "aliases.json"
    path.write_text("not json")

    with pytest.raises(AliasTableError):
        build_resolver(Settings(alias_table_path=str(path)))


@pytest.mark.asyncio
async def test_build_resolver_calls_remote_url() -> None:
    """Stage 3 posts to the configured disambiguation URL."""
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"matchedName": "Robert", "confidence": 77})

    config = Settings(remote_match_url="http://disambiguator.test/api/match-patient")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        resolver = build_resolver(config, http)
        result = await resolver.resolve(
            "Qqq", [MatchCandidate(id="2", full_name="Robert")]
        )

    assert seen == ["http://disambiguator.test/api/match-patient"]
    assert result.candidate is not None
    assert result.confidence == 77
    assert result.tier == MatchTier.CONFIRM
