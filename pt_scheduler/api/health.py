"""Health check endpoints for monitoring and orchestration."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from pt_scheduler.config import settings

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    timestamp: datetime
    version: str


class LivenessResponse(BaseModel):
    """Response model for liveness probe."""

    status: str


class ReadinessResponse(BaseModel):
    """Response model for readiness probe."""

    status: str
    checks: dict[str, str]


@router.get("/", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=settings.app_version,
    )


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe - app is running."""
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> ReadinessResponse:
    """Readiness probe - app can serve traffic.

    Checks:
    - API is responding
    - Patient resolver is wired up
    - LLM credentials are present (disambiguation endpoint only)
    """
    checks: dict[str, str] = {"api": "ok"}

    resolver = getattr(request.app.state, "patient_resolver", None)
    checks["resolver"] = "ok" if resolver is not None else "failed"

    # A missing key only disables disambiguation; it does not fail readiness
    checks["llm"] = "ok" if settings.anthropic_api_key else "not_configured"

    status = (
        "ready"
        if all(v in ("ok", "not_configured") for v in checks.values())
        else "not_ready"
    )
    return ReadinessResponse(status=status, checks=checks)
