"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from pt_scheduler.api.router import api_router
from pt_scheduler.config import Settings, settings
from pt_scheduler.matching.aliases import AliasTable, default_alias_table
from pt_scheduler.matching.confidence import TierThresholds
from pt_scheduler.matching.disambiguator import NameDisambiguator
from pt_scheduler.matching.fuzzy_matcher import FuzzyMatcher
from pt_scheduler.matching.remote_matcher import RemoteMatcher
from pt_scheduler.matching.resolver import PatientResolver
from pt_scheduler.matching.token_matcher import TokenMatcher
from pt_scheduler.services.llm_client import LLMClient

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_resolver(
    config: Settings, http_client: httpx.AsyncClient | None = None
) -> PatientResolver:
    """Wire a PatientResolver from settings.

    The alias table is loaded once here; a missing or invalid
    ``alias_table_path`` fails startup.

    Args:
        config: Application settings
        http_client: Client for the remote fallback; None disables stage 3

    Returns:
        Configured PatientResolver
    """
    alias_table = (
        AliasTable.from_json_file(config.alias_table_path)
        if config.alias_table_path
        else default_alias_table
    )

    remote_matcher = None
    if http_client is not None:
        remote_matcher = RemoteMatcher(
            client=http_client,
            url=config.remote_match_url,
            timeout=config.remote_match_timeout_seconds,
        )

    return PatientResolver(
        token_matcher=TokenMatcher(alias_table),
        fuzzy_matcher=FuzzyMatcher(threshold=config.fuzzy_distance_threshold),
        remote_matcher=remote_matcher,
        thresholds=TierThresholds(
            auto=config.auto_accept_threshold,
            confirm=config.confirm_threshold,
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management.

    Startup:
    - Open shared HTTP client for the remote fallback
    - Build patient resolver and name disambiguator

    Shutdown:
    - Close HTTP client
    """
    logger.info(f"Starting {settings.app_name}...")

    async with httpx.AsyncClient() as http_client:
        app.state.patient_resolver = build_resolver(settings, http_client)
        logger.info(f"Patient resolver initialized: {settings.remote_match_url}")

        app.state.name_disambiguator = NameDisambiguator(LLMClient())
        logger.info("Name disambiguator initialized")

        yield

        logger.info(f"Shutting down {settings.app_name}...")

    logger.info("HTTP client closed")


app = FastAPI(
    title=settings.app_name,
    description="Patient name matching for PT visit scheduling",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pt_scheduler.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
