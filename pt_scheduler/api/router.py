"""API router aggregation."""

from fastapi import APIRouter

from pt_scheduler.api.health import router as health_router
from pt_scheduler.api.matching import router as matching_router

api_router = APIRouter()
api_router.include_router(health_router)
# Patient matching and the disambiguation service
api_router.include_router(matching_router)
