"""
Health check API endpoints.

Routes: GET /health, GET /health/generations

Dependencies: fastapi
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from agentchat.api.deps.dependencies import get_coordinator
from agentchat.core.streaming.coordinator import StreamingCoordinator


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


class GenerationsResponse(BaseModel):
    status: str
    live_generations: int


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/generations", response_model=GenerationsResponse)
async def health_generations(
    coordinator: StreamingCoordinator = Depends(get_coordinator),
) -> GenerationsResponse:
    """Number of generations currently running in this process."""
    return GenerationsResponse(status="healthy", live_generations=coordinator.live_generation_count)
