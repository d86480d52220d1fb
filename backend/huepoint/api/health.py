"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from huepoint.engine.strategies import get_registry
from huepoint.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        modes=[m.value for m in get_registry().modes()],
    )
