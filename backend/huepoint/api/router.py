"""Master API router: mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from huepoint.api import color, health, segment

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(segment.router)
api_router.include_router(color.router)
