from __future__ import annotations

from fastapi import APIRouter

from .endpoints import analysis, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(analysis.router, prefix="/analysis", tags=["analysis"])
