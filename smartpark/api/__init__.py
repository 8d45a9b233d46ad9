"""
API package for SmartPark.

This package aggregates all API routers to be included in the FastAPI
application. The API is versioned under ``/api/v1``.
"""

from fastapi import APIRouter
from .v1.health import router as health_router
from .v1.rates import router as rates_router
from .v1.sessions import router as sessions_router
from .v1.analytics import router as analytics_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(rates_router)
api_router.include_router(sessions_router)
api_router.include_router(analytics_router)
