"""
Entry point for the SmartPark API.

This script creates the FastAPI application and includes all API routers.
Run with:

    uvicorn smartpark.main:app --reload

"""

from __future__ import annotations

import logging
from fastapi import FastAPI

from .core.db import engine, SessionLocal
from .core.config import settings
from .core.errors import log_exception
from .core.logging_config import setup_logging
from .models import Base
from .services.rates import seed_default_rates
from .api import api_router
from . import __version__


def create_app() -> FastAPI:
    app = FastAPI(title="SmartPark API", version=__version__)
    app.include_router(api_router)

    @app.on_event("startup")
    def _init_db() -> None:
        logger = logging.getLogger("startup")
        if settings.auto_create_db:
            try:
                Base.metadata.create_all(bind=engine)
            except Exception as exc:
                # Rates fall back to defaults when the registry is unreachable.
                log_exception(logger, "DB create_all failed", exc=exc)
                return
        if settings.auto_seed_rates:
            try:
                with SessionLocal() as db:
                    added = seed_default_rates(db)
                if added:
                    logger.info("Seeded default rates count=%s", added)
            except Exception as exc:
                log_exception(logger, "Seed default rates failed", exc=exc)

    return app


setup_logging()
app = create_app()
