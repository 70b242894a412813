"""Breedlog API — FastAPI application entry point.

Run locally:
    uvicorn breedlog.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from breedlog.config import Settings, get_settings
from breedlog.heat.config_loader import HeatConfig, get_heat_config, reload_heat_config
from breedlog.routers import health, heat

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("breedlog")


def _load_engine_config(settings: Settings) -> HeatConfig:
    """Use the configured heat config file if one is set, else the bundled one."""
    if settings.heat_config_path:
        return reload_heat_config(Path(settings.heat_config_path))
    return get_heat_config()


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    config = _load_engine_config(settings)
    logger.info(
        "%s v%s [%s] ready, heat config v%s",
        settings.app_name,
        settings.app_version,
        settings.environment,
        config.version,
    )
    yield
    logger.info("%s shut down", settings.app_name)


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()
    docs_enabled = settings.debug or settings.environment != "production"

    app = FastAPI(
        title=f"{settings.app_name} API",
        description=(
            "Dog-breeding records: progesterone analysis, mating windows "
            "and heat-cycle predictions."
        ),
        version=settings.app_version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Stateless and unauthenticated: no cookies, read/compute verbs only
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.include_router(health.router)
    app.include_router(heat.router, prefix="/api/v1")

    return app


app = create_app()
