"""Liveness endpoint reporting the engine config in use."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from breedlog.dependencies import AppSettings
from breedlog.heat.config_loader import get_heat_config

router = APIRouter(tags=["system"])
logger = logging.getLogger("breedlog.health")


@router.get("/health")
async def health_check(settings: AppSettings) -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also reports which heat config version the engine is running with.
    """
    config_version = None
    try:
        config_version = get_heat_config().version
    except (FileNotFoundError, ValueError) as exc:
        logger.warning("Health check could not load heat config: %s", exc)

    return {
        "status": "healthy" if config_version else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "heat_config": config_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
