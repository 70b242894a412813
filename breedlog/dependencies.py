"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from breedlog.config import Settings, get_settings
from breedlog.heat.config_loader import HeatConfig, get_heat_config

# Annotated shortcuts for route signatures
AppSettings = Annotated[Settings, Depends(get_settings)]
HeatSettings = Annotated[HeatConfig, Depends(get_heat_config)]
