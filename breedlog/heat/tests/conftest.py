"""Shared fixtures and builders for heat-cycle engine tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from breedlog.heat.base import CycleRecord, Measurement, MeasurementKind, ProgesteroneUnit
from breedlog.heat.config_loader import HeatConfig, load_heat_config
from breedlog.heat.mating_window import MatingWindowEstimator

# First progesterone test of the canonical test cycle
TEST_START = datetime(2024, 3, 1, 9, 0)
TEST_TODAY = date(2024, 6, 1)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def hormone(
    day: float,
    value: float,
    unit: ProgesteroneUnit = ProgesteroneUnit.ng,
    start: datetime = TEST_START,
) -> Measurement:
    """A progesterone test ``day`` days after ``start``."""
    return Measurement.hormone(start + timedelta(days=day), value, unit)


def temperature(day: float, value: float, start: datetime = TEST_START) -> Measurement:
    return Measurement(
        timestamp=start + timedelta(days=day),
        kind=MeasurementKind.temperature,
        value=value,
    )


def cycle(start: date, end: date | None = None, cycle_id: str | None = None) -> CycleRecord:
    return CycleRecord(id=cycle_id or f"cycle-{start.isoformat()}", start_date=start, end_date=end)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def heat_config() -> HeatConfig:
    """Load the real bundled heat config for tests."""
    return load_heat_config()


@pytest.fixture
def estimator(heat_config: HeatConfig) -> MatingWindowEstimator:
    return MatingWindowEstimator(heat_config)
