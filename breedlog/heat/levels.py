"""Progesterone level classification.

Maps a canonical (ng/ml) concentration onto the ordered bands of
``thresholds.LEVEL_BANDS`` and exposes the same bands, converted, for chart
rendering so the chart and the classifier can never disagree.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from breedlog.heat.base import InvalidMeasurementError, Level, ProgesteroneUnit, Urgency
from breedlog.heat.thresholds import LEVEL_BANDS, LevelBand
from breedlog.heat.units import from_canonical

logger = logging.getLogger("breedlog.heat.levels")


@dataclass(frozen=True)
class LevelStatus:
    """Classification of one canonical progesterone value.

    Attributes:
        level:       Named physiological level.
        urgency:     Urgency tag attached to the level.
        retest_days: Days until the next test, or None when no test is advised.
        value_ng:    The classified value (ng/ml).
        band:        The matching band, with its boundaries.
    """

    level: Level
    urgency: Urgency
    retest_days: int | None
    value_ng: float
    band: LevelBand


@dataclass(frozen=True)
class ChartZone:
    """A level band expressed in a display unit; ``upper`` is None when unbounded."""

    level: Level
    urgency: Urgency
    lower: float
    upper: float | None
    unit: ProgesteroneUnit


def band_for(value_ng: float) -> LevelBand:
    """Return the band containing ``value_ng``.

    Raises:
        InvalidMeasurementError: For negative or NaN values.
    """
    if math.isnan(value_ng) or value_ng < 0:
        raise InvalidMeasurementError(f"Cannot classify progesterone value {value_ng!r}")
    for band in LEVEL_BANDS:
        if band.contains(value_ng):
            return band
    # Only reachable for +inf, which belongs to the unbounded top band.
    return LEVEL_BANDS[-1]


def classify(value_ng: float) -> LevelStatus:
    """Classify a canonical progesterone value."""
    band = band_for(value_ng)
    return LevelStatus(
        level=band.level,
        urgency=band.urgency,
        retest_days=band.retest_days,
        value_ng=value_ng,
        band=band,
    )


def chart_zones(unit: ProgesteroneUnit = ProgesteroneUnit.ng) -> list[ChartZone]:
    """Return the level bands converted to ``unit`` for chart zone rendering."""
    return [
        ChartZone(
            level=band.level,
            urgency=band.urgency,
            lower=from_canonical(band.lower, unit),
            upper=None if math.isinf(band.upper) else from_canonical(band.upper, unit),
            unit=unit,
        )
        for band in LEVEL_BANDS
    ]
