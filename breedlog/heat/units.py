"""Progesterone unit conversion and manual-entry validation.

Two units are supported, ng/ml (canonical) and nmol/L, related by the fixed
factor in ``thresholds.NMOL_PER_NG``.  Conversion *to* the canonical unit
keeps full precision so classification never loses information; conversion
*from* it rounds to one decimal for display.  Round-tripping a valid value
therefore reproduces it to within 0.1.

The display unit is always passed in explicitly by the caller; the engine
keeps no "preferred unit" state.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from breedlog.heat.base import OutOfRangeError, ProgesteroneUnit
from breedlog.heat.thresholds import CANONICAL_UNIT, MAX_VALID_NG, NMOL_PER_NG

logger = logging.getLogger("breedlog.heat.units")

UNIT_LABELS: dict[ProgesteroneUnit, str] = {
    ProgesteroneUnit.ng: "ng/ml",
    ProgesteroneUnit.nmol: "nmol/L",
}

UNIT_ALIASES: dict[str, ProgesteroneUnit] = {
    "ng": ProgesteroneUnit.ng,
    "ng/ml": ProgesteroneUnit.ng,
    "nmol": ProgesteroneUnit.nmol,
    "nmol/l": ProgesteroneUnit.nmol,
}


@dataclass(frozen=True)
class ValidationRange:
    """Inclusive range of acceptable manual entries for one unit."""

    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


def round_display(value: float) -> float:
    """Round to one decimal, halves toward +infinity."""
    return math.floor(value * 10 + 0.5) / 10


def parse_unit(raw: str) -> ProgesteroneUnit:
    """Resolve a unit string ("ng/mL", "nmol/L", "ng", ...) to a unit.

    Raises:
        ValueError: If the unit is not a supported progesterone unit.
    """
    unit = UNIT_ALIASES.get(raw.strip().lower())
    if unit is None:
        raise ValueError(f"Unsupported progesterone unit: {raw!r}")
    return unit


def to_canonical(value: float, unit: ProgesteroneUnit) -> float:
    """Convert a value in ``unit`` to ng/ml."""
    if unit is ProgesteroneUnit.nmol:
        return value / NMOL_PER_NG
    return value


def from_canonical(value_ng: float, unit: ProgesteroneUnit) -> float:
    """Convert an ng/ml value to ``unit`` for display (one decimal)."""
    if unit is ProgesteroneUnit.nmol:
        return round_display(value_ng * NMOL_PER_NG)
    return round_display(value_ng)


def validation_range(unit: ProgesteroneUnit) -> ValidationRange:
    """Return the manual-entry range for ``unit``.

    The upper limit is derived from the canonical limit, so both units
    always describe the same physical range.
    """
    if unit is CANONICAL_UNIT:
        return ValidationRange(0.0, MAX_VALID_NG)
    return ValidationRange(0.0, round_display(MAX_VALID_NG * NMOL_PER_NG))


def ensure_in_range(value: float, unit: ProgesteroneUnit) -> float:
    """Return ``value`` unchanged, or raise if it is outside the unit's range.

    Raises:
        OutOfRangeError: If the value is NaN or outside ``validation_range``.
    """
    bounds = validation_range(unit)
    if math.isnan(value) or not bounds.contains(value):
        logger.debug("Rejected %s %s (valid %s–%s)", value, unit.value, bounds.min, bounds.max)
        raise OutOfRangeError(
            f"{value} {unit_label(unit)} is outside the valid range "
            f"{bounds.min}–{bounds.max} {unit_label(unit)}"
        )
    return value


def unit_label(unit: ProgesteroneUnit) -> str:
    return UNIT_LABELS[unit]


def format_value(value_ng: float, unit: ProgesteroneUnit) -> str:
    """Format a canonical value in ``unit`` with its label, e.g. ``"15.9 nmol/L"``."""
    return f"{from_canonical(value_ng, unit):.1f} {unit_label(unit)}"
