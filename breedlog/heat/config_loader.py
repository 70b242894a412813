"""Load, validate, and hot-reload the heat-cycle engine configuration.

The config lives in ``heat_config.yaml`` alongside this module.  It is loaded
once and cached; call ``reload_heat_config()`` to re-read it from disk.

Usage::

    from breedlog.heat.config_loader import get_heat_config

    config = get_heat_config()
    config.cycle.standard_interval_days        # 365
    config.mating_window.ovulation_offset_days  # 2
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("breedlog.heat.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "heat_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class MatingWindowConfig:
    """Offsets and tiers used by the mating-window estimator."""

    ovulation_offset_days: int = 2
    window_days_before_ovulation: int = 1
    window_days_after_ovulation: int = 0
    confirming_points_for_high: int = 2
    rapid_rise_detection: bool = False
    rapid_rise_factor: float = 2.0


@dataclass
class CycleConfig:
    """Interval fallback, default heat length and phase boundaries."""

    standard_interval_days: int = 365
    default_cycle_length_days: int = 21
    proestrus_end_day: int = 9
    estrus_end_day: int = 16


@dataclass
class UpcomingConfig:
    """Default horizon for projected heat dates."""

    days_ahead: int = 90
    days_past: int = 0


@dataclass
class HeatConfig:
    """Complete, validated engine configuration.

    Attributes:
        version:       Config schema version string.
        mating_window: Mating-window estimator settings.
        cycle:         Interval and phase settings.
        upcoming:      Projection horizon settings.
    """

    version: str
    mating_window: MatingWindowConfig = field(default_factory=MatingWindowConfig)
    cycle: CycleConfig = field(default_factory=CycleConfig)
    upcoming: UpcomingConfig = field(default_factory=UpcomingConfig)
    _raw: dict = field(default_factory=dict, repr=False)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when heat_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Heat config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> HeatConfig:
    """Validate the raw YAML dict and construct a HeatConfig.

    Missing keys take their defaults; every invalid value is collected and
    reported in a single ConfigValidationError.
    """
    errors: list[str] = []

    def _int(section: dict, key: str, default: int, name: str, minimum: int = 0) -> int:
        val = section.get(key, default)
        try:
            num = int(val)
        except (TypeError, ValueError):
            errors.append(f"{name}.{key} must be an integer, got {val!r}")
            return default
        if num < minimum:
            errors.append(f"{name}.{key} = {num} must be >= {minimum}")
        return num

    def _section(key: str) -> dict[str, Any]:
        val = raw.get(key) or {}
        if not isinstance(val, dict):
            errors.append(f"'{key}' must be a mapping")
            return {}
        return val

    version = str(raw.get("version", "1.0"))

    # ── Mating window ──
    mw_raw = _section("mating_window")
    factor_raw = mw_raw.get("rapid_rise_factor", 2.0)
    try:
        factor = float(factor_raw)
    except (TypeError, ValueError):
        errors.append(f"mating_window.rapid_rise_factor must be a number, got {factor_raw!r}")
        factor = 2.0
    else:
        if factor <= 1.0:
            errors.append(f"mating_window.rapid_rise_factor = {factor} must be > 1.0")
    mating_window = MatingWindowConfig(
        ovulation_offset_days=_int(mw_raw, "ovulation_offset_days", 2, "mating_window"),
        window_days_before_ovulation=_int(
            mw_raw, "window_days_before_ovulation", 1, "mating_window"
        ),
        window_days_after_ovulation=_int(
            mw_raw, "window_days_after_ovulation", 0, "mating_window"
        ),
        confirming_points_for_high=_int(
            mw_raw, "confirming_points_for_high", 2, "mating_window", minimum=1
        ),
        rapid_rise_detection=bool(mw_raw.get("rapid_rise_detection", False)),
        rapid_rise_factor=factor,
    )

    # ── Cycle ──
    cy_raw = _section("cycle")
    cycle = CycleConfig(
        standard_interval_days=_int(cy_raw, "standard_interval_days", 365, "cycle", minimum=1),
        default_cycle_length_days=_int(
            cy_raw, "default_cycle_length_days", 21, "cycle", minimum=1
        ),
        proestrus_end_day=_int(cy_raw, "proestrus_end_day", 9, "cycle", minimum=1),
        estrus_end_day=_int(cy_raw, "estrus_end_day", 16, "cycle", minimum=1),
    )
    if cycle.estrus_end_day <= cycle.proestrus_end_day:
        errors.append(
            f"cycle.estrus_end_day ({cycle.estrus_end_day}) must be after "
            f"cycle.proestrus_end_day ({cycle.proestrus_end_day})"
        )

    # ── Upcoming ──
    up_raw = _section("upcoming")
    upcoming = UpcomingConfig(
        days_ahead=_int(up_raw, "days_ahead", 90, "upcoming"),
        days_past=_int(up_raw, "days_past", 0, "upcoming"),
    )

    if errors:
        raise ConfigValidationError(
            f"heat_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return HeatConfig(
        version=version,
        mating_window=mating_window,
        cycle=cycle,
        upcoming=upcoming,
        _raw=raw,
    )


def load_heat_config(path: Path | None = None) -> HeatConfig:
    """Load and validate the heat config from disk.

    Args:
        path: Override path to YAML. Uses the bundled heat_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded heat config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: HeatConfig | None = None
_config_lock = threading.Lock()


def get_heat_config() -> HeatConfig:
    """Return the global HeatConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_heat_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_heat_config()
    return _config


def reload_heat_config(path: Path | None = None) -> HeatConfig:
    """Reload the heat config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_heat_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded heat config: %s → %s", old_version, new_config.version)
    return new_config
