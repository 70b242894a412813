"""Heat-cycle analysis for Breedlog.

This subpackage turns progesterone tests and heat history into a level
classification, an optimal mating window, a next-test date and a next-heat
prediction.  Everything here is a pure function of its inputs.

Modules:
    base           — Input snapshots, derived results, enums and errors
    thresholds     — The single table of progesterone thresholds
    units          — ng/ml ↔ nmol/L conversion and entry validation
    levels         — Level classification and chart zones
    mating_window  — LH-surge detection, mating window, next test
    cycle_stats    — Heat interval and duration statistics
    heat_predictor — Next heat, day in cycle, phase, projections
    config_loader  — Load/validate/hot-reload heat_config.yaml
"""

from breedlog.heat.base import (
    Confidence,
    CyclePhase,
    CycleRecord,
    FertilityWindow,
    HeatInputError,
    HeatPrediction,
    IntervalSource,
    LegacyCycleDate,
    Level,
    Measurement,
    MeasurementKind,
    ProgesteroneUnit,
    RecommendationCode,
    Urgency,
)
from breedlog.heat.config_loader import HeatConfig, get_heat_config
from breedlog.heat.cycle_stats import duration_stats, estimate_interval, predicted_end
from breedlog.heat.heat_predictor import (
    day_in_cycle,
    phase_for_day,
    predict,
    predict_next_heat,
    project_heat_dates,
)
from breedlog.heat.levels import chart_zones, classify
from breedlog.heat.mating_window import MatingWindowEstimator, next_test
from breedlog.heat.units import from_canonical, to_canonical, validation_range

__all__ = [
    "Confidence",
    "CyclePhase",
    "CycleRecord",
    "FertilityWindow",
    "HeatConfig",
    "HeatInputError",
    "HeatPrediction",
    "IntervalSource",
    "LegacyCycleDate",
    "Level",
    "MatingWindowEstimator",
    "Measurement",
    "MeasurementKind",
    "ProgesteroneUnit",
    "RecommendationCode",
    "Urgency",
    "chart_zones",
    "classify",
    "day_in_cycle",
    "duration_stats",
    "estimate_interval",
    "from_canonical",
    "get_heat_config",
    "next_test",
    "phase_for_day",
    "predict",
    "predict_next_heat",
    "predicted_end",
    "project_heat_dates",
    "to_canonical",
    "validation_range",
]
