"""Authoritative progesterone thresholds for the heat-cycle engine.

Every boundary, factor and validation limit is expressed exactly once here,
in the canonical unit (ng/ml).  The level classifier, the mating-window
estimator and the chart-zone rendering all read from this table; nothing
else may redefine a threshold.  Values for other units are derived by
conversion, never stored side by side.

Clinical bands (veterinary progesterone guidance, ng/ml):

    baseline   [0, 1)    retest in 3 days
    rising     [1, 4)    retest in 2 days
    ovulation  [4, 7)    retest in 1 day
    fertile    [7, 11)   no further test
    optimal    [11, 19)  no further test
    urgent     [19, ∞)   no further test
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from breedlog.heat.base import Level, ProgesteroneUnit, Urgency

CANONICAL_UNIT = ProgesteroneUnit.ng

# 1 ng/ml = 3.18 nmol/L
NMOL_PER_NG = 3.18

# LH-surge detection: a rise from below BASELINE to at/above SURGE.
SURGE_BASELINE_NG = 2.0
SURGE_THRESHOLD_NG = 5.0

# Peak above which the surge window is flagged as peak fertility.
PEAK_FERTILITY_NG = 15.0

# Manual-entry validation limit, canonical unit.
MAX_VALID_NG = 50.0


@dataclass(frozen=True)
class LevelBand:
    """One progesterone band: lower bound closed, upper bound open.

    ``retest_days`` of ``None`` means no further testing is advised.
    """

    level: Level
    lower: float
    upper: float
    urgency: Urgency
    retest_days: int | None

    def contains(self, value_ng: float) -> bool:
        return self.lower <= value_ng < self.upper


LEVEL_BANDS: tuple[LevelBand, ...] = (
    LevelBand(Level.baseline, 0.0, 1.0, Urgency.low, 3),
    LevelBand(Level.rising, 1.0, 4.0, Urgency.low, 2),
    LevelBand(Level.ovulation, 4.0, 7.0, Urgency.medium, 1),
    LevelBand(Level.fertile, 7.0, 11.0, Urgency.high, None),
    LevelBand(Level.optimal, 11.0, 19.0, Urgency.high, None),
    LevelBand(Level.urgent, 19.0, math.inf, Urgency.critical, None),
)

BANDS_BY_LEVEL: dict[Level, LevelBand] = {band.level: band for band in LEVEL_BANDS}
