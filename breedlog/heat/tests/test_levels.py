"""Tests for progesterone level classification and chart zones."""

from __future__ import annotations

import math

import pytest

from breedlog.heat.base import InvalidMeasurementError, Level, ProgesteroneUnit, Urgency
from breedlog.heat.levels import chart_zones, classify
from breedlog.heat.thresholds import LEVEL_BANDS
from breedlog.heat.units import to_canonical

_LEVEL_ORDER = [band.level for band in LEVEL_BANDS]


class TestClassify:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (0.0, Level.baseline),
            (0.99, Level.baseline),
            (1.0, Level.rising),
            (3.99, Level.rising),
            (4.0, Level.ovulation),
            (6.99, Level.ovulation),
            (7.0, Level.fertile),
            (11.0, Level.optimal),
            (18.99, Level.optimal),
            (19.0, Level.urgent),
            (500.0, Level.urgent),
            (math.inf, Level.urgent),
        ],
    )
    def test_band_boundaries(self, value: float, expected: Level) -> None:
        assert classify(value).level is expected

    def test_retest_intervals(self) -> None:
        assert classify(0.5).retest_days == 3
        assert classify(2.0).retest_days == 2
        assert classify(5.0).retest_days == 1
        assert classify(8.0).retest_days is None
        assert classify(25.0).retest_days is None

    def test_urgency_tags(self) -> None:
        assert classify(0.5).urgency is Urgency.low
        assert classify(5.0).urgency is Urgency.medium
        assert classify(12.0).urgency is Urgency.high
        assert classify(19.0).urgency is Urgency.critical

    def test_status_carries_band(self) -> None:
        status = classify(8.2)
        assert status.value_ng == 8.2
        assert status.band.lower == 7.0
        assert status.band.upper == 11.0

    @pytest.mark.parametrize("value", [-0.01, float("nan")])
    def test_invalid_values_rejected(self, value: float) -> None:
        with pytest.raises(InvalidMeasurementError):
            classify(value)

    def test_classification_is_monotonic(self) -> None:
        values = [i * 0.25 for i in range(0, 100)]
        statuses = [classify(v) for v in values]
        for earlier, later in zip(statuses, statuses[1:]):
            assert later.urgency.rank >= earlier.urgency.rank
            assert _LEVEL_ORDER.index(later.level) >= _LEVEL_ORDER.index(earlier.level)

    def test_nmol_values_classified_after_conversion(self) -> None:
        # 15.9 nmol/L = 5.0 ng/ml, inside the ovulation band
        assert classify(to_canonical(15.9, ProgesteroneUnit.nmol)).level is Level.ovulation


class TestChartZones:
    def test_ng_zones_mirror_bands(self) -> None:
        zones = chart_zones(ProgesteroneUnit.ng)
        assert [z.level for z in zones] == _LEVEL_ORDER
        assert zones[0].lower == 0.0
        assert zones[3].lower == 7.0
        assert zones[-1].upper is None

    def test_zones_are_contiguous(self) -> None:
        for unit in ProgesteroneUnit:
            zones = chart_zones(unit)
            for lower, upper in zip(zones, zones[1:]):
                assert lower.upper == upper.lower

    def test_nmol_zones_are_converted(self) -> None:
        zones = {z.level: z for z in chart_zones(ProgesteroneUnit.nmol)}
        assert zones[Level.rising].lower == 3.2      # 1 ng/ml
        assert zones[Level.fertile].lower == 22.3    # 7 ng/ml
        assert zones[Level.urgent].lower == 60.4     # 19 ng/ml
        assert all(z.unit is ProgesteroneUnit.nmol for z in zones.values())
