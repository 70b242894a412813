"""Tests for heat interval estimation, duration statistics and history models."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from breedlog.heat.base import (
    CycleRecord,
    IntervalSource,
    InvalidCycleRecordError,
    InvalidDateError,
    LegacyCycleDate,
)
from breedlog.heat.config_loader import HeatConfig
from breedlog.heat.cycle_stats import (
    CycleDurationStats,
    duration_stats,
    estimate_interval,
    occurrence_dates,
    predicted_end,
    round_half_up,
)
from breedlog.heat.tests.conftest import cycle


def legacy(*raw: str) -> list[LegacyCycleDate]:
    return [LegacyCycleDate.parse(r) for r in raw]


# ---------------------------------------------------------------------------
# Interval estimation
# ---------------------------------------------------------------------------


class TestEstimateInterval:
    def test_mean_gap_between_heats(self, heat_config: HeatConfig) -> None:
        cycles = [cycle(date(2023, 1, 1)), cycle(date(2023, 1, 22))]
        estimate = estimate_interval(cycles, config=heat_config)
        assert estimate.interval_days == 21
        assert estimate.source is IntervalSource.calculated
        assert estimate.occurrences == (date(2023, 1, 1), date(2023, 1, 22))

    def test_no_history_uses_standard_interval(self, heat_config: HeatConfig) -> None:
        estimate = estimate_interval([], config=heat_config)
        assert estimate.interval_days == 365
        assert estimate.source is IntervalSource.standard
        assert estimate.occurrences == ()

    def test_single_heat_uses_standard_interval(self, heat_config: HeatConfig) -> None:
        estimate = estimate_interval([cycle(date(2024, 1, 1))], config=heat_config)
        assert estimate.source is IntervalSource.standard
        assert estimate.occurrences == (date(2024, 1, 1),)

    def test_standard_interval_is_configurable(self) -> None:
        config = HeatConfig(version="test")
        config.cycle.standard_interval_days = 200
        assert estimate_interval([], config=config).interval_days == 200

    def test_legacy_dates_are_merged_and_deduplicated(self, heat_config: HeatConfig) -> None:
        cycles = [cycle(date(2023, 1, 1)), cycle(date(2023, 7, 1))]
        estimate = estimate_interval(
            cycles, legacy("2023-01-01", "2022-07-01"), config=heat_config
        )
        # gaps 184 and 181 days; 182.5 rounds up
        assert estimate.occurrences == (
            date(2022, 7, 1),
            date(2023, 1, 1),
            date(2023, 7, 1),
        )
        assert estimate.interval_days == 183

    def test_legacy_only_history(self, heat_config: HeatConfig) -> None:
        estimate = estimate_interval([], legacy("2022-01-10", "2022-07-10"), config=heat_config)
        assert estimate.source is IntervalSource.calculated
        assert estimate.interval_days == 181

    def test_half_day_mean_rounds_up(self, heat_config: HeatConfig) -> None:
        first = date(2020, 3, 1)
        cycles = [
            cycle(first),
            cycle(first + timedelta(days=272)),
            cycle(first + timedelta(days=545)),
        ]
        assert estimate_interval(cycles, config=heat_config).interval_days == 273

    def test_active_cycle_counts_as_occurrence(self, heat_config: HeatConfig) -> None:
        cycles = [
            cycle(date(2023, 1, 1), date(2023, 1, 20)),
            cycle(date(2023, 7, 1)),
        ]
        estimate = estimate_interval(cycles, config=heat_config)
        assert estimate.source is IntervalSource.calculated
        assert estimate.interval_days == 181

    def test_interval_is_always_positive(self, heat_config: HeatConfig) -> None:
        cycles = [cycle(date(2023, 1, 1), cycle_id="a"), cycle(date(2023, 1, 1), cycle_id="b")]
        estimate = estimate_interval(cycles, config=heat_config)
        assert estimate.source is IntervalSource.standard
        assert estimate.interval_days > 0


class TestOccurrenceDates:
    def test_sorted_and_distinct(self) -> None:
        dates = occurrence_dates(
            [cycle(date(2023, 7, 1)), cycle(date(2023, 1, 1))],
            legacy("2022-07-01", "07/01/2023"),
        )
        assert dates == [date(2022, 7, 1), date(2023, 1, 1), date(2023, 7, 1)]


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (272.5, 273), (19.33, 19), (20.7, 21)]
    )
    def test_rounding(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------


class TestDurationStats:
    def test_completed_cycles_only(self) -> None:
        cycles = [
            cycle(date(2024, 1, 1), date(2024, 1, 19)),
            cycle(date(2023, 1, 1), date(2023, 1, 20)),
            cycle(date(2024, 7, 1)),
            cycle(date(2023, 7, 1), date(2023, 7, 22)),
        ]
        stats = duration_stats(cycles)
        assert stats == CycleDurationStats(count=3, shortest=18, longest=21, average=19, last=18)

    def test_average_rounds_half_up(self) -> None:
        cycles = [
            cycle(date(2023, 1, 1), date(2023, 1, 20)),
            cycle(date(2023, 7, 1), date(2023, 7, 21)),
        ]
        assert duration_stats(cycles).average == 20

    def test_no_completed_cycles(self) -> None:
        stats = duration_stats([cycle(date(2024, 7, 1))])
        assert stats.count == 0
        assert stats.average is None
        assert stats.last is None


class TestPredictedEnd:
    def test_uses_average_duration(self, heat_config: HeatConfig) -> None:
        stats = CycleDurationStats(count=3, shortest=18, longest=21, average=19, last=18)
        active = cycle(date(2024, 7, 1))
        assert predicted_end(active, stats, heat_config) == date(2024, 7, 20)

    def test_falls_back_to_default_length(self, heat_config: HeatConfig) -> None:
        active = cycle(date(2024, 7, 1))
        assert predicted_end(active, CycleDurationStats(), heat_config) == date(2024, 7, 22)


# ---------------------------------------------------------------------------
# History models
# ---------------------------------------------------------------------------


class TestCycleRecord:
    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(InvalidCycleRecordError):
            CycleRecord(id="c1", start_date=date(2024, 3, 10), end_date=date(2024, 3, 1))

    def test_active_cycle(self) -> None:
        record = cycle(date(2024, 3, 1))
        assert record.is_active
        assert record.duration_days is None

    def test_completed_cycle(self) -> None:
        record = cycle(date(2024, 3, 1), date(2024, 3, 22))
        assert not record.is_active
        assert record.duration_days == 21

    def test_single_day_cycle(self) -> None:
        assert cycle(date(2024, 3, 1), date(2024, 3, 1)).duration_days == 0


class TestLegacyCycleDate:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2023-05-04", date(2023, 5, 4)),
            ("2023-05-04T10:30:00Z", date(2023, 5, 4)),
            ("2023-05-04T23:30:00+02:00", date(2023, 5, 4)),
            ("05/04/2023", date(2023, 5, 4)),
            ("25/04/2023", date(2023, 4, 25)),
            ("  2023-05-04  ", date(2023, 5, 4)),
        ],
    )
    def test_parse_strings(self, raw: str, expected: date) -> None:
        assert LegacyCycleDate.parse(raw).date == expected

    def test_parse_date_objects(self) -> None:
        assert LegacyCycleDate.parse(date(2023, 5, 4)).date == date(2023, 5, 4)
        assert LegacyCycleDate.parse(datetime(2023, 5, 4, 18, 0)).date == date(2023, 5, 4)

    @pytest.mark.parametrize("raw", ["", "   ", "soon", "31/31/2023"])
    def test_unparseable_rejected(self, raw: str) -> None:
        with pytest.raises(InvalidDateError):
            LegacyCycleDate.parse(raw)
