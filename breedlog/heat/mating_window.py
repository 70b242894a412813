"""Optimal mating window estimation from progesterone tests.

Algorithm:
1. Keep hormone tests only, drop superseded duplicates (same timestamp, last
   entry wins), sort by time and convert every value to ng/ml.
2. Scan consecutive pairs for the LH surge: a rise from below the surge
   baseline (2.0 ng/ml) to at or above the surge threshold (5.0 ng/ml).  The
   later test's timestamp is the surge moment.  No outlier rejection is done:
   a single spike that crosses the thresholds counts.
3. Ovulation is assumed ``ovulation_offset_days`` after the surge; the window
   spans ``window_days_before_ovulation`` before to
   ``window_days_after_ovulation`` after it (defaults: surge + 24h to
   surge + 48h).
4. Without a surge, the slope of the two most recent tests is extrapolated to
   the surge threshold and the same offsets are applied, at low confidence.
   A projection more than 30 days from the latest test counts as no trend.
5. Recommendations come from fixed tables keyed by confidence and by the
   level of the most recent test.

The next-test scheduler lives here too: retest cadence is driven purely by
the current level's ``retest_days``, never by the confidence tier.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, TypeVar

from breedlog.heat.base import (
    Confidence,
    FertilityWindow,
    InvalidMeasurementError,
    Level,
    Measurement,
    RecommendationCode as R,
)
from breedlog.heat.config_loader import HeatConfig, get_heat_config
from breedlog.heat.levels import classify
from breedlog.heat.thresholds import (
    BANDS_BY_LEVEL,
    PEAK_FERTILITY_NG,
    SURGE_BASELINE_NG,
    SURGE_THRESHOLD_NG,
)
from breedlog.heat.units import to_canonical

logger = logging.getLogger("breedlog.heat.mating_window")

_SECONDS_PER_DAY = 86400.0

# Trend projections further than this from the latest test are not estimates.
_MAX_TREND_OFFSET_DAYS = 30.0

# ---------------------------------------------------------------------------
# Recommendation priority tables
# ---------------------------------------------------------------------------

_CONFIDENCE_CODES: dict[Confidence, tuple[R, ...]] = {
    Confidence.high: (R.lh_surge_detected,),
    Confidence.medium: (R.lh_surge_detected,),
    Confidence.low: (R.trend_estimate_only,),
    Confidence.insufficient_data: (R.more_tests_needed,),
}

# Level of the most recent test, when no surge has been observed.
_LEVEL_CODES_NO_SURGE: dict[Level, tuple[R, ...]] = {
    Level.baseline: (R.surge_not_yet,),
    Level.rising: (R.surge_may_be_soon, R.monitor_behavior),
    Level.ovulation: (R.surge_imminent,),
    Level.fertile: (R.surge_possibly_missed, R.mate_now),
    Level.optimal: (R.surge_possibly_missed, R.mate_now),
    Level.urgent: (R.surge_possibly_missed, R.mate_now, R.window_closing),
}

# Level of the most recent test, once a surge has been observed.
_LEVEL_CODES_AFTER_SURGE: dict[Level, tuple[R, ...]] = {
    Level.baseline: (R.monitor_behavior,),
    Level.rising: (R.monitor_behavior,),
    Level.ovulation: (R.monitor_behavior,),
    Level.fertile: (R.mate_now, R.monitor_behavior),
    Level.optimal: (R.mate_now, R.monitor_behavior),
    Level.urgent: (R.mate_now, R.window_closing),
}

_RETEST_CODES: dict[int, R] = {
    1: R.retest_in_1_day,
    2: R.retest_in_2_days,
    3: R.retest_in_3_days,
}


@dataclass(frozen=True)
class _Point:
    timestamp: datetime
    value_ng: float


def _is_aware(moment: datetime) -> bool:
    return moment.tzinfo is not None and moment.utcoffset() is not None


def _prepare(measurements: Iterable[Measurement]) -> list[_Point]:
    """Hormone tests only, deduplicated (last wins), sorted, canonical units."""
    latest_by_ts: dict[datetime, Measurement] = {}
    for m in measurements:
        if m.is_hormone:
            latest_by_ts[m.timestamp] = m

    points: list[_Point] = []
    for m in latest_by_ts.values():
        value_ng = to_canonical(m.value, m.unit)
        if math.isnan(value_ng) or value_ng < 0:
            raise InvalidMeasurementError(
                f"Invalid progesterone value {m.value!r} at {m.timestamp.isoformat()}"
            )
        points.append(_Point(m.timestamp, value_ng))

    try:
        points.sort(key=lambda p: p.timestamp)
    except TypeError as exc:
        raise InvalidMeasurementError(
            "Measurements mix timezone-aware and naive timestamps"
        ) from exc
    return points


class MatingWindowEstimator:
    """Estimate the optimal mating window from one cycle's heat logs.

    Usage::

        estimator = MatingWindowEstimator()
        window = estimator.estimate(measurements)
        if window.lh_surge_detected:
            print(window.start, window.end, window.confidence)
        print(next_test(window))
    """

    def __init__(self, config: HeatConfig | None = None) -> None:
        self._config = config or get_heat_config()

    @property
    def _mw_config(self):
        return self._config.mating_window

    def estimate(
        self,
        measurements: Iterable[Measurement],
        *,
        as_of: datetime | None = None,
    ) -> FertilityWindow:
        """Estimate the fertility window from a cycle's measurements.

        Args:
            measurements: Heat-log measurements in any order; non-hormone
                          entries are ignored.
            as_of:        Reference moment for window timing advice
                          (defaults to now, in the tests' timezone).

        Returns:
            FertilityWindow.  With no hormone tests, every optional field is
            unset and there are no recommendations.

        Raises:
            InvalidMeasurementError: For negative/NaN values, or naive and
                                     aware timestamps mixed among the
                                     measurements and ``as_of``.
        """
        points = _prepare(measurements)
        if not points:
            return FertilityWindow(confidence=Confidence.insufficient_data)

        mw = self._mw_config
        latest = points[-1]
        if as_of is not None and _is_aware(as_of) != _is_aware(latest.timestamp):
            raise InvalidMeasurementError(
                "as_of and measurement timestamps mix timezone-aware and naive values"
            )
        status = classify(latest.value_ng)
        peak = max(p.value_ng for p in points)
        now = as_of or datetime.now(tz=latest.timestamp.tzinfo)

        surge_idx = self._find_surge(points)
        confirming = 0
        if surge_idx is not None:
            surge_at = points[surge_idx].timestamp
            confirming = sum(
                1 for p in points[surge_idx + 1:] if p.value_ng >= SURGE_THRESHOLD_NG
            )
            confidence = (
                Confidence.high
                if confirming >= mw.confirming_points_for_high
                else Confidence.medium
            )
            logger.info(
                "LH surge detected at %s (peak %.1f ng/ml, %d confirming tests)",
                surge_at.isoformat(), peak, confirming,
            )
        else:
            surge_at = self._extrapolate_surge(points)
            confidence = Confidence.low if surge_at is not None else Confidence.insufficient_data

        start = end = None
        if surge_at is not None:
            start, end = self._window_around(surge_at)

        recommendations = _recommend(
            confidence=confidence,
            level=status.level,
            retest_days=status.retest_days,
            surge_detected=surge_idx is not None,
            peak=peak,
            start=start,
            end=end,
            now=now,
        )

        return FertilityWindow(
            confidence=confidence,
            start=start,
            end=end,
            lh_surge_detected=surge_idx is not None,
            peak_value=peak,
            recommendations=recommendations,
            surge_at=surge_at,
            latest_value=latest.value_ng,
            latest_at=latest.timestamp,
            current_level=status.level,
            confirming_points=confirming,
        )

    def _find_surge(self, points: list[_Point]) -> int | None:
        """Return the index of the first test completing an LH surge."""
        mw = self._mw_config
        for i in range(1, len(points)):
            prev, cur = points[i - 1].value_ng, points[i].value_ng
            if prev < SURGE_BASELINE_NG and cur >= SURGE_THRESHOLD_NG:
                return i
            if (
                mw.rapid_rise_detection
                and prev < SURGE_THRESHOLD_NG <= cur
                and cur >= prev * mw.rapid_rise_factor
            ):
                return i
        return None

    @staticmethod
    def _extrapolate_surge(points: list[_Point]) -> datetime | None:
        """Project when the two most recent tests' trend reaches the surge threshold."""
        if len(points) < 2:
            return None
        prev, last = points[-2], points[-1]
        days = (last.timestamp - prev.timestamp).total_seconds() / _SECONDS_PER_DAY
        if days <= 0:
            return None
        slope = (last.value_ng - prev.value_ng) / days
        if slope <= 0:
            logger.debug("No rising trend (slope %.3f ng/ml/day); no window estimate", slope)
            return None
        offset_days = (SURGE_THRESHOLD_NG - last.value_ng) / slope
        if abs(offset_days) > _MAX_TREND_OFFSET_DAYS:
            logger.debug(
                "Trend too flat (slope %.3g ng/ml/day); surge threshold %.0f days away",
                slope, offset_days,
            )
            return None
        projected = last.timestamp + timedelta(days=offset_days)
        logger.debug(
            "Trend estimate: slope %.3f ng/ml/day, surge threshold at %s",
            slope, projected.isoformat(),
        )
        return projected

    def _window_around(self, surge_at: datetime) -> tuple[datetime, datetime]:
        mw = self._mw_config
        ovulation = surge_at + timedelta(days=mw.ovulation_offset_days)
        return (
            ovulation - timedelta(days=mw.window_days_before_ovulation),
            ovulation + timedelta(days=mw.window_days_after_ovulation),
        )


def _recommend(
    *,
    confidence: Confidence,
    level: Level,
    retest_days: int | None,
    surge_detected: bool,
    peak: float,
    start: datetime | None,
    end: datetime | None,
    now: datetime,
) -> tuple[R, ...]:
    codes: list[R] = list(_CONFIDENCE_CODES[confidence])

    if start is not None and end is not None:
        if now < start:
            codes.append(R.window_upcoming)
        elif now <= end:
            codes.append(R.window_active)
        else:
            codes.append(R.window_passed)

    table = _LEVEL_CODES_AFTER_SURGE if surge_detected else _LEVEL_CODES_NO_SURGE
    codes.extend(table[level])

    if surge_detected:
        codes.append(R.multiple_matings)
        if peak > PEAK_FERTILITY_NG:
            codes.append(R.peak_fertility)

    if retest_days:
        codes.append(_RETEST_CODES[retest_days])

    # Ordered, without repeats
    return tuple(dict.fromkeys(codes))


_Stamp = TypeVar("_Stamp", date, datetime)


def next_test(window: FertilityWindow, last_test: _Stamp | None = None) -> _Stamp | None:
    """Return when the next progesterone test is due, or None.

    The cadence comes from the level of the most recent test only.  Levels
    without a retest interval (fertile and above) mean no further testing.

    Args:
        window:    An estimate produced by ``MatingWindowEstimator``.
        last_test: Date or date-time of the last test; defaults to the
                   window's most recent test timestamp.
    """
    if window.current_level is None:
        return None
    retest_days = BANDS_BY_LEVEL[window.current_level].retest_days
    if not retest_days:
        return None
    anchor = last_test if last_test is not None else window.latest_at
    if anchor is None:
        return None
    return anchor + timedelta(days=retest_days)
