"""Canonical data models for the Breedlog heat-cycle analysis engine.

Every engine component consumes and returns the types defined here.  The
persistence layer owns the raw rows; callers map them into these immutable
snapshots before handing them to the engine, and the API layer serializes the
derived results back out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class HeatInputError(ValueError):
    """Raised when input handed to the engine must be rejected."""


class InvalidMeasurementError(HeatInputError):
    """A measurement value or shape cannot be analysed."""


class InvalidCycleRecordError(HeatInputError):
    """A cycle record is internally inconsistent."""


class InvalidDateError(HeatInputError):
    """A legacy free-text date could not be parsed."""


class OutOfRangeError(HeatInputError):
    """A manually entered concentration lies outside its unit's valid range."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProgesteroneUnit(str, Enum):
    ng = "ng"
    nmol = "nmol"


class MeasurementKind(str, Enum):
    temperature = "temperature"
    hormone_level = "hormone_level"


class Level(str, Enum):
    baseline = "baseline"
    rising = "rising"
    ovulation = "ovulation"
    fertile = "fertile"
    optimal = "optimal"
    urgent = "urgent"


class Urgency(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


_URGENCY_RANK = {
    Urgency.low: 0,
    Urgency.medium: 1,
    Urgency.high: 2,
    Urgency.critical: 3,
}


class Confidence(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"
    insufficient_data = "insufficient_data"


class IntervalSource(str, Enum):
    calculated = "calculated"
    standard = "standard"


class CyclePhase(str, Enum):
    proestrus = "proestrus"
    estrus = "estrus"
    metestrus = "metestrus"


class RecommendationCode(str, Enum):
    """Machine-readable advice codes; the presentation layer translates them."""

    more_tests_needed = "more_tests_needed"
    lh_surge_detected = "lh_surge_detected"
    trend_estimate_only = "trend_estimate_only"
    window_upcoming = "window_upcoming"
    window_active = "window_active"
    window_passed = "window_passed"
    surge_not_yet = "surge_not_yet"
    surge_may_be_soon = "surge_may_be_soon"
    surge_imminent = "surge_imminent"
    surge_possibly_missed = "surge_possibly_missed"
    monitor_behavior = "monitor_behavior"
    multiple_matings = "multiple_matings"
    mate_now = "mate_now"
    window_closing = "window_closing"
    peak_fertility = "peak_fertility"
    retest_in_1_day = "retest_in_1_day"
    retest_in_2_days = "retest_in_2_days"
    retest_in_3_days = "retest_in_3_days"


# ---------------------------------------------------------------------------
# Input snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Measurement:
    """A single heat-log measurement.

    Attributes:
        timestamp:   When the sample was taken (date-time precision).
        kind:        Temperature or hormone level.
        value:       Raw value as entered, in ``unit`` for hormone levels.
        unit:        Concentration unit; required for hormone levels.
        phase_label: Optional phase the breeder tagged the log with.
        observation: Optional free-text note.
    """

    timestamp: datetime
    kind: MeasurementKind
    value: float
    unit: ProgesteroneUnit | None = None
    phase_label: str | None = None
    observation: str | None = None

    def __post_init__(self) -> None:
        if self.kind is MeasurementKind.hormone_level and self.unit is None:
            raise InvalidMeasurementError(
                f"Hormone measurement at {self.timestamp.isoformat()} has no unit"
            )

    @classmethod
    def hormone(
        cls,
        timestamp: datetime,
        value: float,
        unit: ProgesteroneUnit = ProgesteroneUnit.ng,
        **extra: str | None,
    ) -> Measurement:
        return cls(
            timestamp=timestamp,
            kind=MeasurementKind.hormone_level,
            value=value,
            unit=unit,
            **extra,
        )

    @property
    def is_hormone(self) -> bool:
        return self.kind is MeasurementKind.hormone_level


@dataclass(frozen=True)
class CycleRecord:
    """A structured heat cycle.

    ``end_date`` is ``None`` while the cycle is ongoing.
    """

    id: str
    start_date: date
    end_date: date | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.end_date is not None and self.end_date < self.start_date:
            raise InvalidCycleRecordError(
                f"Cycle {self.id} ends ({self.end_date}) before it starts ({self.start_date})"
            )

    @property
    def is_active(self) -> bool:
        return self.end_date is None

    @property
    def duration_days(self) -> int | None:
        if self.end_date is None:
            return None
        return (self.end_date - self.start_date).days


# Free-text formats seen in legacy heat history, tried in order after ISO.
_LEGACY_FORMATS = ("%m/%d/%Y", "%d/%m/%Y")


@dataclass(frozen=True)
class LegacyCycleDate:
    """A bare historical heat date from the pre-cycle-record era."""

    date: date

    @classmethod
    def parse(cls, raw: date | datetime | str) -> LegacyCycleDate:
        """Build a legacy date from a date, datetime, or free-text string.

        Raises:
            InvalidDateError: If the string matches none of the known formats.
        """
        if isinstance(raw, datetime):
            return cls(raw.date())
        if isinstance(raw, date):
            return cls(raw)

        text = (raw or "").strip()
        if not text:
            raise InvalidDateError("Empty legacy heat date")

        try:
            return cls(datetime.fromisoformat(text.replace("Z", "+00:00")).date())
        except ValueError:
            pass

        for fmt in _LEGACY_FORMATS:
            try:
                return cls(datetime.strptime(text, fmt).date())
            except ValueError:
                continue

        raise InvalidDateError(f"Unrecognised legacy heat date: {raw!r}")


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FertilityWindow:
    """Predicted optimal mating window for one cycle.

    Attributes:
        start:             Window opening (date-time).
        end:               Window closing (date-time).
        confidence:        Reliability tier of the prediction.
        lh_surge_detected: True if a threshold crossing was observed.
        peak_value:        Highest progesterone value seen, canonical unit.
        recommendations:   Ordered advice codes.
        surge_at:          Observed (or extrapolated, for trend estimates)
                           moment the surge threshold was reached.
        latest_value:      Most recent canonical value.
        latest_at:         Timestamp of the most recent hormone test.
        current_level:     Classification of ``latest_value``.
        confirming_points: Tests after the surge at or above the surge threshold.
    """

    confidence: Confidence
    start: datetime | None = None
    end: datetime | None = None
    lh_surge_detected: bool = False
    peak_value: float | None = None
    recommendations: tuple[RecommendationCode, ...] = ()
    surge_at: datetime | None = None
    latest_value: float | None = None
    latest_at: datetime | None = None
    current_level: Level | None = None
    confirming_points: int = 0


@dataclass(frozen=True)
class HeatPrediction:
    """Next-heat prediction for one dog."""

    interval_days: int
    interval_source: IntervalSource
    next_date: date | None = None
    days_until: int | None = None
    last_date: date | None = None
    total_occurrences: int = 0
    occurrences: tuple[date, ...] = field(default=(), repr=False)
