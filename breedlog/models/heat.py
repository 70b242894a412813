"""Pydantic models for the heat-cycle analysis endpoints.

Requests carry a snapshot of the caller's heat logs and cycle history; the
API is stateless and stores nothing.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from breedlog.heat.base import (
    Confidence,
    CyclePhase,
    CycleRecord,
    IntervalSource,
    LegacyCycleDate,
    Level,
    Measurement,
    MeasurementKind,
    ProgesteroneUnit,
    RecommendationCode,
    Urgency,
)
from breedlog.models.base import BreedlogBase


# ---------- Progesterone status ----------

class ProgesteroneStatusRequest(BreedlogBase):
    value: float
    unit: ProgesteroneUnit = ProgesteroneUnit.ng


class ProgesteroneStatusRead(BreedlogBase):
    level: Level
    urgency: Urgency
    retest_days: int | None = None
    value_ng: float
    display_value: float
    unit: ProgesteroneUnit
    unit_label: str


class ChartZoneRead(BreedlogBase):
    level: Level
    urgency: Urgency
    lower: float
    upper: float | None = None
    unit: ProgesteroneUnit


# ---------- Mating window ----------

class MeasurementIn(BreedlogBase):
    timestamp: datetime
    kind: MeasurementKind = MeasurementKind.hormone_level
    value: float
    unit: ProgesteroneUnit | None = ProgesteroneUnit.ng
    phase_label: str | None = None
    observation: str | None = None

    def to_domain(self) -> Measurement:
        return Measurement(
            timestamp=self.timestamp,
            kind=self.kind,
            value=self.value,
            unit=self.unit,
            phase_label=self.phase_label,
            observation=self.observation,
        )


class MatingWindowRequest(BreedlogBase):
    measurements: list[MeasurementIn] = Field(default_factory=list)
    unit: ProgesteroneUnit = ProgesteroneUnit.ng  # display unit for peak_display_value
    as_of: datetime | None = None


class MatingWindowRead(BreedlogBase):
    confidence: Confidence
    start: datetime | None = None
    end: datetime | None = None
    lh_surge_detected: bool = False
    peak_value: float | None = None
    peak_display_value: float | None = None
    unit: ProgesteroneUnit
    recommendations: list[RecommendationCode] = Field(default_factory=list)
    surge_at: datetime | None = None
    latest_value: float | None = None
    current_level: Level | None = None
    confirming_points: int = 0
    next_test: datetime | None = None


# ---------- Cycle history ----------

class CycleIn(BreedlogBase):
    id: str
    start_date: date
    end_date: date | None = None
    notes: str | None = None

    def to_domain(self) -> CycleRecord:
        return CycleRecord(
            id=self.id,
            start_date=self.start_date,
            end_date=self.end_date,
            notes=self.notes,
        )


class CycleHistoryRequest(BreedlogBase):
    cycles: list[CycleIn] = Field(default_factory=list)
    # Legacy heat history may hold free-text dates ("3/5/2024").
    legacy_dates: list[date | str] = Field(default_factory=list)
    today: date | None = None

    def to_domain(self) -> tuple[list[CycleRecord], list[LegacyCycleDate]]:
        return (
            [c.to_domain() for c in self.cycles],
            [LegacyCycleDate.parse(d) for d in self.legacy_dates],
        )


class DurationStatsRead(BreedlogBase):
    count: int = 0
    shortest: int | None = None
    longest: int | None = None
    average: int | None = None
    last: int | None = None


class IntervalRead(BreedlogBase):
    interval_days: int
    source: IntervalSource
    occurrences: list[date] = Field(default_factory=list)
    durations: DurationStatsRead


class ActiveCycleRead(BreedlogBase):
    cycle_id: str
    start_date: date
    day_in_cycle: int
    phase: CyclePhase
    predicted_end: date


class HeatPredictionRead(BreedlogBase):
    next_date: date | None = None
    days_until: int | None = None
    interval_days: int
    interval_source: IntervalSource
    last_date: date | None = None
    total_occurrences: int = 0
    active_cycle: ActiveCycleRead | None = None


class UpcomingHeatsRequest(CycleHistoryRequest):
    days_ahead: int | None = Field(default=None, ge=0, le=3650)
    days_past: int | None = Field(default=None, ge=0, le=3650)


class UpcomingHeatsRead(BreedlogBase):
    interval_days: int
    interval_source: IntervalSource
    last_date: date | None = None
    dates: list[date] = Field(default_factory=list)
