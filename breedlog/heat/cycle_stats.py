"""Heat interval and duration statistics from cycle history.

Two sources of history are combined:

- ``CycleRecord`` rows (structured cycles with a start and, once finished,
  an end date), and
- ``LegacyCycleDate`` rows (bare heat dates from the older history list).

A legacy date falling on the same calendar day as a cycle start describes the
same heat and is dropped before any interval math.  Durations come from
completed cycle records only; legacy dates carry no end date.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from breedlog.heat.base import CycleRecord, IntervalSource, LegacyCycleDate
from breedlog.heat.config_loader import HeatConfig, get_heat_config

logger = logging.getLogger("breedlog.heat.cycle_stats")


@dataclass(frozen=True)
class IntervalEstimate:
    """Estimated days between heats.

    Attributes:
        interval_days: Positive whole number of days.
        source:        ``calculated`` from history, or the ``standard`` fallback.
        occurrences:   Distinct heat start dates used, oldest first.
    """

    interval_days: int
    source: IntervalSource
    occurrences: tuple[date, ...] = ()


@dataclass(frozen=True)
class CycleDurationStats:
    """Heat duration statistics over completed cycles (all None without any)."""

    count: int = 0
    shortest: int | None = None
    longest: int | None = None
    average: int | None = None
    last: int | None = None


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def occurrence_dates(
    cycle_records: Iterable[CycleRecord],
    legacy_dates: Iterable[LegacyCycleDate] = (),
) -> list[date]:
    """Return sorted, distinct heat start dates from both history sources."""
    starts = {c.start_date for c in cycle_records}
    legacy = {d.date for d in legacy_dates}
    duplicates = legacy & starts
    if duplicates:
        logger.debug("Ignoring %d legacy heat date(s) already recorded as cycles", len(duplicates))
    return sorted(starts | (legacy - duplicates))


def estimate_interval(
    cycle_records: Iterable[CycleRecord],
    legacy_dates: Iterable[LegacyCycleDate] = (),
    config: HeatConfig | None = None,
) -> IntervalEstimate:
    """Estimate the heat interval as the mean gap between consecutive heats.

    Args:
        cycle_records: Structured cycles (active ones included).
        legacy_dates:  Bare historical heat dates.
        config:        Engine config (for the standard fallback).

    Returns:
        IntervalEstimate; the standard fallback when fewer than two distinct
        heats are known.
    """
    cfg = (config or get_heat_config()).cycle
    dates = occurrence_dates(cycle_records, legacy_dates)

    if len(dates) < 2:
        return IntervalEstimate(
            interval_days=cfg.standard_interval_days,
            source=IntervalSource.standard,
            occurrences=tuple(dates),
        )

    gaps = [(later - earlier).days for earlier, later in zip(dates, dates[1:])]
    interval = round_half_up(sum(gaps) / len(gaps))
    logger.debug("Heat interval %d days from %d heats", interval, len(dates))
    return IntervalEstimate(
        interval_days=interval,
        source=IntervalSource.calculated,
        occurrences=tuple(dates),
    )


def duration_stats(cycle_records: Iterable[CycleRecord]) -> CycleDurationStats:
    """Compute heat duration statistics over completed cycles."""
    completed = sorted(
        (c for c in cycle_records if c.end_date is not None),
        key=lambda c: c.start_date,
    )
    if not completed:
        return CycleDurationStats()

    lengths = [c.duration_days for c in completed]
    return CycleDurationStats(
        count=len(lengths),
        shortest=min(lengths),
        longest=max(lengths),
        average=round_half_up(sum(lengths) / len(lengths)),
        last=lengths[-1],
    )


def predicted_end(
    active_cycle: CycleRecord,
    stats: CycleDurationStats,
    config: HeatConfig | None = None,
) -> date:
    """Predict when an ongoing heat ends from the average completed duration."""
    cfg = (config or get_heat_config()).cycle
    length = stats.average if stats.average is not None else cfg.default_cycle_length_days
    return active_cycle.start_date + timedelta(days=length)
