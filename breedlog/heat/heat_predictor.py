"""Next-heat prediction and in-cycle day helpers.

Combines the interval estimate from ``cycle_stats`` with the most recent
heat start.  Predictions are in calendar days; ``days_until`` goes negative
once a predicted heat is overdue, and callers decide how to surface that.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

from breedlog.heat.base import (
    CycleRecord,
    CyclePhase,
    HeatInputError,
    HeatPrediction,
    IntervalSource,
    LegacyCycleDate,
)
from breedlog.heat.config_loader import HeatConfig, get_heat_config
from breedlog.heat.cycle_stats import estimate_interval

logger = logging.getLogger("breedlog.heat.heat_predictor")

_YEAR_DAYS = 365


def advance(start: date, interval_days: int, *, calendar_years: bool = True) -> date:
    """Move ``start`` forward by ``interval_days``.

    With ``calendar_years``, whole multiples of 365 days step by calendar
    years (same day next year; 29 February falls back to 28 February).
    Everything else steps in plain days.  Callers pass
    ``calendar_years=False`` for intervals calculated from history.
    """
    years, remainder = divmod(interval_days, _YEAR_DAYS)
    if not calendar_years or remainder or not years:
        return start + timedelta(days=interval_days)
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return start.replace(year=start.year + years, day=28)


def predict(
    last_occurrence: date | None,
    interval_days: int,
    *,
    today: date | None = None,
    calendar_years: bool = True,
) -> tuple[date | None, int | None]:
    """Return ``(next_date, days_until)``, or ``(None, None)`` without history.

    ``calendar_years`` is passed through to ``advance``.
    """
    if last_occurrence is None:
        return None, None
    today = today or date.today()
    next_date = advance(last_occurrence, interval_days, calendar_years=calendar_years)
    return next_date, (next_date - today).days


def predict_next_heat(
    cycle_records: Iterable[CycleRecord],
    legacy_dates: Iterable[LegacyCycleDate] = (),
    *,
    today: date | None = None,
    config: HeatConfig | None = None,
) -> HeatPrediction:
    """Predict the next heat from a dog's full heat history.

    Args:
        cycle_records: Structured cycles, including an active one.
        legacy_dates:  Bare historical heat dates.
        today:         Reference date (defaults to today).
        config:        Engine config.
    """
    estimate = estimate_interval(cycle_records, legacy_dates, config)
    last = estimate.occurrences[-1] if estimate.occurrences else None
    next_date, days_until = predict(
        last,
        estimate.interval_days,
        today=today,
        calendar_years=estimate.source is IntervalSource.standard,
    )

    if days_until is not None and days_until < 0:
        logger.info("Predicted heat %s is %d day(s) overdue", next_date, -days_until)

    return HeatPrediction(
        interval_days=estimate.interval_days,
        interval_source=estimate.source,
        next_date=next_date,
        days_until=days_until,
        last_date=last,
        total_occurrences=len(estimate.occurrences),
        occurrences=estimate.occurrences,
    )


def day_in_cycle(start_date: date, *, today: date | None = None) -> int:
    """Day number within a heat (day 1 = start date); never below 1."""
    today = today or date.today()
    return max(1, (today - start_date).days + 1)


def phase_for_day(day: int, config: HeatConfig | None = None) -> CyclePhase:
    """Map an in-cycle day number to its heat phase."""
    cfg = (config or get_heat_config()).cycle
    if day <= cfg.proestrus_end_day:
        return CyclePhase.proestrus
    if day <= cfg.estrus_end_day:
        return CyclePhase.estrus
    return CyclePhase.metestrus


def project_heat_dates(
    last_occurrence: date,
    interval_days: int,
    *,
    today: date | None = None,
    days_ahead: int | None = None,
    days_past: int | None = None,
    calendar_years: bool = True,
    config: HeatConfig | None = None,
) -> list[date]:
    """List every predicted heat within ``[today - days_past, today + days_ahead]``.

    Heats repeat every ``interval_days`` after ``last_occurrence``; the last
    occurrence itself is not included.  ``calendar_years`` is passed through
    to ``advance``.

    Raises:
        HeatInputError: If ``interval_days`` is not positive.
    """
    if interval_days <= 0:
        raise HeatInputError(f"interval_days must be positive, got {interval_days}")
    up = (config or get_heat_config()).upcoming
    today = today or date.today()
    until = today + timedelta(days=up.days_ahead if days_ahead is None else days_ahead)
    since = today - timedelta(days=up.days_past if days_past is None else days_past)

    projected: list[date] = []
    k = 1
    current = advance(last_occurrence, interval_days, calendar_years=calendar_years)
    while current <= until:
        if current >= since:
            projected.append(current)
        k += 1
        current = advance(last_occurrence, interval_days * k, calendar_years=calendar_years)
    return projected
