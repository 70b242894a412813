"""Stateless heat-cycle analysis endpoints.

Every handler maps the request snapshot into engine types, runs the pure
engine and serializes the result.  Input the engine rejects becomes a 422.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from breedlog.dependencies import HeatSettings
from breedlog.heat.base import (
    CycleRecord,
    HeatInputError,
    IntervalSource,
    Measurement,
    ProgesteroneUnit,
)
from breedlog.heat.cycle_stats import duration_stats, estimate_interval, predicted_end
from breedlog.heat.heat_predictor import (
    day_in_cycle,
    phase_for_day,
    predict_next_heat,
    project_heat_dates,
)
from breedlog.heat.levels import chart_zones, classify
from breedlog.heat.mating_window import MatingWindowEstimator, next_test
from breedlog.heat.units import ensure_in_range, from_canonical, to_canonical, unit_label
from breedlog.models.base import ErrorDetail
from breedlog.models.heat import (
    ActiveCycleRead,
    ChartZoneRead,
    CycleHistoryRequest,
    DurationStatsRead,
    HeatPredictionRead,
    IntervalRead,
    MatingWindowRead,
    MatingWindowRequest,
    ProgesteroneStatusRead,
    ProgesteroneStatusRequest,
    UpcomingHeatsRead,
    UpcomingHeatsRequest,
)

router = APIRouter(
    prefix="/heat",
    tags=["heat"],
    responses={422: {"model": ErrorDetail}},
)
logger = logging.getLogger("breedlog.routers.heat")


def _unprocessable(exc: HeatInputError) -> HTTPException:
    logger.info("Rejected heat analysis input: %s", exc)
    return HTTPException(status_code=422, detail=str(exc))


def _validated_measurements(body: MatingWindowRequest) -> list[Measurement]:
    measurements = [m.to_domain() for m in body.measurements]
    for m in measurements:
        if m.is_hormone:
            ensure_in_range(m.value, m.unit)
    return measurements


def _history(body: CycleHistoryRequest) -> tuple[list[CycleRecord], list]:
    try:
        return body.to_domain()
    except HeatInputError as exc:
        raise _unprocessable(exc) from exc


# ---------- Progesterone ----------

@router.post("/progesterone/status", response_model=ProgesteroneStatusRead)
async def progesterone_status(body: ProgesteroneStatusRequest) -> Any:
    try:
        ensure_in_range(body.value, body.unit)
    except HeatInputError as exc:
        raise _unprocessable(exc) from exc

    status = classify(to_canonical(body.value, body.unit))
    return ProgesteroneStatusRead(
        level=status.level,
        urgency=status.urgency,
        retest_days=status.retest_days,
        value_ng=status.value_ng,
        display_value=from_canonical(status.value_ng, body.unit),
        unit=body.unit,
        unit_label=unit_label(body.unit),
    )


@router.get("/progesterone/zones", response_model=list[ChartZoneRead])
async def progesterone_zones(
    unit: ProgesteroneUnit = Query(default=ProgesteroneUnit.ng),
) -> Any:
    return [ChartZoneRead.model_validate(zone) for zone in chart_zones(unit)]


@router.post("/mating-window", response_model=MatingWindowRead)
async def mating_window(body: MatingWindowRequest, config: HeatSettings) -> Any:
    try:
        measurements = _validated_measurements(body)
        window = MatingWindowEstimator(config).estimate(measurements, as_of=body.as_of)
    except HeatInputError as exc:
        raise _unprocessable(exc) from exc

    return MatingWindowRead(
        confidence=window.confidence,
        start=window.start,
        end=window.end,
        lh_surge_detected=window.lh_surge_detected,
        peak_value=window.peak_value,
        peak_display_value=(
            from_canonical(window.peak_value, body.unit)
            if window.peak_value is not None
            else None
        ),
        unit=body.unit,
        recommendations=list(window.recommendations),
        surge_at=window.surge_at,
        latest_value=window.latest_value,
        current_level=window.current_level,
        confirming_points=window.confirming_points,
        next_test=next_test(window),
    )


# ---------- Cycles ----------

@router.post("/cycles/interval", response_model=IntervalRead)
async def cycle_interval(body: CycleHistoryRequest, config: HeatSettings) -> Any:
    cycles, legacy = _history(body)
    estimate = estimate_interval(cycles, legacy, config)
    stats = duration_stats(cycles)
    return IntervalRead(
        interval_days=estimate.interval_days,
        source=estimate.source,
        occurrences=list(estimate.occurrences),
        durations=DurationStatsRead.model_validate(stats),
    )


@router.post("/cycles/prediction", response_model=HeatPredictionRead)
async def cycle_prediction(body: CycleHistoryRequest, config: HeatSettings) -> Any:
    cycles, legacy = _history(body)
    prediction = predict_next_heat(cycles, legacy, today=body.today, config=config)

    active_read = None
    active = [c for c in cycles if c.is_active]
    if active:
        current = max(active, key=lambda c: c.start_date)
        day = day_in_cycle(current.start_date, today=body.today)
        active_read = ActiveCycleRead(
            cycle_id=current.id,
            start_date=current.start_date,
            day_in_cycle=day,
            phase=phase_for_day(day, config),
            predicted_end=predicted_end(current, duration_stats(cycles), config),
        )

    return HeatPredictionRead(
        next_date=prediction.next_date,
        days_until=prediction.days_until,
        interval_days=prediction.interval_days,
        interval_source=prediction.interval_source,
        last_date=prediction.last_date,
        total_occurrences=prediction.total_occurrences,
        active_cycle=active_read,
    )


@router.post("/cycles/upcoming", response_model=UpcomingHeatsRead)
async def upcoming_heats(body: UpcomingHeatsRequest, config: HeatSettings) -> Any:
    cycles, legacy = _history(body)
    estimate = estimate_interval(cycles, legacy, config)
    if not estimate.occurrences:
        return UpcomingHeatsRead(
            interval_days=estimate.interval_days,
            interval_source=estimate.source,
        )

    last = estimate.occurrences[-1]
    dates = project_heat_dates(
        last,
        estimate.interval_days,
        today=body.today,
        days_ahead=body.days_ahead,
        days_past=body.days_past,
        calendar_years=estimate.source is IntervalSource.standard,
        config=config,
    )
    return UpcomingHeatsRead(
        interval_days=estimate.interval_days,
        interval_source=estimate.source,
        last_date=last,
        dates=dates,
    )
