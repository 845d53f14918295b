"""Recurring obligations summary (forecast grid) route."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from recurring_ledger.api.deps import get_store, get_today
from recurring_ledger.api.schemas import ForecastResponse
from recurring_ledger.config import settings
from recurring_ledger.engine.forecast import ALL_KINDS, build_forecast
from recurring_ledger.engine.periods import period_key
from recurring_ledger.models.obligation import ObligationKind
from recurring_ledger.store.base import ObligationStore
from recurring_ledger.store.queries import load_forecast_inputs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/recurring", tags=["recurring"])


@router.get("/summary", response_model=ForecastResponse)
async def get_summary(
    kind_filter: str = Query(ALL_KINDS, alias="filter"),
    months: int = Query(
        settings.forecast_default_months,
        ge=settings.forecast_min_months,
        le=settings.forecast_max_months,
    ),
    past_months: int = Query(0, alias="pastMonths", ge=0, le=settings.forecast_max_past_months),
    include_inactive: bool = Query(False, alias="includeInactive"),
    store: ObligationStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Month buckets, next bills and rolling totals across all obligations."""
    if kind_filter.strip().upper() != ALL_KINDS:
        try:
            ObligationKind.parse(kind_filter)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown filter: {kind_filter}")

    inputs = await load_forecast_inputs(
        store, today, months, past_months=past_months, include_inactive=include_inactive
    )
    forecast = build_forecast(
        inputs.obligations,
        inputs.payments,
        inputs.terms,
        timeline_start=inputs.timeline_start,
        today=today,
        kind_filter=kind_filter,
        months=inputs.total_months,
        upcoming_days=settings.upcoming_horizon_days,
        upcoming_limit=settings.upcoming_limit,
    )
    forecast.meta.months = months
    forecast.meta.past_months = past_months

    logger.info(
        "Summary %s: %d obligations, %d buckets from %s",
        forecast.meta.filter, len(forecast.expenses), inputs.total_months,
        period_key(inputs.timeline_start),
    )
    return ForecastResponse.build(forecast)
