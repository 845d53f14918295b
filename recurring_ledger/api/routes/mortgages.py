"""Mortgage plan and what-if simulation routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from recurring_ledger.api.deps import get_store
from recurring_ledger.api.schemas import PlanResponse, SimulateRequest, SimulationResponse
from recurring_ledger.config import settings
from recurring_ledger.engine.periods import parse_period_key
from recurring_ledger.engine.plan import build_plan
from recurring_ledger.engine.simulate import simulate_plan
from recurring_ledger.store.base import NotAMortgage, ObligationNotFound, ObligationStore
from recurring_ledger.store.queries import MortgageInputs, load_mortgage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/mortgages", tags=["mortgages"])


async def _load_mortgage(
    store: ObligationStore, obligation_id: str, start_period: str, months: int
) -> MortgageInputs:
    try:
        return await load_mortgage(store, obligation_id, start_period, months)
    except ObligationNotFound:
        raise HTTPException(status_code=404, detail="Not found")
    except NotAMortgage:
        raise HTTPException(status_code=400, detail="Not a mortgage")


@router.get("/{obligation_id}/plan", response_model=PlanResponse)
async def get_plan(
    obligation_id: str,
    start_period: str = Query(..., alias="from", description="First period, YYYY-MM"),
    months: int = Query(settings.plan_default_months, ge=1, le=settings.plan_max_months),
    store: ObligationStore = Depends(get_store),
):
    """Amortization plan from recorded payments and terms history."""
    start_period = start_period.strip()
    try:
        parse_period_key(start_period)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    inputs = await _load_mortgage(store, obligation_id, start_period, months)
    plan = build_plan(
        inputs.obligation, inputs.snapshots, inputs.payments, start_period, months
    )
    logger.info(
        "Plan %s from %s: %d rows, payoff %s",
        inputs.obligation.id, start_period, len(plan.schedule), plan.payoff_period_key,
    )
    return PlanResponse.build(inputs.obligation, plan)


@router.post("/{obligation_id}/simulate", response_model=SimulationResponse)
async def simulate(
    obligation_id: str,
    req: SimulateRequest,
    store: ObligationStore = Depends(get_store),
):
    """What-if plan with rate overrides and extra payments layered on top."""
    inputs = await _load_mortgage(store, obligation_id, req.start_period, req.months)
    plan = simulate_plan(
        inputs.obligation, inputs.snapshots, inputs.payments,
        req.start_period, req.months,
        scenario=req.scenario.to_scenario(),
    )
    logger.info(
        "Simulation %s from %s: %d rows, payoff %s",
        inputs.obligation.id, req.start_period, len(plan.schedule), plan.payoff_period_key,
    )
    return SimulationResponse.build(inputs.obligation, plan, scenario=req.scenario)
