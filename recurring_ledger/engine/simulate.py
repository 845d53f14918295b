"""What-if mortgage simulation: the plan walk with scenario overlays.

Rate overrides, a recurring extra payment and one-time extras are layered on
top of actual payments and terms at read time. Nothing is mutated.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from recurring_ledger.engine.amortization import ZERO, round2
from recurring_ledger.engine.periods import is_period_key
from recurring_ledger.engine.plan import collect_plan, iter_schedule
from recurring_ledger.models.obligation import Obligation, PaymentRecord
from recurring_ledger.models.results import Plan, ScenarioAdjustments
from recurring_ledger.models.scenario import (
    OneTimeExtra,
    RateOverride,
    RecurringExtra,
    Scenario,
)
from recurring_ledger.models.terms import EffectiveTerms, TermsSnapshot


def override_rate(
    overrides: Sequence[RateOverride], period_key: str, fallback: Decimal
) -> Decimal:
    """Rate of the latest override starting on or before period_key."""
    chosen = None
    for override in sorted(overrides, key=lambda o: o.start_period):
        if override.start_period <= period_key:
            chosen = override
        else:
            break
    if chosen is None or chosen.interest_rate is None:
        return fallback
    return chosen.interest_rate


def recurring_extra_for(recurring: Optional[RecurringExtra], period_key: str) -> Decimal:
    if recurring is None or recurring.amount <= 0:
        return ZERO
    if not is_period_key(recurring.start_period) or recurring.start_period > period_key:
        return ZERO
    return recurring.amount


def one_time_extra_for(extras: Sequence[OneTimeExtra], period_key: str) -> Decimal:
    # First entry for the period wins
    for extra in extras:
        if extra.period_key == period_key:
            return extra.amount
    return ZERO


class ScenarioOverlay:
    """Per-period adjustments for one scenario."""

    def __init__(self, scenario: Scenario):
        self.scenario = scenario

    def __call__(
        self, period_key: str, terms: EffectiveTerms, extra_actual: Decimal
    ) -> tuple[Decimal, Decimal, ScenarioAdjustments]:
        rate = override_rate(self.scenario.rate_overrides, period_key, terms.interest_rate)
        recurring = recurring_extra_for(self.scenario.recurring_extra, period_key)
        one_time = one_time_extra_for(self.scenario.one_time_extras, period_key)
        extra_principal = round2(extra_actual + recurring + one_time)

        return rate, extra_principal, ScenarioAdjustments(
            rate=rate,
            recurring_extra=recurring,
            one_time_extra=one_time,
            extra_actual=extra_actual,
        )


def simulate_plan(
    obligation: Obligation,
    snapshots: Sequence[TermsSnapshot],
    payments: Iterable[PaymentRecord],
    start_period: str,
    months: int,
    scenario: Optional[Scenario] = None,
) -> Plan:
    """Hypothetical plan; each row records the adjustments that were applied."""
    overlay = ScenarioOverlay(scenario or Scenario())
    rows = iter_schedule(
        obligation, snapshots, payments, start_period, months, overlay=overlay
    )
    return collect_plan(rows, start_period, months)
