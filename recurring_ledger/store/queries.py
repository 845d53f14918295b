"""Store reads shared by the API routes and the CLI."""

from dataclasses import dataclass
from datetime import date

from recurring_ledger.engine.periods import add_months, month_start, parse_period_key, period_key
from recurring_ledger.models.obligation import Obligation, PaymentRecord
from recurring_ledger.models.terms import TermsSnapshot
from recurring_ledger.store.base import NotAMortgage, ObligationStore

# Payments are fetched this far before the timeline so early buckets see them
PAYMENT_LOOKBACK_MONTHS = 12


@dataclass
class MortgageInputs:
    obligation: Obligation
    snapshots: list[TermsSnapshot]
    payments: list[PaymentRecord]


@dataclass
class ForecastInputs:
    obligations: list[Obligation]
    payments: list[PaymentRecord]
    terms: dict[str, list[TermsSnapshot]]
    timeline_start: date
    total_months: int


async def load_mortgage(
    store: ObligationStore, obligation_id: str, start_period: str, months: int
) -> MortgageInputs:
    """The mortgage, its full terms history and its payments inside the horizon.

    Raises:
        ObligationNotFound: unknown id.
        NotAMortgage: the obligation is not mortgage-kind.
    """
    obligation = await store.get_obligation(obligation_id)
    if not obligation.is_mortgage:
        raise NotAMortgage(obligation_id)

    to_key = period_key(add_months(parse_period_key(start_period), months - 1))
    payments = await store.list_payments(start_period, to_key, obligation_id=obligation.id)
    terms = await store.list_terms([obligation.id])
    return MortgageInputs(obligation, terms.get(obligation.id, []), payments)


async def load_forecast_inputs(
    store: ObligationStore,
    today: date,
    months: int,
    past_months: int = 0,
    include_inactive: bool = False,
) -> ForecastInputs:
    """Everything the forecast grid needs for past_months back plus months ahead."""
    timeline_start = add_months(month_start(today), -past_months)
    total_months = past_months + months
    last_month = add_months(timeline_start, total_months - 1)

    obligations = await store.list_obligations(include_inactive=include_inactive)
    payments = await store.list_payments(
        period_key(add_months(timeline_start, -PAYMENT_LOOKBACK_MONTHS)),
        period_key(last_month),
    )
    terms = await store.list_terms([o.id for o in obligations])
    return ForecastInputs(obligations, payments, terms, timeline_start, total_months)
