"""Single-mortgage amortization plan driven by recorded payments.

Pure computation. No I/O. The walk is a generator so callers can stop
consuming as soon as the balance is paid off.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional, Sequence

from recurring_ledger.engine.amortization import ZERO, amortize_period, round2
from recurring_ledger.engine.periods import display_due_date, iter_period_keys, parse_period_key
from recurring_ledger.engine.terms import resolve_terms
from recurring_ledger.models.obligation import Obligation, PaymentRecord
from recurring_ledger.models.results import (
    PaymentInfo,
    PeriodPayments,
    Plan,
    PlanTotals,
    ScenarioAdjustments,
    ScheduleRow,
)
from recurring_ledger.models.terms import EffectiveTerms, TermsSnapshot

logger = logging.getLogger(__name__)

# (period_key, resolved terms, actual extra) -> (rate, extra principal, adjustments)
PeriodOverlay = Callable[
    [str, EffectiveTerms, Decimal], tuple[Decimal, Decimal, Optional[ScenarioAdjustments]]
]


def group_payments(payments: Iterable[PaymentRecord]) -> dict[str, list[PaymentRecord]]:
    grouped: dict[str, list[PaymentRecord]] = defaultdict(list)
    for payment in payments:
        grouped[payment.period_key].append(payment)
    return grouped


def main_payment(payments: Sequence[PaymentRecord]) -> Optional[PaymentRecord]:
    """Latest non-extra, non-skipped payment by paid date."""
    candidates = [p for p in payments if not p.is_extra and not p.is_skipped]
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.paid_date)


def extra_total(payments: Sequence[PaymentRecord]) -> Decimal:
    return round2(sum((p.amount for p in payments if p.is_extra), ZERO))


def payment_info(payment: PaymentRecord) -> PaymentInfo:
    return PaymentInfo(
        payment_id=payment.id,
        amount=round2(payment.amount),
        paid_date=payment.paid_date,
        status=payment.status.value,
        note=payment.note,
        kind=payment.kind.value,
    )


def _actual_only(
    period_key: str, terms: EffectiveTerms, extra_actual: Decimal
) -> tuple[Decimal, Decimal, Optional[ScenarioAdjustments]]:
    return terms.interest_rate, extra_actual, None


def iter_schedule(
    obligation: Obligation,
    snapshots: Sequence[TermsSnapshot],
    payments: Iterable[PaymentRecord],
    start_period: str,
    months: int,
    overlay: PeriodOverlay = _actual_only,
) -> Iterator[ScheduleRow]:
    """Yield one ScheduleRow per period, carrying the balance forward.

    The period's payment is the recorded main payment, falling back to the
    resolved terms' amount so unpaid future periods can still be projected.
    """
    due_day = obligation.due_day
    balance = obligation.opening_balance
    by_period = group_payments(payments)

    for key in iter_period_keys(start_period, months):
        month = parse_period_key(key)
        terms = resolve_terms(obligation, snapshots, month)

        period_payments = by_period.get(key, [])
        extra_actual = extra_total(period_payments)
        main = main_payment(period_payments)
        payment_total = main.amount if main is not None else terms.amount

        rate, extra_principal, applied = overlay(key, terms, extra_actual)

        schedule = amortize_period(
            period_key=key,
            due_day=due_day,
            balance_start=balance,
            annual_rate_pct=rate,
            payment_total=payment_total,
            fee=terms.monthly_fee,
            extra_principal=extra_principal,
        )
        balance = schedule.balance_end

        yield ScheduleRow(
            period_key=key,
            due_date=display_due_date(month, due_day),
            schedule=schedule,
            payments=PeriodPayments(
                main=payment_info(main) if main is not None else None,
                extra_sum=extra_actual,
                extra_count=sum(1 for p in period_payments if p.is_extra),
            ),
            scenario_applied=applied,
        )


def collect_plan(rows: Iterable[ScheduleRow], start_period: str, months: int) -> Plan:
    """Consume schedule rows until payoff or the horizon, accumulating totals."""
    plan = Plan(start_period=start_period, months_requested=months)
    totals = PlanTotals()

    for row in rows:
        s = row.schedule
        plan.schedule.append(row)
        totals.total_interest = round2(totals.total_interest + s.interest)
        totals.total_fees = round2(totals.total_fees + s.fee)
        totals.total_principal = round2(
            totals.total_principal + (s.balance_start - s.balance_end)
        )

        if s.balance_end <= 0:
            plan.payoff_period_key = row.period_key
            plan.payoff_date = s.period_end
            plan.months_to_payoff = len(plan.schedule)
            logger.debug("Paid off in %s after %d periods", row.period_key, len(plan.schedule))
            break

    plan.totals = totals
    return plan


def build_plan(
    obligation: Obligation,
    snapshots: Sequence[TermsSnapshot],
    payments: Iterable[PaymentRecord],
    start_period: str,
    months: int,
) -> Plan:
    """Amortization plan from actual payments and terms history.

    Args:
        obligation: Mortgage-kind obligation; its remaining (else initial)
            balance seeds the walk.
        snapshots: Terms history sorted by from_date ascending.
        payments: Recorded payments, any periods (others are ignored).
        start_period: First period, "YYYY-MM".
        months: Horizon; the walk stops earlier at payoff.
    """
    rows = iter_schedule(obligation, snapshots, payments, start_period, months)
    return collect_plan(rows, start_period, months)
