"""Multi-month forecast grid across many recurring obligations.

Pure computation. No I/O. Obligations, payments and terms history in,
Forecast out. Mortgage-kind obligations also get a day-count amortization
step per due month, with the balance carried from bucket to bucket.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from recurring_ledger.engine.amortization import ZERO, amortize_period, round2
from recurring_ledger.engine.periods import (
    add_months,
    display_due_date,
    month_start,
    months_between,
    period_key,
)
from recurring_ledger.engine.plan import payment_info
from recurring_ledger.engine.terms import resolve_terms
from recurring_ledger.models.obligation import Obligation, ObligationKind, PaymentRecord
from recurring_ledger.models.results import (
    DerivedFigures,
    ExpectedAmount,
    Forecast,
    ForecastItem,
    ForecastMeta,
    MonthBucket,
    MortgageSnapshot,
    ObligationSummary,
    RollingSum,
    UpcomingBill,
)
from recurring_ledger.models.terms import TermsSnapshot

logger = logging.getLogger(__name__)

UPCOMING_HORIZON_DAYS = 45
UPCOMING_LIMIT = 10
ALL_KINDS = "ALL"


def is_due_in_month(interval: int, anchor: date, month: date) -> bool:
    """True when month falls on the billing cycle that starts at anchor."""
    if interval <= 1:
        return True
    diff = months_between(anchor, month)
    return diff >= 0 and diff % interval == 0


def estimate_months_left(
    remaining_balance: Decimal, amount: Decimal, monthly_fee: Decimal
) -> Optional[int]:
    """Payments left at the current amount, ignoring interest. None if never."""
    effective = max(ZERO, amount - monthly_fee)
    if remaining_balance <= 0 or effective <= 0:
        return None
    return math.ceil(remaining_balance / effective)


def derived_figures(obligation: Obligation) -> DerivedFigures:
    """Cheap at-a-glance figures from the template terms.

    Uses a flat rate/12 monthly interest, so it can disagree with the
    day-count schedule of the same mortgage.
    """
    if not obligation.is_mortgage:
        return DerivedFigures()

    remaining = obligation.remaining_balance
    rate = obligation.interest_rate
    fee = obligation.monthly_fee

    months_left = estimate_months_left(remaining, obligation.amount, fee)
    if remaining <= 0 or rate < 0:
        return DerivedFigures(months_left=months_left)

    interest = remaining * (rate / 100) / 12
    principal = max(ZERO, obligation.amount - interest - fee)
    return DerivedFigures(
        months_left=months_left,
        est_interest=round2(interest),
        est_principal=round2(principal),
    )


def _is_extra(payment: PaymentRecord) -> bool:
    # Older rows mark extras only in the note
    return payment.is_extra or "extra" in payment.note.lower()


@dataclass
class _PaymentIndex:
    main: dict[tuple[str, str], PaymentRecord] = field(default_factory=dict)
    extra_sum: dict[tuple[str, str], Decimal] = field(default_factory=dict)
    extra_last: dict[tuple[str, str], PaymentRecord] = field(default_factory=dict)

    @classmethod
    def build(cls, payments: Iterable[PaymentRecord]) -> "_PaymentIndex":
        index = cls()
        for p in payments:
            key = (p.obligation_id, p.period_key)
            if _is_extra(p):
                index.extra_sum[key] = round2(index.extra_sum.get(key, ZERO) + p.amount)
                index.extra_last[key] = p
            else:
                index.main[key] = p  # Last write wins
        return index


def _matches_filter(obligation: Obligation, kind_filter: str) -> bool:
    if kind_filter == ALL_KINDS:
        return True
    return obligation.kind is ObligationKind.parse(kind_filter)


def _status(paused: bool, main: Optional[PaymentRecord]) -> str:
    if paused:
        return "PAUSED"
    if main is None:
        return "UNPAID"
    if main.is_skipped:
        return "SKIPPED"
    return "PAID"


def build_forecast(
    obligations: Sequence[Obligation],
    payments: Iterable[PaymentRecord],
    terms_by_obligation: Mapping[str, Sequence[TermsSnapshot]],
    timeline_start: date,
    today: date,
    kind_filter: str = ALL_KINDS,
    months: int = 12,
    upcoming_days: int = UPCOMING_HORIZON_DAYS,
    upcoming_limit: int = UPCOMING_LIMIT,
) -> Forecast:
    """Build the month-by-month forecast grid.

    Args:
        obligations: Normalized obligations, in display order.
        payments: Payments covering the timeline (extra rows included).
        terms_by_obligation: Terms history per obligation id, sorted by from_date.
        timeline_start: First bucket; any day of that month.
        today: Reference date for the upcoming-bills window.
        kind_filter: "ALL" or an obligation kind name.
        months: Number of buckets.
        upcoming_days: Look-ahead window for next bills, inclusive.
        upcoming_limit: Max number of next bills returned.

    Raises:
        ValueError: kind_filter is not "ALL" or a known kind.
    """
    kind_filter = kind_filter.strip().upper()
    if kind_filter != ALL_KINDS:
        ObligationKind.parse(kind_filter)
    selected = [o for o in obligations if _matches_filter(o, kind_filter)]
    start = month_start(timeline_start)
    index = _PaymentIndex.build(payments)

    buckets = [
        MonthBucket(key=period_key(d), date=d)
        for d in (add_months(start, i) for i in range(months))
    ]

    # Running mortgage balance per obligation through the timeline
    mortgage_balances: dict[str, Decimal] = {}

    for obligation in selected:
        start_bound = month_start(obligation.start_date) if obligation.start_date else None
        end_bound = month_start(obligation.end_date) if obligation.end_date else None
        anchor = start_bound or date(start.year, obligation.start_month, 1)
        interval = max(1, obligation.billing_interval_months)
        snapshots = terms_by_obligation.get(obligation.id, ())

        for bucket in buckets:
            if start_bound and bucket.date < start_bound:
                continue
            if end_bound and bucket.date > end_bound:
                continue
            if not is_due_in_month(interval, anchor, bucket.date):
                continue

            key = (obligation.id, bucket.key)
            pause = obligation.pause_for(bucket.date)
            paused = pause is not None
            main = index.main.get(key)
            extra_last = index.extra_last.get(key)

            expected = ExpectedAmount(source="PAUSED")
            mortgage = None

            if not paused:
                terms = resolve_terms(obligation, snapshots, bucket.date)
                fixed = round2(terms.amount)
                low, high = round2(terms.estimate_min), round2(terms.estimate_max)
                if low == 0 and high == 0:
                    low = high = fixed
                expected = ExpectedAmount(fixed=fixed, min=low, max=high)

                bucket.expected_fixed_total += fixed
                bucket.expected_min += low
                bucket.expected_max += high
                if main is not None and not main.is_skipped:
                    bucket.paid_total += round2(main.amount)

                if obligation.is_mortgage:
                    balance_start = mortgage_balances.get(obligation.id)
                    if balance_start is None:
                        balance_start = obligation.opening_balance or terms.remaining_balance

                    schedule = amortize_period(
                        period_key=bucket.key,
                        due_day=obligation.due_day,
                        balance_start=balance_start,
                        annual_rate_pct=terms.interest_rate,
                        payment_total=round2(terms.amount),
                        fee=round2(terms.monthly_fee),
                        extra_principal=index.extra_sum.get(key, ZERO),
                    )
                    mortgage_balances[obligation.id] = schedule.balance_end
                    mortgage = MortgageSnapshot(
                        mortgage_holder=terms.mortgage_holder,
                        mortgage_kind=terms.mortgage_kind,
                        interest_rate=terms.interest_rate,
                        monthly_fee=round2(terms.monthly_fee),
                        remaining_balance=round2(terms.remaining_balance),
                        schedule=schedule,
                    )

            bucket.items.append(ForecastItem(
                obligation_id=obligation.id,
                title=obligation.title,
                kind=obligation.kind.value,
                due_date=display_due_date(bucket.date, obligation.due_day),
                period_key=bucket.key,
                expected=expected,
                status=_status(paused, main),
                mortgage=mortgage,
                actual=payment_info(main) if main is not None else None,
                extra_payment=payment_info(extra_last) if extra_last is not None else None,
                paused=paused,
                pause_id=pause.id if pause else None,
                pause_note=pause.note if pause else "",
            ))
            bucket.items_count += 1

    next_bills = upcoming_bills(buckets, today, upcoming_days, upcoming_limit)

    first_three = buckets[:3]
    sum3 = RollingSum(
        min=round2(sum((b.expected_min for b in first_three), ZERO)),
        max=round2(sum((b.expected_max for b in first_three), ZERO)),
        paid=round2(sum((b.paid_total for b in first_three), ZERO)),
    )

    logger.debug(
        "Forecast %s: %d obligations, %d months, %d items",
        kind_filter, len(selected), months, sum(b.items_count for b in buckets),
    )

    return Forecast(
        expenses=[ObligationSummary(o, derived_figures(o)) for o in selected],
        forecast=buckets,
        next_bills=next_bills,
        meta=ForecastMeta(filter=kind_filter, months=months, sum3=sum3),
    )


def upcoming_bills(
    buckets: Sequence[MonthBucket],
    today: date,
    days: int = UPCOMING_HORIZON_DAYS,
    limit: int = UPCOMING_LIMIT,
) -> list[UpcomingBill]:
    """Non-paused items due within [today, today + days], soonest first."""
    horizon = today + timedelta(days=days)
    upcoming = [
        UpcomingBill(
            obligation_id=item.obligation_id,
            title=item.title,
            kind=item.kind,
            due_date=item.due_date,
            expected_max=item.expected.max,
            status=item.status,
        )
        for bucket in buckets
        for item in bucket.items
        if item.status != "PAUSED" and today <= item.due_date <= horizon
    ]
    upcoming.sort(key=lambda bill: bill.due_date)
    return upcoming[:limit]
