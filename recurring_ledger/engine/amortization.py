"""Day-count amortization of a single billing period.

Pure functions: Decimal in, dataclass out. No I/O.
"""

from decimal import Decimal, ROUND_HALF_UP

from recurring_ledger.engine.periods import period_bounds
from recurring_ledger.models.results import PeriodSchedule

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")

# Fixed 365-day year, leap years included. Not bank-exact; kept for
# compatibility with previously produced schedules.
DAY_BASIS = 365


def round2(value) -> Decimal:
    """Round half-up to cents."""
    return Decimal(value or 0).quantize(TWO_PLACES, ROUND_HALF_UP)


def period_interest(balance: Decimal, annual_rate_pct: Decimal, days: int) -> Decimal:
    """Interest accrued on balance over days at a nominal annual % rate."""
    return round2(balance * (annual_rate_pct / 100) * (Decimal(days) / DAY_BASIS))


def amortize_period(
    period_key: str,
    due_day: int,
    balance_start: Decimal,
    annual_rate_pct: Decimal,
    payment_total: Decimal,
    fee: Decimal = ZERO,
    extra_principal: Decimal = ZERO,
) -> PeriodSchedule:
    """Split one period's payment into interest, fee and principal.

    The period runs from the previous month's due date to this month's due
    date. A payment that does not cover interest yields zero principal (the
    shortfall is not capitalized); extra principal is always added on top.
    The ending balance floors at zero. Detecting payoff is up to the caller.
    """
    period_start, period_end, days = period_bounds(period_key, due_day)

    balance = Decimal(balance_start or 0)
    rate = Decimal(annual_rate_pct or 0)
    payment = Decimal(payment_total or 0)
    fee = Decimal(fee or 0)
    extra = Decimal(extra_principal or 0)

    interest = period_interest(balance, rate, days)
    principal_base = payment - fee - interest
    principal = round2(max(ZERO, principal_base) + extra)
    balance_end = round2(max(ZERO, balance - principal))

    return PeriodSchedule(
        period_start=period_start,
        period_end=period_end,
        days=days,
        day_basis=DAY_BASIS,
        interest_rate=rate,
        payment_total=round2(payment),
        fee=round2(fee),
        interest=interest,
        principal=principal,
        extra_principal=round2(extra),
        balance_start=round2(balance),
        balance_end=balance_end,
    )
