"""Obligation, pause period and payment record data types."""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

BILLING_INTERVALS = (1, 3, 6, 12)


class ObligationKind(Enum):
    MORTGAGE = "MORTGAGE"
    UTILITY = "UTILITY"
    INSURANCE = "INSURANCE"
    SUBSCRIPTION = "SUBSCRIPTION"

    @classmethod
    def parse(cls, value: str) -> "ObligationKind":
        """Parse a stored kind string. Legacy HOUSING rows are mortgages."""
        raw = str(value or "").strip().upper()
        if raw == "HOUSING":
            return cls.MORTGAGE
        return cls(raw)


class PaymentStatus(Enum):
    PAID = "PAID"
    PARTIAL = "PARTIAL"
    SKIPPED = "SKIPPED"
    EXTRA = "EXTRA"


class PaymentKind(Enum):
    MAIN = "MAIN"
    EXTRA = "EXTRA"


@dataclass(frozen=True)
class PausePeriod:
    """Closed month range [start, end] during which an obligation is on hold."""
    start: date
    end: date
    note: str = ""
    id: Optional[str] = None

    def contains(self, month: date) -> bool:
        m = month.replace(day=1)
        return self.start.replace(day=1) <= m <= self.end.replace(day=1)


@dataclass(frozen=True)
class Obligation:
    id: str
    title: str
    kind: ObligationKind
    due_day: int = 1  # 1..28
    billing_interval_months: int = 1
    start_month: int = 1  # Recurrence anchor when start_date is unset

    # Non-mortgage amounts
    amount: Decimal = Decimal("0")  # Mortgages: expected monthly payment
    estimate_min: Decimal = Decimal("0")
    estimate_max: Decimal = Decimal("0")

    # Mortgage fields
    interest_rate: Decimal = Decimal("0")  # Nominal annual %, e.g. Decimal("5.1")
    has_monthly_fee: bool = False
    monthly_fee: Decimal = Decimal("0")
    remaining_balance: Decimal = Decimal("0")
    initial_balance: Decimal = Decimal("0")
    mortgage_holder: str = ""
    mortgage_kind: str = ""

    # Lifecycle
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True
    pause_periods: tuple[PausePeriod, ...] = field(default_factory=tuple)

    @property
    def is_mortgage(self) -> bool:
        return self.kind is ObligationKind.MORTGAGE

    @property
    def opening_balance(self) -> Decimal:
        """Balance a schedule walk starts from: remaining, else initial."""
        return self.remaining_balance or self.initial_balance or Decimal("0")

    def pause_for(self, month: date) -> Optional[PausePeriod]:
        for pause in self.pause_periods:
            if pause.contains(month):
                return pause
        return None


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    obligation_id: str
    period_key: str  # YYYY-MM
    paid_date: date
    amount: Decimal
    status: PaymentStatus = PaymentStatus.PAID
    kind: PaymentKind = PaymentKind.MAIN
    note: str = ""

    @property
    def is_extra(self) -> bool:
        return self.kind is PaymentKind.EXTRA or self.status is PaymentStatus.EXTRA

    @property
    def is_skipped(self) -> bool:
        return self.status is PaymentStatus.SKIPPED


def normalize_obligation(obligation: Obligation) -> Obligation:
    """Apply the invariants stored obligations are expected to satisfy.

    Mortgages always bill monthly and carry no estimate range; every other
    kind carries zeroed mortgage fields. Fees only count when flagged.
    """
    due_day = min(28, max(1, int(obligation.due_day or 1)))
    interval = obligation.billing_interval_months
    if interval not in BILLING_INTERVALS:
        interval = 1
    start_month = min(12, max(1, int(obligation.start_month or 1)))
    monthly_fee = obligation.monthly_fee if obligation.has_monthly_fee else Decimal("0")

    if obligation.is_mortgage:
        return replace(
            obligation,
            due_day=due_day,
            billing_interval_months=1,
            start_month=start_month,
            monthly_fee=monthly_fee,
            estimate_min=Decimal("0"),
            estimate_max=Decimal("0"),
        )

    return replace(
        obligation,
        due_day=due_day,
        billing_interval_months=interval,
        start_month=start_month,
        mortgage_holder="",
        mortgage_kind="",
        remaining_balance=Decimal("0"),
        initial_balance=Decimal("0"),
        interest_rate=Decimal("0"),
        has_monthly_fee=False,
        monthly_fee=Decimal("0"),
    )
