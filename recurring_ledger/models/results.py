from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from recurring_ledger.models.obligation import Obligation


@dataclass(frozen=True)
class PeriodSchedule:
    """One period of day-count amortization."""
    period_start: date
    period_end: date
    days: int
    day_basis: int
    interest_rate: Decimal
    payment_total: Decimal
    fee: Decimal
    interest: Decimal
    principal: Decimal  # Includes extra_principal
    extra_principal: Decimal
    balance_start: Decimal
    balance_end: Decimal


@dataclass(frozen=True)
class PaymentInfo:
    payment_id: str
    amount: Decimal
    paid_date: date
    status: str
    note: str = ""
    kind: str = "MAIN"


@dataclass(frozen=True)
class PeriodPayments:
    main: Optional[PaymentInfo] = None
    extra_sum: Decimal = Decimal("0")
    extra_count: int = 0


@dataclass(frozen=True)
class ScenarioAdjustments:
    rate: Decimal
    recurring_extra: Decimal
    one_time_extra: Decimal
    extra_actual: Decimal


@dataclass(frozen=True)
class ScheduleRow:
    period_key: str
    due_date: date  # Display date, day clamped to 28
    schedule: PeriodSchedule
    payments: PeriodPayments = field(default_factory=PeriodPayments)
    scenario_applied: Optional[ScenarioAdjustments] = None


@dataclass
class PlanTotals:
    total_interest: Decimal = Decimal("0")
    total_fees: Decimal = Decimal("0")
    total_principal: Decimal = Decimal("0")  # Sum of actual balance reductions


@dataclass
class Plan:
    start_period: str
    months_requested: int
    payoff_period_key: Optional[str] = None
    payoff_date: Optional[date] = None
    months_to_payoff: Optional[int] = None
    totals: PlanTotals = field(default_factory=PlanTotals)
    schedule: list[ScheduleRow] = field(default_factory=list)


# ---- Forecast ----

@dataclass(frozen=True)
class ExpectedAmount:
    fixed: Decimal = Decimal("0")
    min: Decimal = Decimal("0")
    max: Decimal = Decimal("0")
    source: str = "TERMS_HISTORY"  # or "PAUSED"


@dataclass(frozen=True)
class MortgageSnapshot:
    mortgage_holder: str
    mortgage_kind: str
    interest_rate: Decimal
    monthly_fee: Decimal
    remaining_balance: Decimal
    schedule: PeriodSchedule


@dataclass(frozen=True)
class ForecastItem:
    obligation_id: str
    title: str
    kind: str
    due_date: date
    period_key: str
    expected: ExpectedAmount
    status: str  # PAUSED / UNPAID / SKIPPED / PAID
    mortgage: Optional[MortgageSnapshot] = None
    actual: Optional[PaymentInfo] = None
    extra_payment: Optional[PaymentInfo] = None
    paused: bool = False
    pause_id: Optional[str] = None
    pause_note: str = ""


@dataclass
class MonthBucket:
    key: str  # YYYY-MM
    date: date
    items_count: int = 0
    expected_fixed_total: Decimal = Decimal("0")
    expected_min: Decimal = Decimal("0")
    expected_max: Decimal = Decimal("0")
    paid_total: Decimal = Decimal("0")
    items: list[ForecastItem] = field(default_factory=list)


@dataclass(frozen=True)
class UpcomingBill:
    obligation_id: str
    title: str
    kind: str
    due_date: date
    expected_max: Decimal
    status: str


@dataclass(frozen=True)
class DerivedFigures:
    """At-a-glance estimates from the current template terms (flat rate/12)."""
    months_left: Optional[int] = None
    est_interest: Optional[Decimal] = None
    est_principal: Optional[Decimal] = None


@dataclass(frozen=True)
class ObligationSummary:
    obligation: Obligation
    derived: DerivedFigures


@dataclass(frozen=True)
class RollingSum:
    min: Decimal = Decimal("0")
    max: Decimal = Decimal("0")
    paid: Decimal = Decimal("0")


@dataclass
class ForecastMeta:
    filter: str
    months: int
    sum3: RollingSum
    past_months: int = 0


@dataclass
class Forecast:
    expenses: list[ObligationSummary] = field(default_factory=list)
    forecast: list[MonthBucket] = field(default_factory=list)
    next_bills: list[UpcomingBill] = field(default_factory=list)
    meta: Optional[ForecastMeta] = None
