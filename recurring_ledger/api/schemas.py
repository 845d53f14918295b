"""Pydantic schemas for API request/response models."""

from dataclasses import asdict
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from recurring_ledger.config import settings
from recurring_ledger.engine.periods import parse_period_key
from recurring_ledger.models.obligation import Obligation, ObligationKind
from recurring_ledger.models.results import Forecast, Plan
from recurring_ledger.models.scenario import (
    OneTimeExtra,
    RateOverride,
    RecurringExtra,
    Scenario,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _period_key(value: str) -> str:
    value = str(value).strip()
    parse_period_key(value)  # ValueError -> 422
    return value


# ---- Request schemas ----

class RecurringExtraIn(CamelModel):
    amount: Decimal = Field(Decimal("0"), ge=0)
    start_period: str = Field(..., alias="from", description="First period, YYYY-MM")

    @field_validator("start_period")
    @classmethod
    def check_period(cls, value: str) -> str:
        return _period_key(value)


class RateOverrideIn(CamelModel):
    start_period: str = Field(..., alias="from")
    interest_rate: Decimal | None = Field(None, ge=0, description="Annual nominal rate, percent")

    @field_validator("start_period")
    @classmethod
    def check_period(cls, value: str) -> str:
        return _period_key(value)


class OneTimeExtraIn(CamelModel):
    period_key: str
    amount: Decimal = Field(..., ge=0)

    @field_validator("period_key")
    @classmethod
    def check_period(cls, value: str) -> str:
        return _period_key(value)


class ScenarioIn(CamelModel):
    recurring_extra: RecurringExtraIn | None = None
    rate_overrides: list[RateOverrideIn] = Field(default_factory=list)
    one_time_extras: list[OneTimeExtraIn] = Field(default_factory=list)

    def to_scenario(self) -> Scenario:
        recurring = None
        if self.recurring_extra is not None:
            recurring = RecurringExtra(
                amount=self.recurring_extra.amount,
                start_period=self.recurring_extra.start_period,
            )
        return Scenario(
            recurring_extra=recurring,
            rate_overrides=tuple(
                RateOverride(start_period=r.start_period, interest_rate=r.interest_rate)
                for r in self.rate_overrides
            ),
            one_time_extras=tuple(
                OneTimeExtra(period_key=e.period_key, amount=e.amount)
                for e in self.one_time_extras
            ),
        )


class SimulateRequest(CamelModel):
    start_period: str = Field(..., alias="from", description="First period, YYYY-MM")
    months: int = Field(settings.plan_default_months, ge=1, le=settings.plan_max_months)
    scenario: ScenarioIn = Field(default_factory=ScenarioIn)

    @field_validator("start_period")
    @classmethod
    def check_period(cls, value: str) -> str:
        return _period_key(value)


# ---- Plan / simulation responses ----

class PeriodScheduleResponse(CamelModel):
    period_start: date
    period_end: date
    days: int
    day_basis: int
    interest_rate: Decimal
    payment_total: Decimal
    fee: Decimal
    interest: Decimal
    principal: Decimal
    extra_principal: Decimal
    balance_start: Decimal
    balance_end: Decimal


class PaymentInfoResponse(CamelModel):
    payment_id: str
    amount: Decimal
    paid_date: date
    status: str
    note: str = ""
    kind: str = "MAIN"


class PeriodPaymentsResponse(CamelModel):
    main: PaymentInfoResponse | None = None
    extra_sum: Decimal
    extra_count: int


class ScenarioAdjustmentsResponse(CamelModel):
    rate: Decimal
    recurring_extra: Decimal
    one_time_extra: Decimal
    extra_actual: Decimal


class ScheduleRowResponse(CamelModel):
    period_key: str
    due_date: date
    schedule: PeriodScheduleResponse
    payments: PeriodPaymentsResponse
    scenario_applied: ScenarioAdjustmentsResponse | None = None


class PlanTotalsResponse(CamelModel):
    total_interest: Decimal
    total_fees: Decimal
    total_principal: Decimal


class MortgageHeader(CamelModel):
    title: str
    mortgage_holder: str
    mortgage_kind: str
    due_day: int


class PlanResponse(CamelModel):
    obligation_id: str
    mortgage: MortgageHeader
    start_period: str = Field(..., alias="from")
    months_requested: int
    payoff_period_key: str | None = None
    payoff_date: date | None = None
    months_to_payoff: int | None = None
    totals: PlanTotalsResponse
    schedule: list[ScheduleRowResponse]

    @classmethod
    def build(cls, obligation: Obligation, plan: Plan, **extra) -> "PlanResponse":
        return cls.model_validate({
            "obligation_id": obligation.id,
            "mortgage": {
                "title": obligation.title,
                "mortgage_holder": obligation.mortgage_holder,
                "mortgage_kind": obligation.mortgage_kind,
                "due_day": obligation.due_day,
            },
            **asdict(plan),
            **extra,
        })


class SimulationResponse(PlanResponse):
    scenario: ScenarioIn


# ---- Forecast (summary) response ----

class PausePeriodResponse(CamelModel):
    id: str | None = None
    start: date = Field(..., alias="from")
    end: date = Field(..., alias="to")
    note: str = ""


class DerivedFiguresResponse(CamelModel):
    months_left: int | None = None
    est_interest: Decimal | None = None
    est_principal: Decimal | None = None


class ExpenseResponse(CamelModel):
    id: str
    title: str
    kind: ObligationKind
    due_day: int
    billing_interval_months: int
    start_month: int
    amount: Decimal
    estimate_min: Decimal
    estimate_max: Decimal
    interest_rate: Decimal
    has_monthly_fee: bool
    monthly_fee: Decimal
    remaining_balance: Decimal
    initial_balance: Decimal
    mortgage_holder: str
    mortgage_kind: str
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool
    pause_periods: list[PausePeriodResponse]
    derived: DerivedFiguresResponse


class ExpectedAmountResponse(CamelModel):
    fixed: Decimal
    min: Decimal
    max: Decimal
    source: str


class MortgageSnapshotResponse(CamelModel):
    mortgage_holder: str
    mortgage_kind: str
    interest_rate: Decimal
    monthly_fee: Decimal
    remaining_balance: Decimal
    schedule: PeriodScheduleResponse


class ForecastItemResponse(CamelModel):
    obligation_id: str
    title: str
    kind: str
    due_date: date
    period_key: str
    expected: ExpectedAmountResponse
    status: str
    mortgage: MortgageSnapshotResponse | None = None
    actual: PaymentInfoResponse | None = None
    extra_payment: PaymentInfoResponse | None = None
    paused: bool
    pause_id: str | None = None
    pause_note: str = ""


class MonthBucketResponse(CamelModel):
    key: str
    date: date
    items_count: int
    expected_fixed_total: Decimal
    expected_min: Decimal
    expected_max: Decimal
    paid_total: Decimal
    items: list[ForecastItemResponse]


class UpcomingBillResponse(CamelModel):
    obligation_id: str
    title: str
    kind: str
    due_date: date
    expected_max: Decimal
    status: str


class RollingSumResponse(CamelModel):
    min: Decimal
    max: Decimal
    paid: Decimal


class ForecastMetaResponse(CamelModel):
    filter: str
    months: int
    past_months: int
    sum3: RollingSumResponse


class ForecastResponse(CamelModel):
    expenses: list[ExpenseResponse]
    forecast: list[MonthBucketResponse]
    next_bills: list[UpcomingBillResponse]
    meta: ForecastMetaResponse

    @classmethod
    def build(cls, forecast: Forecast) -> "ForecastResponse":
        return cls.model_validate({
            "expenses": [
                {**asdict(s.obligation), "derived": asdict(s.derived)}
                for s in forecast.expenses
            ],
            "forecast": [asdict(b) for b in forecast.forecast],
            "next_bills": [asdict(b) for b in forecast.next_bills],
            "meta": asdict(forecast.meta),
        })
