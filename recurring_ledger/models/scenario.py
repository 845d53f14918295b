"""What-if overlays for a mortgage simulation. Read-time only, never stored."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class RecurringExtra:
    amount: Decimal
    start_period: str  # YYYY-MM, applies to this period and every later one


@dataclass(frozen=True)
class RateOverride:
    start_period: str  # YYYY-MM
    interest_rate: Optional[Decimal] = None  # None keeps the resolved rate


@dataclass(frozen=True)
class OneTimeExtra:
    period_key: str
    amount: Decimal


@dataclass(frozen=True)
class Scenario:
    recurring_extra: Optional[RecurringExtra] = None
    rate_overrides: tuple[RateOverride, ...] = field(default_factory=tuple)
    one_time_extras: tuple[OneTimeExtra, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return (
            self.recurring_extra is None
            and not self.rate_overrides
            and not self.one_time_extras
        )
