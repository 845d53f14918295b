"""Effective-dated financial terms.

A TermsSnapshot only overrides the fields it sets (None = not set); the
base values live on the Obligation and are never mutated by a snapshot.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class TermsSnapshot:
    obligation_id: str
    from_date: date  # Always a month start, unique per obligation
    amount: Optional[Decimal] = None
    estimate_min: Optional[Decimal] = None
    estimate_max: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None
    has_monthly_fee: Optional[bool] = None
    monthly_fee: Optional[Decimal] = None
    remaining_balance: Optional[Decimal] = None
    note: str = ""


@dataclass(frozen=True)
class EffectiveTerms:
    amount: Decimal
    estimate_min: Decimal
    estimate_max: Decimal
    interest_rate: Decimal
    has_monthly_fee: bool
    monthly_fee: Decimal
    remaining_balance: Decimal
    mortgage_holder: str = ""
    mortgage_kind: str = ""
    from_date: Optional[date] = None  # Snapshot that won, None = base values
