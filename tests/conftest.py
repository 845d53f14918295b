"""Canonical test fixtures used across engine, store, API and CLI tests.

Mortgage: $100K remaining, 5% nominal, $1,000/mo, due on the 1st, no fee.
Utility: monthly power bill, $80 fixed with a $60-$120 range.
Insurance: quarterly premium anchored on January.
"""

import json
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from recurring_ledger.models.obligation import (
    Obligation,
    ObligationKind,
    PausePeriod,
    PaymentKind,
    PaymentRecord,
    PaymentStatus,
)


def make_payment(
    obligation_id: str,
    key: str,
    amount,
    paid: date | None = None,
    status: PaymentStatus = PaymentStatus.PAID,
    kind: PaymentKind = PaymentKind.MAIN,
    note: str = "",
    payment_id: str | None = None,
) -> PaymentRecord:
    year, month = int(key[:4]), int(key[5:])
    return PaymentRecord(
        id=payment_id or f"{obligation_id}-{key}-{kind.value.lower()}",
        obligation_id=obligation_id,
        period_key=key,
        paid_date=paid or date(year, month, 1),
        amount=Decimal(str(amount)),
        status=status,
        kind=kind,
        note=note,
    )


@pytest.fixture
def mortgage() -> Obligation:
    """$100K at 5%, $1,000/mo on the 1st."""
    return Obligation(
        id="m1",
        title="Home loan",
        kind=ObligationKind.MORTGAGE,
        due_day=1,
        amount=Decimal("1000"),
        interest_rate=Decimal("5"),
        remaining_balance=Decimal("100000"),
        initial_balance=Decimal("250000"),
        mortgage_holder="First Bank",
        mortgage_kind="fixed",
    )


@pytest.fixture
def utility() -> Obligation:
    return Obligation(
        id="u1",
        title="Power",
        kind=ObligationKind.UTILITY,
        due_day=15,
        amount=Decimal("80"),
        estimate_min=Decimal("60"),
        estimate_max=Decimal("120"),
    )


@pytest.fixture
def insurance() -> Obligation:
    """Quarterly premium, due Jan/Apr/Jul/Oct."""
    return Obligation(
        id="i1",
        title="Home insurance",
        kind=ObligationKind.INSURANCE,
        due_day=10,
        billing_interval_months=3,
        start_month=1,
        amount=Decimal("300"),
    )


@pytest.fixture
def paused_utility(utility) -> Obligation:
    """The power bill on hold for March-April 2025."""
    return replace(
        utility,
        pause_periods=(
            PausePeriod(start=date(2025, 3, 1), end=date(2025, 4, 1), note="Away", id="p1"),
        ),
    )


@pytest.fixture
def export_data() -> dict:
    """JSON export in the shape MemoryStore.from_dict reads."""
    return {
        "obligations": [
            {
                "id": "m1",
                "title": "Home loan",
                "kind": "HOUSING",
                "dueDay": 1,
                "amount": "1000",
                "interestRate": "5",
                "remainingBalance": "100000",
                "mortgageHolder": "First Bank",
                "mortgageKind": "fixed",
            },
            {
                "id": "u1",
                "title": "Power",
                "kind": "UTILITY",
                "dueDay": 15,
                "amount": 80,
                "estimateMin": 60,
                "estimateMax": 120,
                "pausePeriods": [{"id": "p1", "from": "2025-03", "to": "2025-04", "note": "Away"}],
            },
            {
                "id": "s1",
                "title": "Old streaming",
                "kind": "SUBSCRIPTION",
                "amount": "9.99",
                "isActive": False,
            },
        ],
        "terms": [
            {"obligationId": "m1", "fromDate": "2025-07-01", "interestRate": "4"},
            {"obligationId": "m1", "fromDate": "2025-01", "amount": "1100"},
        ],
        "payments": [
            {
                "id": "pay1", "obligationId": "m1", "periodKey": "2025-01",
                "paidDate": "2025-01-02", "amount": "1100",
            },
            {
                "id": "pay2", "obligationId": "m1", "periodKey": "2025-01",
                "paidDate": "2025-01-20", "amount": "5000", "kind": "EXTRA", "status": "EXTRA",
            },
            {
                "id": "pay3", "obligationId": "u1", "periodKey": "2025-01",
                "paidDate": "2025-01-14", "amount": "95.50",
            },
            {
                "id": "bad", "obligationId": "u1", "periodKey": "2025-1",
                "paidDate": "2025-01-14", "amount": "1",
            },
        ],
    }


@pytest.fixture
def export_file(tmp_path, export_data):
    path = tmp_path / "export.json"
    path.write_text(json.dumps(export_data), encoding="utf-8")
    return path
