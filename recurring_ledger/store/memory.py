"""In-memory store, loadable from a JSON export.

Export layout (camelCase keys, money as strings or numbers):

    {
      "obligations": [{"id": "m1", "title": "Home loan", "kind": "MORTGAGE", ...}],
      "terms": [{"obligationId": "m1", "fromDate": "2024-06-01", "interestRate": "5.6"}],
      "payments": [{"id": "p1", "obligationId": "m1", "periodKey": "2025-01", ...}]
    }
"""

import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from recurring_ledger.engine.periods import is_period_key, parse_period_key
from recurring_ledger.engine.terms import index_terms
from recurring_ledger.models.obligation import (
    Obligation,
    ObligationKind,
    PausePeriod,
    PaymentKind,
    PaymentRecord,
    PaymentStatus,
    normalize_obligation,
)
from recurring_ledger.models.terms import TermsSnapshot
from recurring_ledger.store.base import ObligationNotFound

logger = logging.getLogger(__name__)


def _dec(value: Any, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    return Decimal(str(value))


def _date(value: Any) -> Optional[date]:
    """Accept "YYYY-MM" (month start) or an ISO date/datetime string."""
    if not value:
        return None
    s = str(value).strip()
    if is_period_key(s):
        return parse_period_key(s)
    return date.fromisoformat(s[:10])


def pause_from_dict(data: dict) -> PausePeriod:
    return PausePeriod(
        start=_date(data["from"]),
        end=_date(data["to"]),
        note=str(data.get("note") or ""),
        id=str(data["id"]) if data.get("id") is not None else None,
    )


def obligation_from_dict(data: dict) -> Obligation:
    obligation = Obligation(
        id=str(data["id"]),
        title=str(data.get("title") or ""),
        kind=ObligationKind.parse(data.get("kind") or data.get("type")),
        due_day=int(data.get("dueDay") or 1),
        billing_interval_months=int(data.get("billingIntervalMonths") or 1),
        start_month=int(data.get("startMonth") or 1),
        amount=_dec(data.get("amount")),
        estimate_min=_dec(data.get("estimateMin")),
        estimate_max=_dec(data.get("estimateMax")),
        interest_rate=_dec(data.get("interestRate")),
        has_monthly_fee=bool(data.get("hasMonthlyFee", False)),
        monthly_fee=_dec(data.get("monthlyFee")),
        remaining_balance=_dec(data.get("remainingBalance")),
        initial_balance=_dec(data.get("initialBalance")),
        mortgage_holder=str(data.get("mortgageHolder") or ""),
        mortgage_kind=str(data.get("mortgageKind") or ""),
        start_date=_date(data.get("startDate")),
        end_date=_date(data.get("endDate")),
        is_active=bool(data.get("isActive", True)),
        pause_periods=tuple(pause_from_dict(p) for p in data.get("pausePeriods") or ()),
    )
    return normalize_obligation(obligation)


def terms_from_dict(data: dict) -> TermsSnapshot:
    has_fee = data.get("hasMonthlyFee")
    return TermsSnapshot(
        obligation_id=str(data["obligationId"]),
        from_date=_date(data["fromDate"]).replace(day=1),
        amount=_dec(data.get("amount"), None),
        estimate_min=_dec(data.get("estimateMin"), None),
        estimate_max=_dec(data.get("estimateMax"), None),
        interest_rate=_dec(data.get("interestRate"), None),
        has_monthly_fee=None if has_fee is None else bool(has_fee),
        monthly_fee=_dec(data.get("monthlyFee"), None),
        remaining_balance=_dec(data.get("remainingBalance"), None),
        note=str(data.get("note") or ""),
    )


def payment_from_dict(data: dict) -> PaymentRecord:
    key = str(data["periodKey"]).strip()
    paid = _date(data.get("paidDate"))
    if paid is None and is_period_key(key):
        paid = parse_period_key(key)
    return PaymentRecord(
        id=str(data["id"]),
        obligation_id=str(data["obligationId"]),
        period_key=key,
        paid_date=paid,
        amount=_dec(data.get("amount")),
        status=PaymentStatus(str(data.get("status") or "PAID").upper()),
        kind=PaymentKind(str(data.get("kind") or "MAIN").upper()),
        note=str(data.get("note") or ""),
    )


class MemoryStore:
    def __init__(
        self,
        obligations: Iterable[Obligation] = (),
        terms: Iterable[TermsSnapshot] = (),
        payments: Iterable[PaymentRecord] = (),
    ):
        self.obligations = [normalize_obligation(o) for o in obligations]
        self.terms = list(terms)
        self.payments = []
        for payment in payments:
            if not is_period_key(payment.period_key):
                logger.warning(
                    "Skipping payment %s with malformed period key %r",
                    payment.id, payment.period_key,
                )
                continue
            self.payments.append(payment)

    @classmethod
    def from_dict(cls, data: dict) -> "MemoryStore":
        return cls(
            obligations=[obligation_from_dict(o) for o in data.get("obligations", [])],
            terms=[terms_from_dict(t) for t in data.get("terms", [])],
            payments=[payment_from_dict(p) for p in data.get("payments", [])],
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "MemoryStore":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        logger.info("Loaded export %s", path)
        return cls.from_dict(data)

    async def get_obligation(self, obligation_id: str) -> Obligation:
        for obligation in self.obligations:
            if obligation.id == obligation_id:
                return obligation
        raise ObligationNotFound(obligation_id)

    async def list_obligations(self, include_inactive: bool = False) -> list[Obligation]:
        rows = [o for o in self.obligations if include_inactive or o.is_active]
        return sorted(rows, key=lambda o: (o.kind.value, o.title))

    async def list_payments(
        self, from_key: str, to_key: str, obligation_id: Optional[str] = None
    ) -> list[PaymentRecord]:
        rows = [
            p for p in self.payments
            if from_key <= p.period_key <= to_key
            and (obligation_id is None or p.obligation_id == obligation_id)
        ]
        return sorted(rows, key=lambda p: (p.period_key, p.paid_date))

    async def list_terms(
        self, obligation_ids: Sequence[str]
    ) -> dict[str, list[TermsSnapshot]]:
        wanted = set(obligation_ids)
        return index_terms(t for t in self.terms if t.obligation_id in wanted)
