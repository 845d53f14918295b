"""Async SQLAlchemy implementation of ObligationStore (read-only)."""

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recurring_ledger.engine.periods import is_period_key
from recurring_ledger.engine.terms import index_terms
from recurring_ledger.models.db import ObligationRow, PaymentRow, TermsHistoryRow
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


def obligation_from_row(row: ObligationRow) -> Obligation:
    return normalize_obligation(Obligation(
        id=str(row.id),
        title=row.title,
        kind=ObligationKind.parse(row.kind),
        due_day=row.due_day,
        billing_interval_months=row.billing_interval_months,
        start_month=row.start_month,
        amount=row.amount,
        estimate_min=row.estimate_min,
        estimate_max=row.estimate_max,
        interest_rate=row.interest_rate,
        has_monthly_fee=row.has_monthly_fee,
        monthly_fee=row.monthly_fee,
        remaining_balance=row.remaining_balance,
        initial_balance=row.initial_balance,
        mortgage_holder=row.mortgage_holder,
        mortgage_kind=row.mortgage_kind,
        start_date=row.start_date,
        end_date=row.end_date,
        is_active=row.is_active,
        pause_periods=tuple(
            PausePeriod(start=p.start_date, end=p.end_date, note=p.note, id=str(p.id))
            for p in row.pause_periods
        ),
    ))


def terms_from_row(row: TermsHistoryRow) -> TermsSnapshot:
    return TermsSnapshot(
        obligation_id=str(row.obligation_id),
        from_date=row.from_date.replace(day=1),
        amount=row.amount,
        estimate_min=row.estimate_min,
        estimate_max=row.estimate_max,
        interest_rate=row.interest_rate,
        has_monthly_fee=row.has_monthly_fee,
        monthly_fee=row.monthly_fee,
        remaining_balance=row.remaining_balance,
        note=row.note,
    )


def payment_from_row(row: PaymentRow) -> PaymentRecord:
    return PaymentRecord(
        id=str(row.id),
        obligation_id=str(row.obligation_id),
        period_key=row.period_key,
        paid_date=row.paid_date,
        amount=row.amount,
        status=PaymentStatus(row.status.upper()),
        kind=PaymentKind(row.kind.upper()),
        note=row.note,
    )


def _parse_id(obligation_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(obligation_id))
    except ValueError:
        return None


class SqlStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_obligation(self, obligation_id: str) -> Obligation:
        uid = _parse_id(obligation_id)
        row = await self.session.get(ObligationRow, uid) if uid else None
        if row is None:
            raise ObligationNotFound(obligation_id)
        return obligation_from_row(row)

    async def list_obligations(self, include_inactive: bool = False) -> list[Obligation]:
        stmt = select(ObligationRow).order_by(ObligationRow.kind, ObligationRow.title)
        if not include_inactive:
            stmt = stmt.where(ObligationRow.is_active.is_(True))
        rows = (await self.session.scalars(stmt)).all()
        obligations = [obligation_from_row(r) for r in rows]
        # Legacy HOUSING rows sort as MORTGAGE after normalization
        return sorted(obligations, key=lambda o: (o.kind.value, o.title))

    async def list_payments(
        self, from_key: str, to_key: str, obligation_id: Optional[str] = None
    ) -> list[PaymentRecord]:
        stmt = (
            select(PaymentRow)
            .where(PaymentRow.period_key >= from_key, PaymentRow.period_key <= to_key)
            .order_by(PaymentRow.period_key, PaymentRow.paid_date)
        )
        if obligation_id is not None:
            uid = _parse_id(obligation_id)
            if uid is None:
                return []
            stmt = stmt.where(PaymentRow.obligation_id == uid)

        payments = []
        for row in (await self.session.scalars(stmt)).all():
            if not is_period_key(row.period_key):
                logger.warning(
                    "Skipping payment %s with malformed period key %r", row.id, row.period_key
                )
                continue
            payments.append(payment_from_row(row))
        return payments

    async def list_terms(
        self, obligation_ids: Sequence[str]
    ) -> dict[str, list[TermsSnapshot]]:
        uids = [u for u in (_parse_id(i) for i in obligation_ids) if u is not None]
        if not uids:
            return {}
        stmt = (
            select(TermsHistoryRow)
            .where(TermsHistoryRow.obligation_id.in_(uids))
            .order_by(TermsHistoryRow.obligation_id, TermsHistoryRow.from_date)
        )
        rows = (await self.session.scalars(stmt)).all()
        return index_terms(terms_from_row(r) for r in rows)
