"""SqlStore against an in-memory SQLite database (aiosqlite)."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from recurring_ledger.engine.plan import build_plan
from recurring_ledger.models.db import (
    Base,
    ObligationRow,
    PausePeriodRow,
    PaymentRow,
    TermsHistoryRow,
)
from recurring_ledger.models.obligation import ObligationKind, PaymentKind
from recurring_ledger.store.base import ObligationNotFound, ObligationStore
from recurring_ledger.store.queries import load_mortgage
from recurring_ledger.store.sql import SqlStore

MORTGAGE_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
POWER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
OLD_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")


def _seed_rows() -> list:
    return [
        ObligationRow(
            id=MORTGAGE_ID, title="Home loan", kind="HOUSING", due_day=1,
            amount=Decimal("1000"), interest_rate=Decimal("5"),
            remaining_balance=Decimal("100000"), mortgage_holder="First Bank",
            estimate_min=Decimal("5"), estimate_max=Decimal("9"),
        ),
        ObligationRow(
            id=POWER_ID, title="Power", kind="UTILITY", due_day=15,
            amount=Decimal("80"), estimate_min=Decimal("60"), estimate_max=Decimal("120"),
            pause_periods=[
                PausePeriodRow(start_date=date(2025, 3, 1), end_date=date(2025, 4, 1), note="Away"),
            ],
        ),
        ObligationRow(id=OLD_ID, title="Old streaming", kind="SUBSCRIPTION", is_active=False),
        TermsHistoryRow(obligation_id=MORTGAGE_ID, from_date=date(2025, 7, 15),
                        interest_rate=Decimal("4")),
        TermsHistoryRow(obligation_id=MORTGAGE_ID, from_date=date(2025, 1, 1),
                        amount=Decimal("1100")),
        PaymentRow(obligation_id=MORTGAGE_ID, period_key="2025-01",
                   paid_date=date(2025, 1, 2), amount=Decimal("1100")),
        PaymentRow(obligation_id=MORTGAGE_ID, period_key="2025-01", kind="EXTRA", status="EXTRA",
                   paid_date=date(2025, 1, 20), amount=Decimal("5000")),
        PaymentRow(obligation_id=POWER_ID, period_key="2025-1",
                   paid_date=date(2025, 1, 14), amount=Decimal("1")),
    ]


@pytest_asyncio.fixture
async def store():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, expire_on_commit=False)
    async with maker() as session:
        session.add_all(_seed_rows())
        await session.commit()

    async with maker() as session:
        yield SqlStore(session)
    await engine.dispose()


class TestSqlStore:
    @pytest.mark.asyncio()
    async def test_protocol(self, store):
        assert isinstance(store, ObligationStore)

    @pytest.mark.asyncio()
    async def test_get_obligation_normalized(self, store):
        m = await store.get_obligation(str(MORTGAGE_ID))
        assert m.id == str(MORTGAGE_ID)
        assert m.kind is ObligationKind.MORTGAGE
        assert m.estimate_min == 0
        assert m.remaining_balance == Decimal("100000")

    @pytest.mark.asyncio()
    async def test_pause_periods(self, store):
        power = await store.get_obligation(str(POWER_ID))
        assert len(power.pause_periods) == 1
        assert power.pause_periods[0].contains(date(2025, 4, 1))
        assert power.pause_periods[0].note == "Away"

    @pytest.mark.asyncio()
    async def test_missing(self, store):
        with pytest.raises(ObligationNotFound):
            await store.get_obligation(str(uuid.uuid4()))
        with pytest.raises(ObligationNotFound):
            await store.get_obligation("not-a-uuid")

    @pytest.mark.asyncio()
    async def test_list_obligations(self, store):
        assert [o.title for o in await store.list_obligations()] == ["Home loan", "Power"]
        everything = await store.list_obligations(include_inactive=True)
        assert [o.kind.value for o in everything] == ["MORTGAGE", "SUBSCRIPTION", "UTILITY"]

    @pytest.mark.asyncio()
    async def test_list_payments(self, store):
        payments = await store.list_payments("2024-01", "2025-12")
        assert len(payments) == 2  # Malformed period key skipped
        assert payments[0].amount == Decimal("1100")
        assert payments[1].kind is PaymentKind.EXTRA
        assert await store.list_payments("2025-01", "2025-12", obligation_id=str(POWER_ID)) == []

    @pytest.mark.asyncio()
    async def test_list_terms(self, store):
        terms = await store.list_terms([str(MORTGAGE_ID), "junk"])
        history = terms[str(MORTGAGE_ID)]
        assert [t.from_date for t in history] == [date(2025, 1, 1), date(2025, 7, 1)]
        assert history[0].interest_rate is None
        assert history[1].interest_rate == Decimal("4")

    @pytest.mark.asyncio()
    async def test_plan_from_database(self, store):
        inputs = await load_mortgage(store, str(MORTGAGE_ID), "2025-01", 12)
        plan = build_plan(inputs.obligation, inputs.snapshots, inputs.payments, "2025-01", 12)
        first = plan.schedule[0]
        assert first.schedule.payment_total == Decimal("1100.00")
        assert first.payments.extra_sum == Decimal("5000.00")
        assert plan.schedule[6].schedule.interest_rate == Decimal("4")
