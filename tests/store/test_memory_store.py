from datetime import date
from decimal import Decimal

import pytest

from recurring_ledger.models.obligation import ObligationKind, PaymentKind
from recurring_ledger.store.base import NotAMortgage, ObligationNotFound, ObligationStore
from recurring_ledger.store.memory import MemoryStore, obligation_from_dict
from recurring_ledger.store.queries import load_forecast_inputs, load_mortgage


@pytest.fixture
def store(export_data) -> MemoryStore:
    return MemoryStore.from_dict(export_data)


class TestLoading:
    def test_protocol(self, store):
        assert isinstance(store, ObligationStore)

    def test_legacy_kind_normalized(self, store):
        assert store.obligations[0].kind is ObligationKind.MORTGAGE

    def test_pause_periods_parsed(self, store):
        power = store.obligations[1]
        assert power.pause_periods[0].start == date(2025, 3, 1)
        assert power.pause_periods[0].end == date(2025, 4, 1)
        assert power.pause_periods[0].note == "Away"

    def test_malformed_payment_skipped(self, store):
        assert "bad" not in {p.id for p in store.payments}
        assert len(store.payments) == 3

    def test_malformed_payment_without_paid_date_skipped(self):
        store = MemoryStore.from_dict({
            "payments": [
                {"id": "bad", "obligationId": "u1", "periodKey": "2025-1", "amount": "1"},
                {"id": "ok", "obligationId": "u1", "periodKey": "2025-02", "amount": "80"},
            ],
        })
        assert [p.id for p in store.payments] == ["ok"]
        assert store.payments[0].paid_date == date(2025, 2, 1)

    def test_from_json(self, export_file):
        store = MemoryStore.from_json(export_file)
        assert len(store.obligations) == 3

    def test_numbers_become_decimals(self, store):
        assert store.obligations[1].amount == Decimal("80")
        assert store.obligations[2].amount == Decimal("9.99")

    def test_snapshot_unset_fields_stay_none(self, store):
        snapshot = next(t for t in store.terms if t.interest_rate is not None)
        assert snapshot.amount is None
        assert snapshot.from_date == date(2025, 7, 1)

    def test_defaults(self):
        o = obligation_from_dict({"id": "x", "kind": "utility", "amount": 5})
        assert o.due_day == 1
        assert o.billing_interval_months == 1
        assert o.is_active


class TestQueries:
    @pytest.mark.asyncio()
    async def test_get_obligation(self, store):
        assert (await store.get_obligation("m1")).title == "Home loan"

    @pytest.mark.asyncio()
    async def test_get_missing(self, store):
        with pytest.raises(ObligationNotFound):
            await store.get_obligation("nope")

    @pytest.mark.asyncio()
    async def test_active_only_by_default(self, store):
        ids = [o.id for o in await store.list_obligations()]
        assert ids == ["m1", "u1"]

    @pytest.mark.asyncio()
    async def test_include_inactive_ordered_by_kind(self, store):
        kinds = [o.kind.value for o in await store.list_obligations(include_inactive=True)]
        assert kinds == ["MORTGAGE", "SUBSCRIPTION", "UTILITY"]

    @pytest.mark.asyncio()
    async def test_payments_in_range(self, store):
        payments = await store.list_payments("2025-01", "2025-01", obligation_id="m1")
        assert [p.id for p in payments] == ["pay1", "pay2"]
        assert payments[1].kind is PaymentKind.EXTRA
        assert await store.list_payments("2025-02", "2025-12") == []

    @pytest.mark.asyncio()
    async def test_terms_sorted(self, store):
        terms = await store.list_terms(["m1", "u1"])
        assert [t.from_date for t in terms["m1"]] == [date(2025, 1, 1), date(2025, 7, 1)]
        assert "u1" not in terms


class TestSharedQueries:
    @pytest.mark.asyncio()
    async def test_load_mortgage(self, store):
        inputs = await load_mortgage(store, "m1", "2025-01", 12)
        assert inputs.obligation.id == "m1"
        assert len(inputs.snapshots) == 2
        assert {p.id for p in inputs.payments} == {"pay1", "pay2"}

    @pytest.mark.asyncio()
    async def test_load_mortgage_horizon(self, store):
        inputs = await load_mortgage(store, "m1", "2025-02", 12)
        assert inputs.payments == []

    @pytest.mark.asyncio()
    async def test_load_non_mortgage(self, store):
        with pytest.raises(NotAMortgage):
            await load_mortgage(store, "u1", "2025-01", 12)

    @pytest.mark.asyncio()
    async def test_forecast_inputs(self, store):
        inputs = await load_forecast_inputs(store, date(2025, 3, 18), 6, past_months=2)
        assert inputs.timeline_start == date(2025, 1, 1)
        assert inputs.total_months == 8
        assert [o.id for o in inputs.obligations] == ["m1", "u1"]
        # Lookback reaches a year before the timeline
        assert {p.id for p in inputs.payments} == {"pay1", "pay2", "pay3"}
