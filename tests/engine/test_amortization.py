from decimal import Decimal

from recurring_ledger.engine.amortization import (
    DAY_BASIS,
    amortize_period,
    period_interest,
    round2,
)


def _is_cents(value: Decimal) -> bool:
    return value == value.quantize(Decimal("0.01"))


class TestRound2:
    def test_half_up(self):
        assert round2(Decimal("2.345")) == Decimal("2.35")
        assert round2(Decimal("2.344999")) == Decimal("2.34")
        assert round2(Decimal("-2.345")) == Decimal("-2.35")

    def test_none_is_zero(self):
        assert round2(None) == Decimal("0.00")


class TestPeriodInterest:
    def test_thirty_days_at_five_percent(self):
        # 100000 * 0.05 * 30/365 = 410.958...
        assert period_interest(Decimal("100000"), Decimal("5"), 30) == Decimal("410.96")

    def test_fixed_365_basis_in_leap_year(self):
        assert DAY_BASIS == 365
        assert period_interest(Decimal("36500"), Decimal("10"), 366) == Decimal("3660.00")

    def test_zero_rate(self):
        assert period_interest(Decimal("100000"), Decimal("0"), 31) == Decimal("0.00")


class TestAmortizePeriod:
    def test_standard_period(self):
        """$100K at 5%, $1,000 payment over a 30-day period."""
        s = amortize_period("2024-05", 1, Decimal("100000"), Decimal("5"), Decimal("1000"))
        assert s.days == 30
        assert s.interest == Decimal("410.96")
        assert s.principal == Decimal("589.04")
        assert s.balance_end == Decimal("99410.96")
        assert s.extra_principal == Decimal("0.00")

    def test_extra_principal_is_additive(self):
        s = amortize_period(
            "2024-05", 1, Decimal("100000"), Decimal("5"), Decimal("1000"),
            extra_principal=Decimal("5000"),
        )
        assert s.principal == Decimal("5589.04")
        assert s.balance_end == Decimal("94410.96")
        assert s.extra_principal == Decimal("5000.00")

    def test_fee_reduces_principal(self):
        s = amortize_period(
            "2024-05", 1, Decimal("100000"), Decimal("5"), Decimal("1000"), fee=Decimal("25")
        )
        assert s.fee == Decimal("25.00")
        assert s.principal == Decimal("564.04")
        assert s.balance_end == Decimal("99435.96")

    def test_shortfall_never_negative_principal(self):
        s = amortize_period("2024-05", 1, Decimal("100000"), Decimal("5"), Decimal("300"))
        assert s.principal == Decimal("0.00")
        assert s.balance_end == Decimal("100000.00")

    def test_shortfall_still_takes_extra(self):
        s = amortize_period(
            "2024-05", 1, Decimal("100000"), Decimal("5"), Decimal("0"),
            extra_principal=Decimal("250"),
        )
        assert s.principal == Decimal("250.00")
        assert s.balance_end == Decimal("99750.00")

    def test_balance_floors_at_zero(self):
        s = amortize_period("2024-05", 1, Decimal("500"), Decimal("5"), Decimal("1000"))
        assert s.interest == Decimal("2.05")
        assert s.principal == Decimal("997.95")
        assert s.balance_end == Decimal("0.00")

    def test_period_dates(self):
        s = amortize_period("2025-03", 15, Decimal("1000"), Decimal("5"), Decimal("100"))
        assert str(s.period_start) == "2025-02-15"
        assert str(s.period_end) == "2025-03-15"
        assert s.days == 28
        assert s.day_basis == 365

    def test_pure(self):
        args = ("2024-05", 1, Decimal("100000"), Decimal("5"), Decimal("1000"))
        assert amortize_period(*args) == amortize_period(*args)

    def test_money_fields_are_cents(self):
        s = amortize_period(
            "2024-02", 7, Decimal("123456.789"), Decimal("4.375"), Decimal("987.654"),
            fee=Decimal("3.333"), extra_principal=Decimal("10.005"),
        )
        for value in (s.payment_total, s.fee, s.interest, s.principal,
                      s.extra_principal, s.balance_start, s.balance_end):
            assert _is_cents(value)
