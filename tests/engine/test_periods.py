from datetime import date

import pytest

from recurring_ledger.engine.periods import (
    accrual_due_date,
    add_months,
    display_due_date,
    is_period_key,
    iter_period_keys,
    months_between,
    parse_period_key,
    period_bounds,
    period_key,
)


class TestParsePeriodKey:
    def test_month_start(self):
        assert parse_period_key("2025-01") == date(2025, 1, 1)

    def test_strips_whitespace(self):
        assert parse_period_key(" 2024-12 ") == date(2024, 12, 1)

    @pytest.mark.parametrize("bad", ["2025-13", "2025-00", "2025-1", "25-01", "2025/01", "", None])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            parse_period_key(bad)

    def test_is_period_key(self):
        assert is_period_key("2025-06")
        assert not is_period_key("2025-6")

    def test_format_round_trip(self):
        assert period_key(date(2025, 3, 17)) == "2025-03"


class TestMonthArithmetic:
    def test_add_months_crosses_year(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 1)

    def test_add_negative_months(self):
        assert add_months(date(2025, 1, 1), -1) == date(2024, 12, 1)
        assert add_months(date(2025, 3, 1), -14) == date(2024, 1, 1)

    def test_months_between(self):
        assert months_between(date(2024, 11, 1), date(2025, 2, 1)) == 3
        assert months_between(date(2025, 2, 1), date(2024, 11, 1)) == -3

    def test_iter_period_keys(self):
        assert list(iter_period_keys("2024-11", 3)) == ["2024-11", "2024-12", "2025-01"]


class TestDueDates:
    def test_accrual_clamps_to_month_length(self):
        assert accrual_due_date(date(2025, 2, 1), 31) == date(2025, 2, 28)
        assert accrual_due_date(date(2024, 2, 1), 30) == date(2024, 2, 29)

    def test_display_clamps_to_28(self):
        assert display_due_date(date(2025, 1, 1), 31) == date(2025, 1, 28)
        assert display_due_date(date(2025, 1, 1), 0) == date(2025, 1, 1)

    def test_conventions_agree_for_valid_due_days(self):
        for day in range(1, 29):
            for month in (date(2024, 2, 1), date(2025, 2, 1), date(2025, 7, 1)):
                assert accrual_due_date(month, day) == display_due_date(month, day)


class TestPeriodBounds:
    def test_thirty_day_period(self):
        start, end, days = period_bounds("2024-05", 1)
        assert start == date(2024, 4, 1)
        assert end == date(2024, 5, 1)
        assert days == 30

    def test_leap_february(self):
        assert period_bounds("2024-03", 1)[2] == 29
        assert period_bounds("2025-03", 15)[2] == 28

    def test_year_boundary(self):
        start, end, days = period_bounds("2025-01", 10)
        assert start == date(2024, 12, 10)
        assert end == date(2025, 1, 10)
        assert days == 31
