from datetime import datetime

from spendlens.domain import BudgetPeriod, RecurringFrequency
from spendlens.periods import (
    add_months,
    advance,
    gregorian_weekday,
    month_bounds,
    period_bounds,
    shift_month,
    week_bounds,
    whole_days,
)


def test_shift_month_across_years():
    assert shift_month(2026, 1, -1) == (2025, 12)
    assert shift_month(2025, 12, 1) == (2026, 1)
    assert shift_month(2026, 5, -17) == (2024, 12)


def test_month_bounds_leap_february():
    start, end = month_bounds(2024, 2)
    assert start == datetime(2024, 2, 1)
    assert end == datetime(2024, 2, 29, 23, 59, 59, 999999)


def test_add_months_clamps_day():
    assert add_months(datetime(2026, 1, 31, 9, 30), 1) == datetime(2026, 2, 28, 9, 30)
    assert add_months(datetime(2024, 2, 29), 12) == datetime(2025, 2, 28)


def test_gregorian_weekday_starts_on_sunday():
    assert gregorian_weekday(datetime(2026, 10, 18)) == 1  # Sunday
    assert gregorian_weekday(datetime(2026, 10, 19)) == 2
    assert gregorian_weekday(datetime(2026, 10, 17)) == 7  # Saturday


def test_week_bounds():
    start, end = week_bounds(datetime(2026, 10, 21, 15, 0))
    assert start == datetime(2026, 10, 18)
    assert end == datetime(2026, 10, 24, 23, 59, 59, 999999)


def test_period_bounds():
    now = datetime(2026, 10, 17, 12)
    assert period_bounds(BudgetPeriod.MONTHLY, now) == (datetime(2026, 10, 1), datetime(2026, 10, 31, 23, 59, 59, 999999))
    assert period_bounds(BudgetPeriod.YEARLY, now)[0] == datetime(2026, 1, 1)
    assert period_bounds(BudgetPeriod.WEEKLY, now)[0] == datetime(2026, 10, 11)


def test_whole_days_truncates():
    assert whole_days(datetime(2026, 10, 1), datetime(2026, 10, 17, 12)) == 16
    assert whole_days(datetime(2026, 10, 1), datetime(2026, 10, 1, 23)) == 0


def test_advance():
    base = datetime(2026, 1, 31)
    assert advance(base, RecurringFrequency.DAILY) == datetime(2026, 2, 1)
    assert advance(base, RecurringFrequency.WEEKLY) == datetime(2026, 2, 7)
    assert advance(base, RecurringFrequency.BIWEEKLY) == datetime(2026, 2, 14)
    assert advance(base, RecurringFrequency.MONTHLY) == datetime(2026, 2, 28)
    assert advance(datetime(2024, 2, 29), RecurringFrequency.YEARLY) == datetime(2025, 2, 28)
    assert advance(base, RecurringFrequency.MONTHLY, steps=3) == datetime(2026, 4, 30)
