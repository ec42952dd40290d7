import calendar
from datetime import datetime, timedelta
from functools import lru_cache

from spendlens.domain import BudgetPeriod, RecurringFrequency

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_LAST_INSTANT = timedelta(microseconds=1)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


@lru_cache(maxsize=256)
def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First and last instant of a calendar month, both inclusive."""
    start = datetime(year, month, 1)
    next_year, next_month = shift_month(year, month, 1)
    return start, datetime(next_year, next_month, 1) - _LAST_INSTANT


def month_window(moment: datetime) -> tuple[datetime, datetime]:
    return month_bounds(moment.year, moment.month)


def add_months(moment: datetime, months: int) -> datetime:
    # clamps the day like a calendar does: Jan 31 + 1 month -> Feb 28/29
    year, month = shift_month(moment.year, moment.month, months)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def gregorian_weekday(moment: datetime) -> int:
    """1 = Sunday ... 7 = Saturday."""
    return (moment.weekday() + 1) % 7 + 1


def week_bounds(moment: datetime) -> tuple[datetime, datetime]:
    start = start_of_day(moment) - timedelta(days=gregorian_weekday(moment) - 1)
    return start, start + timedelta(days=7) - _LAST_INSTANT


def year_bounds(moment: datetime) -> tuple[datetime, datetime]:
    return datetime(moment.year, 1, 1), datetime(moment.year + 1, 1, 1) - _LAST_INSTANT


def period_bounds(period: BudgetPeriod, now: datetime) -> tuple[datetime, datetime]:
    if period == BudgetPeriod.WEEKLY:
        return week_bounds(now)
    if period == BudgetPeriod.YEARLY:
        return year_bounds(now)
    return month_window(now)


def whole_days(start: datetime, end: datetime) -> int:
    return (end - start).days


def advance(moment: datetime, frequency: RecurringFrequency, steps: int = 1) -> datetime:
    if frequency == RecurringFrequency.DAILY:
        return moment + timedelta(days=steps)
    if frequency == RecurringFrequency.WEEKLY:
        return moment + timedelta(weeks=steps)
    if frequency == RecurringFrequency.BIWEEKLY:
        return moment + timedelta(weeks=2 * steps)
    if frequency == RecurringFrequency.MONTHLY:
        return add_months(moment, steps)
    return add_months(moment, 12 * steps)
