import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from spendlens.domain import (
    CategorySpending,
    SpendingByDayOfWeek,
    SpendingByHour,
    SpendingTrend,
    TopExpense,
    Transaction,
    TransactionType,
)
from spendlens.filters import (
    by_date_range,
    by_type,
    expenses,
    group_by_category,
    iter_transactions,
    total_amount,
)
from spendlens.periods import DAY_NAMES, gregorian_weekday, month_bounds, shift_month

logger = logging.getLogger(__name__)


def _percent(part: Decimal, whole: Decimal) -> float:
    if whole <= 0:
        return 0.0
    return float(part / whole) * 100


def monthly_trends(
    trans: Iterable[Transaction], months: int = 6, now: Optional[datetime] = None
) -> list[SpendingTrend]:
    """Income, expense and balance for each of the last `months` calendar months.

    Oldest month first. Months without transactions are zero-filled, so the
    result always has exactly `months` entries.
    """
    now = now or datetime.now()
    trans = tuple(trans)
    trends: list[SpendingTrend] = []

    for offset in reversed(range(months)):
        year, month = shift_month(now.year, now.month, -offset)
        start, end = month_bounds(year, month)
        in_month = tuple(iter_transactions(trans, by_date_range(start, end)))

        income = total_amount(iter_transactions(in_month, by_type(TransactionType.INCOME)))
        expense = total_amount(iter_transactions(in_month, by_type(TransactionType.EXPENSE)))

        change = None
        change_pct = None
        if trends:
            previous = trends[-1].expense
            change = expense - previous
            if previous > 0:
                change_pct = float(change / previous) * 100

        label = start.strftime("%b") if year == now.year else start.strftime("%b %y")
        trends.append(SpendingTrend(
            period=label,
            income=income,
            expense=expense,
            balance=sum((t.signed_amount for t in in_month), Decimal(0)),
            date=start,
            change_from_previous=change,
            change_percentage=change_pct,
        ))

    return trends


def category_breakdown(
    trans: Iterable[Transaction], kind: TransactionType = TransactionType.EXPENSE
) -> list[CategorySpending]:
    filtered = list(iter_transactions(trans, by_type(kind)))
    total = total_amount(filtered)

    results = []
    for category, members in group_by_category(filtered).values():
        amount = total_amount(members)
        results.append(CategorySpending(
            category=category,
            amount=amount,
            percentage=_percent(amount, total),
            transaction_count=len(members),
        ))

    # sorted() is stable: ties keep first-seen category order
    return sorted(results, key=lambda c: c.amount, reverse=True)


def spending_by_day_of_week(trans: Iterable[Transaction]) -> list[SpendingByDayOfWeek]:
    grouped: dict[int, list[Transaction]] = defaultdict(list)
    for t in expenses(trans):
        grouped[gregorian_weekday(t.date)].append(t)

    days = []
    for day in range(1, 8):
        members = grouped.get(day, [])
        total = total_amount(members)
        count = len(members)
        days.append(SpendingByDayOfWeek(
            day_of_week=day,
            day_name=DAY_NAMES[day - 1],
            total_amount=total,
            average_amount=total / count if count else Decimal(0),
            transaction_count=count,
        ))
    return days


def spending_by_hour(trans: Iterable[Transaction]) -> list[SpendingByHour]:
    grouped: dict[int, list[Transaction]] = defaultdict(list)
    for t in expenses(trans):
        grouped[t.date.hour].append(t)

    return [
        SpendingByHour(
            hour=hour,
            total_amount=total_amount(grouped.get(hour, [])),
            transaction_count=len(grouped.get(hour, [])),
        )
        for hour in range(24)
    ]


def top_expenses(
    trans: Iterable[Transaction],
    limit: int = 10,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[TopExpense]:
    filtered = iter_transactions(expenses(trans), by_date_range(start, end))
    ordered = sorted(filtered, key=lambda t: t.amount, reverse=True)
    top = [TopExpense(transaction=t, rank=i + 1) for i, t in enumerate(ordered[: max(0, limit)])]
    logger.debug("top_expenses: %d of %d candidates", len(top), len(ordered))
    return top
