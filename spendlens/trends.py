import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from spendlens.domain import CategoryTrend, MonthComparison, Transaction
from spendlens.filters import by_date_range, expenses, group_by_category, iter_transactions, total_amount
from spendlens.periods import month_bounds, month_window, shift_month

logger = logging.getLogger(__name__)


def percent_change(previous: Decimal, current: Decimal) -> float:
    """Change from `previous` to `current` in percent.

    With nothing to compare against the change counts as 100% when there is
    current spending and 0% otherwise.
    """
    if previous > 0:
        return float((current - previous) / previous) * 100
    return 100.0 if current > 0 else 0.0


def _month_expense(trans: Iterable[Transaction], moment: datetime) -> Decimal:
    start, end = month_window(moment)
    return total_amount(iter_transactions(trans, by_date_range(start, end)))


def compare_months(trans: Iterable[Transaction], month1: datetime, month2: datetime) -> MonthComparison:
    spent = expenses(trans)
    total1 = _month_expense(spent, month1)
    total2 = _month_expense(spent, month2)
    return MonthComparison(
        month1_total=total1,
        month2_total=total2,
        difference=total2 - total1,
        percent_change=percent_change(total1, total2),
    )


def category_trends(
    trans: Iterable[Transaction], months: int = 3, now: Optional[datetime] = None
) -> list[CategoryTrend]:
    now = now or datetime.now()
    current_start, current_end = month_window(now)
    prev_start, prev_end = month_bounds(*shift_month(now.year, now.month, -1))
    analysis_start, _ = month_bounds(*shift_month(now.year, now.month, -months))

    window = iter_transactions(expenses(trans), by_date_range(analysis_start, None))

    results = []
    for category, members in group_by_category(window).values():
        current = list(iter_transactions(members, by_date_range(current_start, current_end)))
        current_amount = total_amount(current)
        previous_amount = total_amount(iter_transactions(members, by_date_range(prev_start, prev_end)))
        change = current_amount - previous_amount

        results.append(CategoryTrend(
            category=category,
            current_month_amount=current_amount,
            previous_month_amount=previous_amount,
            change=change,
            change_percentage=percent_change(previous_amount, current_amount),
            is_increasing=change > 0,
            # divides by the requested window even when the category is newer than it
            average_monthly_amount=total_amount(members) / months if months > 0 else Decimal(0),
            transaction_count=len(current),
        ))

    logger.debug("category_trends: %d categories over %d months", len(results), months)
    return sorted(results, key=lambda t: abs(t.change_percentage), reverse=True)
