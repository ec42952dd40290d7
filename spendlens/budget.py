import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from spendlens.domain import Budget, BudgetPrediction, Transaction
from spendlens.filters import by_category, by_date_range, expenses, iter_transactions, total_amount
from spendlens.periods import whole_days

logger = logging.getLogger(__name__)

FALLBACK_PERIOD_DAYS = 30


def budget_transactions(budget: Budget, trans: Iterable[Transaction], now: datetime) -> list[Transaction]:
    """Expenses inside the budget's current period, scoped to its category if it has one."""
    start, end = budget.current_period(now)
    scoped = iter_transactions(expenses(trans), by_date_range(start, end))
    if budget.category is not None:
        scoped = iter_transactions(scoped, by_category(budget.category.id))
    return list(scoped)


def predict_budget(
    budget: Budget, trans: Iterable[Transaction], now: Optional[datetime] = None
) -> BudgetPrediction:
    """Project end-of-period spend from the spending pace so far.

    The confidence is the share of the period already elapsed, in percent.
    """
    now = now or datetime.now()
    start, end = budget.current_period(now)

    current_spent = total_amount(budget_transactions(budget, trans, now))

    total_days = whole_days(start, end)
    if total_days <= 0:
        total_days = FALLBACK_PERIOD_DAYS
    days_elapsed = max(whole_days(start, now), 1)

    daily_average = current_spent / days_elapsed
    predicted_total = daily_average * total_days

    expected_by_now = budget.amount / total_days * days_elapsed

    prediction = BudgetPrediction(
        current_spent=current_spent,
        predicted_total=predicted_total,
        budget_amount=budget.amount,
        days_in_period=total_days,
        days_elapsed=days_elapsed,
        daily_average=daily_average,
        remaining_budget=budget.amount - current_spent,
        predicted_overage=max(predicted_total - budget.amount, Decimal(0)),
        is_on_track=current_spent <= expected_by_now,
        confidence=min(days_elapsed / total_days * 100, 100.0),
    )
    logger.debug(
        "Budget %s: spent %s of %s after %d/%d days",
        budget.id, current_spent, budget.amount, days_elapsed, total_days,
    )
    return prediction


def predict_budgets(
    budgets: Iterable[Budget], trans: Iterable[Transaction], now: Optional[datetime] = None
) -> list[BudgetPrediction]:
    now = now or datetime.now()
    trans = tuple(trans)
    return [predict_budget(b, trans, now) for b in budgets]
