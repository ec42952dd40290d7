from datetime import datetime
from decimal import Decimal

import pytest

from spendlens.budget import budget_transactions, predict_budget, predict_budgets
from spendlens.domain import Budget, BudgetPeriod, Category, Transaction, TransactionType

FOOD = Category(id="food", name="Food", type=TransactionType.EXPENSE)
TAXI = Category(id="taxi", name="Taxi", type=TransactionType.EXPENSE)

NOW = datetime(2026, 10, 17, 12, 0)


def make_tx(id, amount, date, kind=TransactionType.EXPENSE, category=None):
    return Transaction(id=id, amount=Decimal(amount), type=kind, date=date, category=category)


TRANS = [
    make_tx("f1", "100", datetime(2026, 10, 2), category=FOOD),
    make_tx("f2", "60", datetime(2026, 10, 16), category=FOOD),
    make_tx("f3", "400", datetime(2026, 9, 28), category=FOOD),
    make_tx("x1", "60", datetime(2026, 10, 12), category=TAXI),
    make_tx("i1", "3000", datetime(2026, 10, 1), TransactionType.INCOME),
]


def test_budget_transactions_scoped_to_period_and_category():
    food = Budget(id="b1", amount=Decimal(300), category=FOOD)
    assert [t.id for t in budget_transactions(food, TRANS, NOW)] == ["f1", "f2"]

    total = Budget(id="b2", amount=Decimal(1000))
    assert [t.id for t in budget_transactions(total, TRANS, NOW)] == ["f1", "f2", "x1"]


def test_predict_monthly_budget_on_track():
    p = predict_budget(Budget(id="b1", amount=Decimal(300), category=FOOD), TRANS, NOW)

    assert p.current_spent == Decimal(160)
    assert p.days_in_period == 30
    assert p.days_elapsed == 16
    assert p.daily_average == Decimal(10)
    assert p.predicted_total == Decimal(300)
    assert p.predicted_overage == Decimal(0)
    assert p.remaining_budget == Decimal(140)
    assert p.is_on_track
    assert p.confidence == pytest.approx(16 / 30 * 100)
    assert p.usage_percentage == pytest.approx(160 / 300 * 100)


def test_predict_weekly_budget_over_pace():
    p = predict_budget(Budget(id="b3", amount=Decimal(40), period=BudgetPeriod.WEEKLY, category=TAXI), TRANS, NOW)

    assert p.current_spent == Decimal(60)
    assert p.days_in_period == 6
    assert p.days_elapsed == 6
    assert p.predicted_total == Decimal(60)
    assert p.predicted_overage == Decimal(20)
    assert not p.is_on_track
    assert p.remaining_budget == Decimal(-20)


def test_predict_budget_first_day_counts_as_one_day():
    now = datetime(2026, 10, 1, 8, 0)
    trans = [make_tx("f1", "12", datetime(2026, 10, 1, 7, 0), category=FOOD)]
    p = predict_budget(Budget(id="b1", amount=Decimal(300), category=FOOD), trans, now)

    assert p.days_elapsed == 1
    assert p.daily_average == Decimal(12)
    assert p.predicted_total == Decimal(360)
    assert p.predicted_overage == Decimal(60)


def test_predict_budget_without_spending():
    p = predict_budget(Budget(id="b1", amount=Decimal(300), category=FOOD), [], NOW)
    assert p.current_spent == Decimal(0)
    assert p.predicted_total == Decimal(0)
    assert p.is_on_track


def test_confidence_is_capped():
    p = predict_budget(Budget(id="b1", amount=Decimal(300)), [], datetime(2026, 10, 31, 23, 0))
    assert p.confidence == 100.0


def test_predict_budgets():
    budgets = [Budget(id="b1", amount=Decimal(300), category=FOOD), Budget(id="b2", amount=Decimal(1000))]
    predictions = predict_budgets(budgets, iter(TRANS), NOW)
    assert [p.current_spent for p in predictions] == [Decimal(160), Decimal(220)]


def test_current_period():
    weekly = Budget(id="b1", amount=Decimal(40), period=BudgetPeriod.WEEKLY)
    start, end = weekly.current_period(NOW)
    assert start == datetime(2026, 10, 11)
    assert end == datetime(2026, 10, 17, 23, 59, 59, 999999)
