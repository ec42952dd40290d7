from datetime import datetime
from decimal import Decimal

from spendlens.domain import Category, Transaction, TransactionType
from spendlens.filters import by_category, by_date_range, expenses, group_by_category, iter_transactions, total_amount

FOOD = Category(id="food", name="Food", type=TransactionType.EXPENSE)
TAXI = Category(id="taxi", name="Taxi", type=TransactionType.EXPENSE)


def make_tx(id, amount, date, kind=TransactionType.EXPENSE, category=None):
    return Transaction(id=id, amount=Decimal(amount), type=kind, date=date, category=category)


TRANS = (
    make_tx("t1", "10", datetime(2026, 10, 1), category=TAXI),
    make_tx("t2", "20", datetime(2026, 10, 5), category=FOOD),
    make_tx("t3", "500", datetime(2026, 10, 5), TransactionType.INCOME),
    make_tx("t4", "5.5", datetime(2026, 10, 9), category=FOOD),
    make_tx("t5", "7", datetime(2026, 10, 10)),
)


def test_iter_transactions_is_lazy():
    it = iter_transactions(TRANS, by_category("food"))
    assert next(it).id == "t2"
    assert next(it).id == "t4"


def test_by_date_range_inclusive_and_open():
    inside = list(iter_transactions(TRANS, by_date_range(datetime(2026, 10, 5), datetime(2026, 10, 9))))
    assert [t.id for t in inside] == ["t2", "t3", "t4"]

    after = list(iter_transactions(TRANS, by_date_range(datetime(2026, 10, 9), None)))
    assert [t.id for t in after] == ["t4", "t5"]


def test_expenses_and_total():
    spent = expenses(TRANS)
    assert [t.id for t in spent] == ["t1", "t2", "t4", "t5"]
    assert total_amount(spent) == Decimal("42.5")
    assert total_amount([]) == Decimal(0)


def test_group_by_category_drops_uncategorized_and_keeps_order():
    groups = group_by_category(expenses(TRANS))
    assert list(groups) == ["taxi", "food"]
    category, members = groups["food"]
    assert category is FOOD
    assert [t.id for t in members] == ["t2", "t4"]
    assert all(t.category is not None for _, ms in groups.values() for t in ms)
