from datetime import datetime
from decimal import Decimal

from spendlens.domain import Category, RecurringFrequency, RecurringTransaction, TransactionType
from spendlens.projection import next_due, projected_transactions, should_process

HOUSING = Category(id="housing", name="Housing", type=TransactionType.EXPENSE)


def make_rule(id, frequency, start, amount="1200", note="", **kw):
    return RecurringTransaction(
        id=id,
        amount=Decimal(amount),
        type=TransactionType.EXPENSE,
        frequency=frequency,
        start_date=start,
        category=HOUSING,
        note=note,
        **kw,
    )


def test_projected_transactions_monthly():
    rule = make_rule("r1", RecurringFrequency.MONTHLY, datetime(2026, 1, 15, 8), note="Rent")
    projected = projected_transactions([rule], datetime(2026, 2, 1), datetime(2026, 4, 30))

    assert [t.date for t in projected] == [
        datetime(2026, 2, 15, 8),
        datetime(2026, 3, 15, 8),
        datetime(2026, 4, 15, 8),
    ]
    assert projected[0].id == "r1@2026-02-15"
    assert projected[0].note == "Rent (auto)"
    assert projected[0].category is HOUSING
    assert projected[0].amount == Decimal(1200)


def test_projected_transactions_window_is_inclusive():
    rule = make_rule("r1", RecurringFrequency.WEEKLY, datetime(2026, 10, 4))
    projected = projected_transactions([rule], datetime(2026, 10, 11), datetime(2026, 10, 18), currency="KRW")

    assert [t.date.day for t in projected] == [11, 18]
    assert all(t.currency == "KRW" for t in projected)
    assert projected[0].note == "auto"


def test_projected_transactions_respects_end_date_and_active():
    ended = make_rule("r1", RecurringFrequency.WEEKLY, datetime(2026, 1, 1), end_date=datetime(2026, 1, 20))
    expired = make_rule("r2", RecurringFrequency.DAILY, datetime(2025, 1, 1), end_date=datetime(2025, 6, 1))
    paused = make_rule("r3", RecurringFrequency.DAILY, datetime(2026, 1, 1), is_active=False)

    projected = projected_transactions([ended, expired, paused], datetime(2026, 1, 1), datetime(2026, 2, 28))

    assert [t.id for t in projected] == ["r1@2026-01-01", "r1@2026-01-08", "r1@2026-01-15"]


def test_projected_transactions_empty_window():
    rule = make_rule("r1", RecurringFrequency.MONTHLY, datetime(2026, 1, 15))
    assert projected_transactions([rule], datetime(2026, 2, 16), datetime(2026, 3, 14)) == []


def test_next_due():
    rule = make_rule("r1", RecurringFrequency.BIWEEKLY, datetime(2026, 1, 1))
    assert next_due(rule) == datetime(2026, 1, 15)

    advanced = make_rule("r2", RecurringFrequency.MONTHLY, datetime(2026, 1, 1), next_due_date=datetime(2026, 3, 1))
    assert next_due(advanced) == datetime(2026, 4, 1)


def test_should_process():
    rule = make_rule("r1", RecurringFrequency.MONTHLY, datetime(2026, 1, 15), end_date=datetime(2026, 12, 31))

    assert should_process(rule, datetime(2026, 1, 15))
    assert not should_process(rule, datetime(2026, 1, 14))
    assert not should_process(rule, datetime(2027, 1, 1))

    paused = make_rule("r2", RecurringFrequency.MONTHLY, datetime(2026, 1, 15), is_active=False)
    assert not should_process(paused, datetime(2026, 6, 1))

    due_later = make_rule("r3", RecurringFrequency.MONTHLY, datetime(2026, 1, 15), next_due_date=datetime(2026, 5, 15))
    assert not should_process(due_later, datetime(2026, 4, 1))
    assert should_process(due_later, datetime(2026, 5, 15))


def test_rule_methods_delegate():
    rule = make_rule("r1", RecurringFrequency.WEEKLY, datetime(2026, 1, 1))
    assert rule.next_due() == datetime(2026, 1, 8)
    assert rule.should_process(datetime(2026, 1, 1))
