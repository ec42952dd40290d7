from datetime import datetime
from typing import Iterable

from spendlens.domain import RecurringTransaction, Transaction
from spendlens.periods import advance

AUTO_LABEL = "auto"


def next_due(rule: RecurringTransaction) -> datetime:
    """The due date after the rule's current one."""
    return advance(rule.next_due_date or rule.start_date, rule.frequency)


def should_process(rule: RecurringTransaction, on: datetime) -> bool:
    if not rule.is_active:
        return False
    if rule.end_date is not None and on > rule.end_date:
        return False
    return on >= (rule.next_due_date or rule.start_date)


def _projected_note(note: str) -> str:
    return f"{note} ({AUTO_LABEL})" if note else AUTO_LABEL


def projected_transactions(
    recurrings: Iterable[RecurringTransaction],
    start: datetime,
    end: datetime,
    currency: str = "USD",
) -> list[Transaction]:
    projections = []

    for rule in recurrings:
        if not rule.is_active:
            continue
        if rule.end_date is not None and rule.end_date < start:
            continue

        occurrence = rule.start_date
        while occurrence < start:
            occurrence = advance(occurrence, rule.frequency)

        while occurrence <= end:
            if rule.end_date is not None and occurrence > rule.end_date:
                break
            projections.append(Transaction(
                id=f"{rule.id}@{occurrence.date().isoformat()}",
                amount=rule.amount,
                type=rule.type,
                date=occurrence,
                category=rule.category,
                note=_projected_note(rule.note),
                currency=currency,
            ))
            occurrence = advance(occurrence, rule.frequency)

    return projections
