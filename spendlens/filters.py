from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional

from spendlens.domain import Category, Transaction, TransactionType


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def by_type(kind: TransactionType):
    def _filter(t: Transaction) -> bool:
        return t.type == kind

    return _filter


def by_category(cat_id: str):
    def _filter(t: Transaction) -> bool:
        return t.category is not None and t.category.id == cat_id

    return _filter


def by_date_range(start: Optional[datetime], end: Optional[datetime]):
    """Inclusive on both ends; a missing bound is open."""

    def _filter(t: Transaction) -> bool:
        if start is not None and t.date < start:
            return False
        if end is not None and t.date > end:
            return False
        return True

    return _filter


def expenses(trans: Iterable[Transaction]) -> list[Transaction]:
    return list(iter_transactions(trans, by_type(TransactionType.EXPENSE)))


def total_amount(trans: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in trans), Decimal(0))


def group_by_category(
    trans: Iterable[Transaction],
) -> dict[str, tuple[Category, list[Transaction]]]:
    """Group by category id in first-seen order.

    Uncategorized transactions are dropped here, explicitly.
    """
    groups: dict[str, tuple[Category, list[Transaction]]] = {}
    members: dict[str, list[Transaction]] = defaultdict(list)

    for t in trans:
        if t.category is None:
            continue
        if t.category.id not in groups:
            groups[t.category.id] = (t.category, members[t.category.id])
        members[t.category.id].append(t)

    return groups
