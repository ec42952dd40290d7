import json
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, TypeVar

from spendlens.domain import (
    Budget,
    BudgetPeriod,
    Category,
    RecurringFrequency,
    RecurringTransaction,
    Transaction,
    TransactionType,
)
from spendlens.functional import Either, Right, safe_category, validate_budget, validate_transaction

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class Ledger:
    categories: tuple[Category, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    budgets: tuple[Budget, ...] = ()
    recurring: tuple[RecurringTransaction, ...] = ()


def to_decimal(value: Any) -> Decimal:
    # str() first so floats from JSON keep their printed digits
    return Decimal(str(value))


def to_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _required_datetime(raw: dict, key: str) -> datetime:
    moment = to_datetime(raw[key])
    if moment is None:
        raise ValueError(f"missing {key}")
    return moment


def _build_rows(kind: str, rows: list[dict], build: Callable[[dict], Either[dict, R]]) -> tuple[R, ...]:
    built = []
    for raw in rows:
        try:
            result = build(raw)
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            logger.warning("Skipping malformed %s row %r: %s", kind, raw.get("id"), exc)
            continue
        if result.is_left():
            logger.warning("Skipping invalid %s row %r: %s", kind, raw.get("id"), result.get_error()["message"])
            continue
        built.append(result.get_or_else(None))
    return tuple(built)


def _category_ref(cats: tuple[Category, ...], cat_id: Optional[str], owner: str) -> Optional[Category]:
    found = safe_category(cats, cat_id)
    if cat_id is not None and found.is_none():
        logger.warning("Unknown category %r on %s, treating it as uncategorized", cat_id, owner)
    return found.get_or_else(None)


def parse_ledger(data: dict) -> Ledger:
    categories = tuple(
        Category(id=c["id"], name=c["name"], type=TransactionType(c["type"]), tag=c.get("tag"))
        for c in data.get("categories", [])
    )

    def build_transaction(raw: dict) -> Either[dict, Transaction]:
        return validate_transaction(Transaction(
            id=raw["id"],
            amount=to_decimal(raw["amount"]),
            type=TransactionType(raw["type"]),
            date=_required_datetime(raw, "date"),
            category=_category_ref(categories, raw.get("category_id"), raw["id"]),
            note=raw.get("note", ""),
            currency=raw.get("currency", "USD"),
        ))

    def build_budget(raw: dict) -> Either[dict, Budget]:
        return validate_budget(Budget(
            id=raw["id"],
            amount=to_decimal(raw["amount"]),
            period=BudgetPeriod(raw.get("period", "monthly")),
            category=_category_ref(categories, raw.get("category_id"), raw["id"]),
            start_date=to_datetime(raw.get("start_date")),
        ))

    def build_recurring(raw: dict) -> Either[dict, RecurringTransaction]:
        rule = RecurringTransaction(
            id=raw["id"],
            amount=to_decimal(raw["amount"]),
            type=TransactionType(raw["type"]),
            frequency=RecurringFrequency(raw["frequency"]),
            start_date=_required_datetime(raw, "start_date"),
            category=_category_ref(categories, raw.get("category_id"), raw["id"]),
            note=raw.get("note", ""),
            end_date=to_datetime(raw.get("end_date")),
            is_active=bool(raw.get("is_active", True)),
        )
        return validate_transaction(
            Transaction(id=rule.id, amount=rule.amount, type=rule.type, date=rule.start_date, category=rule.category)
        ).bind(lambda _: Right(rule))

    ledger = Ledger(
        categories=categories,
        transactions=_build_rows("transaction", data.get("transactions", []), build_transaction),
        budgets=_build_rows("budget", data.get("budgets", []), build_budget),
        recurring=_build_rows("recurring", data.get("recurring", []), build_recurring),
    )
    logger.info(
        "Loaded ledger: %d categories, %d transactions, %d budgets, %d recurring rules",
        len(ledger.categories), len(ledger.transactions), len(ledger.budgets), len(ledger.recurring),
    )
    return ledger


def load_ledger(path: str) -> Ledger:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return parse_ledger(data)


def add_transaction(
    trans: tuple[Transaction, ...], t: Transaction
) -> tuple[Transaction, ...]:
    return trans + (t,)


def most_recent(trans: tuple[Transaction, ...], limit: int) -> tuple[Transaction, ...]:
    """Newest `limit` transactions, newest first."""
    return tuple(sorted(trans, key=lambda t: t.date, reverse=True)[: max(0, limit)])
