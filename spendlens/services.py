import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from spendlens import config
from spendlens.aggregates import category_breakdown, monthly_trends, spending_by_day_of_week, spending_by_hour, top_expenses
from spendlens.budget import predict_budgets
from spendlens.domain import Budget, Transaction
from spendlens.recurring import detect_recurring_patterns
from spendlens.transforms import most_recent
from spendlens.trends import category_trends

logger = logging.getLogger(__name__)

Analyzer = Callable[[tuple, tuple, datetime, Dict[str, Any]], Dict[str, Any]]


def trends_analyzer(transactions, budgets, now, acc) -> Dict[str, Any]:
    return {"monthly_trends": monthly_trends(transactions, config.TREND_MONTHS, now)}


def categories_analyzer(transactions, budgets, now, acc) -> Dict[str, Any]:
    return {
        "category_breakdown": category_breakdown(transactions),
        "category_trends": category_trends(transactions, now=now),
    }


def budgets_analyzer(transactions, budgets, now, acc) -> Dict[str, Any]:
    return {"budget_predictions": predict_budgets(budgets, transactions, now)}


def recurring_analyzer(transactions, budgets, now, acc) -> Dict[str, Any]:
    return {"recurring_patterns": detect_recurring_patterns(transactions)}


def habits_analyzer(transactions, budgets, now, acc) -> Dict[str, Any]:
    return {
        "by_day_of_week": spending_by_day_of_week(transactions),
        "by_hour": spending_by_hour(transactions),
        "top_expenses": top_expenses(transactions, limit=5),
    }


def default_analyzers() -> list[Analyzer]:
    return [trends_analyzer, categories_analyzer, budgets_analyzer, recurring_analyzer, habits_analyzer]


class InsightsService:
    """Facade running injected analyzers over a capped transaction slice.

    analyzers: sequence of functions taking (transactions, budgets, now, acc) -> dict
    (partial results). Each output is recorded as a step and merged into the
    accumulated result that later analyzers receive as `acc`.
    """

    def __init__(self, analyzers: Optional[Sequence[Analyzer]] = None, limit: int = config.MAX_ANALYTICS_TRANSACTIONS):
        self.analyzers = list(analyzers) if analyzers is not None else default_analyzers()
        self.limit = limit

    def report(
        self,
        transactions: Iterable[Transaction],
        budgets: Iterable[Budget] = (),
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or datetime.now()
        capped = most_recent(tuple(transactions), self.limit)
        budgets = tuple(budgets)

        report = {"generated_at": now, "steps": [], "result": {}}
        acc: Dict[str, Any] = {}
        for analyzer in self.analyzers:
            out = analyzer(capped, budgets, now, acc)
            report["steps"].append({"analyzer": getattr(analyzer, "__name__", str(analyzer)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        logger.debug("Insights over %d transactions: %s", len(capped), sorted(acc))
        return report
