import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from spendlens import config
from spendlens.aggregates import category_breakdown, monthly_trends
from spendlens.budget import predict_budgets
from spendlens.domain import Budget, Transaction
from spendlens.recurring import detect_recurring_patterns
from spendlens.transforms import most_recent

logger = logging.getLogger(__name__)


async def build_insights_async(
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Run the heavier analyses in worker threads and gather them.

    The inputs are immutable tuples, so the threads share them without copying.
    """
    now = now or datetime.now()
    capped = most_recent(tuple(transactions), config.MAX_ANALYTICS_TRANSACTIONS)
    budgets = tuple(budgets)

    trends, breakdown, predictions, patterns = await asyncio.gather(
        asyncio.to_thread(monthly_trends, capped, config.TREND_MONTHS, now),
        asyncio.to_thread(category_breakdown, capped),
        asyncio.to_thread(predict_budgets, budgets, capped, now),
        asyncio.to_thread(detect_recurring_patterns, capped),
    )
    logger.debug("Async insights ready for %d transactions", len(capped))
    return {
        "generated_at": now,
        "monthly_trends": trends,
        "category_breakdown": breakdown,
        "budget_predictions": predictions,
        "recurring_patterns": patterns,
    }
