import logging
import statistics
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from spendlens import config
from spendlens.domain import DetectedRecurringPattern, FrequencyMatch, RecurringFrequency, Transaction
from spendlens.filters import expenses, group_by_category, total_amount
from spendlens.functional import pipe
from spendlens.periods import advance, whole_days

logger = logging.getLogger(__name__)

# (low, high, frequency, expected interval in days), checked in order
FREQUENCY_BANDS: tuple[tuple[float, float, RecurringFrequency, float], ...] = (
    (25, 35, RecurringFrequency.MONTHLY, 30),
    (12, 16, RecurringFrequency.BIWEEKLY, 14),
    (5, 9, RecurringFrequency.WEEKLY, 7),
)


def cluster_by_amount(trans: Iterable[Transaction], tolerance: float) -> list[list[Transaction]]:
    """Greedy first-fit clustering on amount.

    A transaction joins the first cluster whose first member's amount is
    within `tolerance` of its own (as a ratio), otherwise it opens a new
    cluster. The first member fixes the band for the cluster's lifetime, so
    the result depends on input order.
    """
    clusters: list[list[Transaction]] = []
    low = Decimal(str(1 - tolerance))
    high = Decimal(str(1 + tolerance))

    for t in trans:
        for cluster in clusters:
            anchor = cluster[0].amount
            if anchor == 0:
                continue
            if low <= t.amount / anchor <= high:
                cluster.append(t)
                break
        else:
            clusters.append([t])

    return clusters


def interval_days(dates: Sequence[datetime]) -> list[int]:
    ordered = sorted(dates)
    return [whole_days(a, b) for a, b in zip(ordered, ordered[1:])]


def classify_intervals(dates: Sequence[datetime]) -> Optional[FrequencyMatch]:
    """Classify the gaps between dates as weekly, biweekly or monthly.

    Uses the population standard deviation of the day gaps; confidence is
    1 - std/expected clamped to [0, 1]. Returns None for fewer than two
    dates or when the mean gap falls outside every band.
    """
    if len(dates) < 2:
        return None

    gaps = interval_days(dates)
    average = statistics.fmean(gaps)
    std_dev = statistics.pstdev(gaps)

    for low, high, frequency, expected in FREQUENCY_BANDS:
        if low <= average <= high:
            confidence = max(0.0, min(1.0, 1 - std_dev / expected))
            return FrequencyMatch(
                frequency=frequency,
                confidence=confidence,
                average_interval=average,
                std_dev=std_dev,
            )
    return None


def _first_note(cluster: Iterable[Transaction]) -> Optional[str]:
    return next((t.note for t in cluster if t.note), None)


def detect_recurring_patterns(
    trans: Iterable[Transaction],
    min_occurrences: int = config.RECURRING_MIN_OCCURRENCES,
    min_confidence: float = config.RECURRING_MIN_CONFIDENCE,
    tolerance: float = config.AMOUNT_TOLERANCE,
) -> list[DetectedRecurringPattern]:
    """Find expense series that repeat weekly, biweekly or monthly.

    Recomputed from scratch on every call. Clustering is quadratic in the
    worst case, so callers should cap the slice they pass in.
    """
    patterns: list[DetectedRecurringPattern] = []
    groups = pipe(trans, expenses, group_by_category)

    for category, members in groups.values():
        for cluster in cluster_by_amount(members, tolerance):
            if len(cluster) < min_occurrences:
                continue

            dates = sorted(t.date for t in cluster)
            match = classify_intervals(dates)
            if match is None or match.confidence < min_confidence:
                continue

            last = dates[-1]
            patterns.append(DetectedRecurringPattern(
                category=category,
                average_amount=total_amount(cluster) / len(cluster),
                frequency=match.frequency,
                occurrences=len(cluster),
                last_occurrence=last,
                next_expected=advance(last, match.frequency),
                note=_first_note(cluster),
                confidence=match.confidence,
            ))

    logger.debug("Detected %d recurring patterns across %d categories", len(patterns), len(groups))
    return sorted(patterns, key=lambda p: p.confidence, reverse=True)
