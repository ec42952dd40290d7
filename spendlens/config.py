import os

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


SEED_PATH = os.getenv("SPENDLENS_SEED_PATH", "data/seed.json")
LOG_LEVEL = os.getenv("SPENDLENS_LOG_LEVEL", "INFO").strip().upper()
DEFAULT_CURRENCY = os.getenv("SPENDLENS_CURRENCY", "USD").strip().upper()

# analytics callers cap the slice they hand to the detectors
MAX_ANALYTICS_TRANSACTIONS = max(1, _env_int("SPENDLENS_MAX_TRANSACTIONS", 2000))
TREND_MONTHS = max(1, _env_int("SPENDLENS_TREND_MONTHS", 6))

RECURRING_MIN_OCCURRENCES = max(2, _env_int("SPENDLENS_RECURRING_MIN_OCCURRENCES", 3))
RECURRING_MIN_CONFIDENCE = max(0.0, min(1.0, _env_float("SPENDLENS_RECURRING_MIN_CONFIDENCE", 0.6)))
AMOUNT_TOLERANCE = max(0.0, min(1.0, _env_float("SPENDLENS_AMOUNT_TOLERANCE", 0.15)))

# empty means the learned keyword table lives in memory only
LEARNED_PATTERNS_PATH = os.getenv("SPENDLENS_LEARNED_PATTERNS_PATH", "").strip()
