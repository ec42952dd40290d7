from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# shared by recurring rules and the pattern detector
class RecurringFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: TransactionType
    tag: Optional[str] = None  # keyword tag, e.g. "food"


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: Decimal            # always >= 0, sign comes from type
    type: TransactionType
    date: datetime
    category: Optional[Category] = None
    note: str = ""
    currency: str = "USD"

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == TransactionType.INCOME else -self.amount


# A spending limit; category None means a total budget
@dataclass(frozen=True)
class Budget:
    id: str
    amount: Decimal
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    category: Optional[Category] = None
    start_date: Optional[datetime] = None

    def current_period(self, now: datetime) -> tuple[datetime, datetime]:
        from spendlens.periods import period_bounds

        return period_bounds(self.period, now)


@dataclass(frozen=True)
class RecurringTransaction:
    id: str
    amount: Decimal
    type: TransactionType
    frequency: RecurringFrequency
    start_date: datetime
    category: Optional[Category] = None
    note: str = ""
    end_date: Optional[datetime] = None
    is_active: bool = True
    next_due_date: Optional[datetime] = None

    def next_due(self) -> datetime:
        from spendlens.projection import next_due

        return next_due(self)

    def should_process(self, on: datetime) -> bool:
        from spendlens.projection import should_process

        return should_process(self, on)


# --- derived records, recomputed on every call


@dataclass(frozen=True)
class SpendingTrend:
    period: str
    income: Decimal
    expense: Decimal
    balance: Decimal
    date: datetime
    change_from_previous: Optional[Decimal] = None
    change_percentage: Optional[float] = None


@dataclass(frozen=True)
class CategorySpending:
    category: Category
    amount: Decimal
    percentage: float
    transaction_count: int


@dataclass(frozen=True)
class TopExpense:
    transaction: Transaction
    rank: int


@dataclass(frozen=True)
class SpendingByDayOfWeek:
    day_of_week: int  # 1 = Sunday, 7 = Saturday
    day_name: str
    total_amount: Decimal
    average_amount: Decimal
    transaction_count: int


@dataclass(frozen=True)
class SpendingByHour:
    hour: int
    total_amount: Decimal
    transaction_count: int


@dataclass(frozen=True)
class MonthComparison:
    month1_total: Decimal
    month2_total: Decimal
    difference: Decimal
    percent_change: float


@dataclass(frozen=True)
class CategoryTrend:
    category: Category
    current_month_amount: Decimal
    previous_month_amount: Decimal
    change: Decimal
    change_percentage: float
    is_increasing: bool
    average_monthly_amount: Decimal
    transaction_count: int


@dataclass(frozen=True)
class BudgetPrediction:
    current_spent: Decimal
    predicted_total: Decimal
    budget_amount: Decimal
    days_in_period: int
    days_elapsed: int
    daily_average: Decimal
    remaining_budget: Decimal
    predicted_overage: Decimal
    is_on_track: bool
    confidence: float  # 0..100, share of the period already elapsed

    @property
    def usage_percentage(self) -> float:
        if self.budget_amount <= 0:
            return 0.0
        return float(self.current_spent / self.budget_amount) * 100

    @property
    def predicted_usage_percentage(self) -> float:
        if self.budget_amount <= 0:
            return 0.0
        return float(self.predicted_total / self.budget_amount) * 100


@dataclass(frozen=True)
class FrequencyMatch:
    frequency: RecurringFrequency
    confidence: float
    average_interval: float
    std_dev: float


@dataclass(frozen=True)
class DetectedRecurringPattern:
    category: Optional[Category]
    average_amount: Decimal
    frequency: RecurringFrequency
    occurrences: int
    last_occurrence: datetime
    next_expected: Optional[datetime]
    note: Optional[str]
    confidence: float  # 0..1


@dataclass(frozen=True)
class ParsedTransaction:
    type: TransactionType = TransactionType.EXPENSE
    amount: Optional[Decimal] = None
    date: Optional[datetime] = None
    category_hint: Optional[str] = None
    note: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.amount is not None and self.amount > 0


@dataclass(frozen=True)
class OCRLine:
    text: str
    confidence: float = 1.0


@dataclass(frozen=True)
class ReceiptOCRResult:
    extracted_amount: Optional[Decimal]
    all_amounts: tuple[Decimal, ...] = field(default_factory=tuple)
    raw_text: str = ""
    confidence: float = 0.0

    @property
    def has_amount(self) -> bool:
        return self.extracted_amount is not None
