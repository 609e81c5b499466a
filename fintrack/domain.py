from dataclasses import dataclass
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

UNKNOWN_CATEGORY_NAME = "Unknown"
UNKNOWN_CATEGORY_COLOR = "#64748b"  # slate gray

MIN_AMOUNT = 0.01
MAX_AMOUNT = 999999999.99
MAX_DESCRIPTION_LENGTH = 200
MAX_CATEGORY_NAME_LENGTH = 50

# budget alert thresholds, percent of budget used
BUDGET_WARNING = 80
BUDGET_DANGER = 100


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str
    type: str        # "income" or "expense", never both
    icon: str = ""


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str            # "income" or "expense"
    amount: float        # always positive, USD
    category_id: str     # may point at a deleted category
    date: str            # when it happened, ISO-8601, e.g. "2024-03-02T10:00:00.000Z"
    description: str = ""
    user_id: str = "1"
    created_at: str = ""


# A monthly spending target for one expense category
@dataclass(frozen=True)
class Budget:
    category_id: str
    amount: float
    month: Optional[str] = None  # "YYYY-MM"
    id: str = ""
    user_id: str = "1"


@dataclass(frozen=True)
class CategorySpending:
    category_id: str
    category_name: str
    color: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class MonthlyTrend:
    month: str           # short label, e.g. "Mar"
    income: float
    expenses: float
    year_month: str = ""  # "YYYY-MM", the ordering key behind the label


@dataclass(frozen=True)
class BudgetProgressItem:
    category_id: str
    category_name: str
    color: str
    budgeted: float
    spent: float
    remaining: float     # negative when over budget
    percentage: float


@dataclass(frozen=True)
class DashboardSummary:
    total_balance: float
    total_income: float
    total_expenses: float
    transaction_count: int


@dataclass(frozen=True)
class TransactionFilters:
    type: Optional[str] = None
    category_id: Optional[str] = None
    start_date: Optional[str] = None  # "YYYY-MM-DD", inclusive
    end_date: Optional[str] = None    # "YYYY-MM-DD", inclusive
    search: str = ""
