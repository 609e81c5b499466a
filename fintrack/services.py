from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from fintrack.domain import (
    Budget,
    BudgetProgressItem,
    Category,
    CategorySpending,
    DashboardSummary,
    MonthlyTrend,
    Transaction,
)
from fintrack.log import get_logger
from fintrack.periods import current_month
from fintrack import reports

logger = get_logger(__name__)


class ReportService:
    """Facade over the report functions with the clock injected.

    clock: zero-argument callable returning today's date; ``date.today`` by default.
    Tests pass ``lambda: date(2024, 3, 15)`` to pin the current month.
    """

    def __init__(self, clock: Optional[Callable[[], date]] = None, trend_months: int = 6):
        self.clock = clock or date.today
        self.trend_months = trend_months

    def current_month(self) -> str:
        return current_month(self.clock())

    def spending(self, transactions: Iterable[Transaction], categories: Iterable[Category]) -> List[CategorySpending]:
        return reports.spending_by_category(transactions, categories)

    def trend(self, transactions: Iterable[Transaction], month_count: Optional[int] = None) -> List[MonthlyTrend]:
        if month_count is None:
            month_count = self.trend_months
        return reports.monthly_trend_for(transactions, self.current_month(), month_count)

    def budgets(
        self,
        transactions: Iterable[Transaction],
        budgets: Sequence[Budget],
        categories: Iterable[Category],
        target_month: Optional[str] = None,
    ) -> List[BudgetProgressItem]:
        return reports.budget_progress(
            transactions, budgets, categories, target_month or self.current_month()
        )

    def summary(self, transactions: Iterable[Transaction]) -> DashboardSummary:
        return reports.dashboard_summary(transactions)

    def dashboard(
        self,
        transactions: Sequence[Transaction],
        categories: Sequence[Category],
        budgets: Sequence[Budget],
    ) -> Dict[str, Any]:
        """Everything the dashboard page shows, for the current month."""
        month = self.current_month()
        report = {
            "month": month,
            "summary": self.summary(transactions),
            "spending": self.spending(transactions, categories),
            "trend": self.trend(transactions),
            "budgets": self.budgets(transactions, budgets, categories, month),
        }
        logger.debug(
            "dashboard %s: %d transactions, %d spending rows, %d budgets",
            month, len(transactions), len(report["spending"]), len(report["budgets"]),
        )
        return report
