"""Reporting over transactions: where the money went, how it trended, and
how each budget is holding up.

Every function here is pure over its arguments and returns new records;
nothing is mutated. Missing categories, zero totals and empty input all
produce ordinary results rather than errors. The only things that raise are
malformed dates (``InvalidDateError``), amounts that are not finite numbers
(``InvalidAmountError``, NaN or infinity) and a non-positive window size.
"""
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from fintrack.domain import (
    BUDGET_DANGER,
    BUDGET_WARNING,
    EXPENSE,
    INCOME,
    UNKNOWN_CATEGORY_COLOR,
    UNKNOWN_CATEGORY_NAME,
    Budget,
    BudgetProgressItem,
    Category,
    CategorySpending,
    DashboardSummary,
    MonthlyTrend,
    Transaction,
)
from fintrack.log import get_logger
from fintrack.money import round_cents, to_decimal, truncate_tenths
from fintrack.periods import (
    current_month,
    format_month_key,
    month_key,
    month_label,
    parse_month,
    trailing_months,
)

logger = get_logger(__name__)

CategoryLookup = Union[Mapping[str, Category], Iterable[Category]]


def category_index(categories: CategoryLookup) -> Dict[str, Category]:
    if isinstance(categories, Mapping):
        return dict(categories)
    return {c.id: c for c in categories}


def resolve_category(category_id: str, categories: CategoryLookup) -> Tuple[str, str]:
    """Return ``(name, color)`` for a category id.

    Transactions can outlive the category they were filed under, so an
    unmatched id resolves to ``("Unknown", "#64748b")`` instead of failing.
    """
    index = categories if isinstance(categories, Mapping) else category_index(categories)
    category = index.get(category_id)
    if category is None:
        return UNKNOWN_CATEGORY_NAME, UNKNOWN_CATEGORY_COLOR
    return category.name, category.color


def spending_by_category(
    transactions: Iterable[Transaction], categories: CategoryLookup
) -> List[CategorySpending]:
    """Total expenses per category, largest first.

    Income is ignored. Categories without expenses are left out rather than
    zero-filled. ``percentage`` is the share of all expenses in the input,
    or 0 everywhere when there is nothing to divide by.
    """
    index = category_index(categories)
    totals: Dict[str, Decimal] = defaultdict(Decimal)

    for t in transactions:
        if t.type == EXPENSE:
            totals[t.category_id] += to_decimal(t.amount)

    grand_total = sum(totals.values(), Decimal(0))

    spending = []
    for category_id, amount in totals.items():
        name, color = resolve_category(category_id, index)
        percentage = float(amount / grand_total * 100) if grand_total > 0 else 0.0
        spending.append(
            CategorySpending(
                category_id=category_id,
                category_name=name,
                color=color,
                amount=round_cents(amount),
                percentage=percentage,
            )
        )

    logger.debug("spending_by_category: %d categories, total %s", len(spending), grand_total)
    return sorted(spending, key=lambda s: s.amount, reverse=True)


def monthly_trend_for(
    transactions: Iterable[Transaction],
    reference_month: Union[str, date],
    month_count: int = 6,
) -> List[MonthlyTrend]:
    """Income and expenses for the ``month_count`` months ending with
    ``reference_month``, oldest first.

    Every month in the window gets an entry, so the result always has
    exactly ``month_count`` items. Transactions outside the window are
    skipped. Sums are rounded to cents, halves away from zero.
    """
    keys = trailing_months(reference_month, month_count)
    income: Dict[str, Decimal] = {k: Decimal(0) for k in keys}
    expenses: Dict[str, Decimal] = {k: Decimal(0) for k in keys}

    for t in transactions:
        key = month_key(t.date)
        if key not in income:
            continue
        if t.type == INCOME:
            income[key] += to_decimal(t.amount)
        else:
            expenses[key] += to_decimal(t.amount)

    logger.debug("monthly_trend_for: %s..%s", keys[0], keys[-1])
    return [
        MonthlyTrend(
            month=month_label(k),
            income=round_cents(income[k]),
            expenses=round_cents(expenses[k]),
            year_month=k,
        )
        for k in keys
    ]


def monthly_trend(
    transactions: Iterable[Transaction],
    month_count: int = 6,
    today: Optional[date] = None,
) -> List[MonthlyTrend]:
    """``monthly_trend_for`` anchored at the month of ``today`` (the clock if omitted)."""
    return monthly_trend_for(transactions, current_month(today), month_count)


def budget_progress(
    transactions: Iterable[Transaction],
    budgets: Sequence[Budget],
    categories: CategoryLookup,
    target_month: Optional[Union[str, date]] = None,
    today: Optional[date] = None,
) -> List[BudgetProgressItem]:
    """Budget vs. actual spend for one month, one item per budget, in budget order.

    Only expense transactions dated in ``target_month`` count. Budgets
    tagged with a different month are skipped; untagged budgets always
    apply. Spending in a category that has no budget does not show up here
    at all.

    ``remaining`` goes negative once a budget is overspent. ``percentage``
    is cut to one decimal toward zero rather than rounded, so it reaches 100
    exactly when ``remaining`` reaches 0: $99.96 of $100 shows as 99.9, not
    100.0. A zero budget reports 0% however much was spent; ``remaining``
    still shows the overspend.
    """
    if target_month is None:
        month = current_month(today)
    else:
        month = format_month_key(*parse_month(target_month))

    spent_by_category: Dict[str, Decimal] = defaultdict(Decimal)
    for t in transactions:
        if t.type == EXPENSE and month_key(t.date) == month:
            spent_by_category[t.category_id] += to_decimal(t.amount)

    index = category_index(categories)
    progress = []
    for budget in budgets:
        if budget.month is not None and budget.month != month:
            continue
        name, color = resolve_category(budget.category_id, index)
        budgeted = to_decimal(budget.amount)
        spent = to_decimal(round_cents(spent_by_category.get(budget.category_id, Decimal(0))))
        percentage = truncate_tenths(spent / budgeted * 100) if budgeted > 0 else 0.0
        progress.append(
            BudgetProgressItem(
                category_id=budget.category_id,
                category_name=name,
                color=color,
                budgeted=budget.amount,
                spent=float(spent),
                remaining=round_cents(budgeted - spent),
                percentage=percentage,
            )
        )

    logger.debug("budget_progress: %d budgets for %s", len(progress), month)
    return progress


def budget_status(percentage: float) -> str:
    """``"danger"`` at 100% or more, ``"warning"`` from 80%, else ``"ok"``."""
    if percentage >= BUDGET_DANGER:
        return "danger"
    if percentage >= BUDGET_WARNING:
        return "warning"
    return "ok"


def dashboard_summary(transactions: Iterable[Transaction]) -> DashboardSummary:
    income = Decimal(0)
    expenses = Decimal(0)
    count = 0
    for t in transactions:
        count += 1
        if t.type == INCOME:
            income += to_decimal(t.amount)
        elif t.type == EXPENSE:
            expenses += to_decimal(t.amount)
    return DashboardSummary(
        total_balance=round_cents(income - expenses),
        total_income=round_cents(income),
        total_expenses=round_cents(expenses),
        transaction_count=count,
    )
