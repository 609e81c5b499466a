"""Sample data generator.

Produces a few months of believable activity: a salary and rent every
month, a couple dozen random expenses, one to three side incomes, and a set
of monthly budgets. Pass ``rng_seed`` for reproducible output.

    python -m fintrack.seed --output data/seed.json --year 2024 --months 3
"""
import argparse
import calendar
import random
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from fintrack import config
from fintrack.domain import EXPENSE, INCOME, Budget, Category, Transaction
from fintrack.log import configure, get_logger
from fintrack.money import round_cents
from fintrack.periods import format_month_key, shift_month
from fintrack.transforms import Seed, dump_seed

logger = get_logger(__name__)

DEFAULT_CATEGORIES: Tuple[Category, ...] = (
    Category("1", "Food & Dining", "#ef4444", EXPENSE, "utensils"),
    Category("2", "Transportation", "#f97316", EXPENSE, "car"),
    Category("3", "Entertainment", "#a855f7", EXPENSE, "film"),
    Category("4", "Shopping", "#ec4899", EXPENSE, "shopping-bag"),
    Category("5", "Bills & Utilities", "#6366f1", EXPENSE, "file-text"),
    Category("6", "Health", "#14b8a6", EXPENSE, "heart-pulse"),
    Category("7", "Education", "#0ea5e9", EXPENSE, "graduation-cap"),
    Category("8", "Other", "#64748b", EXPENSE, "more-horizontal"),
    Category("9", "Salary", "#22c55e", INCOME, "briefcase"),
    Category("10", "Freelance", "#10b981", INCOME, "laptop"),
    Category("11", "Investments", "#059669", INCOME, "trending-up"),
    Category("12", "Other Income", "#84cc16", INCOME, "plus-circle"),
)

EXPENSE_DESCRIPTIONS: Dict[str, Sequence[str]] = {
    "1": ("Grocery shopping", "Restaurant dinner", "Coffee shop", "Lunch meeting",
          "Weekly groceries", "Fast food", "Food delivery"),
    "2": ("Gas fill-up", "Uber ride", "Bus pass", "Car maintenance", "Parking", "Train ticket"),
    "3": ("Netflix subscription", "Spotify premium", "Movie tickets", "Concert tickets",
          "Video games", "Books"),
    "4": ("Amazon purchase", "Clothing", "Electronics", "Home goods", "Gifts"),
    "5": ("Rent payment", "Electric bill", "Internet bill", "Phone bill", "Water bill", "Insurance"),
    "6": ("Gym membership", "Doctor visit", "Pharmacy", "Vitamins", "Dental checkup"),
    "7": ("Online course", "Books", "Workshop fee", "Certification exam"),
    "8": ("Miscellaneous", "ATM withdrawal", "Bank fee"),
}

INCOME_DESCRIPTIONS: Dict[str, Sequence[str]] = {
    "10": ("Freelance project", "Consulting fee", "Side gig payment"),
    "11": ("Stock dividends", "Interest income", "Investment returns"),
    "12": ("Gift received", "Refund", "Cashback reward"),
}

# (minimum, spread): amount = minimum + random() * spread
EXPENSE_RANGES = {
    "1": (15, 100), "2": (10, 80), "3": (10, 60), "4": (20, 200),
    "5": (50, 150), "6": (20, 150), "7": (50, 300), "8": (10, 50),
}
INCOME_RANGES = {"10": (200, 800), "11": (50, 300), "12": (50, 200)}

BUDGET_AMOUNTS = {"1": 600, "2": 200, "3": 150, "4": 300, "5": 1500, "6": 250}

SALARY = 5000
RENT = 1200

DEMO_USER = {
    "id": "1",
    "email": "demo@example.com",
    "name": "Demo User",
    "avatar": None,
    "createdAt": "2024-01-01T00:00:00.000Z",
}


def _iso(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def _random_moment(rng: random.Random, year: int, month: int) -> datetime:
    start = datetime(year, month, 1)
    last_day = calendar.monthrange(year, month)[1]
    span = (datetime(year, month, last_day) - start).total_seconds()
    return start + timedelta(seconds=rng.random() * span)


def _tx(type_: str, amount: float, category_id: str, description: str, when: datetime) -> Transaction:
    stamp = _iso(when)
    return Transaction(
        id="",
        type=type_,
        amount=round_cents(amount),
        category_id=category_id,
        date=stamp,
        description=description,
        created_at=stamp,
    )


def month_transactions(rng: random.Random, year: int, month: int) -> List[Transaction]:
    """One month of activity; ids are left blank for the caller to assign."""
    transactions = [
        _tx(INCOME, SALARY, "9", "Monthly salary", datetime(year, month, 1, 9, 0)),
        _tx(EXPENSE, RENT, "5", "Rent payment", datetime(year, month, 2, 10, 0)),
    ]

    for _ in range(15 + rng.randrange(10)):
        category_id = str(rng.randrange(8) + 1)
        low, spread = EXPENSE_RANGES[category_id]
        transactions.append(_tx(
            EXPENSE,
            low + rng.random() * spread,
            category_id,
            rng.choice(EXPENSE_DESCRIPTIONS[category_id]),
            _random_moment(rng, year, month),
        ))

    for _ in range(rng.randrange(3) + 1):
        category_id = str(10 + rng.randrange(3))
        low, spread = INCOME_RANGES[category_id]
        transactions.append(_tx(
            INCOME,
            low + rng.random() * spread,
            category_id,
            rng.choice(INCOME_DESCRIPTIONS[category_id]),
            _random_moment(rng, year, month),
        ))

    return transactions


def month_budgets(year: int, month: int) -> List[Budget]:
    key = format_month_key(year, month)
    return [Budget(category_id=cid, amount=amount, month=key) for cid, amount in BUDGET_AMOUNTS.items()]


def generate_seed_data(year: int = 2024, months: int = 3, rng_seed: Optional[int] = None,
                       start_month: int = 1) -> Seed:
    """Categories, transactions and budgets for ``months`` months from ``year-start_month``.

    Transactions come back sorted by date and numbered from "1"; budgets are
    numbered in generation order.
    """
    if months < 1:
        raise ValueError(f"months must be at least 1, got {months}")
    rng = random.Random(rng_seed)

    transactions: List[Transaction] = []
    budgets: List[Budget] = []
    for offset in range(months):
        y, m = shift_month(year, start_month, offset)
        transactions.extend(month_transactions(rng, y, m))
        budgets.extend(month_budgets(y, m))

    transactions.sort(key=lambda t: t.date)
    transactions = [replace(t, id=str(i)) for i, t in enumerate(transactions, start=1)]
    budgets = [replace(b, id=str(i)) for i, b in enumerate(budgets, start=1)]

    return DEFAULT_CATEGORIES, tuple(transactions), tuple(budgets)


def main(argv: Optional[Sequence[str]] = None) -> Path:
    parser = argparse.ArgumentParser(description="Generate sample finance tracker data")
    parser.add_argument("--output", type=Path, default=config.SEED_PATH,
                        help=f"where to write the JSON (default: {config.SEED_PATH})")
    parser.add_argument("--year", type=int, default=2024)
    parser.add_argument("--start-month", type=int, default=1, choices=range(1, 13), metavar="1-12")
    parser.add_argument("--months", type=int, default=3)
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible data")
    args = parser.parse_args(argv)
    configure()

    if args.months < 1:
        parser.error("--months must be at least 1")

    categories, transactions, budgets = generate_seed_data(
        args.year, args.months, args.seed, start_month=args.start_month
    )
    path = dump_seed(args.output, categories, transactions, budgets, users=[DEMO_USER])
    logger.info(
        "Seed data written to %s: %d categories, %d transactions, %d budgets",
        path, len(categories), len(transactions), len(budgets),
    )
    return path


if __name__ == "__main__":
    main()
