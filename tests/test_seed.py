import json
import logging

import pytest

from fintrack.domain import EXPENSE, INCOME
from fintrack.functional import validate_budget, validate_category, validate_transaction
from fintrack.periods import month_key
from fintrack.seed import BUDGET_AMOUNTS, DEFAULT_CATEGORIES, generate_seed_data, main
from fintrack.transforms import load_seed


def test_same_seed_same_data():
    assert generate_seed_data(rng_seed=7) == generate_seed_data(rng_seed=7)


def test_default_categories():
    categories, _, _ = generate_seed_data(rng_seed=1)
    assert categories == DEFAULT_CATEGORIES
    assert len(categories) == 12
    assert sum(1 for c in categories if c.type == INCOME) == 4


def test_salary_and_rent_every_month():
    _, transactions, _ = generate_seed_data(2024, 3, rng_seed=1)
    for month in ("2024-01", "2024-02", "2024-03"):
        in_month = [t for t in transactions if month_key(t.date) == month]
        assert any(t.description == "Monthly salary" and t.amount == 5000 for t in in_month)
        assert any(t.description == "Rent payment" and t.amount == 1200 for t in in_month)
        # salary, rent, 15-24 expenses, 1-3 side incomes
        assert 18 <= len(in_month) <= 29


def test_transactions_sorted_and_numbered():
    _, transactions, _ = generate_seed_data(rng_seed=3)
    assert [t.id for t in transactions] == [str(i) for i in range(1, len(transactions) + 1)]
    dates = [t.date for t in transactions]
    assert dates == sorted(dates)


def test_budgets_per_month():
    _, _, budgets = generate_seed_data(2024, 2, rng_seed=3)
    assert len(budgets) == 2 * len(BUDGET_AMOUNTS)
    assert {b.month for b in budgets} == {"2024-01", "2024-02"}
    assert [b.id for b in budgets] == [str(i) for i in range(1, len(budgets) + 1)]


def test_generated_records_are_valid():
    categories, transactions, budgets = generate_seed_data(rng_seed=11)
    assert all(validate_category(c).is_right() for c in categories)
    assert all(validate_transaction(t, categories, require_description=True).is_right()
               for t in transactions)
    assert all(validate_budget(b).is_right() for b in budgets)


def test_amounts_are_in_cents():
    _, transactions, _ = generate_seed_data(rng_seed=5)
    assert all(round(t.amount, 2) == t.amount for t in transactions)
    assert all(t.amount > 0 for t in transactions)
    assert {t.type for t in transactions} == {INCOME, EXPENSE}


def test_year_rollover():
    _, transactions, budgets = generate_seed_data(2023, 3, rng_seed=2, start_month=12)
    assert {month_key(t.date) for t in transactions} == {"2023-12", "2024-01", "2024-02"}
    assert budgets[-1].month == "2024-02"


def test_months_must_be_positive():
    with pytest.raises(ValueError):
        generate_seed_data(months=0)


@pytest.fixture
def fintrack_logger():
    logger = logging.getLogger("fintrack")
    saved_handlers, saved_level = list(logger.handlers), logger.level
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


def test_main_writes_loadable_file(tmp_path, fintrack_logger):
    out = tmp_path / "seed.json"
    path = main(["--output", str(out), "--year", "2024", "--months", "2", "--seed", "42"])

    assert path == out
    assert fintrack_logger.handlers
    raw = json.loads(out.read_text(encoding="utf-8"))
    assert raw["users"][0]["email"] == "demo@example.com"

    categories, transactions, budgets = load_seed(out)
    assert len(categories) == 12
    assert len(budgets) == 2 * len(BUDGET_AMOUNTS)
    assert {month_key(t.date) for t in transactions} == {"2024-01", "2024-02"}


def test_main_rejects_zero_months(tmp_path, fintrack_logger):
    with pytest.raises(SystemExit):
        main(["--output", str(tmp_path / "seed.json"), "--months", "0"])
