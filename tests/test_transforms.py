import json
import logging

import pytest

from fintrack.domain import EXPENSE, INCOME, Budget, Category, Transaction, TransactionFilters
from fintrack.errors import NotFoundError, SeedDataError
from fintrack.transforms import (
    add_budget,
    add_category,
    add_transaction,
    budgets_for_month,
    by_category,
    by_date_range,
    categories_of_type,
    delete_budget,
    delete_category,
    delete_transaction,
    dump_seed,
    filter_transactions,
    load_seed,
    next_id,
    parse_budget,
    parse_transaction,
    recent_transactions,
    update_budget,
    update_transaction,
)


def make_sample():
    cats = (
        Category("1", "Food & Dining", "#ef4444", EXPENSE, "utensils"),
        Category("2", "Transportation", "#f97316", EXPENSE, "car"),
        Category("9", "Salary", "#22c55e", INCOME, "briefcase"),
    )
    trans = (
        Transaction("1", INCOME, 5000, "9", "2024-03-01T09:00:00.000Z", "Monthly salary"),
        Transaction("2", EXPENSE, 52.3, "1", "2024-03-04T12:00:00.000Z", "Weekly groceries"),
        Transaction("3", EXPENSE, 18, "2", "2024-03-31T23:00:00.000Z", "Uber ride"),
        Transaction("4", EXPENSE, 12.5, "1", "2024-02-27T08:15:00.000Z", "Coffee shop"),
    )
    budgets = (
        Budget("1", 600, "2024-03", id="1"),
        Budget("2", 200, "2024-03", id="2"),
        Budget("1", 550, "2024-02", id="3"),
    )
    return cats, trans, budgets


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_parse_transaction_camel_case():
    t = parse_transaction({
        "id": 7, "userId": "1", "type": "expense", "amount": 12.5, "categoryId": "1",
        "description": "Coffee", "date": "2024-03-01T08:00:00.000Z", "createdAt": "2024-03-01T08:00:00.000Z",
    })
    assert t == Transaction("7", EXPENSE, 12.5, "1", "2024-03-01T08:00:00.000Z", "Coffee", "1",
                            "2024-03-01T08:00:00.000Z")


def test_parse_transaction_snake_case_and_numeric_string():
    t = parse_transaction({"id": "8", "type": "income", "amount": "99.90", "category_id": "9",
                           "date": "2024-03-01"})
    assert t.category_id == "9"
    assert t.amount == 99.9


def test_parse_budget_without_month():
    b = parse_budget({"categoryId": "1", "amount": 100})
    assert b.month is None
    assert b.category_id == "1"


def test_load_seed(tmp_path):
    path = write_json(tmp_path / "db.json", {
        "users": [{"id": "1"}],
        "categories": [
            {"id": "1", "name": "Food & Dining", "icon": "utensils", "color": "#ef4444", "type": "expense"},
            {"id": "9", "name": "Salary", "icon": "briefcase", "color": "#22c55e", "type": "income"},
        ],
        "transactions": [
            {"id": "1", "type": "income", "amount": 5000, "categoryId": "9",
             "description": "Monthly salary", "date": "2024-01-01T09:00:00.000Z"},
            {"id": "2", "type": "expense", "amount": 20, "categoryId": "1",
             "description": "Lunch", "date": "2024-01-02T12:00:00.000Z"},
        ],
        "budgets": [{"id": "1", "categoryId": "1", "amount": 600, "month": "2024-01"}],
    })

    categories, transactions, budgets = load_seed(path)

    assert [c.name for c in categories] == ["Food & Dining", "Salary"]
    assert [t.id for t in transactions] == ["1", "2"]
    assert budgets == (Budget("1", 600, "2024-01", id="1"),)


def test_load_seed_drops_invalid_records(tmp_path, caplog):
    path = write_json(tmp_path / "db.json", {
        "categories": [
            {"id": "1", "name": "Food", "color": "#ef4444", "type": "expense"},
            {"id": "2", "name": "", "color": "#000000", "type": "expense"},
        ],
        "transactions": [
            {"id": "1", "type": "expense", "amount": 20, "categoryId": "1", "date": "2024-01-02"},
            {"id": "2", "type": "expense", "amount": "lots", "categoryId": "1", "date": "2024-01-02"},
            {"id": "3", "type": "expense", "amount": 5, "categoryId": "1", "date": "soon"},
            {"id": "4", "type": "refund", "amount": 5, "categoryId": "1", "date": "2024-01-02"},
            {"type": "expense", "amount": 5, "categoryId": "1", "date": "2024-01-02"},
        ],
        "budgets": [
            {"id": "1", "categoryId": "1", "amount": -10, "month": "2024-01"},
            {"id": "2", "categoryId": "1", "amount": 100, "month": "2024-01"},
        ],
    })

    with caplog.at_level(logging.WARNING, logger="fintrack"):
        categories, transactions, budgets = load_seed(path)

    assert [c.id for c in categories] == ["1"]
    assert [t.id for t in transactions] == ["1"]
    skipped = [r.getMessage() for r in caplog.records if r.name == "fintrack.transforms"]
    assert len(skipped) == 6
    assert any("Amount must be a number" in m for m in skipped)
    assert [b.id for b in budgets] == ["2"]


def test_load_seed_missing_file(tmp_path):
    with pytest.raises(SeedDataError):
        load_seed(tmp_path / "nope.json")


def test_load_seed_bad_json(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SeedDataError):
        load_seed(path)


def test_load_seed_requires_object(tmp_path):
    path = write_json(tmp_path / "db.json", [1, 2, 3])
    with pytest.raises(SeedDataError):
        load_seed(path)


def test_dump_seed_then_load(tmp_path):
    cats, trans, budgets = make_sample()
    path = dump_seed(tmp_path / "out" / "db.json", cats, trans, budgets)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["transactions"][1]["categoryId"] == "1"
    assert load_seed(path) == (cats, trans, budgets)


def test_add_transaction_immutability():
    _, trans, _ = make_sample()
    t = Transaction("5", EXPENSE, 9.99, "1", "2024-03-05", "Snack")
    new_trans = add_transaction(trans, t)
    assert new_trans is not trans
    assert len(new_trans) == 5
    assert len(trans) == 4


def test_update_transaction():
    _, trans, _ = make_sample()
    updated = update_transaction(trans, "2", amount=60.0, description="Big groceries")
    assert updated[1].amount == 60.0
    assert updated[1].description == "Big groceries"
    assert trans[1].amount == 52.3


def test_update_transaction_missing():
    _, trans, _ = make_sample()
    with pytest.raises(NotFoundError):
        update_transaction(trans, "404", amount=1)


def test_delete_transaction():
    _, trans, _ = make_sample()
    assert [t.id for t in delete_transaction(trans, "3")] == ["1", "2", "4"]
    with pytest.raises(NotFoundError):
        delete_transaction(trans, "404")


def test_budget_crud():
    _, _, budgets = make_sample()
    budgets2 = add_budget(budgets, Budget("2", 150, "2024-02", id="4"))
    assert len(budgets2) == 4

    budgets3 = update_budget(budgets2, "1", 700)
    assert budgets3[0].amount == 700
    assert budgets[0].amount == 600

    assert [b.id for b in delete_budget(budgets3, "2")] == ["1", "3", "4"]
    with pytest.raises(NotFoundError):
        update_budget(budgets, "404", 1)
    with pytest.raises(NotFoundError):
        delete_budget(budgets, "404")


def test_category_crud():
    cats, _, _ = make_sample()
    more = add_category(cats, Category("13", "Pets", "#f59e0b", EXPENSE))
    assert [c.id for c in more] == ["1", "2", "9", "13"]
    assert [c.id for c in delete_category(more, "2")] == ["1", "9", "13"]
    with pytest.raises(NotFoundError):
        delete_category(cats, "404")


def test_next_id():
    cats, trans, _ = make_sample()
    assert next_id(trans) == "5"
    assert next_id(cats) == "10"
    assert next_id(()) == "1"


def test_by_category():
    _, trans, _ = make_sample()
    assert [t.id for t in filter(by_category("1"), trans)] == ["2", "4"]


def test_by_date_range_inclusive_on_calendar_days():
    _, trans, _ = make_sample()
    result = list(filter(by_date_range("2024-03-01", "2024-03-31"), trans))
    assert [t.id for t in result] == ["1", "2", "3"]


def test_by_date_range_open_ended():
    _, trans, _ = make_sample()
    assert [t.id for t in filter(by_date_range(None, "2024-02-28"), trans)] == ["4"]
    assert [t.id for t in filter(by_date_range("2024-03-04", None), trans)] == ["2", "3"]


def test_filter_transactions_no_filters_newest_first():
    _, trans, _ = make_sample()
    assert [t.id for t in filter_transactions(trans, TransactionFilters())] == ["3", "2", "1", "4"]


def test_filter_transactions_combined():
    _, trans, _ = make_sample()
    filters = TransactionFilters(type=EXPENSE, start_date="2024-03-01", end_date="2024-03-31")
    assert [t.id for t in filter_transactions(trans, filters)] == ["3", "2"]


def test_filter_transactions_search_is_case_insensitive():
    _, trans, _ = make_sample()
    result = filter_transactions(trans, TransactionFilters(search="  GROCER "))
    assert [t.id for t in result] == ["2"]


def test_filter_transactions_by_category():
    _, trans, _ = make_sample()
    result = filter_transactions(trans, TransactionFilters(category_id="1"))
    assert [t.id for t in result] == ["2", "4"]


def test_recent_transactions():
    _, trans, _ = make_sample()
    assert [t.id for t in recent_transactions(trans, 2)] == ["3", "2"]
    assert recent_transactions(trans, 0) == ()


def test_budgets_for_month():
    _, _, budgets = make_sample()
    assert [b.id for b in budgets_for_month(budgets, "2024-03")] == ["1", "2"]
    assert budgets_for_month(budgets, "2023-12") == ()


def test_categories_of_type():
    cats, _, _ = make_sample()
    assert [c.name for c in categories_of_type(cats, INCOME)] == ["Salary"]
