import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from fintrack.domain import Budget, Category, Transaction, TransactionFilters
from fintrack.errors import InvalidDateError, NotFoundError, SeedDataError, ValidationError
from fintrack.functional import ensure_valid, validate_budget, validate_category, validate_transaction
from fintrack.log import get_logger
from fintrack.periods import calendar_date, parse_timestamp

logger = get_logger(__name__)

Seed = Tuple[Tuple[Category, ...], Tuple[Transaction, ...], Tuple[Budget, ...]]


def _pick(d: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return default


def _amount(value: Any) -> Any:
    # JSON numbers arrive as int/float; numeric strings are coerced, anything else is left for validation
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def parse_category(d: Dict[str, Any]) -> Category:
    return Category(
        id=str(d["id"]),
        name=d.get("name", ""),
        color=d.get("color", ""),
        type=d.get("type", ""),
        icon=d.get("icon", "") or "",
    )


def parse_transaction(d: Dict[str, Any]) -> Transaction:
    """Build a Transaction from the camelCase JSON shape (snake_case also accepted)."""
    return Transaction(
        id=str(d["id"]),
        type=d.get("type", ""),
        amount=_amount(d.get("amount")),
        category_id=str(_pick(d, "categoryId", "category_id", default="")),
        date=_pick(d, "date", default=""),
        description=d.get("description", "") or "",
        user_id=str(_pick(d, "userId", "user_id", default="1")),
        created_at=_pick(d, "createdAt", "created_at", default=""),
    )


def parse_budget(d: Dict[str, Any]) -> Budget:
    return Budget(
        category_id=str(_pick(d, "categoryId", "category_id", default="")),
        amount=_amount(d.get("amount")),
        month=d.get("month"),
        id=str(d.get("id", "")),
        user_id=str(_pick(d, "userId", "user_id", default="1")),
    )


def category_to_dict(c: Category) -> Dict[str, Any]:
    return {"id": c.id, "name": c.name, "icon": c.icon, "color": c.color, "type": c.type}


def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    return {
        "id": t.id,
        "userId": t.user_id,
        "type": t.type,
        "amount": t.amount,
        "categoryId": t.category_id,
        "description": t.description,
        "date": t.date,
        "createdAt": t.created_at,
    }


def budget_to_dict(b: Budget) -> Dict[str, Any]:
    return {
        "id": b.id,
        "userId": b.user_id,
        "categoryId": b.category_id,
        "amount": b.amount,
        "month": b.month,
    }


def _parse_records(kind: str, rows: Iterable[Dict[str, Any]], parse, validate) -> tuple:
    records = []
    for row in rows:
        try:
            record = ensure_valid(validate(parse(row)))
        except (KeyError, TypeError) as e:
            logger.warning("Skipping %s %r: missing field %s", kind, row, e)
            continue
        except ValidationError as e:
            logger.warning("Skipping %s %s: %s", kind, row.get("id"), e)
            continue
        records.append(record)
    return tuple(records)


def parse_seed(data: Dict[str, Any]) -> Seed:
    """Turn a decoded seed document into validated records; invalid rows are logged and dropped."""
    categories = _parse_records("category", data.get("categories", []), parse_category, validate_category)
    transactions = _parse_records(
        "transaction",
        data.get("transactions", []),
        parse_transaction,
        lambda t: validate_transaction(t, categories),
    )
    budgets = _parse_records("budget", data.get("budgets", []), parse_budget, validate_budget)
    return categories, transactions, budgets


def load_seed(path: Union[str, Path]) -> Seed:
    path = Path(path)
    if not path.exists():
        raise SeedDataError(f"Seed file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SeedDataError(f"Seed file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SeedDataError(f"Seed file {path} must contain a JSON object")

    categories, transactions, budgets = parse_seed(data)
    logger.info(
        "Loaded %d categories, %d transactions, %d budgets from %s",
        len(categories), len(transactions), len(budgets), path,
    )
    return categories, transactions, budgets


def dump_seed(
    path: Union[str, Path],
    categories: Iterable[Category],
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    users: Optional[list] = None,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "users": users or [],
        "categories": [category_to_dict(c) for c in categories],
        "transactions": [transaction_to_dict(t) for t in transactions],
        "budgets": [budget_to_dict(b) for b in budgets],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


def next_id(records: Iterable[Any]) -> str:
    """One past the largest numeric id, the way the seed data numbers records."""
    numeric = [int(r.id) for r in records if str(r.id).isdigit()]
    return str(max(numeric, default=0) + 1)


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)


def update_transaction(
    trans: Tuple[Transaction, ...], tid: str, **changes: Any
) -> Tuple[Transaction, ...]:
    if not any(t.id == tid for t in trans):
        raise NotFoundError(f"Transaction {tid} not found")
    return tuple(replace(t, **changes) if t.id == tid else t for t in trans)


def delete_transaction(
    trans: Tuple[Transaction, ...], tid: str
) -> Tuple[Transaction, ...]:
    kept = tuple(t for t in trans if t.id != tid)
    if len(kept) == len(trans):
        raise NotFoundError(f"Transaction {tid} not found")
    return kept


def add_budget(budgets: Tuple[Budget, ...], b: Budget) -> Tuple[Budget, ...]:
    return budgets + (b,)


def update_budget(
    budgets: Tuple[Budget, ...], bid: str, new_amount: float
) -> Tuple[Budget, ...]:
    if not any(b.id == bid for b in budgets):
        raise NotFoundError(f"Budget {bid} not found")
    return tuple(replace(b, amount=new_amount) if b.id == bid else b for b in budgets)


def delete_budget(budgets: Tuple[Budget, ...], bid: str) -> Tuple[Budget, ...]:
    kept = tuple(b for b in budgets if b.id != bid)
    if len(kept) == len(budgets):
        raise NotFoundError(f"Budget {bid} not found")
    return kept


def add_category(cats: Tuple[Category, ...], c: Category) -> Tuple[Category, ...]:
    return cats + (c,)


def delete_category(cats: Tuple[Category, ...], cid: str) -> Tuple[Category, ...]:
    # transactions filed under it stay put and report as "Unknown"
    kept = tuple(c for c in cats if c.id != cid)
    if len(kept) == len(cats):
        raise NotFoundError(f"Category {cid} not found")
    return kept


def by_type(type_: str) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return t.type == type_

    return _filter


def by_category(cat_id: str) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return t.category_id == cat_id

    return _filter


def by_date_range(start: Optional[str], end: Optional[str]) -> Callable[[Transaction], bool]:
    """Inclusive on calendar dates (``"YYYY-MM-DD"``); either bound may be open."""
    def _filter(t: Transaction) -> bool:
        try:
            day = calendar_date(t.date)
        except InvalidDateError:
            return False
        return (start is None or start <= day) and (end is None or day <= end)

    return _filter


def by_search(text: str) -> Callable[[Transaction], bool]:
    needle = text.strip().lower()

    def _filter(t: Transaction) -> bool:
        return needle in t.description.lower()

    return _filter


def _sort_key(t: Transaction):
    try:
        ts = parse_timestamp(t.date)
    except InvalidDateError:
        return ""
    # aware and naive timestamps don't compare; the wall-clock text does
    return ts.strftime("%Y-%m-%dT%H:%M:%S.%f")


def filter_transactions(
    trans: Iterable[Transaction], filters: TransactionFilters
) -> Tuple[Transaction, ...]:
    """Apply every set filter, newest first."""
    preds = []
    if filters.type:
        preds.append(by_type(filters.type))
    if filters.category_id:
        preds.append(by_category(filters.category_id))
    if filters.start_date or filters.end_date:
        preds.append(by_date_range(filters.start_date, filters.end_date))
    if filters.search and filters.search.strip():
        preds.append(by_search(filters.search))

    matched = [t for t in trans if all(p(t) for p in preds)]
    return tuple(sorted(matched, key=_sort_key, reverse=True))


def recent_transactions(trans: Iterable[Transaction], limit: int = 5) -> Tuple[Transaction, ...]:
    return filter_transactions(trans, TransactionFilters())[: max(0, limit)]


def budgets_for_month(budgets: Iterable[Budget], month: str) -> Tuple[Budget, ...]:
    return tuple(b for b in budgets if b.month == month)


def categories_of_type(cats: Iterable[Category], type_: str) -> Tuple[Category, ...]:
    return tuple(c for c in cats if c.type == type_)
