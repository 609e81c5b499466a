"""Validation at the edges: records coming from JSON or a form are checked
here before anything else sees them.

Each check takes a record and returns ``Right(record)`` or ``Left(error)``,
where the error is a dict with an ``error`` code and a user-facing
``message``. Checks run in order through ``Either.bind`` and stop at the
first failure.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import reduce
from typing import Callable, Generic, Iterable, TypeVar

from fintrack.domain import (
    MAX_AMOUNT,
    MAX_CATEGORY_NAME_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MIN_AMOUNT,
    TRANSACTION_TYPES,
    Budget,
    Category,
    Transaction,
)
from fintrack.errors import InvalidDateError, ValidationError
from fintrack.periods import is_month, parse_timestamp

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')

Check = Callable[[T], 'Either[dict, T]']


class Maybe(Generic[T], ABC):
    """A lookup result: ``Some(value)`` or ``Nothing()``."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


@dataclass(frozen=True)
class Some(Maybe[T]):
    value: T

    def map(self, f: Callable[[T], U]) -> Maybe[U]:
        return Some(f(self.value))

    def get_or_else(self, default: T) -> T:
        return self.value

    def is_some(self) -> bool:
        return True


@dataclass(frozen=True)
class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> Maybe[U]:
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False


class Either(Generic[E, T], ABC):
    """A validation result: ``Right(record)`` or ``Left(error)``."""

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


@dataclass(frozen=True)
class Right(Either[E, T]):
    value: T

    def bind(self, f: Callable[[T], Either[E, U]]) -> Either[E, U]:
        return f(self.value)

    def get_or_else(self, default: T) -> T:
        return self.value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Right holds no error")


@dataclass(frozen=True)
class Left(Either[E, T]):
    error: E

    def bind(self, f: Callable[[T], Either[E, U]]) -> Either[E, U]:
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self.error


def run_checks(record: T, *checks: Check) -> Either[dict, T]:
    """Feed ``record`` through ``checks``; the first ``Left`` wins."""
    return reduce(lambda result, check: result.bind(check), checks, Right(record))


def safe_category(cats: Iterable[Category], cat_id: str) -> Maybe[Category]:
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _check_type(record):
    if record.type in TRANSACTION_TYPES:
        return Right(record)
    return Left({
        "error": "invalid_type",
        "message": "Please select a transaction type",
        "type": record.type,
    })


def _check_amount(record):
    amount = record.amount
    if not _is_number(amount):
        return Left({
            "error": "invalid_amount",
            "message": "Amount must be a number",
            "amount": amount,
        })
    if amount < MIN_AMOUNT:
        return Left({
            "error": "amount_too_small",
            "message": f"Amount must be at least ${MIN_AMOUNT}",
            "amount": amount,
        })
    if amount > MAX_AMOUNT:
        return Left({
            "error": "amount_too_large",
            "message": f"Amount cannot exceed ${MAX_AMOUNT:,}",
            "amount": amount,
        })
    return Right(record)


def _check_category_id(record):
    if record.category_id:
        return Right(record)
    return Left({
        "error": "category_required",
        "message": "Please select a category",
    })


def _description_check(required: bool) -> Check:
    def check(t: Transaction) -> Either[dict, Transaction]:
        description = t.description or ""
        if required and not description.strip():
            return Left({
                "error": "description_required",
                "message": "Description is required",
            })
        if len(description) > MAX_DESCRIPTION_LENGTH:
            return Left({
                "error": "description_too_long",
                "message": f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
                "length": len(description),
            })
        return Right(t)
    return check


def _check_date(t: Transaction) -> Either[dict, Transaction]:
    try:
        parse_timestamp(t.date)
    except InvalidDateError:
        return Left({
            "error": "invalid_date",
            "message": f"Invalid date: {t.date!r}",
            "date": t.date,
        })
    return Right(t)


def _category_type_check(cats: Iterable[Category]) -> Check:
    def check(t: Transaction) -> Either[dict, Transaction]:
        category = safe_category(cats, t.category_id)
        # unknown ids pass; reports show them as "Unknown"
        if category.map(lambda c: c.type == t.type).get_or_else(True):
            return Right(t)
        c = category.get_or_else(None)
        return Left({
            "error": "category_type_mismatch",
            "message": f"{c.type.capitalize()} category {c.name} cannot be used for {t.type}",
            "category_type": c.type,
            "transaction_type": t.type,
        })
    return check


def validate_transaction(
    t: Transaction,
    cats: Iterable[Category],
    require_description: bool = False,
) -> Either[dict, Transaction]:
    """Check a transaction before it enters the system.

    A category id that matches nothing is accepted (reports fall back to
    "Unknown"), but a category of the other type is not.
    """
    return run_checks(
        t,
        _check_type,
        _check_amount,
        _check_category_id,
        _description_check(require_description),
        _check_date,
        _category_type_check(cats),
    )


def _check_month(b: Budget) -> Either[dict, Budget]:
    if b.month is None or is_month(b.month):
        return Right(b)
    return Left({
        "error": "invalid_month",
        "message": f"Invalid month: {b.month!r} (expected YYYY-MM)",
        "month": b.month,
    })


def validate_budget(b: Budget) -> Either[dict, Budget]:
    return run_checks(b, _check_category_id, _check_amount, _check_month)


def validate_category(c: Category) -> Either[dict, Category]:
    name = (c.name or "").strip()
    if not name:
        return Left({
            "error": "name_required",
            "message": "Category name is required",
        })
    if len(name) > MAX_CATEGORY_NAME_LENGTH:
        return Left({
            "error": "name_too_long",
            "message": f"Category name cannot exceed {MAX_CATEGORY_NAME_LENGTH} characters",
            "length": len(name),
        })
    if c.type not in TRANSACTION_TYPES:
        return Left({
            "error": "invalid_type",
            "message": "Category type must be income or expense",
            "type": c.type,
        })
    return Right(c)


def ensure_valid(result: Either[dict, T]) -> T:
    """Unwrap a validation result, raising ``ValidationError`` on Left."""
    if result.is_left():
        raise ValidationError(result.get_error())
    return result.get_or_else(None)
