"""Calendar-month helpers.

Months are handled as ``"YYYY-MM"`` strings throughout; they sort
chronologically as plain strings. Transaction timestamps are bucketed by
the calendar date written in them, without converting time zones.
"""
import re
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from fintrack.errors import InvalidDateError

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

DateLike = Union[str, date, datetime]


def parse_timestamp(value: DateLike) -> datetime:
    """Parse an ISO-8601 date or date-time; raises InvalidDateError."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"Invalid date: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDateError(f"Invalid date: {value!r}") from None


def month_key(value: DateLike) -> str:
    """``"2024-03-02T10:00:00.000Z"`` -> ``"2024-03"``."""
    ts = parse_timestamp(value)
    return f"{ts.year:04d}-{ts.month:02d}"


def calendar_date(value: DateLike) -> str:
    """``"2024-03-02T10:00:00.000Z"`` -> ``"2024-03-02"``."""
    return parse_timestamp(value).date().isoformat()


def is_month(value: object) -> bool:
    if not isinstance(value, str):
        return False
    m = _MONTH_RE.match(value)
    return bool(m) and 1 <= int(m.group(2)) <= 12


def parse_month(value: Union[str, date]) -> Tuple[int, int]:
    if isinstance(value, date):
        return value.year, value.month
    if not is_month(value):
        raise InvalidDateError(f"Invalid month: {value!r} (expected YYYY-MM)")
    year, month = value.split("-")
    return int(year), int(month)


def format_month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    y, m = divmod(year * 12 + (month - 1) + delta, 12)
    return y, m + 1


def trailing_months(reference: Union[str, date], count: int) -> List[str]:
    """``count`` consecutive months ending with ``reference``, oldest first."""
    if count < 1:
        raise ValueError(f"month count must be at least 1, got {count}")
    year, month = parse_month(reference)
    return [
        format_month_key(*shift_month(year, month, -offset))
        for offset in range(count - 1, -1, -1)
    ]


def month_label(key: str) -> str:
    _, month = parse_month(key)
    return MONTH_ABBR[month - 1]


def current_month(today: Optional[date] = None) -> str:
    """The month containing ``today``; reads the clock when not given."""
    today = today or date.today()
    return format_month_key(today.year, today.month)
