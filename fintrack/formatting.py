"""Formatting helpers for amounts, months and budget states in the UI."""
from typing import Union

from fintrack.domain import BUDGET_DANGER, BUDGET_WARNING
from fintrack.errors import InvalidDateError
from fintrack.periods import parse_month, parse_timestamp

MONTH_NAMES = ("January", "February", "March", "April", "May", "June", "July",
               "August", "September", "October", "November", "December")

DANGER_COLOR = "#ef4444"
WARNING_COLOR = "#f59e0b"
SUCCESS_COLOR = "#22c55e"

Number = Union[int, float]


def format_currency(amount: Number) -> str:
    """Format as USD with thousands separators.

    >>> format_currency(1234.5)
    '$1,234.50'
    >>> format_currency(-20)
    '-$20.00'
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_compact_currency(amount: Number) -> str:
    """``$1.5M`` / ``$2.3K`` for large values, full currency otherwise."""
    if abs(amount) >= 1_000_000:
        return f"${amount / 1_000_000:.1f}M"
    if abs(amount) >= 1000:
        return f"${amount / 1000:.1f}K"
    return format_currency(amount)


def format_chart_currency(value: Number) -> str:
    """Axis tick label: ``$1.5k`` from a thousand up, ``$950`` below."""
    if value >= 1000:
        return f"${value / 1000:.1f}k"
    return f"${value:g}"


def escape_dollars(text: str) -> str:
    # st.markdown treats paired "$" as LaTeX delimiters
    return text.replace("$", "\\$")


def format_month(month: str) -> str:
    """``"2024-03"`` -> ``"March 2024"``."""
    year, m = parse_month(month)
    return f"{MONTH_NAMES[m - 1]} {year}"


def format_date(value: str, fmt: str = "%b %d, %Y") -> str:
    try:
        return parse_timestamp(value).strftime(fmt)
    except InvalidDateError:
        return "Invalid date"


def format_percentage(value: Number, decimals: int = 0) -> str:
    return f"{value:.{decimals}f}%"


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def budget_progress_color(percentage: Number) -> str:
    if percentage >= BUDGET_DANGER:
        return DANGER_COLOR
    if percentage >= BUDGET_WARNING:
        return WARNING_COLOR
    return SUCCESS_COLOR


def describe_remaining(remaining: Number) -> str:
    """``"$50.00 left"`` or, once overspent, ``"$50.00 over budget"``."""
    if remaining < 0:
        return f"{format_currency(-remaining)} over budget"
    return f"{format_currency(remaining)} left"
