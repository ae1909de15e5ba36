"""Formatting utilities for currency, dates and display labels."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

import pandas as pd

CURRENCY_SUFFIX = "kr"
NO_DATE_LABEL = "No date"
# nb-NO groups thousands with a no-break space
GROUP_SEPARATOR = "\u00a0"

MONTH_LABELS = (
    "januar",
    "februar",
    "mars",
    "april",
    "mai",
    "juni",
    "juli",
    "august",
    "september",
    "oktober",
    "november",
    "desember",
)

Number = Union[int, float]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def format_currency(amount: Any) -> str:
    """Format an amount as whole Norwegian kroner.

    Amounts are rounded half away from zero to zero decimals and grouped
    in thousands. Anything that is not a finite number renders as the zero
    amount.

    Args:
        amount: The amount to format

    Returns:
        Formatted currency string (e.g. "1 234 kr")

    Example:
        >>> format_currency(1234.5)
        '1\\xa0235 kr'
        >>> format_currency(-50)
        '-50 kr'
        >>> format_currency(float('nan'))
        '0 kr'
    """
    if not _is_number(amount):
        amount = 0
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        value = Decimal(0)
    if not value.is_finite():
        value = Decimal(0)

    rounded = int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    grouped = f"{abs(rounded):,}".replace(",", GROUP_SEPARATOR)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{grouped} {CURRENCY_SUFFIX}"


def format_date(value: Any) -> str:
    """Render an ISO date as ``DD.MM.YY``.

    Args:
        value: ISO date string (or date-like object)

    Returns:
        The short date, or ``NO_DATE_LABEL`` when missing or unparseable

    Example:
        >>> format_date("2024-03-05")
        '05.03.24'
        >>> format_date(None)
        'No date'
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return NO_DATE_LABEL
    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        return NO_DATE_LABEL
    return parsed.strftime("%d.%m.%y")


def to_number(value: Any) -> Number:
    """Coerce an amount that may arrive as text into a number.

    ``None``, blank or unparseable text and non-finite values all become
    ``0`` so a bad row contributes nothing instead of breaking a total.

    Example:
        >>> to_number("42")
        42
        >>> to_number("abc")
        0
    """
    if _is_number(value):
        if isinstance(value, int):
            return value
        number = float(value)
        return number if math.isfinite(number) else 0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            parsed = float(text)
        except ValueError:
            return 0
        if not math.isfinite(parsed):
            return 0
        return int(parsed) if parsed.is_integer() else parsed
    return 0


def round_half_up(value: Any) -> int:
    """Round a coerced amount to a whole currency unit (halves go up)."""
    number = to_number(value)
    return int(math.floor(number + 0.5))


def month_label(month: Any) -> str:
    """Norwegian month name for ``1``-``12``; empty for anything else."""
    try:
        index = int(month)
    except (TypeError, ValueError):
        return ""
    if 1 <= index <= 12:
        return MONTH_LABELS[index - 1]
    return ""


def category_hue(name: str) -> int:
    """Stable 0-359 colour hue for a category pill."""
    normalized = (name or "").strip().lower() or "uncategorized"
    hue = 0
    for char in normalized:
        hue = (hue * 31 + ord(char)) % 360
    return hue
