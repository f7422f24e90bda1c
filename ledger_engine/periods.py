"""
Month-key helpers.

A month-key is the string "M/YYYY" with an unpadded month (e.g. "3/2024").
It is both the grouping key of the reports and the literal column header
of the monthly reconciliation sheet.
"""
import calendar
from typing import Any, Iterable, List, Optional, Tuple

import pandas as pd


_MONTH_NAMES = {
    name.lower(): number
    for number, name in enumerate(calendar.month_name)
    if name
}
_MONTH_NAMES.update({
    name.lower(): number
    for number, name in enumerate(calendar.month_abbr)
    if name
})


def month_key(value: Any) -> Optional[str]:
    """
    Build the month-key of a date-like value.

    Returns None for missing values (None, NaN, NaT).
    """
    if value is None or pd.isna(value):
        return None
    return f"{value.month}/{value.year}"


def month_key_from_parts(month: int, year: int) -> str:
    return f"{int(month)}/{int(year)}"


def parse_month_key(key: str) -> Tuple[int, int]:
    """Split "M/YYYY" into (year, month) so keys sort chronologically."""
    month, year = key.split("/")
    return int(year), int(month)


def sort_month_keys(keys: Iterable[str]) -> List[str]:
    """Sort month-keys chronologically: year first, then month."""
    return sorted(set(keys), key=parse_month_key)


def payment_month_number(value: Any) -> Optional[int]:
    """
    Interpret a Payment Month cell.

    Accepts 1-12 as int, float (3.0) or numeric text, and English month
    names or abbreviations. Anything else yields None.
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.lower() in _MONTH_NAMES:
            return _MONTH_NAMES[text.lower()]
        try:
            value = float(text)
        except ValueError:
            return None

    try:
        number = float(value)
    except (TypeError, ValueError):
        return None

    if not number.is_integer() or not 1 <= number <= 12:
        return None
    return int(number)


def payment_year_number(value: Any) -> Optional[int]:
    """Interpret a Payment Year cell (int, float or numeric text)."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)
