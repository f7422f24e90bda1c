"""
Time and cost normalization.

Turns the raw rows of one worker sheet into ledger rows: parses the free-text
start/end times against the row date, computes hours worked and derives the
work and total cost.
"""
import logging
import re
from datetime import date, datetime, time
from typing import Any, Optional

import pandas as pd

from .canonical_fields import LEDGER_COLUMNS, LedgerField, get_field_names

logger = logging.getLogger(__name__)

# H:MM:SS with an optional AM/PM suffix
TIME_PATTERN = re.compile(r"(\d+):(\d+):(\d+)\s?(AM|PM)?", re.IGNORECASE)

DEFAULT_TIME = "00:00:00"


def convert_to_24_hour(hours: int, meridiem: Optional[str]) -> int:
    """
    Convert a 12-hour clock hour to 24-hour.

    PM adds 12 unless the hour is already 12; 12 AM becomes 0.
    Without a suffix the hour is returned unchanged.
    """
    if not meridiem:
        return hours
    meridiem = meridiem.upper()
    if meridiem == "PM" and hours < 12:
        return hours + 12
    if meridiem == "AM" and hours == 12:
        return 0
    return hours


def parse_timestamp(base_date: Any, time_string: str) -> pd.Timestamp:
    """
    Combine a date with a time-of-day string.

    Best effort: when the string does not match H:MM:SS [AM|PM] the date is
    returned with its own time-of-day. Never raises.

    Example:
        >>> parse_timestamp(pd.Timestamp("2024-03-05"), "1:15:00 PM")
        Timestamp('2024-03-05 13:15:00')
    """
    timestamp = pd.Timestamp(base_date)
    match = TIME_PATTERN.search(str(time_string))
    if not match:
        return timestamp

    hours = convert_to_24_hour(int(match.group(1)), match.group(4))
    minutes = int(match.group(2))
    seconds = int(match.group(3))

    try:
        midnight = timestamp.replace(hour=0, minute=0, second=0)
        # Out-of-range parts roll over into the next minute/hour/day
        return midnight + pd.Timedelta(hours=hours, minutes=minutes, seconds=seconds)
    except (OverflowError, ValueError):
        logger.warning(f"[NORMALIZE] Time '{time_string}' is out of range, keeping {timestamp}")
        return timestamp


def format_time_value(value: Any) -> str:
    """
    Render a start/end cell as text for parse_timestamp.

    Spreadsheet time cells arrive as datetime.time (or datetime) objects;
    missing cells default to midnight.
    """
    if _is_missing(value):
        return DEFAULT_TIME
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, datetime):
        return value.strftime("%H:%M:%S")
    text = str(value).strip()
    return text or DEFAULT_TIME


def parse_event_date(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a Date cell into a naive timestamp.

    Returns None when the cell is empty or cannot be read as a date.
    """
    if _is_missing(value):
        return None
    if isinstance(value, (datetime, date)):
        parsed = pd.Timestamp(value)
    elif isinstance(value, str):
        parsed = pd.to_datetime(value.strip(), errors='coerce')
    else:
        return None

    if pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed


def calculate_work_cost(global_amount: Any, hours_worked: Any, hourly_rate: Any) -> float:
    """
    Derive the work cost of one event.

    Rules:
    - the global amount when it is > 0
    - else hours_worked * hourly_rate when hours_worked > 0 and a rate is set
    - else 0
    """
    if global_amount is not None and global_amount > 0:
        return global_amount
    if hours_worked is not None and hours_worked > 0 and hourly_rate:
        return hours_worked * hourly_rate
    return 0


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _cell(value: Any) -> Any:
    """Missing cells become None so they are written back empty."""
    return None if _is_missing(value) else value


def _to_number(value: Any) -> Optional[float]:
    """Numeric value of a cell, None when it is not a number."""
    number = pd.to_numeric(pd.Series([value]), errors="coerce").iloc[0]
    return None if pd.isna(number) else float(number)


def normalize_source_events(
    events: pd.DataFrame,
    source_link: str,
    owner_name: str,
    hourly_rate: Optional[float],
) -> pd.DataFrame:
    """
    Convert one worker's canonical event rows into ledger rows.

    Args:
        events: Output of apply_source_mapping(raw, EVENT_MAPPING)
        source_link: Link of the worker workbook
        owner_name: Worker name from Parameters
        hourly_rate: Hourly cost from Parameters (0/None = unknown)

    Returns:
        DataFrame with LEDGER_COLUMNS, one row per event
    """
    rows = []

    for index, event in events.iterrows():
        raw_date = event[LedgerField.DATE.value]
        raw_from = event[LedgerField.START_TIME.value]
        raw_to = event[LedgerField.END_TIME.value]

        from_timestamp = None
        to_timestamp = None
        hours_worked = None

        parsed_date = parse_event_date(raw_date)
        if parsed_date is not None:
            from_timestamp = parse_timestamp(parsed_date, format_time_value(raw_from))
            to_timestamp = parse_timestamp(parsed_date, format_time_value(raw_to))
            hours_worked = (to_timestamp - from_timestamp).total_seconds() / 3600
        elif not _is_missing(raw_date):
            logger.warning(
                f"[NORMALIZE] {owner_name}: could not parse date {raw_date!r} "
                f"(sheet row {index + 2}); timestamps left empty"
            )

        global_amount = _to_number(event[LedgerField.GLOBAL_AMOUNT.value])

        work_cost = calculate_work_cost(global_amount, hours_worked, hourly_rate)
        travel_cost = _to_number(event[LedgerField.TRAVEL_COST.value]) or 0.0
        total_cost = (work_cost or 0) + travel_cost

        rows.append({
            LedgerField.SOURCE_LINK.value: source_link,
            LedgerField.OWNER_NAME.value: owner_name,
            LedgerField.EVENT_TYPE.value: _cell(event[LedgerField.EVENT_TYPE.value]),
            LedgerField.DATE.value: _cell(raw_date),
            LedgerField.START_TIME.value: _cell(raw_from),
            LedgerField.END_TIME.value: _cell(raw_to),
            LedgerField.GLOBAL_AMOUNT.value: _cell(event[LedgerField.GLOBAL_AMOUNT.value]),
            LedgerField.NOTES.value: _cell(event[LedgerField.NOTES.value]),
            LedgerField.TRAVEL_COST.value: _cell(event[LedgerField.TRAVEL_COST.value]),
            LedgerField.FROM_TIMESTAMP.value: from_timestamp,
            LedgerField.TO_TIMESTAMP.value: to_timestamp,
            LedgerField.HOURS_WORKED.value: hours_worked,
            LedgerField.WORK_COST.value: float(work_cost),
            LedgerField.TOTAL_COST.value: float(total_cost),
        })

    return pd.DataFrame(rows, columns=get_field_names(LEDGER_COLUMNS))
