"""
Source-to-canonical field mappings for the worker ledger.

This module is the ONLY place where raw source column names should appear
(apart from the strict column lists in config.py). All other modules use the
canonical enums from canonical_fields.py.

Mappings define how to turn a raw sheet into canonical columns:
1. Header lookup, with aliases
2. Positional fallback for sheets laid out without recognizable headers
3. Value transformations
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple
import numpy as np
import pandas as pd

from .canonical_fields import LedgerField, PaymentField, SourceSpecField
from .exceptions import SchemaError
from .periods import payment_month_number, payment_year_number


# ==================== Raw Source Column Names ====================

class EventSourceColumns:
    """Raw column names of the Data sheet inside each worker workbook."""
    EVENT_TYPE = "Event Type"
    DATE = "Date"
    START_TIME = "Start Time"
    FROM = "From"
    FROM_HOUR = "From Hour"
    END_TIME = "End Time"
    TO = "To"
    TO_HOUR = "To Hour"
    GLOBAL_AMOUNT = "Global Amount"
    NOTES = "Notes"
    TRAVEL_COST = "Travel Cost"
    TRAVEL = "Travel"


class ParameterColumns:
    """Raw column names of the Parameters (worker registry) sheet."""
    SOURCE_SHEET_LINK = "Source Sheet Link"
    FULL_NAME = "Full Name"
    OWNER_NAME = "Owner Name"
    HOURLY_COST = "Hourly Cost"
    HIDE_IN_MONTHLY_REPORT = "Hide in Monthly Report"


class PaymentColumns:
    """Raw column names of the Payments sheet."""
    EMPLOYEE_NAME = "Employee Name"
    PAYMENT_MONTH = "Payment Month"
    PAYMENT_YEAR = "Payment Year"
    AMOUNT = "Amount"


# ==================== Source Mapping Configuration ====================

class PositionalFallback(str, Enum):
    """How a mapping treats columns whose header is not recognized."""
    NONE = "none"
    """Header lookup only; unresolved required columns raise SchemaError"""

    TABLE = "table"
    """Use positions for every column when no header at all is recognized"""

    COLUMN = "column"
    """Use the position of each individual column whose header is not found"""


@dataclass
class ColumnTransform:
    """Defines a transformation for a single column."""
    source_column: str
    canonical_field: Enum
    aliases: Tuple[str, ...] = ()
    position: Optional[int] = None
    transform_func: Optional[Callable[[pd.Series], pd.Series]] = None

    def resolve(self, df: pd.DataFrame) -> Optional[str]:
        """Return the header under which this column appears, if any."""
        headers = {_clean_header(col): col for col in df.columns}
        for name in (self.source_column,) + self.aliases:
            if name in headers:
                return headers[name]
        return None

    def apply(self, df: pd.DataFrame, use_position: bool = False) -> pd.Series:
        """Extract and transform this column from source data."""
        if use_position:
            if self.position is not None and self.position < len(df.columns):
                series = df.iloc[:, self.position]
            else:
                series = pd.Series([None] * len(df), index=df.index, dtype=object)
        else:
            header = self.resolve(df)
            if header is None:
                raise ValueError(f"Source column '{self.source_column}' not found in DataFrame")
            series = df[header]

        if self.transform_func is not None:
            return self.transform_func(series)

        return series


@dataclass
class SourceMapping:
    """
    Complete mapping configuration for a raw sheet.

    Example:
        >>> canonical = apply_source_mapping(raw_df, PAYMENTS_MAPPING)
        >>> canonical[PaymentField.AMOUNT.value].sum()
    """

    name: str
    """Source name used in error messages"""

    column_transforms: List[ColumnTransform]

    required_fields: List[Enum] = field(default_factory=list)
    """Canonical fields that must be resolvable by header"""

    fallback: PositionalFallback = PositionalFallback.NONE

    row_filter: Optional[Callable[[pd.DataFrame], pd.DataFrame]] = None
    """Optional function applied to the canonical rows"""


def _clean_header(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


# ==================== Value transforms ====================

def _to_amount(series: pd.Series) -> pd.Series:
    """Parse numbers, treating anything unparseable as 0."""
    return pd.to_numeric(series, errors='coerce').fillna(0.0).astype('float64')


def _to_text(series: pd.Series) -> pd.Series:
    """Strip text cells; missing cells become empty strings."""
    return series.map(lambda v: "" if v is None or (not isinstance(v, str) and pd.isna(v)) else str(v).strip())


def is_hidden_flag(value: Any) -> bool:
    """A worker is hidden when the cell is boolean true or the text "TRUE"."""
    if isinstance(value, str):
        return value.strip() == "TRUE"
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    return False


def _to_hidden_flag(series: pd.Series) -> pd.Series:
    return series.map(is_hidden_flag).astype(bool)


def _to_month_number(series: pd.Series) -> pd.Series:
    return series.map(payment_month_number).astype('Int64')


def _to_year_number(series: pd.Series) -> pd.Series:
    return series.map(payment_year_number).astype('Int64')


def _drop_blank_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows where every cell is empty."""
    if df.empty:
        return df
    blank = df.apply(
        lambda col: col.map(lambda v: v is None or (isinstance(v, str) and not v.strip()) or (not isinstance(v, str) and pd.isna(v)))
    ).all(axis=1)
    return df[~blank]


def _drop_unnamed_payments(df: pd.DataFrame) -> pd.DataFrame:
    return df[df[PaymentField.EMPLOYEE_NAME.value] != ""]


# ==================== Worker Data sheet ====================

EVENT_MAPPING = SourceMapping(
    name="worker data",
    column_transforms=[
        ColumnTransform(EventSourceColumns.EVENT_TYPE, LedgerField.EVENT_TYPE, position=0),
        ColumnTransform(EventSourceColumns.DATE, LedgerField.DATE, position=1),
        ColumnTransform(
            EventSourceColumns.START_TIME, LedgerField.START_TIME,
            aliases=(EventSourceColumns.FROM, EventSourceColumns.FROM_HOUR), position=2
        ),
        ColumnTransform(
            EventSourceColumns.END_TIME, LedgerField.END_TIME,
            aliases=(EventSourceColumns.TO, EventSourceColumns.TO_HOUR), position=3
        ),
        ColumnTransform(EventSourceColumns.GLOBAL_AMOUNT, LedgerField.GLOBAL_AMOUNT, position=4),
        ColumnTransform(EventSourceColumns.NOTES, LedgerField.NOTES, position=5),
        ColumnTransform(
            EventSourceColumns.TRAVEL_COST, LedgerField.TRAVEL_COST,
            aliases=(EventSourceColumns.TRAVEL,), position=6
        ),
    ],
    fallback=PositionalFallback.TABLE,
    row_filter=_drop_blank_rows,
)


# ==================== Parameters sheet ====================

PARAMETERS_MAPPING = SourceMapping(
    name="Parameters",
    column_transforms=[
        ColumnTransform(
            ParameterColumns.SOURCE_SHEET_LINK, SourceSpecField.SOURCE_LINK,
            position=0, transform_func=_to_text
        ),
        ColumnTransform(
            ParameterColumns.FULL_NAME, SourceSpecField.OWNER_NAME,
            aliases=(ParameterColumns.OWNER_NAME,), position=2, transform_func=_to_text
        ),
        # Column 8 of the sheet
        ColumnTransform(
            ParameterColumns.HOURLY_COST, SourceSpecField.HOURLY_RATE,
            position=7, transform_func=_to_amount
        ),
        ColumnTransform(
            ParameterColumns.HIDE_IN_MONTHLY_REPORT, SourceSpecField.HIDE_IN_MONTHLY,
            transform_func=_to_hidden_flag
        ),
    ],
    fallback=PositionalFallback.COLUMN,
)

# Strict variant used by the monthly reconciliation: headers only
PARAMETERS_STRICT_MAPPING = SourceMapping(
    name="Parameters",
    column_transforms=[
        ColumnTransform(
            ParameterColumns.FULL_NAME, SourceSpecField.OWNER_NAME,
            aliases=(ParameterColumns.OWNER_NAME,), transform_func=_to_text
        ),
        ColumnTransform(
            ParameterColumns.HIDE_IN_MONTHLY_REPORT, SourceSpecField.HIDE_IN_MONTHLY,
            transform_func=_to_hidden_flag
        ),
    ],
    required_fields=[SourceSpecField.OWNER_NAME, SourceSpecField.HIDE_IN_MONTHLY],
)


# ==================== Payments sheet ====================

PAYMENTS_MAPPING = SourceMapping(
    name="Payments",
    column_transforms=[
        ColumnTransform(PaymentColumns.EMPLOYEE_NAME, PaymentField.EMPLOYEE_NAME, transform_func=_to_text),
        ColumnTransform(PaymentColumns.PAYMENT_MONTH, PaymentField.PAYMENT_MONTH, transform_func=_to_month_number),
        ColumnTransform(PaymentColumns.PAYMENT_YEAR, PaymentField.PAYMENT_YEAR, transform_func=_to_year_number),
        ColumnTransform(PaymentColumns.AMOUNT, PaymentField.AMOUNT, transform_func=_to_amount),
    ],
    required_fields=[
        PaymentField.EMPLOYEE_NAME,
        PaymentField.PAYMENT_MONTH,
        PaymentField.PAYMENT_YEAR,
        PaymentField.AMOUNT,
    ],
    row_filter=_drop_unnamed_payments,
)


def apply_source_mapping(df: pd.DataFrame, mapping: SourceMapping) -> pd.DataFrame:
    """
    Apply a source mapping to transform a raw sheet to canonical columns.

    Process:
    1. Resolve each column by header (or alias)
    2. Raise SchemaError for unresolved required columns
    3. Fall back to positions where the mapping allows it
    4. Apply column transformations, then the row filter

    The source index is preserved so callers can report sheet row numbers.

    Args:
        df: Raw sheet DataFrame (first row used as header)
        mapping: SourceMapping configuration

    Returns:
        DataFrame with canonical column names only
    """
    resolved = {t.canonical_field: t.resolve(df) for t in mapping.column_transforms}

    missing = [
        t.source_column for t in mapping.column_transforms
        if t.canonical_field in mapping.required_fields and resolved[t.canonical_field] is None
    ]
    if missing:
        raise SchemaError(mapping.name, missing, [str(c) for c in df.columns])

    table_positional = (
        mapping.fallback == PositionalFallback.TABLE
        and all(header is None for header in resolved.values())
    )

    result_data = {}
    for transform in mapping.column_transforms:
        found = resolved[transform.canonical_field] is not None
        if table_positional:
            use_position = True
        elif found:
            use_position = False
        elif mapping.fallback == PositionalFallback.COLUMN and transform.position is not None:
            use_position = True
        else:
            # Optional column absent from this sheet
            empty = pd.Series([None] * len(df), index=df.index, dtype=object)
            result_data[transform.canonical_field.value] = (
                transform.transform_func(empty) if transform.transform_func else empty
            )
            continue

        try:
            result_data[transform.canonical_field.value] = transform.apply(df, use_position=use_position)
        except Exception as e:
            raise ValueError(
                f"Error transforming column '{transform.source_column}' -> "
                f"'{transform.canonical_field.value}' in {mapping.name}: {e}"
            )

    result_df = pd.DataFrame(result_data, index=df.index)

    if mapping.row_filter is not None:
        result_df = mapping.row_filter(result_df)

    return result_df
