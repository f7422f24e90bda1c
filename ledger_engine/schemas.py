"""
Schema validation for the tables the jobs read.

The ledger sheet is read back by both report jobs; these helpers check its
header and coerce the columns they aggregate on.
"""
import pandas as pd

from config import ColumnMapping
from .canonical_fields import LEDGER_COLUMNS, TIMESTAMP_FIELDS, LedgerField, get_field_names
from .exceptions import SchemaError


def validate_columns(df: pd.DataFrame, mapping: ColumnMapping, table_name: str) -> None:
    """
    Validate that a DataFrame contains every required column.

    Args:
        df: DataFrame read from a sheet
        mapping: ColumnMapping listing the required header names
        table_name: Name of the table for error messages

    Raises:
        SchemaError: If any required column is missing

    Example:
        >>> validate_columns(ledger_df, config.monthly_ledger_columns, "Data")
    """
    columns = [_header_text(c) for c in df.columns]
    is_valid, missing = mapping.validate(columns)
    if not is_valid:
        raise SchemaError(table_name, missing, columns)


def strip_headers(df: pd.DataFrame) -> pd.DataFrame:
    """Trim whitespace around header text so lookups by name succeed."""
    return df.rename(columns=_header_text)


def _header_text(value):
    return value.strip() if isinstance(value, str) else value


def enforce_ledger_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce a ledger read back from its sheet.

    - timestamps -> datetime64 (unparseable -> NaT)
    - Total Cost -> float, unparseable -> 0
    - Owner Name / Source Sheet Link -> stripped text, missing -> ""
    """
    df = df.copy()

    for field in TIMESTAMP_FIELDS:
        if field.value in df.columns:
            df[field.value] = pd.to_datetime(df[field.value], errors='coerce')

    if LedgerField.TOTAL_COST.value in df.columns:
        df[LedgerField.TOTAL_COST.value] = (
            pd.to_numeric(df[LedgerField.TOTAL_COST.value], errors='coerce').fillna(0.0).astype('float64')
        )

    for field in (LedgerField.OWNER_NAME, LedgerField.SOURCE_LINK):
        if field.value in df.columns:
            df[field.value] = df[field.value].map(
                lambda v: "" if v is None or (not isinstance(v, str) and pd.isna(v)) else str(v).strip()
            )

    return df


def empty_ledger() -> pd.DataFrame:
    """Create an empty DataFrame with the ledger columns."""
    return pd.DataFrame(columns=get_field_names(LEDGER_COLUMNS))
