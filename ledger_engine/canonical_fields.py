"""
Canonical field definitions for the worker ledger.

This module is the single source of truth for the column names of the ledger
and of the two reports. Raw source column names (worker sheets, Parameters,
Payments) should NEVER be referenced outside of mappings.py.

The ledger header text is also its storage contract: the Collector writes the
columns in LEDGER_COLUMNS order and both report jobs read them back.
"""
from enum import Enum
from typing import Iterable, List, Tuple


class LedgerField(str, Enum):
    """
    Canonical ledger column names.

    Inheriting from str makes these usable as dictionary keys and
    compatible with pandas DataFrame column operations.
    """

    # ==================== Provenance ====================
    SOURCE_LINK = "Source Sheet Link"
    """Link to the worker workbook the row was collected from"""

    OWNER_NAME = "Owner Name"
    """Worker the row belongs to"""

    # ==================== Raw Event ====================
    EVENT_TYPE = "Event Type"
    """Free-text kind of work/event"""

    DATE = "Date"
    """Calendar date of the event as entered by the worker"""

    START_TIME = "Start Time"
    """Free-text start time as entered (H:MM:SS [AM|PM])"""

    END_TIME = "End Time"
    """Free-text end time as entered (H:MM:SS [AM|PM])"""

    GLOBAL_AMOUNT = "Global Amount"
    """Fixed amount for the event; overrides the hourly calculation when > 0"""

    NOTES = "Notes"

    TRAVEL_COST = "Travel Cost"
    """Travel reimbursement, always added to the total"""

    # ==================== Derived ====================
    FROM_TIMESTAMP = "From Timestamp"
    """Date combined with the start time"""

    TO_TIMESTAMP = "To Timestamp"
    """Date combined with the end time"""

    HOURS_WORKED = "Time Difference (Hours)"
    """To - From in hours; negative when the end precedes the start"""

    WORK_COST = "Work Cost"
    """Global amount, or hours * hourly rate"""

    TOTAL_COST = "Total Cost"
    """Work cost + travel cost"""


class ReportCategory(str, Enum):
    """Row categories of the monthly reconciliation report, in output order."""
    DESERVES = "Deserves"
    GOT = "Got"
    DIFFERENCE = "Difference"


# Exact column order of the ledger sheet
LEDGER_COLUMNS: Tuple[LedgerField, ...] = (
    LedgerField.SOURCE_LINK,
    LedgerField.OWNER_NAME,
    LedgerField.EVENT_TYPE,
    LedgerField.DATE,
    LedgerField.START_TIME,
    LedgerField.END_TIME,
    LedgerField.GLOBAL_AMOUNT,
    LedgerField.NOTES,
    LedgerField.TRAVEL_COST,
    LedgerField.FROM_TIMESTAMP,
    LedgerField.TO_TIMESTAMP,
    LedgerField.HOURS_WORKED,
    LedgerField.WORK_COST,
    LedgerField.TOTAL_COST,
)

TIMESTAMP_FIELDS: Tuple[LedgerField, ...] = (
    LedgerField.FROM_TIMESTAMP,
    LedgerField.TO_TIMESTAMP,
)

# Report headers
MONTHLY_REPORT_PREFIX = ["Owner Name", "Category"]
SUMMARY_HEADER = ["Month and Year", "Total Cost", "Number of Days"]


def get_field_names(fields: Iterable[LedgerField]) -> List[str]:
    """Convert LedgerField enums to their column names, preserving order."""
    return [f.value for f in fields]


class SourceSpecField(str, Enum):
    """Canonical fields of a worker registry (Parameters) row."""
    SOURCE_LINK = "source_link"
    OWNER_NAME = "owner_name"
    HOURLY_RATE = "hourly_rate"
    HIDE_IN_MONTHLY = "hide_in_monthly"


class PaymentField(str, Enum):
    """Canonical fields of a payments ledger row."""
    EMPLOYEE_NAME = "employee_name"
    PAYMENT_MONTH = "payment_month"
    PAYMENT_YEAR = "payment_year"
    AMOUNT = "amount"
