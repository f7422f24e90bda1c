"""
Ledger Engine - timesheet consolidation and payment reconciliation.

The scheduled entry points live in ledger_engine.jobs.
"""
from .canonical_fields import LedgerField, ReportCategory, LEDGER_COLUMNS
from .normalize import parse_timestamp, convert_to_24_hour, calculate_work_cost, normalize_source_events
from .io import WorkbookLoader
from .collect import collect_ledger, sort_ledger, load_source_specs
from .reconcile import MonthlyReport, build_monthly_report, reconcile_owner_months
from .summary import OwnerSummary, build_owner_summaries
from .schemas import validate_columns, enforce_ledger_dtypes
from .exceptions import LedgerError, SchemaError, SheetNotFoundError

__all__ = [
    "LedgerField",
    "ReportCategory",
    "LEDGER_COLUMNS",
    "parse_timestamp",
    "convert_to_24_hour",
    "calculate_work_cost",
    "normalize_source_events",
    "WorkbookLoader",
    "collect_ledger",
    "sort_ledger",
    "load_source_specs",
    "MonthlyReport",
    "build_monthly_report",
    "reconcile_owner_months",
    "OwnerSummary",
    "build_owner_summaries",
    "validate_columns",
    "enforce_ledger_dtypes",
    "LedgerError",
    "SchemaError",
    "SheetNotFoundError",
]
