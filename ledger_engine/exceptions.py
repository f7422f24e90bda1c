"""
Exception types raised by the ledger engine.
"""
from typing import List, Optional


class LedgerError(Exception):
    """Base class for ledger engine errors."""


class SchemaError(LedgerError, ValueError):
    """A table is missing columns required to process it."""

    def __init__(self, table: str, missing: List[str], available: Optional[List[str]] = None):
        self.table = table
        self.missing = list(missing)
        self.available = list(available or [])
        super().__init__(
            f"{table} is missing required columns: {self.missing}. "
            f"Available columns: {self.available}"
        )


class SheetNotFoundError(LedgerError):
    """The workbook exists but does not contain the expected sheet."""

    def __init__(self, link: str, sheet_name: str):
        self.link = link
        self.sheet_name = sheet_name
        super().__init__(f"No '{sheet_name}' sheet found in {link}")


class SourceUnavailableError(LedgerError):
    """A workbook could not be opened or downloaded."""


class DestinationWriteError(LedgerError):
    """A sheet could not be written back to its workbook."""
