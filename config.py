"""
Centralized configuration for the worker ledger jobs.
All sheet names, required columns and remote access settings are defined here.
"""
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path
import os


@dataclass
class ColumnMapping:
    """Maps required columns for a data source."""
    required_columns: List[str]
    optional_columns: List[str] = field(default_factory=list)

    def validate(self, columns: List[str]) -> tuple[bool, List[str]]:
        """Check if all required columns are present."""
        missing = [col for col in self.required_columns if col not in columns]
        return len(missing) == 0, missing


@dataclass
class SheetNames:
    """Sheet (tab) names inside the main workbook and the worker workbooks."""
    parameters: str = "Parameters"
    data: str = "Data"
    payments: str = "Payments"
    monthly: str = "Monthly"

    # Sheets inside each worker's own workbook
    source_data: str = "Data"
    summary: str = "Summary"


@dataclass
class RemoteConfig:
    """Access settings for workbooks addressed by an http(s) link."""
    access_token: Optional[str] = field(default_factory=lambda: os.getenv('LEDGER_REMOTE_TOKEN'))
    timeout: float = field(default_factory=lambda: float(os.getenv('LEDGER_REMOTE_TIMEOUT', '30')))

    def auth_headers(self) -> dict:
        if self.access_token:
            return {'Authorization': f'Bearer {self.access_token}'}
        return {}


@dataclass
class LedgerConfig:
    """Main configuration container."""
    # Workbook holding Parameters, Data, Payments and Monthly
    workbook_path: Path = field(default_factory=lambda: Path(os.getenv('LEDGER_WORKBOOK', 'instance/ledger.xlsx')))

    log_level: str = field(default_factory=lambda: os.getenv('LEDGER_LOG_LEVEL', 'INFO').upper())

    sheets: SheetNames = field(default_factory=SheetNames)

    remote: RemoteConfig = field(default_factory=RemoteConfig)

    # Ledger columns the monthly reconciliation aggregates on
    monthly_ledger_columns: ColumnMapping = field(default_factory=lambda: ColumnMapping(
        required_columns=["From Timestamp", "Owner Name", "Total Cost"]
    ))

    # Ledger columns the per-worker summaries aggregate on
    summary_ledger_columns: ColumnMapping = field(default_factory=lambda: ColumnMapping(
        required_columns=["Owner Name", "Source Sheet Link", "Date", "Total Cost"]
    ))


# Global configuration instance
config = LedgerConfig()
