"""Pytest configuration and fixtures."""

import os
from datetime import datetime, time
from pathlib import Path
from typing import Any, Dict, List

import pytest
from openpyxl import Workbook

# Keep remote settings from the environment out of the tests
os.environ.pop("LEDGER_REMOTE_TOKEN", None)

from config import LedgerConfig  # noqa: E402


def write_workbook(path: Path, sheets: Dict[str, List[List[Any]]]) -> Path:
    """Create an .xlsx file with one sheet per entry, rows written as given."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(name)
        for row in rows:
            sheet.append(row)
    workbook.save(path)
    return path


@pytest.fixture
def make_workbook(tmp_path):
    """Factory fixture: make_workbook("name.xlsx", {"Sheet": rows})."""
    def _make(name: str, sheets: Dict[str, List[List[Any]]]) -> Path:
        return write_workbook(tmp_path / name, sheets)
    return _make


@pytest.fixture
def event_header():
    return ["Event Type", "Date", "Start Time", "End Time", "Global Amount", "Notes", "Travel Cost"]


@pytest.fixture
def parameters_header():
    return [
        "Source Sheet Link", "Email", "Full Name", "Role", "Phone", "Start Date", "Notes",
        "Hourly Cost", "Hide in Monthly Report",
    ]


@pytest.fixture
def ana_workbook(make_workbook, event_header):
    """Worker workbook: two sessions on 2024-03-05 and one in April."""
    return make_workbook("ana.xlsx", {
        "Data": [
            event_header,
            ["Shift", datetime(2024, 3, 5), "9:00:00 AM", "10:00:00 AM", None, "morning", None],
            ["Shift", datetime(2024, 3, 5), "1:00:00 PM", "1:30:00 PM", None, None, 5],
            ["Visit", datetime(2024, 4, 2), time(8, 0), time(9, 0), 40, None, None],
        ],
    })


@pytest.fixture
def ben_workbook(make_workbook, event_header):
    """Worker workbook: one fixed-amount event in February 2024."""
    return make_workbook("ben.xlsx", {
        "Data": [
            event_header,
            ["Install", datetime(2024, 2, 10), "8:00:00 AM", "12:00:00 PM", 100, None, None],
        ],
    })


@pytest.fixture
def test_config(tmp_path):
    cfg = LedgerConfig()
    cfg.workbook_path = tmp_path / "ledger.xlsx"
    cfg.remote.access_token = None
    return cfg
