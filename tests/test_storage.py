"""Tests for sheet replacement in local and remote workbooks."""

import io
from datetime import datetime
from unittest.mock import Mock, patch

import numpy as np
import pandas as pd
import pytest
from openpyxl import Workbook, load_workbook

from config import RemoteConfig
from ledger_engine.exceptions import DestinationWriteError
from storage.service import WorkbookStore, dataframe_rows, to_cell_value

ROWS = [["Month and Year", "Total Cost", "Number of Days"], ["3/2024", 25.0, 1]]


def _values(path, sheet):
    return [list(row) for row in load_workbook(path)[sheet].iter_rows(values_only=True)]


class TestToCellValue:
    def test_missing_values(self):
        assert to_cell_value(None) is None
        assert to_cell_value(np.nan) is None
        assert to_cell_value(pd.NaT) is None

    def test_timestamp(self):
        value = to_cell_value(pd.Timestamp("2024-03-05 09:00"))
        assert type(value) is datetime
        assert value == datetime(2024, 3, 5, 9, 0)

    def test_numpy_scalars(self):
        assert type(to_cell_value(np.int64(3))) is int
        assert type(to_cell_value(np.float64(2.5))) is float

    def test_plain_values_unchanged(self):
        assert to_cell_value("Ana") == "Ana"
        assert to_cell_value(4) == 4


def test_dataframe_rows():
    df = pd.DataFrame({"a": [1, None], "b": ["x", "y"]})
    assert dataframe_rows(df) == [["a", "b"], [1.0, "x"], [None, "y"]]


class TestLocalReplace:
    def test_replaces_existing_sheet_in_place(self, make_workbook):
        path = make_workbook("ana.xlsx", {
            "Data": [["keep"]],
            "Summary": [["old header"], ["a"], ["b"], ["c"]],
            "Notes": [["keep too"]],
        })

        written = WorkbookStore().replace_sheet(str(path), "Summary", ROWS)

        assert written == 2
        assert _values(path, "Summary") == ROWS
        assert load_workbook(path).sheetnames == ["Data", "Summary", "Notes"]
        assert _values(path, "Data") == [["keep"]]

    def test_creates_missing_sheet(self, make_workbook):
        path = make_workbook("ana.xlsx", {"Data": [["keep"]]})

        WorkbookStore().replace_sheet(str(path), "Summary", ROWS)

        assert load_workbook(path).sheetnames == ["Data", "Summary"]
        assert _values(path, "Summary") == ROWS

    def test_bold_rows(self, make_workbook):
        path = make_workbook("ledger.xlsx", {"Monthly": []})
        rows = [["Owner Name", "Category"], ["Ben", "Deserves"], ["Ben", "Got"], ["Ben", "Difference"]]

        WorkbookStore().replace_sheet(str(path), "Monthly", rows, bold_rows=[3])

        sheet = load_workbook(path)["Monthly"]
        assert all(cell.font.bold for cell in sheet[4])
        assert not any(cell.font.bold for cell in sheet[2])

    def test_no_temp_files_left(self, tmp_path, make_workbook):
        path = make_workbook("ana.xlsx", {"Data": [["keep"]]})

        WorkbookStore().replace_sheet(str(path), "Summary", ROWS)

        assert [p.name for p in tmp_path.iterdir()] == ["ana.xlsx"]

    def test_missing_workbook(self, tmp_path):
        with pytest.raises(DestinationWriteError):
            WorkbookStore().replace_sheet(str(tmp_path / "nope.xlsx"), "Summary", ROWS)

    def test_replace_dataframe(self, make_workbook):
        path = make_workbook("ledger.xlsx", {"Data": [["stale"]]})
        df = pd.DataFrame({"Owner Name": ["Ana"], "From Timestamp": [pd.Timestamp("2024-03-05 09:00")]})

        WorkbookStore().replace_dataframe(str(path), "Data", df)

        assert _values(path, "Data") == [["Owner Name", "From Timestamp"], ["Ana", datetime(2024, 3, 5, 9, 0)]]


def _workbook_bytes(sheets):
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(name)
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestRemoteReplace:
    URL = "https://files.example.com/ana.xlsx"

    def test_downloads_and_puts_back(self):
        content = _workbook_bytes({"Data": [["keep"]], "Summary": [["old"]]})
        store = WorkbookStore(RemoteConfig(access_token="secret", timeout=5))

        with patch("requests.get", return_value=Mock(status_code=200, content=content)) as get, \
                patch("requests.put", return_value=Mock(status_code=201)) as put:
            store.replace_sheet(self.URL, "Summary", ROWS)

        get.assert_called_once()
        assert get.call_args.kwargs["headers"] == {"Authorization": "Bearer secret"}
        put.assert_called_once()
        args, kwargs = put.call_args
        assert args[0] == self.URL
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 5

        uploaded = load_workbook(io.BytesIO(kwargs["data"]))
        assert uploaded.sheetnames == ["Data", "Summary"]
        assert [list(r) for r in uploaded["Summary"].iter_rows(values_only=True)] == ROWS

    def test_upload_failure(self):
        content = _workbook_bytes({"Data": [["keep"]]})
        store = WorkbookStore(RemoteConfig(access_token=None))

        with patch("requests.get", return_value=Mock(status_code=200, content=content)), \
                patch("requests.put", return_value=Mock(status_code=500, text="boom")):
            with pytest.raises(DestinationWriteError, match="HTTP 500"):
                store.replace_sheet(self.URL, "Summary", ROWS)
