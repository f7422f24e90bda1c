"""Tests for workbook loading."""

from unittest.mock import Mock, patch

import pytest
import requests

from config import RemoteConfig
from ledger_engine.exceptions import SheetNotFoundError, SourceUnavailableError
from ledger_engine.io import WorkbookLoader, is_remote_link


def test_is_remote_link():
    assert is_remote_link("https://example.com/a.xlsx")
    assert is_remote_link("HTTP://example.com/a.xlsx")
    assert not is_remote_link("/data/a.xlsx")


def test_load_sheet(ana_workbook):
    df = WorkbookLoader().load_sheet(str(ana_workbook), "Data")
    assert list(df.columns)[:3] == ["Event Type", "Date", "Start Time"]
    assert len(df) == 3


def test_missing_sheet(ana_workbook):
    with pytest.raises(SheetNotFoundError) as excinfo:
        WorkbookLoader().load_sheet(str(ana_workbook), "Payments")
    assert excinfo.value.sheet_name == "Payments"


def test_missing_workbook(tmp_path):
    with pytest.raises(SourceUnavailableError):
        WorkbookLoader().load_sheet(str(tmp_path / "nope.xlsx"), "Data")


def test_remote_http_error():
    loader = WorkbookLoader(RemoteConfig(access_token=None))
    with patch("requests.get", return_value=Mock(status_code=404, text="not found")):
        with pytest.raises(SourceUnavailableError, match="HTTP 404"):
            loader.load_sheet("https://example.com/a.xlsx", "Data")


def test_remote_connection_error():
    loader = WorkbookLoader(RemoteConfig(access_token=None))
    with patch("requests.get", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(SourceUnavailableError, match="refused"):
            loader.fetch_bytes("https://example.com/a.xlsx")


def test_remote_sends_bearer_token():
    loader = WorkbookLoader(RemoteConfig(access_token="tok", timeout=3))
    with patch("requests.get", return_value=Mock(status_code=200, content=b"xlsx")) as get:
        assert loader.fetch_bytes("https://example.com/a.xlsx") == b"xlsx"
    get.assert_called_once_with(
        "https://example.com/a.xlsx", headers={"Authorization": "Bearer tok"}, timeout=3
    )
