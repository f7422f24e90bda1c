"""Tests for the monthly reconciliation."""

import pandas as pd
import pytest

from config import LedgerConfig
from ledger_engine.canonical_fields import ReportCategory
from ledger_engine.exceptions import SchemaError
from ledger_engine.reconcile import build_monthly_report

LEDGER_COLUMNS = LedgerConfig().monthly_ledger_columns


def _parameters(rows):
    return pd.DataFrame(rows, columns=["Source Sheet Link", "Full Name", "Hide in Monthly Report"])


def _ledger(rows):
    return pd.DataFrame(rows, columns=["From Timestamp", "Owner Name", "Total Cost"])


def _payments(rows):
    return pd.DataFrame(rows, columns=["Employee Name", "Payment Month", "Payment Year", "Amount"])


@pytest.fixture
def report():
    parameters = _parameters([
        ["ben.xlsx", "Ben", False],
        ["zed.xlsx", "Zed", "TRUE"],
        ["ana.xlsx", "Ana", False],
    ])
    ledger = _ledger([
        [pd.Timestamp("2024-02-10 08:00"), "Ben", 100],
        [pd.Timestamp("2024-01-03 09:00"), "Ana", 30],
        [pd.Timestamp("2023-12-01 09:00"), "Zed", 999],
        [None, "Ana", 5],
    ])
    payments = _payments([
        ["Ben", 2, 2024, 60],
        ["Ana", "Jan", 2024, 30],
        ["Ben", 5, 2024, 10],
        ["Zed", 12, 2023, 500],
    ])
    return build_monthly_report(parameters, ledger, payments, LEDGER_COLUMNS)


class TestMonthlyReport:
    def test_deserves_got_difference(self, report):
        assert report.value("Ben", ReportCategory.DESERVES, "2/2024") == 100
        assert report.value("Ben", ReportCategory.GOT, "2/2024") == 60
        assert report.value("Ben", ReportCategory.DIFFERENCE, "2/2024") == 40

    def test_missing_combinations_are_zero(self, report):
        assert report.value("Ben", ReportCategory.DESERVES, "1/2024") == 0
        assert report.value("Ben", ReportCategory.GOT, "1/2024") == 0
        assert report.value("Ana", ReportCategory.DESERVES, "2/2024") == 0

    def test_difference_is_deserves_minus_got(self, report):
        for owner in report.owners:
            for month in report.months:
                deserves = report.value(owner, ReportCategory.DESERVES, month)
                got = report.value(owner, ReportCategory.GOT, month)
                assert report.value(owner, ReportCategory.DIFFERENCE, month) == deserves - got

    def test_hidden_owner_excluded_from_rows_and_months(self, report):
        assert report.owners == ["Ana", "Ben"]
        assert "12/2023" not in report.months

    def test_payments_outside_ledger_months_ignored(self, report):
        assert "5/2024" not in report.months

    def test_layout(self, report):
        rows = report.to_rows()

        assert rows[0] == ["Owner Name", "Category", "1/2024", "2/2024"]
        assert rows[1] == ["Ana", "Deserves", 30.0, 0.0]
        assert rows[2] == ["Ana", "Got", 30.0, 0.0]
        assert rows[3] == ["Ana", "Difference", 0.0, 0.0]
        assert [r[1] for r in rows[4:]] == ["Deserves", "Got", "Difference"]
        assert report.difference_rows == [3, 6]

    def test_to_dataframe(self, report):
        df = report.to_dataframe()
        assert list(df.columns) == ["Owner Name", "Category", "1/2024", "2/2024"]
        assert len(df) == 6


def test_month_columns_are_chronological():
    ledger = _ledger([
        [pd.Timestamp("2023-10-01"), "Ana", 1],
        [pd.Timestamp("2024-02-01"), "Ana", 1],
        [pd.Timestamp("2023-09-15"), "Ana", 1],
    ])

    report = build_monthly_report(
        _parameters([["ana.xlsx", "Ana", False]]), ledger, _payments([]), LEDGER_COLUMNS
    )

    assert report.months == ["9/2023", "10/2023", "2/2024"]


def test_amounts_summed_per_month():
    ledger = _ledger([
        [pd.Timestamp("2024-03-01"), "Ana", 10],
        [pd.Timestamp("2024-03-20"), "Ana", 15.5],
    ])
    payments = _payments([["Ana", 3, 2024, 5], ["Ana", 3, 2024, 7]])

    report = build_monthly_report(_parameters([]), ledger, payments, LEDGER_COLUMNS)

    assert report.value("Ana", ReportCategory.DESERVES, "3/2024") == pytest.approx(25.5)
    assert report.value("Ana", ReportCategory.GOT, "3/2024") == pytest.approx(12)


def test_empty_ledger():
    report = build_monthly_report(_parameters([]), _ledger([]), _payments([]), LEDGER_COLUMNS)

    assert report.to_rows() == [["Owner Name", "Category"]]
    assert report.difference_rows == []


class TestStrictSchema:
    def test_ledger_missing_total_cost(self):
        ledger = pd.DataFrame({"From Timestamp": [], "Owner Name": []})

        with pytest.raises(SchemaError) as excinfo:
            build_monthly_report(_parameters([]), ledger, _payments([]), LEDGER_COLUMNS)

        assert excinfo.value.missing == ["Total Cost"]

    def test_payments_missing_amount(self):
        payments = pd.DataFrame({"Employee Name": [], "Payment Month": [], "Payment Year": []})

        with pytest.raises(SchemaError):
            build_monthly_report(_parameters([]), _ledger([]), payments, LEDGER_COLUMNS)

    def test_parameters_missing_hide_flag(self):
        parameters = pd.DataFrame({"Full Name": ["Ana"]})

        with pytest.raises(SchemaError):
            build_monthly_report(parameters, _ledger([]), _payments([]), LEDGER_COLUMNS)
