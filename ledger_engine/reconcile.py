"""
Monthly reconciliation - what each worker deserves vs. what they got.

Accrued cost comes from the ledger (Total Cost, bucketed by the month of
From Timestamp); paid amounts come from the Payments sheet. Both are summed
per (owner, month-key) and laid out as three rows per owner:
Deserves, Got, Difference.

Unlike the Collector this step is strict: a missing column in any of its
three inputs raises SchemaError and nothing is written.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Set
import pandas as pd

from config import ColumnMapping
from .canonical_fields import (
    MONTHLY_REPORT_PREFIX,
    LedgerField,
    PaymentField,
    ReportCategory,
    SourceSpecField,
)
from .mappings import PARAMETERS_STRICT_MAPPING, PAYMENTS_MAPPING, apply_source_mapping
from .periods import month_key, month_key_from_parts, sort_month_keys
from .schemas import enforce_ledger_dtypes, strip_headers, validate_columns

logger = logging.getLogger(__name__)

OWNER = "owner"
MONTH_KEY = "month_key"


@dataclass
class MonthlyReport:
    """
    Monthly reconciliation laid out for the report sheet.

    Attributes:
        months: Month-key columns in chronological order
        owners: Owners in lexicographic order
        rows: Data rows, three per owner
        difference_rows: 0-based indexes of the Difference rows in to_rows()
    """
    months: List[str]
    owners: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    difference_rows: List[int] = field(default_factory=list)

    @property
    def header(self) -> List[str]:
        return MONTHLY_REPORT_PREFIX + self.months

    def to_rows(self) -> List[List[Any]]:
        """Header plus data rows, as written to the sheet."""
        return [self.header] + self.rows

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=self.header)

    def value(self, owner: str, category: ReportCategory, month: str) -> Any:
        """Look up one cell, e.g. report.value("Ben", ReportCategory.GOT, "2/2024")."""
        column = self.header.index(month)
        for row in self.rows:
            if row[0] == owner and row[1] == category.value:
                return row[column]
        raise KeyError(f"No {category.value} row for {owner}")


@dataclass
class OwnerMonthAggregates:
    """Deserves/Got/Difference per (owner, month-key)."""
    owners: List[str]
    """Visible owners, sorted lexicographically"""

    months: List[str]
    """Month-keys seen in the ledger, sorted chronologically"""

    totals: pd.DataFrame

    def cell(self, owner: str, month: str, category: ReportCategory) -> float:
        return float(self.totals.loc[(owner, month), category.value])


def find_hidden_owners(specs: pd.DataFrame) -> Set[str]:
    """Owners flagged "Hide in Monthly Report" in the canonical Parameters."""
    hidden = specs[specs[SourceSpecField.HIDE_IN_MONTHLY.value]]
    return {name for name in hidden[SourceSpecField.OWNER_NAME.value] if name}


def accrued_by_owner_month(ledger: pd.DataFrame, hidden: Set[str]) -> pd.DataFrame:
    """
    Ledger rows of visible owners with their month-key.

    Rows without a From Timestamp keep a None month-key: they contribute
    their owner but no month column and no amount.
    """
    visible = ledger[
        (ledger[LedgerField.OWNER_NAME.value] != "")
        & ~ledger[LedgerField.OWNER_NAME.value].isin(hidden)
    ]
    return pd.DataFrame({
        OWNER: visible[LedgerField.OWNER_NAME.value],
        MONTH_KEY: visible[LedgerField.FROM_TIMESTAMP.value].map(month_key),
        ReportCategory.DESERVES.value: visible[LedgerField.TOTAL_COST.value],
    })


def paid_by_owner_month(payments: pd.DataFrame) -> pd.DataFrame:
    """Canonical payment rows with their month-key; rows without month or year are dropped."""
    dated = payments[
        payments[PaymentField.PAYMENT_MONTH.value].notna()
        & payments[PaymentField.PAYMENT_YEAR.value].notna()
    ]
    keys = [
        month_key_from_parts(m, y)
        for m, y in zip(dated[PaymentField.PAYMENT_MONTH.value], dated[PaymentField.PAYMENT_YEAR.value])
    ]
    return pd.DataFrame({
        OWNER: dated[PaymentField.EMPLOYEE_NAME.value].tolist(),
        MONTH_KEY: keys,
        ReportCategory.GOT.value: dated[PaymentField.AMOUNT.value].tolist(),
    })


def reconcile_owner_months(
    ledger: pd.DataFrame,
    payments: pd.DataFrame,
    hidden: Set[str],
) -> OwnerMonthAggregates:
    """
    Aggregate Deserves/Got/Difference for every (owner, month-key).

    Args:
        ledger: Ledger with enforced dtypes
        payments: Canonical payments (PAYMENTS_MAPPING)
        hidden: Owners excluded from the report

    Returns:
        OwnerMonthAggregates whose totals are indexed by (owner, month_key)
        over the full owner x month grid. Missing combinations are 0.
    """
    accrued = accrued_by_owner_month(ledger, hidden)

    owners = sorted(set(accrued[OWNER]))
    months = sort_month_keys(k for k in accrued[MONTH_KEY] if pd.notna(k))

    grid = pd.MultiIndex.from_product([owners, months], names=[OWNER, MONTH_KEY])
    columns = [c.value for c in ReportCategory]
    if len(grid) == 0:
        return OwnerMonthAggregates(owners=owners, months=months, totals=pd.DataFrame(index=grid, columns=columns))

    deserves = (
        accrued[accrued[MONTH_KEY].notna()]
        .groupby([OWNER, MONTH_KEY])[ReportCategory.DESERVES.value]
        .sum()
    )

    # Payments for owners or months outside the grid are ignored
    paid = paid_by_owner_month(payments)
    if paid.empty:
        got = pd.Series(0.0, index=grid)
    else:
        got = paid.groupby([OWNER, MONTH_KEY])[ReportCategory.GOT.value].sum()

    result = pd.DataFrame(index=grid)
    result[ReportCategory.DESERVES.value] = deserves.reindex(grid, fill_value=0.0).astype('float64')
    result[ReportCategory.GOT.value] = got.reindex(grid, fill_value=0.0).astype('float64')
    result[ReportCategory.DIFFERENCE.value] = (
        result[ReportCategory.DESERVES.value] - result[ReportCategory.GOT.value]
    )
    return OwnerMonthAggregates(owners=owners, months=months, totals=result)


def layout_monthly_report(aggregates: OwnerMonthAggregates) -> MonthlyReport:
    """Turn the owner x month aggregates into three rows per owner."""
    owners = aggregates.owners
    months = aggregates.months
    report = MonthlyReport(months=months, owners=owners)

    for owner in owners:
        for category in ReportCategory:
            if months:
                values = aggregates.totals.xs(owner, level=OWNER)[category.value].reindex(months).tolist()
            else:
                values = []
            report.rows.append([owner, category.value] + [float(v) for v in values])
        # +1 for the header row
        report.difference_rows.append(len(report.rows))

    return report


def build_monthly_report(
    parameters: pd.DataFrame,
    ledger: pd.DataFrame,
    payments: pd.DataFrame,
    ledger_columns: ColumnMapping,
) -> MonthlyReport:
    """
    Validate the three inputs and build the monthly reconciliation report.

    Args:
        parameters: Raw Parameters sheet
        ledger: Raw ledger (Data) sheet
        payments: Raw Payments sheet
        ledger_columns: Ledger columns required for the aggregation

    Raises:
        SchemaError: If any input lacks a required column
    """
    specs = apply_source_mapping(strip_headers(parameters), PARAMETERS_STRICT_MAPPING)

    ledger = strip_headers(ledger)
    validate_columns(ledger, ledger_columns, "Data")
    ledger = enforce_ledger_dtypes(ledger)

    payments = apply_source_mapping(strip_headers(payments), PAYMENTS_MAPPING)

    hidden = find_hidden_owners(specs)
    if hidden:
        logger.info(f"[MONTHLY] Excluding hidden owners: {sorted(hidden)}")

    aggregates = reconcile_owner_months(ledger, payments, hidden)
    report = layout_monthly_report(aggregates)

    logger.info(
        f"[MONTHLY] Reconciled {len(report.owners)} owners over {len(report.months)} months"
    )
    return report
