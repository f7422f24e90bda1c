"""
Per-worker monthly summaries.

Groups the ledger by owner and by the month of each row's Date, summing
Total Cost and counting distinct workdays. Month rows keep the order in
which they first appear in the ledger; no chronological sort is applied,
unlike the monthly reconciliation columns.
"""
import logging
from dataclasses import dataclass
from typing import Any, List
import pandas as pd

from config import ColumnMapping
from .canonical_fields import SUMMARY_HEADER, LedgerField
from .normalize import parse_event_date
from .periods import month_key
from .schemas import enforce_ledger_dtypes, strip_headers, validate_columns

logger = logging.getLogger(__name__)

OWNER = "owner"
DESTINATION = "destination"
MONTH_KEY = "month_key"
WORKDAY = "workday"
TOTAL_COST = "total_cost"


@dataclass
class OwnerSummary:
    """Summary table for one worker, written into that worker's own workbook."""
    owner: str
    destination: str
    months: pd.DataFrame
    """Columns: SUMMARY_HEADER"""

    def to_rows(self) -> List[List[Any]]:
        rows = [list(SUMMARY_HEADER)]
        for month, total, days in self.months.itertuples(index=False, name=None):
            rows.append([month, float(total), int(days)])
        return rows


def dated_ledger_rows(ledger: pd.DataFrame) -> pd.DataFrame:
    """
    Ledger rows usable for the summaries, keyed by owner, month and workday.

    Rows missing owner, source link or date, or whose date does not parse,
    are skipped.
    """
    records = []
    skipped = 0
    for _, row in ledger.iterrows():
        owner = row[LedgerField.OWNER_NAME.value]
        link = row[LedgerField.SOURCE_LINK.value]
        parsed = parse_event_date(row[LedgerField.DATE.value])
        if not owner or not link or parsed is None:
            skipped += 1
            continue
        records.append({
            OWNER: owner,
            DESTINATION: link,
            MONTH_KEY: month_key(parsed),
            WORKDAY: parsed.date().isoformat(),
            TOTAL_COST: row[LedgerField.TOTAL_COST.value],
        })

    if skipped:
        logger.debug(f"[SUMMARY] Skipped {skipped} ledger rows without owner, link or date")
    return pd.DataFrame(records, columns=[OWNER, DESTINATION, MONTH_KEY, WORKDAY, TOTAL_COST])


def summarize_owner_months(rows: pd.DataFrame) -> List[OwnerSummary]:
    """
    Aggregate keyed rows into one OwnerSummary per owner.

    Owners and their months appear in first-seen order. The destination is
    the first source link recorded for the owner.
    """
    if rows.empty:
        return []

    destinations = rows.groupby(OWNER, sort=False)[DESTINATION].first()
    per_month = rows.groupby([OWNER, MONTH_KEY], sort=False).agg(
        total=(TOTAL_COST, 'sum'),
        days=(WORKDAY, 'nunique'),
    )

    summaries = []
    for owner, group in per_month.groupby(level=OWNER, sort=False):
        months = pd.DataFrame({
            SUMMARY_HEADER[0]: group.index.get_level_values(MONTH_KEY),
            SUMMARY_HEADER[1]: group['total'].astype('float64').values,
            SUMMARY_HEADER[2]: group['days'].astype('int64').values,
        })
        summaries.append(OwnerSummary(owner=owner, destination=destinations[owner], months=months))
    return summaries


def build_owner_summaries(ledger: pd.DataFrame, ledger_columns: ColumnMapping) -> List[OwnerSummary]:
    """
    Validate the ledger and build every worker's summary.

    Raises:
        SchemaError: If the ledger lacks a required column
    """
    ledger = strip_headers(ledger)
    validate_columns(ledger, ledger_columns, "Data")
    ledger = enforce_ledger_dtypes(ledger)

    summaries = summarize_owner_months(dated_ledger_rows(ledger))
    logger.info(f"[SUMMARY] Built summaries for {len(summaries)} owners")
    return summaries
