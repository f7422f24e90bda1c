"""
Collector - consolidate every worker sheet into the ledger.

For each Parameters row with a source link, the worker's Data sheet is read,
normalized and appended. A failing source is logged and left out; the run
goes on with the others. The result is sorted by From Timestamp with rows
lacking a timestamp kept last in their original order.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List
import pandas as pd

from .canonical_fields import LedgerField, SourceSpecField
from .exceptions import SheetNotFoundError
from .io import WorkbookLoader
from .mappings import EVENT_MAPPING, PARAMETERS_MAPPING, apply_source_mapping
from .normalize import normalize_source_events
from .schemas import empty_ledger

logger = logging.getLogger(__name__)


@dataclass
class CollectionResult:
    """Ledger produced by one Collector pass plus per-source bookkeeping."""
    ledger: pd.DataFrame
    sources_processed: int = 0
    sources_skipped: int = 0
    errors: List[str] = field(default_factory=list)


def sheet_row_number(index) -> int:
    """1-based sheet row of a DataFrame row read with a header row."""
    return int(index) + 2


def load_source_specs(parameters: pd.DataFrame) -> pd.DataFrame:
    """Map the raw Parameters sheet to SourceSpecField columns."""
    return apply_source_mapping(parameters, PARAMETERS_MAPPING)


def build_rate_map(specs: pd.DataFrame) -> Dict[str, float]:
    """Hourly rate per source link; a later row for the same link wins."""
    rates = {}
    for _, spec in specs.iterrows():
        link = spec[SourceSpecField.SOURCE_LINK.value]
        if link:
            rates[link] = float(spec[SourceSpecField.HOURLY_RATE.value])
    return rates


def sort_ledger(ledger: pd.DataFrame) -> pd.DataFrame:
    """
    Sort ascending by From Timestamp, missing timestamps last.

    Stable: rows with equal or missing timestamps keep their relative order.
    """
    if ledger.empty:
        return ledger.reset_index(drop=True)

    order = pd.to_datetime(ledger[LedgerField.FROM_TIMESTAMP.value], errors='coerce')
    positions = order.reset_index(drop=True).sort_values(kind='mergesort', na_position='last').index
    return ledger.iloc[positions].reset_index(drop=True)


def collect_ledger(
    specs: pd.DataFrame,
    loader: WorkbookLoader,
    source_sheet: str,
) -> CollectionResult:
    """
    Read every worker sheet listed in Parameters and build the sorted ledger.

    Args:
        specs: Output of load_source_specs
        loader: Loader used to open each worker workbook
        source_sheet: Name of the events sheet inside each workbook

    Returns:
        CollectionResult with the sorted ledger
    """
    rates = build_rate_map(specs)
    frames = []
    result = CollectionResult(ledger=empty_ledger())

    for index, spec in specs.iterrows():
        row_number = sheet_row_number(index)
        link = spec[SourceSpecField.SOURCE_LINK.value]
        owner = spec[SourceSpecField.OWNER_NAME.value]

        if not link:
            logger.info(f"[COLLECT] Row {row_number}: Target sheet link is empty. Skipping.")
            result.sources_skipped += 1
            continue

        if not owner:
            logger.warning(f"[COLLECT] Row {row_number}: Owner name is empty. Skipping.")
            result.sources_skipped += 1
            continue

        try:
            raw = loader.load_sheet(link, source_sheet)
            events = apply_source_mapping(raw, EVENT_MAPPING)
            frame = normalize_source_events(events, link, owner, rates.get(link))
        except SheetNotFoundError:
            logger.warning(f"[COLLECT] Row {row_number}: No '{source_sheet}' sheet found in {link}. Skipping.")
            result.sources_skipped += 1
            continue
        except Exception as e:
            logger.error(f"[COLLECT] Row {row_number}: Error processing target sheet {link}. {e}", exc_info=True)
            result.sources_skipped += 1
            result.errors.append(f"Row {row_number}: {e}")
            continue

        frames.append(frame)
        result.sources_processed += 1
        logger.info(f"[COLLECT] Row {row_number}: {len(frame)} rows from {owner} processed successfully.")

    frames = [f for f in frames if not f.empty]
    if frames:
        result.ledger = sort_ledger(pd.concat(frames, ignore_index=True))

    return result
