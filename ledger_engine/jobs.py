"""
Batch jobs run on a schedule.

- run_collector: Parameters + worker sheets -> Data (every 15 minutes)
- run_monthly_report: Parameters + Data + Payments -> Monthly (daily)
- run_individual_reports: Data -> each worker's Summary sheet (weekly)

Each job is a stateless pass over its inputs that fully replaces its
output. Nothing coordinates the jobs with one another.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from config import LedgerConfig, config as default_config
from storage.service import WorkbookStore
from .collect import collect_ledger, load_source_specs
from .io import WorkbookLoader
from .reconcile import build_monthly_report
from .summary import build_owner_summaries

logger = logging.getLogger(__name__)


@dataclass
class JobResult:
    """Outcome of one job run."""
    job: str
    ok: bool = True
    rows_written: int = 0
    processed: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def fail(self, message: str) -> "JobResult":
        self.ok = False
        self.errors.append(message)
        return self


def _services(cfg: LedgerConfig, loader: Optional[WorkbookLoader], store: Optional[WorkbookStore]):
    loader = loader or WorkbookLoader(cfg.remote)
    store = store or WorkbookStore(cfg.remote, loader)
    return loader, store


def run_collector(
    cfg: LedgerConfig = default_config,
    loader: Optional[WorkbookLoader] = None,
    store: Optional[WorkbookStore] = None,
) -> JobResult:
    """
    Rebuild the ledger from every worker sheet.

    Per-source failures are logged and skipped. A failure to read Parameters
    or to write the ledger marks the result as failed; nothing is raised.
    """
    loader, store = _services(cfg, loader, store)
    result = JobResult(job="collect")
    workbook = str(cfg.workbook_path)

    try:
        specs = load_source_specs(loader.load_sheet(workbook, cfg.sheets.parameters))
    except Exception as e:
        logger.error(f"[COLLECT] Could not load '{cfg.sheets.parameters}' from {workbook}: {e}", exc_info=True)
        return result.fail(str(e))

    collection = collect_ledger(specs, loader, cfg.sheets.source_data)
    result.processed = collection.sources_processed
    result.skipped = collection.sources_skipped
    result.errors.extend(collection.errors)

    try:
        result.rows_written = store.replace_dataframe(workbook, cfg.sheets.data, collection.ledger)
    except Exception as e:
        logger.error(f"[COLLECT] Could not write '{cfg.sheets.data}' to {workbook}: {e}", exc_info=True)
        return result.fail(str(e))

    logger.info(
        f"[COLLECT] Ledger rebuilt: {len(collection.ledger)} rows from "
        f"{result.processed} sources ({result.skipped} skipped)"
    )
    return result


def run_monthly_report(
    cfg: LedgerConfig = default_config,
    loader: Optional[WorkbookLoader] = None,
    store: Optional[WorkbookStore] = None,
) -> JobResult:
    """
    Rebuild the Monthly reconciliation sheet.

    Strict: any error (a missing column in particular) is logged and
    re-raised, and the Monthly sheet is left untouched.
    """
    loader, store = _services(cfg, loader, store)
    result = JobResult(job="monthly")
    workbook = str(cfg.workbook_path)

    try:
        parameters = loader.load_sheet(workbook, cfg.sheets.parameters)
        ledger = loader.load_sheet(workbook, cfg.sheets.data)
        payments = loader.load_sheet(workbook, cfg.sheets.payments)

        report = build_monthly_report(parameters, ledger, payments, cfg.monthly_ledger_columns)

        result.rows_written = store.replace_sheet(
            workbook, cfg.sheets.monthly, report.to_rows(), bold_rows=report.difference_rows
        )
    except Exception as e:
        logger.error(f"[MONTHLY] An error occurred: {e}", exc_info=True)
        raise

    result.processed = len(report.owners)
    logger.info(f"[MONTHLY] Monthly report generated for {result.processed} owners.")
    return result


def run_individual_reports(
    cfg: LedgerConfig = default_config,
    loader: Optional[WorkbookLoader] = None,
    store: Optional[WorkbookStore] = None,
) -> JobResult:
    """
    Write each worker's Summary sheet into their own workbook.

    One owner's failure is logged and does not stop the others.
    """
    loader, store = _services(cfg, loader, store)
    result = JobResult(job="individual")
    workbook = str(cfg.workbook_path)

    try:
        ledger = loader.load_sheet(workbook, cfg.sheets.data)
        summaries = build_owner_summaries(ledger, cfg.summary_ledger_columns)
    except Exception as e:
        logger.error(f"[SUMMARY] Could not build monthly summaries: {e}", exc_info=True)
        return result.fail(str(e))

    for summary in summaries:
        try:
            result.rows_written += store.replace_sheet(
                summary.destination, cfg.sheets.summary, summary.to_rows()
            )
        except Exception as e:
            logger.error(f"[SUMMARY] Error writing summary for {summary.owner}: {e}", exc_info=True)
            result.skipped += 1
            result.errors.append(f"{summary.owner}: {e}")
            continue

        result.processed += 1
        logger.info(f"[SUMMARY] Monthly report written successfully for {summary.owner}.")

    return result


JOBS: Dict[str, Callable[..., JobResult]] = {
    "collect": run_collector,
    "monthly": run_monthly_report,
    "individual": run_individual_reports,
}
