"""
Scheduler entrypoint.

    python run.py collect      # every 15 minutes
    python run.py monthly      # daily
    python run.py individual   # weekly
    python run.py all
"""
import argparse
import logging
import sys
from typing import List, Optional

from config import config

logger = logging.getLogger(__name__)

JOB_ORDER = ["collect", "monthly", "individual"]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    # Silence per-request connection logging
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worker-ledger",
        description="Consolidate worker timesheets and reconcile payments.",
    )
    parser.add_argument("job", choices=JOB_ORDER + ["all"], help="Job to run")
    parser.add_argument(
        "--workbook",
        help=f"Main workbook path or URL (default: {config.workbook_path})",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(config.log_level)

    from ledger_engine.jobs import JOBS

    if args.workbook:
        config.workbook_path = args.workbook

    names = JOB_ORDER if args.job == "all" else [args.job]
    exit_code = 0
    for name in names:
        logger.info(f"[RUN] Starting {name} job")
        try:
            result = JOBS[name](config)
        except Exception as e:
            logger.error(f"[RUN] {name} job failed: {e}", exc_info=True)
            exit_code = 1
            continue

        if not result.ok:
            exit_code = 1
        logger.info(
            f"[RUN] {name} finished: ok={result.ok}, rows={result.rows_written}, "
            f"processed={result.processed}, skipped={result.skipped}"
        )

    return exit_code


if __name__ == '__main__':
    sys.exit(main())
