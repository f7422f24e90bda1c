"""
Workbook loading.

A workbook is addressed by a link: either a path to an .xlsx file or an
http(s) URL that serves one.
"""
import io
import logging
from pathlib import Path
from typing import Dict, Optional
import pandas as pd
import requests

from config import RemoteConfig
from .exceptions import SheetNotFoundError, SourceUnavailableError

logger = logging.getLogger(__name__)


def is_remote_link(link: str) -> bool:
    return str(link).lower().startswith(("http://", "https://"))


class WorkbookLoader:
    """Load sheets from local or remote workbooks."""

    def __init__(self, remote: Optional[RemoteConfig] = None):
        self.remote = remote or RemoteConfig()

    def fetch_bytes(self, link: str) -> bytes:
        """Download a remote workbook."""
        try:
            response = requests.get(link, headers=self.remote.auth_headers(), timeout=self.remote.timeout)
        except requests.RequestException as e:
            raise SourceUnavailableError(f"Could not download {link}: {e}") from e

        if response.status_code != 200:
            raise SourceUnavailableError(
                f"Could not download {link}: HTTP {response.status_code} - {response.text[:200]}"
            )
        return response.content

    def _excel_source(self, link: str):
        if is_remote_link(link):
            return io.BytesIO(self.fetch_bytes(link))

        path = Path(link)
        if not path.exists():
            raise SourceUnavailableError(f"Workbook not found: {link}")
        return path

    def load_all_sheets(self, link: str) -> Dict[str, pd.DataFrame]:
        """Load all sheets from a workbook."""
        source = self._excel_source(link)
        try:
            sheets = pd.read_excel(source, sheet_name=None)
        except Exception as e:
            raise SourceUnavailableError(f"Could not read workbook {link}: {e}") from e
        logger.debug(f"[IO] Loaded {link}: sheets {list(sheets.keys())}")
        return sheets

    def load_sheet(self, link: str, sheet_name: str) -> pd.DataFrame:
        """
        Load one sheet of a workbook, first row as header.

        Raises:
            SourceUnavailableError: workbook missing or unreadable
            SheetNotFoundError: workbook has no such sheet
        """
        sheets = self.load_all_sheets(link)
        if sheet_name not in sheets:
            raise SheetNotFoundError(link, sheet_name)

        df = sheets[sheet_name]
        logger.debug(f"[IO] Sheet '{sheet_name}' of {link}: {df.shape}")
        return df
