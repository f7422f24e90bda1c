"""
Storage service for report and ledger destinations.
Writes a whole sheet at once, to a local workbook or back to a remote link.
"""
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
import requests
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from config import RemoteConfig
from ledger_engine.exceptions import DestinationWriteError
from ledger_engine.io import WorkbookLoader, is_remote_link

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def to_cell_value(value: Any) -> Any:
    """Convert pandas/numpy values into something openpyxl can store."""
    if value is None or value is pd.NaT or value is pd.NA:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    return value


def dataframe_rows(df: pd.DataFrame) -> List[List[Any]]:
    """Header plus data rows of a DataFrame as plain lists."""
    rows = [[str(c) for c in df.columns]]
    for record in df.itertuples(index=False, name=None):
        rows.append([to_cell_value(v) for v in record])
    return rows


class WorkbookStore:
    """
    Replace the content of one sheet in a workbook.

    Every write is a full replace: the sheet is dropped and recreated at the
    same position, then the workbook is swapped in as a whole (os.replace for
    local files, a single PUT for remote links). A reader sees either the old
    sheet or the new one.

    Concurrent writers to the same workbook are not coordinated here.
    """

    def __init__(self, remote: Optional[RemoteConfig] = None, loader: Optional[WorkbookLoader] = None):
        self.remote = remote or RemoteConfig()
        self.loader = loader or WorkbookLoader(self.remote)

    def replace_sheet(
        self,
        link: str,
        sheet_name: str,
        rows: Sequence[Sequence[Any]],
        bold_rows: Iterable[int] = (),
    ) -> int:
        """
        Clear a sheet and write rows into it, creating the sheet if absent.

        Args:
            link: Workbook path or http(s) URL
            sheet_name: Target sheet
            rows: Header + data rows
            bold_rows: 0-based indexes into rows to render bold

        Returns:
            Number of rows written (header included)
        """
        if is_remote_link(link):
            self._replace_remote(link, sheet_name, rows, bold_rows)
        else:
            self._replace_local(Path(link), sheet_name, rows, bold_rows)

        logger.info(f"[STORAGE] Wrote {len(rows)} rows to '{sheet_name}' in {link}")
        return len(rows)

    def replace_dataframe(
        self,
        link: str,
        sheet_name: str,
        df: pd.DataFrame,
        bold_rows: Iterable[int] = (),
    ) -> int:
        return self.replace_sheet(link, sheet_name, dataframe_rows(df), bold_rows)

    def _fill_sheet(self, workbook: Workbook, sheet_name: str, rows, bold_rows) -> None:
        if sheet_name in workbook.sheetnames:
            position = workbook.sheetnames.index(sheet_name)
            workbook.remove(workbook[sheet_name])
            sheet = workbook.create_sheet(sheet_name, position)
        else:
            sheet = workbook.create_sheet(sheet_name)

        for row in rows:
            sheet.append([to_cell_value(v) for v in row])

        bold = Font(bold=True)
        for index in bold_rows:
            for cell in sheet[index + 1]:
                cell.font = bold

    def _replace_local(self, path: Path, sheet_name: str, rows, bold_rows) -> None:
        if not path.exists():
            raise DestinationWriteError(f"Workbook not found: {path}")

        try:
            workbook = load_workbook(path)
        except Exception as e:
            raise DestinationWriteError(f"Could not open workbook {path}: {e}") from e

        self._fill_sheet(workbook, sheet_name, rows, bold_rows)

        handle, tmp_name = tempfile.mkstemp(suffix=".xlsx", prefix=f".{path.stem}-", dir=path.parent)
        os.close(handle)
        try:
            workbook.save(tmp_name)
            os.replace(tmp_name, path)
        except Exception as e:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise DestinationWriteError(f"Could not save workbook {path}: {e}") from e

    def _replace_remote(self, link: str, sheet_name: str, rows, bold_rows) -> None:
        content = self.loader.fetch_bytes(link)
        try:
            workbook = load_workbook(io.BytesIO(content))
        except Exception as e:
            raise DestinationWriteError(f"Could not open workbook {link}: {e}") from e

        self._fill_sheet(workbook, sheet_name, rows, bold_rows)

        buffer = io.BytesIO()
        workbook.save(buffer)

        headers = {'Content-Type': XLSX_CONTENT_TYPE}
        headers.update(self.remote.auth_headers())
        logger.info(f"[STORAGE] Uploading workbook: {link} ({buffer.tell()} bytes)")
        try:
            response = requests.put(link, headers=headers, data=buffer.getvalue(), timeout=self.remote.timeout)
        except requests.RequestException as e:
            raise DestinationWriteError(f"Could not upload {link}: {e}") from e

        if response.status_code not in [200, 201]:
            raise DestinationWriteError(
                f"Could not upload {link}: HTTP {response.status_code} - {response.text[:200]}"
            )
