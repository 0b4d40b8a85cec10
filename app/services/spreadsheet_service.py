"""
app/services/spreadsheet_service.py

Decodes uploaded visit spreadsheets into raw row records.

Only the first sheet is read. Cells are kept as Python scalars so the row
normalizer sees the same shapes it would get from any other reader:
blank cells become ``None`` and date cells become ``YYYY-MM-DD HH:MM:SS``
text. The decode step is all-or-nothing; a broken file never yields
partial rows.
"""

from __future__ import annotations

import io
import logging
from datetime import date, datetime, time
from typing import Any

import pandas as pd

from app.logging_utils import log_event
from visits.rows import is_header_repeat

logger = logging.getLogger(__name__)

_ENGINE_BY_SUFFIX: dict[str, str] = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
}

SPREADSHEET_SUFFIXES: tuple[str, ...] = tuple(_ENGINE_BY_SUFFIX)


class SpreadsheetDecodeError(ValueError):
    """
    Raised when an upload cannot be read as a spreadsheet.
    """


class SpreadsheetDecoder:
    """
    Reads the first worksheet of an Excel workbook into row dictionaries.
    """

    def decode(self, data: bytes, *, filename: str | None = None) -> list[dict[str, Any]]:
        """
        Return one dictionary per data row, keyed by the sheet's column labels.

        The repeated header row (id cell "序号") and completely empty rows are
        dropped.

        Raises
        ------
        SpreadsheetDecodeError
            The bytes are not a readable workbook.
        """

        if not data:
            raise SpreadsheetDecodeError("Uploaded file is empty.")

        engine = self._engine_for(filename)
        try:
            frame = pd.read_excel(
                io.BytesIO(data),
                sheet_name=0,
                dtype=object,
                engine=engine,
            )
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                logging.WARNING,
                "spreadsheet_decode_failed",
                filename=filename,
                engine=engine,
                error=str(exc),
            )
            raise SpreadsheetDecodeError(f"Unable to read spreadsheet: {exc}") from exc

        records: list[dict[str, Any]] = []
        skipped = 0
        for raw in frame.to_dict(orient="records"):
            record = {str(column): _cell_value(value) for column, value in raw.items()}
            if is_header_repeat(record) or all(value is None for value in record.values()):
                skipped += 1
                continue
            records.append(record)

        log_event(
            logger,
            logging.INFO,
            "spreadsheet_decoded",
            filename=filename,
            columns=len(frame.columns),
            rows=len(records),
            skipped=skipped,
        )
        return records

    @staticmethod
    def _engine_for(filename: str | None) -> str | None:
        if not filename:
            return None
        lowered = filename.strip().lower()
        for suffix, engine in _ENGINE_BY_SUFFIX.items():
            if lowered.endswith(suffix):
                return engine
        return None


def _cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        if pd.isna(value):
            return None
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day)
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return None
    if hasattr(value, "item"):
        return value.item()
    return value
