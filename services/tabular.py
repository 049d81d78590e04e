"""Spreadsheet import/export for the classification pipeline."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Dict, Iterable, List, Mapping, Protocol, Sequence

import pandas as pd

from services.models import EXPORT_COLUMNS, ClassifiedProduct

EXPORT_SHEET_NAME = "Classifications"
EXPORT_PREFIX = "classified_"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

Row = Dict[str, object]

logger = logging.getLogger(__name__)


class TabularCodecError(RuntimeError):
    """Raised when a spreadsheet cannot be read or written."""


class TabularCodec(Protocol):
    def parse(self, data: bytes) -> List[Row]:
        ...

    def serialize(self, rows: Iterable[Mapping[str, object]]) -> bytes:
        ...


def _is_blank_cell(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


class ExcelCodec:
    """Read the first sheet of an ``.xlsx``/``.xls`` workbook and write ``.xlsx``.

    Parsed rows keep the sheet's column order and leave out blank cells;
    rows with no value at all are skipped.
    """

    def __init__(
        self,
        *,
        columns: Sequence[str] = EXPORT_COLUMNS,
        sheet_name: str = EXPORT_SHEET_NAME,
    ) -> None:
        self.columns = list(columns)
        self.sheet_name = sheet_name

    def parse(self, data: bytes) -> List[Row]:
        if not data:
            raise TabularCodecError("Failed to read the file: it is empty.")
        try:
            frame = pd.read_excel(BytesIO(data), sheet_name=0, dtype=object)
        except Exception as exc:
            raise TabularCodecError(f"Failed to read the file: {exc}") from exc

        rows: List[Row] = []
        for record in frame.to_dict(orient="records"):
            row = {
                str(column): value
                for column, value in record.items()
                if not _is_blank_cell(value)
            }
            if row:
                rows.append(row)
        logger.debug("Parsed %d row(s) from %d-byte workbook", len(rows), len(data))
        return rows

    def serialize(self, rows: Iterable[Mapping[str, object]]) -> bytes:
        frame = pd.DataFrame([dict(row) for row in rows], columns=self.columns)
        buffer = BytesIO()
        try:
            frame.to_excel(buffer, index=False, sheet_name=self.sheet_name, engine="openpyxl")
        except Exception as exc:
            raise TabularCodecError(f"Failed to write the workbook: {exc}") from exc
        return buffer.getvalue()


def export_file_name(file_name: str) -> str:
    """Prefix the upload name; legacy ``.xls`` names get the ``.xlsx`` extension written."""

    stem, dot, ext = file_name.rpartition(".")
    if dot and ext.lower() == "xls":
        file_name = f"{stem}.xlsx"
    return f"{EXPORT_PREFIX}{file_name}"


def to_export_rows(results: Iterable[ClassifiedProduct]) -> List[Dict[str, str]]:
    return [item.to_export_row() for item in results]


def results_frame(results: Iterable[ClassifiedProduct]) -> pd.DataFrame:
    """Return the export table as a DataFrame for on-screen preview."""

    return pd.DataFrame(to_export_rows(results), columns=list(EXPORT_COLUMNS))
