from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from typing import Any

import openpyxl

from extract_service.extraction.extractors.base import FormatExtractor, cell_text, render_table
from extract_service.extraction.types import RawExtraction, RawUnit

# Rows per table unit; every block repeats the header row
_ROWS_PER_UNIT = 50
_ZIP_MAGIC = b"PK\x03\x04"
_SNIFF_BYTES = 4096


class SpreadsheetExtractor(FormatExtractor):
    """XLSX workbooks via openpyxl, CSV/TSV via the csv module."""

    family = "spreadsheet"

    def _extract(self, *, data: bytes, file_name: str, mime_type: str | None) -> RawExtraction:
        if data.startswith(_ZIP_MAGIC):
            return self._extract_xlsx(data)
        return self._extract_delimited(data, file_name=file_name, mime_type=mime_type)

    def _extract_xlsx(self, data: bytes) -> RawExtraction:
        wb = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            units: list[RawUnit] = []
            names: list[str] = []
            for ws in wb.worksheets:
                names.append(ws.title)
                rows = _non_empty(ws.iter_rows(values_only=True))
                if not rows:
                    continue
                units.append(RawUnit(type="heading", text=ws.title, section=ws.title))
                units.extend(_table_units(rows, section=ws.title))
        finally:
            wb.close()
        return RawExtraction(units=units, metadata={"sheet_count": len(names), "sheet_names": names})

    def _extract_delimited(self, data: bytes, *, file_name: str, mime_type: str | None) -> RawExtraction:
        text = data.decode("utf-8-sig", errors="ignore")
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=_delimiter(text, file_name, mime_type))
        rows = _non_empty(reader)
        return RawExtraction(units=_table_units(rows, section=None), metadata={"row_count": len(rows)})


def _delimiter(text: str, file_name: str, mime_type: str | None) -> str:
    if file_name.lower().endswith(".tsv") or (mime_type or "").startswith("text/tab-separated-values"):
        return "\t"
    try:
        return csv.Sniffer().sniff(text[:_SNIFF_BYTES], delimiters=",;\t|").delimiter
    except csv.Error:
        return ","


def _non_empty(rows: Any) -> list[Sequence[Any]]:
    return [row for row in rows if any(cell_text(c) for c in row)]


def _table_units(rows: list[Sequence[Any]], *, section: str | None) -> list[RawUnit]:
    if not rows:
        return []
    header, body = rows[0], rows[1:]
    if not body:
        return [RawUnit(type="table", text=render_table([header]), section=section)]
    units: list[RawUnit] = []
    for start in range(0, len(body), _ROWS_PER_UNIT):
        block = [header, *body[start : start + _ROWS_PER_UNIT]]
        units.append(RawUnit(type="table", text=render_table(block), section=section))
    return units
