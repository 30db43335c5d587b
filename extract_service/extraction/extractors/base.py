from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date, datetime, time
from typing import Any

from extract_service.errors import ExtractionError, ExtractServiceError
from extract_service.extraction.types import RawExtraction

logger = logging.getLogger(__name__)

CELL_SEPARATOR = " | "
ROW_SEPARATOR = " || "

_BLANK_LINE = re.compile(r"\n\s*\n")


class FormatExtractor(ABC):
    """Turns one file's bytes into raw content units plus metadata."""

    family: str

    def extract(self, *, data: bytes, file_name: str, mime_type: str | None = None) -> RawExtraction:
        if not data:
            raise ExtractionError(f"{file_name} is empty")
        try:
            return self._extract(data=data, file_name=file_name, mime_type=mime_type)
        except ExtractServiceError:
            raise
        except Exception as e:
            # Parsing libraries raise their own zoo of exceptions on bad input
            logger.debug("%s parser failed on %s", self.family, file_name, exc_info=True)
            raise ExtractionError(f"Could not parse {file_name}: {e}") from e

    @abstractmethod
    def _extract(self, *, data: bytes, file_name: str, mime_type: str | None) -> RawExtraction: ...


def split_blocks(text: str) -> list[str]:
    """Split on blank lines, dropping empty blocks."""
    if not text:
        return []
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return [b for b in _BLANK_LINE.split(text) if b.strip()]


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value).strip()


def render_table(rows: Sequence[Sequence[Any]]) -> str:
    """Flatten a table so row breaks survive whitespace collapsing."""
    lines: list[str] = []
    for row in rows:
        cells = [cell_text(c) for c in row]
        if any(cells):
            lines.append(CELL_SEPARATOR.join(cells))
    return ROW_SEPARATOR.join(lines)


def render_list(items: Sequence[str]) -> str:
    return "\n".join(f"- {item.strip()}" for item in items if item and item.strip())


def clean_metadata(meta: dict[str, Any]) -> dict[str, Any]:
    """Drop keys with no value; string values are stripped."""
    out: dict[str, Any] = {}
    for k, v in meta.items():
        if isinstance(v, str):
            v = v.strip()
        if v is None or v == "":
            continue
        out[k] = v
    return out
