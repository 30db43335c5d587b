"""Raw extractor units -> canonical content chunks."""

from __future__ import annotations

import re
from collections.abc import Iterable

from extract_service.errors import ExtractionError
from extract_service.extraction.types import CHUNK_TYPES, ContentChunk, RawUnit

# Control characters other than whitespace, plus zero-width marks, BOM and soft hyphen
_ARTIFACTS = re.compile(r"[\x00-\x08\x0e-\x1f\x7f-\x84\x86-\x9f\u00ad\u200b-\u200d\u2060\ufeff]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    if not text:
        return ""
    text = _ARTIFACTS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize(units: Iterable[RawUnit]) -> list[ContentChunk]:
    """Clean each unit's text, drop empty ones and number the rest.

    Order is preserved and units are never merged, even adjacent ones of
    the same type.
    """
    chunks: list[ContentChunk] = []
    for unit in units:
        if unit.type not in CHUNK_TYPES:
            raise ExtractionError(f"Unknown content unit type: {unit.type!r}")
        text = normalize_text(unit.text)
        if not text:
            continue
        section = normalize_text(unit.section) if unit.section else None
        chunks.append(
            ContentChunk(
                id=f"chunk-{len(chunks) + 1}",
                type=unit.type,
                text=text,
                page=unit.page if unit.page and unit.page > 0 else None,
                section=section or None,
            )
        )
    return chunks
