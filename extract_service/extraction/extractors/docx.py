from __future__ import annotations

import io

import docx  # python-docx
from docx.table import Table
from docx.text.paragraph import Paragraph

from extract_service.extraction.extractors.base import (
    FormatExtractor,
    clean_metadata,
    render_list,
    render_table,
)
from extract_service.extraction.types import RawExtraction, RawUnit


class DocxExtractor(FormatExtractor):
    family = "docx"

    def _extract(self, *, data: bytes, file_name: str, mime_type: str | None) -> RawExtraction:
        d = docx.Document(io.BytesIO(data))

        units: list[RawUnit] = []
        pending_items: list[str] = []
        paragraphs = 0
        tables = 0

        def flush_list() -> None:
            if pending_items:
                units.append(RawUnit(type="list", text=render_list(pending_items)))
                pending_items.clear()

        for block in d.iter_inner_content():
            if isinstance(block, Table):
                flush_list()
                tables += 1
                rows = [[cell.text for cell in row.cells] for row in block.rows]
                units.append(RawUnit(type="table", text=render_table(rows)))
                continue

            if not block.text or not block.text.strip():
                continue
            paragraphs += 1
            if _is_list_item(block):
                pending_items.append(block.text)
                continue
            flush_list()
            kind = "heading" if _is_heading(block) else "paragraph"
            units.append(RawUnit(type=kind, text=block.text))
        flush_list()

        props = d.core_properties
        meta = clean_metadata(
            {
                "paragraph_count": paragraphs,
                "table_count": tables,
                "title": props.title,
                "author": props.author,
            }
        )
        return RawExtraction(units=units, metadata=meta)


def _style_name(p: Paragraph) -> str:
    style = p.style
    return (style.name or "") if style is not None else ""


def _is_heading(p: Paragraph) -> bool:
    name = _style_name(p)
    return name == "Title" or name.startswith("Heading")


def _is_list_item(p: Paragraph) -> bool:
    if _style_name(p).startswith("List"):
        return True
    ppr = p._p.pPr
    return ppr is not None and ppr.numPr is not None
