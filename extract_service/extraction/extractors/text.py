from __future__ import annotations

import re

from extract_service.extraction.extractors.base import FormatExtractor, render_list, split_blocks
from extract_service.extraction.types import RawExtraction, RawUnit

_MD_HEADING = re.compile(r"^#{1,6}\s+(.*)$")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(.*)$")


class TextExtractor(FormatExtractor):
    """Plain text and Markdown: one unit per blank-line separated block."""

    family = "text"

    def _extract(self, *, data: bytes, file_name: str, mime_type: str | None) -> RawExtraction:
        text = data.decode("utf-8-sig", errors="ignore")
        units: list[RawUnit] = []
        for block in split_blocks(text):
            lines = [ln for ln in block.split("\n") if ln.strip()]
            heading = _MD_HEADING.match(lines[0].strip())
            if heading:
                units.append(RawUnit(type="heading", text=heading.group(1)))
                lines = lines[1:]
                if not lines:
                    continue
            items = [_LIST_ITEM.match(ln) for ln in lines]
            if all(items):
                units.append(RawUnit(type="list", text=render_list([m.group(1) for m in items if m])))
            else:
                units.append(RawUnit(type="paragraph", text="\n".join(lines)))
        return RawExtraction(units=units, metadata={"line_count": len(text.splitlines())})
