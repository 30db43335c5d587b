from __future__ import annotations

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from extract_service.extraction.extractors.base import (
    FormatExtractor,
    clean_metadata,
    render_list,
    render_table,
)
from extract_service.extraction.types import ChunkType, RawExtraction, RawUnit

_BLOCKS: dict[str, ChunkType] = {
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "p": "paragraph",
    "pre": "paragraph",
    "blockquote": "paragraph",
    "ul": "list",
    "ol": "list",
    "table": "table",
}

_NON_TEXT = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


class HtmlExtractor(FormatExtractor):
    family = "html"

    def _extract(self, *, data: bytes, file_name: str, mime_type: str | None) -> RawExtraction:
        raw = data.decode("utf-8", errors="ignore")
        soup = BeautifulSoup(raw, "lxml")
        for tag in soup(["script", "style", "noscript", "template"]):
            tag.decompose()

        title = soup.title.get_text(" ", strip=True) if soup.title else None
        if soup.head is not None:
            soup.head.decompose()
        root = soup.body or soup

        units: list[RawUnit] = []
        loose: list[str] = []
        names = list(_BLOCKS)

        def flush_loose() -> None:
            if loose:
                units.append(RawUnit(type="paragraph", text="\n".join(loose)))
                loose.clear()

        # Document order; text outside any block is gathered into paragraphs
        for node in root.descendants:
            if isinstance(node, Tag):
                if node.name in _BLOCKS and node.find_parent(names) is None:
                    flush_loose()
                    units.append(RawUnit(type=_BLOCKS[node.name], text=_block_text(node)))
            elif isinstance(node, NavigableString) and not isinstance(node, _NON_TEXT):
                if node.strip() and node.find_parent(names) is None:
                    loose.append(str(node))
        flush_loose()

        return RawExtraction(units=units, metadata=clean_metadata({"title": title}))


def _block_text(el: Tag) -> str:
    if el.name in ("ul", "ol"):
        return render_list([li.get_text(" ", strip=True) for li in el.find_all("li", recursive=False)])
    if el.name == "table":
        rows = [[c.get_text(" ", strip=True) for c in tr.find_all(["th", "td"])] for tr in el.find_all("tr")]
        return render_table(rows)
    return el.get_text(" ", strip=True)
