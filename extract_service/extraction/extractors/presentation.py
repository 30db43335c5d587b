from __future__ import annotations

import io
from collections.abc import Iterable, Iterator

from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.shapes.base import BaseShape

from extract_service.extraction.extractors.base import (
    FormatExtractor,
    clean_metadata,
    render_list,
    render_table,
)
from extract_service.extraction.types import RawExtraction, RawUnit


class PresentationExtractor(FormatExtractor):
    family = "presentation"

    def _extract(self, *, data: bytes, file_name: str, mime_type: str | None) -> RawExtraction:
        prs = Presentation(io.BytesIO(data))

        units: list[RawUnit] = []
        slide_count = 0
        for number, slide in enumerate(prs.slides, start=1):
            slide_count += 1
            title_shape = slide.shapes.title
            title_id = title_shape.shape_id if title_shape is not None else None
            title = title_shape.text_frame.text.strip() if title_shape is not None else ""
            section = title or None

            for shape in _walk(slide.shapes):
                if shape.shape_id == title_id:
                    units.append(RawUnit(type="heading", text=title, page=number, section=section))
                elif shape.has_table:
                    rows = [[cell.text for cell in row.cells] for row in shape.table.rows]
                    units.append(RawUnit(type="table", text=render_table(rows), page=number, section=section))
                elif shape.has_text_frame:
                    paras = [p for p in shape.text_frame.paragraphs if p.text.strip()]
                    if not paras:
                        continue
                    if any(p.level > 0 for p in paras):
                        text = render_list([p.text for p in paras])
                        units.append(RawUnit(type="list", text=text, page=number, section=section))
                    else:
                        text = "\n".join(p.text for p in paras)
                        units.append(RawUnit(type="paragraph", text=text, page=number, section=section))

        props = prs.core_properties
        meta = clean_metadata({"slide_count": slide_count, "title": props.title, "author": props.author})
        return RawExtraction(units=units, metadata=meta)


def _walk(shapes: Iterable[BaseShape]) -> Iterator[BaseShape]:
    for shape in shapes:
        if shape.shape_type == MSO_SHAPE_TYPE.GROUP:
            yield from _walk(shape.shapes)  # type: ignore[attr-defined]
        else:
            yield shape
