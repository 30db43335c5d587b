from __future__ import annotations

from extract_service.extraction.extractors.base import FormatExtractor
from extract_service.extraction.ocr.adapter import OcrAdapter
from extract_service.extraction.types import RawExtraction, RawUnit


class ImageExtractor(FormatExtractor):
    """OCR the whole image into a single paragraph. No layout analysis."""

    family = "image"

    def __init__(self, *, ocr: OcrAdapter) -> None:
        self._ocr = ocr

    def _extract(self, *, data: bytes, file_name: str, mime_type: str | None) -> RawExtraction:
        outcome = self._ocr.recognize_detailed(data, mime_type=mime_type)
        meta: dict[str, object] = {
            "ocr_engine": self._ocr.engine_name,
            "ocr_language": self._ocr.language,
        }
        if outcome.error is not None:
            meta["ocr_error"] = outcome.error
        return RawExtraction(units=[RawUnit(type="paragraph", text=outcome.text)], metadata=meta)
