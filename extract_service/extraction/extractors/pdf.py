from __future__ import annotations

import io
import logging

from pypdf import PageObject, PdfReader

from extract_service.errors import ExtractionError
from extract_service.extraction.extractors.base import FormatExtractor, clean_metadata, split_blocks
from extract_service.extraction.ocr.adapter import OcrAdapter
from extract_service.extraction.types import RawExtraction, RawUnit

logger = logging.getLogger(__name__)


class PdfExtractor(FormatExtractor):
    family = "pdf"

    def __init__(self, *, ocr: OcrAdapter | None = None) -> None:
        # OCR is only used for pages that carry no text layer
        self._ocr = ocr

    def _extract(self, *, data: bytes, file_name: str, mime_type: str | None) -> RawExtraction:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted and not _try_empty_password(reader):
            raise ExtractionError("PDF is encrypted")
        if len(reader.pages) == 0:
            raise ExtractionError(f"{file_name} has no pages")

        units: list[RawUnit] = []
        ocr_pages: list[int] = []
        for number, page in enumerate(reader.pages, start=1):
            text = page.extract_text() or ""
            if not text.strip() and self._ocr is not None:
                text = self._ocr_page(page, number=number, file_name=file_name)
                if text:
                    ocr_pages.append(number)
            for block in split_blocks(text):
                units.append(RawUnit(type="paragraph", text=block, page=number))

        info = reader.metadata
        meta = clean_metadata(
            {
                "page_count": len(reader.pages),
                "title": info.title if info else None,
                "author": info.author if info else None,
            }
        )
        if ocr_pages:
            meta["ocr_pages"] = ocr_pages
        return RawExtraction(units=units, metadata=meta)

    def _ocr_page(self, page: PageObject, *, number: int, file_name: str) -> str:
        assert self._ocr is not None
        try:
            images = list(page.images)
        except Exception as e:
            logger.warning("Could not read images on page %d of %s: %s", number, file_name, e)
            return ""

        parts: list[str] = []
        for img in images:
            outcome = self._ocr.recognize_detailed(img.data)
            if not outcome.ok:
                logger.warning("OCR skipped image %s on page %d of %s", img.name, number, file_name)
                continue
            if outcome.text:
                parts.append(outcome.text)
        return "\n\n".join(parts)


def _try_empty_password(reader: PdfReader) -> bool:
    try:
        return bool(reader.decrypt(""))
    except Exception:
        # AES-encrypted files need the optional crypto backend; treat as locked
        return False
