"""MIME / extension based dispatch to format extractors."""

from __future__ import annotations

import logging

from extract_service.errors import UnsupportedFormatError
from extract_service.extraction.extractors.base import FormatExtractor
from extract_service.extraction.extractors.docx import DocxExtractor
from extract_service.extraction.extractors.html import HtmlExtractor
from extract_service.extraction.extractors.image import ImageExtractor
from extract_service.extraction.extractors.pdf import PdfExtractor
from extract_service.extraction.extractors.presentation import PresentationExtractor
from extract_service.extraction.extractors.spreadsheet import SpreadsheetExtractor
from extract_service.extraction.extractors.text import TextExtractor
from extract_service.extraction.ocr.adapter import OcrAdapter

logger = logging.getLogger(__name__)

_MIME_FAMILIES: dict[str, str] = {
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "spreadsheet",
    "text/csv": "spreadsheet",
    "application/csv": "spreadsheet",
    "text/tab-separated-values": "spreadsheet",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "presentation",
    "text/html": "html",
    "application/xhtml+xml": "html",
    "text/plain": "text",
    "text/markdown": "text",
    "image/png": "image",
    "image/jpeg": "image",
    "image/webp": "image",
    "image/gif": "image",
    "image/tiff": "image",
    "image/bmp": "image",
}

_EXT_FAMILIES: dict[str, str] = {
    ".pdf": "pdf",
    ".docx": "docx",
    ".xlsx": "spreadsheet",
    ".csv": "spreadsheet",
    ".tsv": "spreadsheet",
    ".pptx": "presentation",
    ".html": "html",
    ".htm": "html",
    ".xhtml": "html",
    ".txt": "text",
    ".md": "text",
    ".markdown": "text",
    ".png": "image",
    ".jpg": "image",
    ".jpeg": "image",
    ".webp": "image",
    ".gif": "image",
    ".tif": "image",
    ".tiff": "image",
    ".bmp": "image",
}


def _mime(mime_type: str | None) -> str:
    # "text/csv; charset=utf-8" -> "text/csv"
    return (mime_type or "").split(";", 1)[0].strip().lower()


def _ext(name: str) -> str:
    base = name.rsplit("/", 1)[-1].lower()
    dot = base.rfind(".")
    return base[dot:] if dot > 0 else ""


def derive_family(file_name: str, mime_type: str | None) -> str | None:
    """Declared MIME type wins; generic or unknown MIME types fall back to the extension."""
    family = _MIME_FAMILIES.get(_mime(mime_type))
    if family is not None:
        return family
    return _EXT_FAMILIES.get(_ext(file_name))


def supported_formats() -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    for ext, family in _EXT_FAMILIES.items():
        out.setdefault(family, []).append(ext)
    return out


class FormatRouter:
    def __init__(self, *, ocr: OcrAdapter, pdf_ocr_fallback: bool = True) -> None:
        self._extractors: dict[str, FormatExtractor] = {
            "pdf": PdfExtractor(ocr=ocr if pdf_ocr_fallback else None),
            "docx": DocxExtractor(),
            "spreadsheet": SpreadsheetExtractor(),
            "presentation": PresentationExtractor(),
            "html": HtmlExtractor(),
            "text": TextExtractor(),
            "image": ImageExtractor(ocr=ocr),
        }

    def route(self, file_name: str, mime_type: str | None) -> FormatExtractor:
        family = derive_family(file_name, mime_type)
        if family is None:
            raise UnsupportedFormatError(file_name, mime_type)
        logger.debug("Routing %s (%s) to %s extractor", file_name, mime_type, family)
        return self._extractors[family]
