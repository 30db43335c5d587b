from __future__ import annotations

import io
import logging

import pytesseract
from PIL import Image, UnidentifiedImageError

from extract_service.errors import OcrEngineError

logger = logging.getLogger(__name__)


class TesseractEngine:
    """Single-use Tesseract session.

    pytesseract shells out to the ``tesseract`` binary, so "starting" the
    engine means confirming the binary is reachable. Decoded images are
    owned by the session and closed on ``terminate``.
    """

    name = "tesseract"

    def __init__(self, *, lang: str = "eng", timeout_s: int = 0) -> None:
        self._lang = lang
        self._timeout = max(0, int(timeout_s))
        self._images: list[Image.Image] = []
        self._version: str | None = None

    def start(self) -> None:
        try:
            self._version = str(pytesseract.get_tesseract_version())
        except pytesseract.TesseractNotFoundError as e:
            raise OcrEngineError("Tesseract binary not found on PATH") from e
        logger.debug("Tesseract %s ready (lang=%s)", self._version, self._lang)

    def recognize(self, data: bytes, *, mime_type: str | None = None) -> str:
        image = self._open(data)
        try:
            return pytesseract.image_to_string(image, lang=self._lang, timeout=self._timeout)
        except pytesseract.TesseractError as e:
            raise OcrEngineError(f"Tesseract failed: {e.message or e.status}") from e
        except RuntimeError as e:
            # pytesseract signals a process timeout with a bare RuntimeError
            raise OcrEngineError(str(e)) from e

    def terminate(self) -> None:
        while self._images:
            self._images.pop().close()

    def _open(self, data: bytes) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise OcrEngineError(f"Unreadable image: {e}") from e
        self._images.append(image)
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
            self._images.append(image)
        return image


def use_tesseract_binary(path: str) -> None:
    """Point pytesseract at an explicit binary. Process-wide; call once at startup."""
    pytesseract.pytesseract.tesseract_cmd = path
