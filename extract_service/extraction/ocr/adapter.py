"""OCR adapter: one engine instance per call, always torn down.

The service is expected to run on short-lived serverless instances, so no
engine state is kept between calls. Every ``recognize`` builds an engine,
starts it, runs recognition and terminates it, whatever happens in between.
Failures never propagate: the caller receives a sentinel string instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol

from extract_service.config import ExtractConfig
from extract_service.extraction.ocr.document_ai import DocAIConfig, DocumentAIEngine
from extract_service.extraction.ocr.tesseract import TesseractEngine, use_tesseract_binary

logger = logging.getLogger(__name__)

OCR_ERROR_PREFIX = "[OCR Error]"


class OcrEngine(Protocol):
    name: str

    def start(self) -> None: ...

    def recognize(self, data: bytes, *, mime_type: str | None = None) -> str: ...

    def terminate(self) -> None: ...


EngineFactory = Callable[[], OcrEngine]


@dataclass(frozen=True)
class OcrOutcome:
    text: str
    error: str | None = None  # failure reason; text then holds the sentinel

    @property
    def ok(self) -> bool:
        return self.error is None


def sentinel_text(reason: str) -> str:
    return f"{OCR_ERROR_PREFIX} Could not extract text: {reason}"


class OcrAdapter:
    def __init__(
        self,
        *,
        engine_factory: EngineFactory,
        language: str = "eng",
        engine_name: str = "tesseract",
    ) -> None:
        self._engine_factory = engine_factory
        self._language = language
        self._engine_name = engine_name

    @property
    def language(self) -> str:
        return self._language

    @property
    def engine_name(self) -> str:
        return self._engine_name

    def recognize(self, image: bytes, *, mime_type: str | None = None) -> str:
        """Return recognized text, or a ``[OCR Error]`` sentinel. Never raises."""
        return self.recognize_detailed(image, mime_type=mime_type).text

    def recognize_detailed(self, image: bytes, *, mime_type: str | None = None) -> OcrOutcome:
        try:
            with self._engine_session() as engine:
                logger.debug("OCR recognizing %d bytes with %s", len(image), engine.name)
                text = engine.recognize(image, mime_type=mime_type)
        except Exception as e:
            reason = str(e) or "Unknown OCR error"
            logger.error("OCR failed (%s): %s", self._engine_name, reason)
            return OcrOutcome(text=sentinel_text(reason), error=reason)
        return OcrOutcome(text=(text or "").strip())

    @contextmanager
    def _engine_session(self) -> Iterator[OcrEngine]:
        engine: OcrEngine | None = None
        try:
            engine = self._engine_factory()
            engine.start()
            yield engine
        finally:
            # Runs after a failed start() too; engines must tolerate a partial start
            if engine is not None:
                try:
                    engine.terminate()
                except Exception as e:
                    logger.warning("OCR engine termination failed (%s): %s", self._engine_name, e)


def build_ocr_adapter(cfg: ExtractConfig) -> OcrAdapter:
    """Build an adapter for the engine selected in config."""
    factory: EngineFactory
    if cfg.ocr_engine == "documentai":
        docai_cfg = DocAIConfig(
            project=cfg.docai_project or "",
            location=cfg.docai_location or "",
            processor_id=cfg.docai_processor_id or "",
        )

        def factory() -> OcrEngine:
            return DocumentAIEngine(cfg=docai_cfg)

    else:
        if cfg.tesseract_cmd:
            use_tesseract_binary(cfg.tesseract_cmd)

        def factory() -> OcrEngine:
            return TesseractEngine(lang=cfg.ocr_lang, timeout_s=cfg.ocr_timeout_seconds)

    return OcrAdapter(engine_factory=factory, language=cfg.ocr_lang, engine_name=cfg.ocr_engine)
