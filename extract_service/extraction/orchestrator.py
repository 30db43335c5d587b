"""Concurrent batch extraction with per-file fault isolation.

Every file runs as its own asyncio task; blocking parsing and OCR work is
pushed to a thread pool owned by the run. The pool is released without
waiting once the batch deadline passes, so a stuck parser never holds up
the caller. Whatever goes wrong inside one file becomes that
file's ``ExtractionFailure`` and never reaches its siblings. Results come
back in input order regardless of completion order.
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import logging
import uuid
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from extract_service.config import ExtractConfig
from extract_service.errors import ExtractServiceError, FileTooLargeError
from extract_service.extraction.normalizer import normalize
from extract_service.extraction.ocr.adapter import build_ocr_adapter
from extract_service.extraction.router import FormatRouter
from extract_service.extraction.types import (
    ExtractedDocument,
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
    UploadedFile,
)

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    def __init__(
        self,
        *,
        router: FormatRouter,
        max_workers: int = 4,
        max_file_bytes: int | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._router = router
        self._max_workers = max(1, int(max_workers))
        self._max_file_bytes = max_file_bytes
        self._timeout = timeout_seconds

    @classmethod
    def from_config(cls, cfg: ExtractConfig) -> BatchOrchestrator:
        ocr = build_ocr_adapter(cfg)
        return cls(
            router=FormatRouter(ocr=ocr, pdf_ocr_fallback=cfg.pdf_ocr_fallback),
            max_workers=cfg.max_file_workers,
            max_file_bytes=cfg.max_file_bytes,
            timeout_seconds=cfg.batch_timeout_seconds,
        )

    async def run(self, files: Sequence[UploadedFile]) -> list[ExtractionResult]:
        """Extract every file; one result per input file, in input order."""
        if not files:
            return []

        slots: list[ExtractionResult | None] = [None] * len(files)
        executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="extract")

        async def worker(index: int, f: UploadedFile) -> None:
            slots[index] = await self._process(f, executor)

        tasks = [asyncio.create_task(worker(i, f)) for i, f in enumerate(files)]
        try:
            _, pending = await asyncio.wait(tasks, timeout=self._timeout)
            for t in pending:
                t.cancel()
            if pending:
                logger.warning("Batch deadline of %ss reached; %d file(s) abandoned", self._timeout, len(pending))
                await asyncio.gather(*pending, return_exceptions=True)
        finally:
            for t in tasks:
                if not t.done():
                    t.cancel()
            # Queued files are dropped; threads already parsing finish on their own
            executor.shutdown(wait=False, cancel_futures=True)

        results: list[ExtractionResult] = []
        for f, slot in zip(files, slots, strict=True):
            if slot is None:
                slot = ExtractionFailure(file_name=f.name, error=f"Extraction timed out after {self._timeout:g}s")
            results.append(slot)

        failed = sum(1 for r in results if isinstance(r, ExtractionFailure))
        logger.info("Batch done: %d file(s), %d failed", len(results), failed)
        return results

    def run_sync(self, files: Sequence[UploadedFile]) -> list[ExtractionResult]:
        return asyncio.run(self.run(files))

    async def _process(self, f: UploadedFile, executor: ThreadPoolExecutor) -> ExtractionResult:
        loop = asyncio.get_running_loop()
        # Carry the request id into the worker thread's log records
        call = functools.partial(contextvars.copy_context().run, self._extract_one, f)
        try:
            doc = await loop.run_in_executor(executor, call)
        except ExtractServiceError as e:
            logger.warning("Extraction failed: %s :: %s", f.name, e)
            return ExtractionFailure(file_name=f.name, error=str(e))
        except Exception as e:
            logger.exception("Unexpected extraction error: %s", f.name)
            return ExtractionFailure(file_name=f.name, error=f"{type(e).__name__}: {e}")
        return ExtractionSuccess(document=doc)

    def _extract_one(self, f: UploadedFile) -> ExtractedDocument:
        if self._max_file_bytes is not None and len(f.data) > self._max_file_bytes:
            raise FileTooLargeError(f.name, self._max_file_bytes)

        extractor = self._router.route(f.name, f.mime_type)
        raw = extractor.extract(data=f.data, file_name=f.name, mime_type=f.mime_type)
        chunks = normalize(raw.units)
        logger.debug("Extracted %s: %d chunk(s) via %s", f.name, len(chunks), extractor.family)
        return ExtractedDocument(
            document_id=str(uuid.uuid4()),
            file_name=f.name,
            mime_type=f.mime_type,
            metadata=raw.metadata,
            chunks=chunks,
        )
