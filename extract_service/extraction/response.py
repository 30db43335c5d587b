"""Orchestrator results -> wire envelope."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, assert_never

from extract_service.extraction.types import (
    ContentChunk,
    ExtractedDocument,
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
)
from extract_service.models import (
    ChunkOut,
    DocumentOut,
    ErrorResponse,
    ExtractResponse,
    FailureResult,
    SuccessResult,
)


def _chunk(c: ContentChunk) -> ChunkOut:
    return ChunkOut(id=c.id, type=c.type, text=c.text, page=c.page, section=c.section)


def _document(d: ExtractedDocument) -> DocumentOut:
    return DocumentOut(
        document_id=d.document_id,
        file_name=d.file_name,
        mime_type=d.mime_type,
        metadata=dict(d.metadata),
        chunks=[_chunk(c) for c in d.chunks],
    )


def _result(r: ExtractionResult) -> SuccessResult | FailureResult:
    if isinstance(r, ExtractionSuccess):
        return SuccessResult(document=_document(r.document))
    if isinstance(r, ExtractionFailure):
        return FailureResult(file_name=r.file_name, error=r.error)
    assert_never(r)


def assemble(results: Sequence[ExtractionResult]) -> ExtractResponse:
    """Wrap results in the response envelope without reordering or altering them."""
    return ExtractResponse(results=[_result(r) for r in results])


def error_envelope(message: str) -> ErrorResponse:
    return ErrorResponse(error=message)


def to_wire(model: ExtractResponse | ErrorResponse) -> dict[str, Any]:
    """JSON-ready dict with camelCase keys. Chunks omit unknown page/section."""
    return model.model_dump(mode="json", by_alias=True)
