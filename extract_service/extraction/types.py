from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ChunkType = Literal["heading", "paragraph", "table", "list"]

CHUNK_TYPES: frozenset[str] = frozenset({"heading", "paragraph", "table", "list"})


@dataclass(frozen=True)
class UploadedFile:
    name: str
    mime_type: str  # as declared by the client, may be generic or empty
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class RawUnit:
    type: ChunkType
    text: str
    page: int | None = None
    section: str | None = None


@dataclass(frozen=True)
class RawExtraction:
    units: list[RawUnit]
    metadata: dict[str, Any]


@dataclass(frozen=True)
class ContentChunk:
    id: str
    type: ChunkType
    text: str
    page: int | None = None
    section: str | None = None


@dataclass(frozen=True)
class ExtractedDocument:
    document_id: str
    file_name: str
    mime_type: str
    metadata: dict[str, Any]
    chunks: list[ContentChunk]


@dataclass(frozen=True)
class ExtractionSuccess:
    document: ExtractedDocument


@dataclass(frozen=True)
class ExtractionFailure:
    file_name: str
    error: str


ExtractionResult = ExtractionSuccess | ExtractionFailure
