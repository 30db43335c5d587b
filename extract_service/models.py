"""Pydantic response schemas for the extraction API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -- Extraction ---------------------------------------------------------------


class ChunkOut(_WireModel):
    id: str
    type: Literal["heading", "paragraph", "table", "list"]
    text: str
    page: int | None = Field(None, ge=1)
    section: str | None = None

    @model_serializer(mode="wrap")
    def _omit_unknown_position(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for key in ("page", "section"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class DocumentOut(_WireModel):
    document_id: str
    file_name: str
    mime_type: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    chunks: list[ChunkOut]


class SuccessResult(_WireModel):
    success: Literal[True] = True
    document: DocumentOut


class FailureResult(_WireModel):
    success: Literal[False] = False
    file_name: str
    error: str


class ExtractResponse(_WireModel):
    results: list[SuccessResult | FailureResult]


class ErrorResponse(_WireModel):
    error: str


# -- Formats ------------------------------------------------------------------


class FormatsResponse(_WireModel):
    formats: dict[str, list[str]]


# -- Health -------------------------------------------------------------------


class HealthResponse(_WireModel):
    status: str
