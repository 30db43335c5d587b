from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from google.api_core.exceptions import GoogleAPIError
from google.cloud import documentai_v1 as documentai
from PIL import Image, UnidentifiedImageError

from extract_service.errors import OcrEngineError

logger = logging.getLogger(__name__)

_DEFAULT_MIME = "image/png"


@dataclass(frozen=True)
class DocAIConfig:
    project: str
    location: str
    processor_id: str

    @property
    def processor_name(self) -> str:
        return f"projects/{self.project}/locations/{self.location}/processors/{self.processor_id}"


class DocumentAIEngine:
    """
    Document AI online OCR, one client per session:
    - start() builds the processor client
    - terminate() closes its gRPC transport
    """

    name = "documentai"

    def __init__(self, *, cfg: DocAIConfig) -> None:
        self._cfg = cfg
        self._client: documentai.DocumentProcessorServiceClient | None = None

    def start(self) -> None:
        try:
            self._client = documentai.DocumentProcessorServiceClient()
        except GoogleAPIError as e:
            raise OcrEngineError(f"Document AI client init failed: {e}") from e

    def recognize(self, data: bytes, *, mime_type: str | None = None) -> str:
        if self._client is None:
            raise OcrEngineError("Document AI engine not started")
        mime = mime_type if mime_type and mime_type.startswith("image/") else _sniff_mime(data)
        req = documentai.ProcessRequest(
            name=self._cfg.processor_name,
            raw_document=documentai.RawDocument(content=data, mime_type=mime),
        )
        try:
            resp = self._client.process_document(request=req)
        except GoogleAPIError as e:
            raise OcrEngineError(f"Document AI request failed: {e}") from e
        return resp.document.text or ""

    def terminate(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            client.transport.close()


def _sniff_mime(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        return _DEFAULT_MIME
    return Image.MIME.get(fmt or "", _DEFAULT_MIME)
