"""FastAPI entry point for the document extraction service.

Endpoints:
- POST /v1/extract  - Multipart upload (field ``files``, repeatable) -> per-file results
- GET  /v1/formats  - Supported format families and extensions
- GET  /liveness    - Health check

Run with ``extract-service`` (binds EXTRACT_HOST:PORT) or
``uvicorn extract_service.app:app``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from extract_service.config import (
    EXTRACT_CORS_ALLOW_CREDENTIALS,
    EXTRACT_CORS_ALLOW_HEADERS,
    EXTRACT_CORS_ALLOW_METHODS,
    EXTRACT_CORS_ALLOW_ORIGINS,
    EXTRACT_HOST,
    EXTRACT_MAX_BODY_BYTES,
    LOG_LEVEL,
    PORT,
    ExtractConfig,
)
from extract_service.errors import RequestError
from extract_service.extraction.orchestrator import BatchOrchestrator
from extract_service.extraction.response import assemble, error_envelope, to_wire
from extract_service.extraction.router import supported_formats
from extract_service.extraction.types import UploadedFile
from extract_service.logging_config import bind_request_id, generate_request_id, setup_logging, unbind_request_id
from extract_service.models import ErrorResponse, ExtractResponse, FormatsResponse, HealthResponse

logger = logging.getLogger(__name__)

_UPLOAD_FIELD = "files"

_orchestrator: BatchOrchestrator | None = None


def get_orchestrator() -> BatchOrchestrator:
    """Dependency: build the orchestrator from env config on first use."""
    global _orchestrator
    if _orchestrator is None:
        cfg = ExtractConfig.from_env()
        cfg.validate()
        _orchestrator = BatchOrchestrator.from_config(cfg)
        logger.info(
            "Extraction pipeline ready (ocr=%s/%s, workers=%d)",
            cfg.ocr_engine,
            cfg.ocr_lang,
            cfg.max_file_workers,
        )
    return _orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: configure logging and fail fast on bad config."""
    setup_logging(level=LOG_LEVEL)
    get_orchestrator()
    logger.info("Extraction service started")
    yield
    logger.info("Extraction service stopped")


app = FastAPI(
    title="Document Extraction API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestError)
async def _request_error_handler(request: Request, exc: RequestError) -> JSONResponse:
    return JSONResponse(status_code=400, content=to_wire(error_envelope(str(exc))))


@app.exception_handler(Exception)
async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content=to_wire(error_envelope("Internal server error")))


if EXTRACT_CORS_ALLOW_CREDENTIALS and "*" in EXTRACT_CORS_ALLOW_ORIGINS:
    raise RuntimeError("Invalid CORS config: wildcard origin cannot be combined with credentials=true")

app.add_middleware(
    CORSMiddleware,
    allow_origins=EXTRACT_CORS_ALLOW_ORIGINS,
    allow_credentials=EXTRACT_CORS_ALLOW_CREDENTIALS,
    allow_methods=EXTRACT_CORS_ALLOW_METHODS,
    allow_headers=EXTRACT_CORS_ALLOW_HEADERS,
)


# -- Body size limit ----------------------------------------------------------


@app.middleware("http")
async def body_size_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with bodies exceeding the size limit."""
    content_length = request.headers.get("content-length")
    if content_length is not None and content_length.isdigit() and int(content_length) > EXTRACT_MAX_BODY_BYTES:
        return JSONResponse(status_code=413, content=to_wire(error_envelope("Request body too large")))
    return await call_next(request)


# -- Request ID middleware ----------------------------------------------------


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Attach a unique request ID for trace correlation."""
    request_id = request.headers.get("x-request-id") or generate_request_id()
    request.state.request_id = request_id
    token = bind_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        unbind_request_id(token)
    response.headers["x-request-id"] = request_id
    return response


# -- Health -------------------------------------------------------------------


@app.get("/liveness", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    return HealthResponse(status="ok")


# -- Extraction ---------------------------------------------------------------


@app.get("/v1/formats", response_model=FormatsResponse)
async def formats() -> FormatsResponse:
    return FormatsResponse(formats=supported_formats())


@app.post(
    "/v1/extract",
    response_model=ExtractResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
async def extract(
    request: Request,
    orchestrator: Annotated[BatchOrchestrator, Depends(get_orchestrator)],
) -> JSONResponse:
    """Extract every uploaded file; one result per file, in upload order."""
    files = await _read_uploads(request)
    logger.info("Extract request: %d file(s)", len(files))
    results = await orchestrator.run(files)
    return JSONResponse(content=to_wire(assemble(results)))


async def _read_uploads(request: Request) -> list[UploadedFile]:
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise RequestError("Expected a multipart/form-data body")

    try:
        async with request.form() as form:
            uploads = [v for v in form.getlist(_UPLOAD_FIELD) if isinstance(v, UploadFile)]
            files = [
                UploadedFile(
                    name=up.filename or "unnamed",
                    mime_type=up.content_type or "",
                    data=await up.read(),
                )
                for up in uploads
            ]
    except (MultiPartException, StarletteHTTPException) as e:
        detail = getattr(e, "message", None) or getattr(e, "detail", None) or str(e)
        raise RequestError(f"Malformed multipart body: {detail}") from e

    if not files:
        raise RequestError(f"No files provided (expected one or more '{_UPLOAD_FIELD}' parts)")
    return files


def serve() -> None:
    """Console entry point: run the API under uvicorn."""
    uvicorn.run("extract_service.app:app", host=EXTRACT_HOST, port=PORT, log_config=None)
