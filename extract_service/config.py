"""Environment-variable-driven configuration for the extraction service.

Server-level settings are module constants read at import time. Pipeline
settings live on ``ExtractConfig`` so the CLI can override them per run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

OCR_ENGINES: frozenset[str] = frozenset({"tesseract", "documentai"})


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


# -- Limits -------------------------------------------------------------------
EXTRACT_MAX_BODY_BYTES: int = _env_int("EXTRACT_MAX_BODY_BYTES", 200 * 1024 * 1024)

# -- CORS ---------------------------------------------------------------------
EXTRACT_CORS_ALLOW_ORIGINS: list[str] = _env_csv(
    "EXTRACT_CORS_ALLOW_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
)
EXTRACT_CORS_ALLOW_METHODS: list[str] = _env_csv("EXTRACT_CORS_ALLOW_METHODS", "GET,POST,OPTIONS")
EXTRACT_CORS_ALLOW_HEADERS: list[str] = _env_csv(
    "EXTRACT_CORS_ALLOW_HEADERS",
    "Content-Type,X-Request-Id",
)
EXTRACT_CORS_ALLOW_CREDENTIALS: bool = _env_bool("EXTRACT_CORS_ALLOW_CREDENTIALS", False)

# -- Server -------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
EXTRACT_HOST: str = os.getenv("EXTRACT_HOST", "0.0.0.0")
PORT: int = _env_int("PORT", 8080)


@dataclass(frozen=True)
class ExtractConfig:
    # Limits / concurrency
    max_file_bytes: int
    max_file_workers: int
    batch_timeout_seconds: float | None

    # OCR
    ocr_engine: str
    ocr_lang: str
    ocr_timeout_seconds: int
    tesseract_cmd: str | None
    docai_project: str | None
    docai_location: str | None
    docai_processor_id: str | None

    # PDF
    pdf_ocr_fallback: bool

    @classmethod
    def from_env(cls) -> ExtractConfig:
        return cls(
            max_file_bytes=_env_int("EXTRACT_MAX_FILE_BYTES", 50 * 1024 * 1024),
            max_file_workers=_env_int("EXTRACT_MAX_FILE_WORKERS", 4),
            batch_timeout_seconds=_env_float("EXTRACT_BATCH_TIMEOUT_SECONDS"),
            ocr_engine=os.getenv("EXTRACT_OCR_ENGINE", "tesseract").strip().lower(),
            ocr_lang=os.getenv("EXTRACT_OCR_LANG", "eng").strip() or "eng",
            ocr_timeout_seconds=_env_int("EXTRACT_OCR_TIMEOUT_SECONDS", 120),
            tesseract_cmd=os.getenv("EXTRACT_TESSERACT_CMD") or None,
            docai_project=os.getenv("EXTRACT_DOC_AI_PROJECT"),
            docai_location=os.getenv("EXTRACT_DOC_AI_LOCATION"),
            docai_processor_id=os.getenv("EXTRACT_DOC_AI_PROCESSOR_ID"),
            pdf_ocr_fallback=_env_bool("EXTRACT_PDF_OCR_FALLBACK", True),
        )

    def validate(self) -> None:
        if self.max_file_bytes < 1:
            raise ValueError("EXTRACT_MAX_FILE_BYTES must be >= 1")
        if self.max_file_workers < 1:
            raise ValueError("EXTRACT_MAX_FILE_WORKERS must be >= 1")
        if self.batch_timeout_seconds is not None and self.batch_timeout_seconds <= 0:
            raise ValueError("EXTRACT_BATCH_TIMEOUT_SECONDS must be > 0")
        if self.ocr_timeout_seconds < 0:
            raise ValueError("EXTRACT_OCR_TIMEOUT_SECONDS must be >= 0")
        if self.ocr_engine not in OCR_ENGINES:
            raise ValueError(
                f"Unknown EXTRACT_OCR_ENGINE '{self.ocr_engine}' "
                f"(expected one of: {', '.join(sorted(OCR_ENGINES))})"
            )

        if self.ocr_engine == "documentai":
            missing = [
                k
                for k, v in {
                    "EXTRACT_DOC_AI_PROJECT": self.docai_project,
                    "EXTRACT_DOC_AI_LOCATION": self.docai_location,
                    "EXTRACT_DOC_AI_PROCESSOR_ID": self.docai_processor_id,
                }.items()
                if not v
            ]
            if missing:
                raise ValueError(f"Document AI OCR selected but missing config: {', '.join(missing)}")
