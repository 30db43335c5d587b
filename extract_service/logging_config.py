"""Logging setup for the extraction service.

On Cloud Run (``K_SERVICE`` set) records are emitted as JSON lines that
Cloud Logging understands; locally a compact text format is used. Every
record carries the id of the request being served, including records
written from the worker threads that parse files.
"""

from __future__ import annotations

import logging
import os
import uuid
from contextvars import ContextVar, Token

from pythonjsonlogger.json import JsonFormatter

NO_REQUEST = "-"

_request_id: ContextVar[str] = ContextVar("extract_request_id", default=NO_REQUEST)

# Parsing libraries that log per-object warnings on malformed input
_NOISY_LOGGERS = ("pypdf", "PIL", "pytesseract")


def generate_request_id() -> str:
    return uuid.uuid4().hex[:16]


def bind_request_id(request_id: str) -> Token[str]:
    """Make ``request_id`` current for this context; pass the token to ``unbind_request_id``."""
    return _request_id.set(request_id)


def unbind_request_id(token: Token[str]) -> None:
    _request_id.reset(token)


def current_request_id() -> str:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamps ``record.request_id`` from the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()
        return True


class CloudRunFormatter(JsonFormatter):
    """JSON lines with ``severity`` and the request id as a log label."""

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["severity"] = record.levelname
        log_record.pop("levelname", None)
        request_id = log_record.pop("request_id", NO_REQUEST)
        if request_id != NO_REQUEST:
            log_record["logging.googleapis.com/labels"] = {"request_id": request_id}


def setup_logging(*, level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if os.getenv("K_SERVICE"):
        handler.setFormatter(
            CloudRunFormatter(
                fmt="%(message)s %(name)s %(lineno)d %(request_id)s",
                rename_fields={"name": "logger"},
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s  %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)
