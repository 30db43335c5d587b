"""Shared test fixtures for the extraction service test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from extract_service.errors import OcrEngineError
from extract_service.extraction.ocr.adapter import OcrAdapter


class FakeEngine:
    """Records its lifecycle so tests can assert start/terminate pairing."""

    name = "fake"

    def __init__(self, events: list[str], *, text: str = "recognized text", fail_on: str | None = None) -> None:
        self._events = events
        self._text = text
        self._fail_on = fail_on

    def start(self) -> None:
        self._events.append("start")
        if self._fail_on == "start":
            raise OcrEngineError("engine failed to initialize")

    def recognize(self, data: bytes, *, mime_type: str | None = None) -> str:
        self._events.append("recognize")
        if self._fail_on == "recognize":
            raise RuntimeError("engine crashed")
        return self._text

    def terminate(self) -> None:
        self._events.append("terminate")
        if self._fail_on == "terminate":
            raise RuntimeError("terminate failed")


@pytest.fixture
def make_ocr() -> Callable[..., tuple[OcrAdapter, list[str]]]:
    """Factory: ``make_ocr(text=..., fail_on=...)`` -> (adapter, lifecycle events)."""

    def _make(*, text: str = "recognized text", fail_on: str | None = None) -> tuple[OcrAdapter, list[str]]:
        events: list[str] = []
        adapter = OcrAdapter(
            engine_factory=lambda: FakeEngine(events, text=text, fail_on=fail_on),
            language="eng",
            engine_name="fake",
        )
        return adapter, events

    return _make


@pytest.fixture
def fake_ocr(make_ocr) -> OcrAdapter:
    adapter, _ = make_ocr()
    return adapter
