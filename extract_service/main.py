from __future__ import annotations

import dataclasses
import json
import logging
import mimetypes
import sys
from pathlib import Path

from extract_service.cli import build_parser
from extract_service.config import ExtractConfig
from extract_service.errors import RequestError
from extract_service.extraction.orchestrator import BatchOrchestrator
from extract_service.extraction.response import assemble, error_envelope, to_wire
from extract_service.extraction.types import ExtractionFailure, UploadedFile
from extract_service.logging_config import setup_logging


def _load(paths: list[str]) -> list[UploadedFile]:
    files: list[UploadedFile] = []
    for raw in paths:
        path = Path(raw)
        if not path.is_file():
            raise RequestError(f"File not found: {raw}")
        mime, _ = mimetypes.guess_type(path.name)
        files.append(UploadedFile(name=path.name, mime_type=mime or "", data=path.read_bytes()))
    return files


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level.upper())
    logger = logging.getLogger("extract_service.cli")

    cfg = ExtractConfig.from_env()
    overrides: dict[str, object] = {}
    if args.ocr_lang:
        overrides["ocr_lang"] = args.ocr_lang
    if args.ocr_engine:
        overrides["ocr_engine"] = args.ocr_engine
    if args.concurrency and args.concurrency > 0:
        overrides["max_file_workers"] = args.concurrency
    if args.timeout and args.timeout > 0:
        overrides["batch_timeout_seconds"] = args.timeout
    cfg = dataclasses.replace(cfg, **overrides)  # type: ignore[arg-type]
    cfg.validate()

    indent = args.indent if args.indent > 0 else None
    try:
        files = _load(args.files)
    except RequestError as e:
        logger.error("%s", e)
        print(json.dumps(to_wire(error_envelope(str(e))), indent=indent))
        return 1

    results = BatchOrchestrator.from_config(cfg).run_sync(files)
    print(json.dumps(to_wire(assemble(results)), indent=indent, ensure_ascii=False))

    failed = sum(1 for r in results if isinstance(r, ExtractionFailure))
    logger.info("DONE files=%d failed=%d", len(results), failed)
    return 0 if failed == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
