from __future__ import annotations

import argparse

from extract_service.config import OCR_ENGINES
from extract_service.extraction.router import supported_formats


def build_parser() -> argparse.ArgumentParser:
    exts = sorted(e for group in supported_formats().values() for e in group)
    p = argparse.ArgumentParser(
        prog="extract-docs",
        description="Extract normalized content chunks from documents and print the JSON envelope",
        epilog=f"Supported extensions: {' '.join(exts)}",
    )
    p.add_argument("files", nargs="+", metavar="FILE", help="Document to extract (repeatable)")
    p.add_argument("--ocr-lang", default=None, help="Override EXTRACT_OCR_LANG (e.g. eng, eng+fra)")
    p.add_argument(
        "--ocr-engine",
        default=None,
        choices=sorted(OCR_ENGINES),
        help="Override EXTRACT_OCR_ENGINE",
    )
    p.add_argument("--concurrency", type=int, default=0, help="Override EXTRACT_MAX_FILE_WORKERS")
    p.add_argument("--timeout", type=float, default=0, help="Batch deadline in seconds (0 = none)")
    p.add_argument("--indent", type=int, default=2, help="JSON indent (0 = compact)")
    p.add_argument("--log-level", default="WARNING", help="Python logging level (INFO, DEBUG, ...)")
    return p
