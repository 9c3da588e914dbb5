"""Command-line export of the panel filter report."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import CONTEXTS_DIR, REPORT_OUTPUT
from .models.records import Context
from .report import generate_report, write_report
from .store import ContextStore

logger = logging.getLogger("uvicorn.error")


def parse_context(value: str) -> Context:
    school, sep, department = value.partition(":")
    if not sep or not school.strip() or not department.strip():
        raise argparse.ArgumentTypeError("Context must look like SCHOOL:DEPARTMENT")
    return Context(school=school.strip(), department=department.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export the panel mark-status filter report")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=CONTEXTS_DIR,
        help="Directory holding one folder per school/department context",
    )
    parser.add_argument(
        "--context",
        dest="contexts",
        action="append",
        type=parse_context,
        help="Restrict the report to SCHOOL:DEPARTMENT (repeatable)",
    )
    parser.add_argument("--format", choices=["text", "csv"], default="text")
    parser.add_argument("--output", type=Path, default=REPORT_OUTPUT)
    parser.add_argument("--workers", type=int, default=1, help="Contexts processed in parallel")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")
    args = build_parser().parse_args(argv)
    store = ContextStore(args.data_dir)
    try:
        report = generate_report(store, args.contexts, max_workers=args.workers)
        path = write_report(report, args.output, fmt=args.format, source=str(args.data_dir))
    except OSError as exc:
        logger.error(f"Failed to generate panel filter report: {exc}")
        return 1
    print(f"Report generated at {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
