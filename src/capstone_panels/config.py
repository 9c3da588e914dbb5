"""Application configuration and path helpers."""
from __future__ import annotations

import os
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent  # src/capstone_panels directory


def _candidate_roots() -> list[Path]:
    env_base = os.getenv("PROJECT_ROOT")
    candidates = []
    if env_base:
        candidates.append(Path(env_base))
    candidates.extend(
        [
            APP_DIR.parent.parent,  # repo root during local dev
            Path("/app"),  # docker image root
        ]
    )
    return candidates


def _resolve_base_dir() -> Path:
    for candidate in _candidate_roots():
        if (candidate / "data").is_dir():
            return candidate
    return Path.cwd()


BASE_DIR = _resolve_base_dir()

DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
CONTEXTS_DIR = DATA_DIR / "contexts"
REPORT_DIR = DATA_DIR / "reports"
REPORT_OUTPUT = Path(os.getenv("PANEL_FILTER_OUTPUT", str(REPORT_DIR / "panel-filter-report.txt")))

for path in (CONTEXTS_DIR, REPORT_DIR):
    path.mkdir(parents=True, exist_ok=True)

SCHEMA_KEY_SEPARATOR = "|||"
ALL_REVIEWS = "all"
OPERATION_TIMEOUT = float(os.getenv("OPERATION_TIMEOUT", "30"))  # seconds
MAX_BULK_WORKERS = int(os.getenv("MAX_BULK_WORKERS", "2"))
