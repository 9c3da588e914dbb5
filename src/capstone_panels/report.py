"""
Panel filter report across school/department contexts.

For every context the report lists, per review selection and mark-status
filter, the matching panels and the distinct faculty sitting on them. A
context without panels or whose data cannot be read is noted and skipped.
"""

from __future__ import annotations

import csv
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .board_builder import build_panel_views, summarise_panels
from .config import ALL_REVIEWS
from .marks import SchemaCache, build_review_options, prime_for_panels
from .models.records import Context
from .models.results import PanelMarkTotals, PanelView
from .store import ContextStore

logger = logging.getLogger("uvicorn.error")

RULE = "=" * 60
CSV_COLUMNS = [
    "school",
    "department",
    "review_selection",
    "mark_filter",
    "panel_id",
    "status",
    "marked_projects",
    "total_projects",
    "faculty",
]


@dataclass(frozen=True)
class MarkFilter:
    key: str
    label: str
    predicate: Callable[[Optional[PanelMarkTotals]], bool]


def _status_is(value: str) -> Callable[[Optional[PanelMarkTotals]], bool]:
    return lambda summary: summary is not None and summary.status.value == value


MARK_FILTERS = [
    MarkFilter("any", "No mark-status filter (all panels)", lambda summary: True),
    MarkFilter("all", "Fully marked panels", _status_is("all")),
    MarkFilter("partial", "Partially marked panels", _status_is("partial")),
    MarkFilter("none", "Panels with no marks recorded", _status_is("none")),
    MarkFilter("no-projects", "Panels without assigned projects", _status_is("no-projects")),
]


@dataclass
class FilterResult:
    key: str
    label: str
    panels: List[PanelView] = field(default_factory=list)
    faculty: List[str] = field(default_factory=list)

    @property
    def matched(self) -> int:
        return len(self.panels)


@dataclass
class SelectionResult:
    selection: str
    label: str
    filters: List[FilterResult] = field(default_factory=list)


@dataclass
class ContextReport:
    context: Context
    panel_count: int = 0
    selections: List[SelectionResult] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class PanelFilterReport:
    generated_at: str
    contexts: List[ContextReport] = field(default_factory=list)


def _distinct_faculty(panels: Iterable[PanelView]) -> List[str]:
    seen: Dict[str, None] = {}
    for panel in panels:
        for label in panel.faculty_labels():
            seen.setdefault(label, None)
    return list(seen)


def build_context_report(store: ContextStore, context: Context) -> ContextReport:
    views = build_panel_views(store, context)
    report = ContextReport(context=context, panel_count=len(views))
    if not views:
        return report

    schema_cache = SchemaCache(store.fetch_marking_schema)
    prime_for_panels(schema_cache, views)
    options = build_review_options(schema_cache)
    labels = {option.value: option.label for option in options}

    for selection in [ALL_REVIEWS] + [option.value for option in options]:
        label = "All panel reviews" if selection == ALL_REVIEWS else labels.get(selection, selection)
        summarised = summarise_panels(views, schema_cache, selection)
        result = SelectionResult(selection=selection, label=label)
        for mark_filter in MARK_FILTERS:
            matched = [panel for panel in summarised if mark_filter.predicate(panel.mark_summary)]
            result.filters.append(
                FilterResult(
                    key=mark_filter.key,
                    label=mark_filter.label,
                    panels=matched,
                    faculty=_distinct_faculty(matched),
                )
            )
        report.selections.append(result)
    return report


def _safe_context_report(store: ContextStore, context: Context) -> ContextReport:
    try:
        return build_context_report(store, context)
    except (OSError, ValueError) as exc:
        logger.warning(f"Skipping {context}: {exc}")
        return ContextReport(context=context, error=str(exc))


def generate_report(
    store: ContextStore,
    contexts: Optional[List[Context]] = None,
    max_workers: int = 1,
) -> PanelFilterReport:
    targets = contexts if contexts is not None else store.list_contexts()
    generated_at = datetime.now(timezone.utc).isoformat()
    if max_workers > 1 and len(targets) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            reports = list(pool.map(lambda ctx: _safe_context_report(store, ctx), targets))
    else:
        reports = [_safe_context_report(store, ctx) for ctx in targets]
    logger.info(f"Panel filter report covers {len(reports)} context(s)")
    return PanelFilterReport(generated_at=generated_at, contexts=reports)


def _panel_line(panel: PanelView, idx: int) -> str:
    labels = panel.faculty_labels()
    faculty_text = ", ".join(labels) if labels else "No faculty recorded"
    summary = panel.mark_summary
    status = summary.status.value if summary else "unknown"
    total = summary.total_projects if summary else 0
    marked = summary.marked_projects if summary else 0
    return (
        f"  {idx + 1}. Panel {panel.panel_id or 'N/A'} | status={status} | projects={marked}/{total}\n"
        f"     Faculty: {faculty_text}"
    )


def render_text(report: PanelFilterReport, source: Optional[str] = None) -> str:
    lines = ["Panel Management Filter Export", f"Generated at: {report.generated_at}"]
    if source:
        lines.append(f"Data source: {source}")
    lines.append("")

    if not report.contexts:
        lines.append("No panels found for any school/department.")
        return "\n".join(lines)

    for entry in report.contexts:
        lines.append(RULE)
        lines.append(f"School: {entry.context.school}")
        lines.append(f"Department: {entry.context.department}")
        if entry.error:
            lines.append(f"Skipped: {entry.error}")
            lines.append("")
            continue
        lines.append(f"Panels fetched: {entry.panel_count}")
        if entry.panel_count == 0:
            lines.append("No panels for this context.")
            lines.append("")
            continue

        lines.append(f"Review filters discovered: {len(entry.selections)}")
        lines.append("")
        for selection in entry.selections:
            lines.append(f"Review Selection: {selection.label}")
            for result in selection.filters:
                lines.append(f"  Mark Filter: {result.label}")
                lines.append(f"    Matched Panels: {result.matched}")
                lines.append(f"    Unique Faculty Count: {len(result.faculty)}")
                lines.append(f"    Faculty List: {'; '.join(result.faculty) if result.faculty else 'None'}")
                if result.panels:
                    lines.append("    Panels:")
                    lines.extend(_panel_line(panel, idx) for idx, panel in enumerate(result.panels))
            lines.append("")
    return "\n".join(lines)


def _csv_rows(report: PanelFilterReport) -> Iterable[Dict[str, object]]:
    for entry in report.contexts:
        for selection in entry.selections:
            for result in selection.filters:
                for panel in result.panels:
                    summary = panel.mark_summary
                    yield {
                        "school": entry.context.school,
                        "department": entry.context.department,
                        "review_selection": selection.selection,
                        "mark_filter": result.key,
                        "panel_id": panel.panel_id,
                        "status": summary.status.value if summary else "",
                        "marked_projects": summary.marked_projects if summary else 0,
                        "total_projects": summary.total_projects if summary else 0,
                        "faculty": "; ".join(panel.faculty_labels()),
                    }


def render_csv(report: PanelFilterReport) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    writer.writerows(_csv_rows(report))
    return buffer.getvalue()


def write_report(report: PanelFilterReport, path: Path, fmt: str = "text", source: Optional[str] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    content = render_csv(report) if fmt == "csv" else render_text(report, source)
    path.write_text(content, encoding="utf-8")
    return path


__all__ = [
    "MARK_FILTERS",
    "ContextReport",
    "FilterResult",
    "MarkFilter",
    "PanelFilterReport",
    "SelectionResult",
    "build_context_report",
    "generate_report",
    "render_csv",
    "render_text",
    "write_report",
]
