from __future__ import annotations

from typing import Dict, List, Optional

from .config import ALL_REVIEWS
from .marks import (
    SchemaCache,
    build_review_options,
    compute_panel_mark_summary,
    prime_for_panels,
)
from .models.records import Context, Faculty
from .models.results import PanelBoard, PanelView, TeamView
from .store import ContextStore

ANY_STATUS = "any"


def build_panel_views(store: ContextStore, context: Context) -> List[PanelView]:
    """Join the context's panels with faculty details and assigned teams."""
    faculty: Dict[str, Faculty] = {f.id: f for f in store.fetch_faculty(context)}
    teams_by_panel: Dict[str, List[TeamView]] = {}
    for entry in store.fetch_panel_projects(context):
        teams_by_panel[entry.panel_id] = [
            TeamView(
                id=project.project_id,
                name=project.name,
                domain=project.domain or project.specialization or "N/A",
                members=project.member_names,
                project=project,
            )
            for project in entry.projects
        ]

    views = []
    for panel in store.fetch_panels(context):
        names, employee_ids = [], []
        for fid in panel.faculty_ids:
            member = faculty.get(fid)
            names.append(member.name if member else fid)
            employee_ids.append(member.employee_id if member else "")
        views.append(
            PanelView(
                panel_id=panel.panel_id,
                faculty_ids=list(panel.faculty_ids),
                faculty_names=names,
                faculty_employee_ids=employee_ids,
                venue=panel.venue,
                school=panel.school or "Unknown",
                department=panel.department or "Unknown",
                teams=teams_by_panel.get(panel.panel_id, []),
            )
        )
    return views


def summarise_panels(
    panels: List[PanelView],
    schema_cache: SchemaCache,
    review_selection: str = ALL_REVIEWS,
) -> List[PanelView]:
    enriched = []
    for view in panels:
        result = compute_panel_mark_summary(view, schema_cache, review_selection)
        enriched.append(view.model_copy(update={"teams": result.teams, "mark_summary": result.summary}))
    return enriched


def build_panel_board(
    store: ContextStore,
    context: Context,
    review_selection: str = ALL_REVIEWS,
    mark_filter: str = ANY_STATUS,
    schema_cache: Optional[SchemaCache] = None,
) -> PanelBoard:
    cache = schema_cache or SchemaCache(store.fetch_marking_schema)
    views = build_panel_views(store, context)
    prime_for_panels(cache, views)
    cache.get(context.school, context.department)
    panels = summarise_panels(views, cache, review_selection)
    if mark_filter and mark_filter != ANY_STATUS:
        panels = [p for p in panels if p.mark_summary and p.mark_summary.status.value == mark_filter]
    return PanelBoard(
        context=context,
        review_selection=review_selection,
        mark_filter=mark_filter,
        panels=panels,
        review_options=build_review_options(cache),
        contexts=store.list_contexts(),
    )


__all__ = ["ANY_STATUS", "build_panel_board", "build_panel_views", "summarise_panels"]
