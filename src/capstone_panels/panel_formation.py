"""
Panel formation for a single (school, department) context.

Panels are unordered faculty pairs and partition the context's faculty: a
faculty member sits on at most one panel at a time.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .errors import DuplicatePanel, FacultyAlreadyAssigned, InvalidSelection, NotFound
from .models.records import Context, Faculty, Panel
from .models.results import AutoCreateResult, RemovedPanel
from .store import ContextStore

logger = logging.getLogger("uvicorn.error")


def panel_membership(panels: List[Panel]) -> Dict[str, str]:
    """Map faculty id -> id of the panel the faculty sits on."""
    members: Dict[str, str] = {}
    for panel in panels:
        for faculty_id in panel.faculty_ids:
            members[faculty_id] = panel.panel_id
    return members


def available_faculty(store: ContextStore, context: Context) -> List[Faculty]:
    """Faculty of the context not on any panel, sorted by id."""
    members = panel_membership(store.fetch_panels(context))
    pool = [faculty for faculty in store.fetch_faculty(context) if faculty.id not in members]
    return sorted(pool, key=lambda faculty: faculty.id)


def create_panel(
    store: ContextStore,
    context: Context,
    faculty_id1: Optional[str],
    faculty_id2: Optional[str],
    venue: Optional[str] = None,
) -> Panel:
    if not faculty_id1 or not faculty_id2 or faculty_id1 == faculty_id2:
        raise InvalidSelection("Two distinct faculty IDs are required.")

    known = {faculty.id for faculty in store.fetch_faculty(context)}
    for faculty_id in (faculty_id1, faculty_id2):
        if faculty_id not in known:
            raise NotFound("faculty", faculty_id)

    panels = store.fetch_panels(context)
    pair = frozenset((faculty_id1, faculty_id2))
    duplicate = next((p for p in panels if p.pair == pair), None)
    if duplicate is not None:
        raise DuplicatePanel(f"Panel already exists: {duplicate.panel_id}")

    members = panel_membership(panels)
    for faculty_id in (faculty_id1, faculty_id2):
        if faculty_id in members:
            raise FacultyAlreadyAssigned(faculty_id, members[faculty_id])

    panel = Panel(
        panel_id=store.new_panel_id(),
        faculty_ids=[faculty_id1, faculty_id2],
        school=context.school,
        department=context.department,
        venue=venue,
    )
    store.insert_panel(context, panel)
    logger.info(f"Created panel {panel.panel_id} ({faculty_id1}, {faculty_id2}) for {context}")
    return panel


def auto_create_panels(store: ContextStore, context: Context, force_additional: bool = False) -> AutoCreateResult:
    """Pair every unpanelled faculty member sequentially by id.

    Existing panels are never touched. Whether to proceed when panels
    already exist is the caller's decision; ``force_additional`` is only
    recorded on the result.
    """
    existing = store.fetch_panels(context)
    if existing and not force_additional:
        logger.warning(f"Auto-creating panels for {context} alongside {len(existing)} existing panel(s)")

    pool = available_faculty(store, context)
    created: List[Panel] = []
    for first, second in zip(pool[0::2], pool[1::2]):
        panel = Panel(
            panel_id=store.new_panel_id(),
            faculty_ids=[first.id, second.id],
            school=context.school,
            department=context.department,
        )
        store.insert_panel(context, panel)
        created.append(panel)

    unpaired = [pool[-1].id] if len(pool) % 2 else []
    if unpaired:
        logger.warning(f"Faculty {unpaired[0]} left without a partner in {context}")
    logger.info(f"Auto-created {len(created)} panel(s) for {context}")
    return AutoCreateResult(
        created=created,
        unpaired=unpaired,
        existing_panels=len(existing),
        force_additional=force_additional,
    )


def remove_panel(store: ContextStore, context: Context, panel_id: str) -> RemovedPanel:
    panel, released = store.delete_panel(context, panel_id)
    logger.info(f"Removed panel {panel_id} from {context}; released {len(released)} team(s)")
    return RemovedPanel(panel=panel, unassigned_project_ids=released)


__all__ = [
    "auto_create_panels",
    "available_faculty",
    "create_panel",
    "panel_membership",
    "remove_panel",
]
