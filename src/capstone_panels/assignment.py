"""
Project team to panel assignment.

Manual assignment refuses a panel that contains the project's guide.
Automatic assignment is a greedy pass over the unassigned teams in ascending
project id, giving each the first conflict-free panel in ascending panel id.
It never moves teams that already have a panel.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .conflicts import GuideIndex, build_guide_index, can_assign
from .errors import ConflictError, InvalidSelection, NotFound
from .models.records import Context, Faculty, Panel, Project
from .models.results import (
    AssignmentOutcome,
    AutoAssignResult,
    PanelTeamAvailability,
    SkippedProject,
)
from .store import ContextStore

logger = logging.getLogger("uvicorn.error")

NO_ELIGIBLE_PANEL = "no eligible panel (all conflict)"


def _guide_index(store: ContextStore, context: Context, projects: List[Project]) -> Dict:
    return build_guide_index(store.fetch_guide_projects(context), projects)


def _find_panel(store: ContextStore, context: Context, panel_id: str) -> Panel:
    panel = next((p for p in store.fetch_panels(context) if p.panel_id == panel_id), None)
    if panel is None:
        raise NotFound("panel", panel_id)
    return panel


def assign_project(store: ContextStore, context: Context, panel_id: str, project_id: str) -> AssignmentOutcome:
    panel = _find_panel(store, context, panel_id)
    projects = store.fetch_projects(context)
    project = next((p for p in projects if p.project_id == project_id), None)
    if project is None:
        raise NotFound("project", project_id)

    check = can_assign(project_id, panel.faculty_ids, _guide_index(store, context, projects))
    if not check.allowed:
        logger.warning(f"Refused {project_id} -> {panel_id}: {check.reason}")
        raise ConflictError(check.reason or "Guide conflict")

    previous = project.panel_id
    if previous == panel_id:
        return AssignmentOutcome(project_id=project_id, panel_id=panel_id, previous_panel_id=previous, changed=False)

    store.update_project_panel(context, project_id, panel_id)
    logger.info(f"Assigned project {project_id} to panel {panel_id} (was {previous})")
    return AssignmentOutcome(project_id=project_id, panel_id=panel_id, previous_panel_id=previous)


def unassign_project(store: ContextStore, context: Context, project_id: str) -> AssignmentOutcome:
    project = next((p for p in store.fetch_projects(context) if p.project_id == project_id), None)
    if project is None:
        raise NotFound("project", project_id)
    previous = project.panel_id
    if previous is not None:
        store.update_project_panel(context, project_id, None)
        logger.info(f"Unassigned project {project_id} from panel {previous}")
    return AssignmentOutcome(project_id=project_id, previous_panel_id=previous, changed=previous is not None)


def set_project_panel(
    store: ContextStore,
    context: Context,
    panel_id: Optional[str],
    project_id: str,
) -> AssignmentOutcome:
    """Bind a project to ``panel_id``, or release it when ``panel_id`` is empty."""
    if not panel_id or panel_id == "null":
        return unassign_project(store, context, project_id)
    return assign_project(store, context, panel_id, project_id)


def _shares_specialization(project: Project, panel: Panel, faculty: Dict[str, Faculty]) -> bool:
    wanted = (project.specialization or "").strip()
    if not wanted:
        return False
    for faculty_id in panel.faculty_ids:
        member = faculty.get(faculty_id)
        if member and any(s.strip() == wanted for s in member.specializations):
            return True
    return False


def _pick_panel(
    project: Project,
    panels: List[Panel],
    guide_index: GuideIndex,
    faculty: Optional[Dict[str, Faculty]] = None,
) -> Optional[Panel]:
    eligible = [p for p in panels if can_assign(project.project_id, p.faculty_ids, guide_index).allowed]
    if not eligible:
        return None
    if faculty is not None:
        preferred = next((p for p in eligible if _shares_specialization(project, p, faculty)), None)
        if preferred is not None:
            return preferred
    return eligible[0]


def auto_assign_all(
    store: ContextStore,
    context: Context,
    reserve: int = 0,
    prefer_specialization: bool = False,
) -> AutoAssignResult:
    """Assign every unassigned team to the first conflict-free panel.

    ``reserve`` holds back the last N panels (in panel id order) as a buffer.
    With ``prefer_specialization`` a conflict-free panel whose faculty share
    the project's specialization wins over the first conflict-free one.
    """
    if reserve < 0:
        raise InvalidSelection("reserve must not be negative")
    panels = sorted(store.fetch_panels(context), key=lambda p: p.panel_id)
    if not panels:
        raise InvalidSelection("No panels available.")
    if reserve:
        panels = panels[: max(len(panels) - reserve, 0)]
        if not panels:
            raise InvalidSelection("No panels left for assignment (reserve too large).")

    projects = store.fetch_projects(context)
    guide_index = _guide_index(store, context, projects)
    faculty = {f.id: f for f in store.fetch_faculty(context)} if prefer_specialization else None
    candidates = sorted((p for p in projects if p.panel_id is None), key=lambda p: p.project_id)

    result = AutoAssignResult()
    bindings: Dict[str, str] = {}
    for project in candidates:
        panel = _pick_panel(project, panels, guide_index, faculty)
        if panel is None:
            logger.warning(f"Skipping project {project.project_id}: {NO_ELIGIBLE_PANEL}")
            result.skipped.append(SkippedProject(project_id=project.project_id, reason=NO_ELIGIBLE_PANEL))
            continue
        bindings[project.project_id] = panel.panel_id
        result.assigned.append(AssignmentOutcome(project_id=project.project_id, panel_id=panel.panel_id))

    store.update_project_panels(context, bindings)
    logger.info(f"Auto-assigned {len(result.assigned)} team(s) in {context}, skipped {len(result.skipped)}")
    return result


def teams_for_panel(store: ContextStore, context: Context, panel_id: str) -> PanelTeamAvailability:
    panel = _find_panel(store, context, panel_id)
    projects = store.fetch_projects(context)
    guide_index = _guide_index(store, context, projects)
    availability = PanelTeamAvailability(panel_id=panel_id)
    for project in sorted(projects, key=lambda p: p.project_id):
        if project.panel_id is not None:
            continue
        check = can_assign(project.project_id, panel.faculty_ids, guide_index)
        if check.allowed:
            availability.available.append(project)
        else:
            availability.excluded.append(SkippedProject(project_id=project.project_id, reason=check.reason or ""))
    return availability


__all__ = [
    "NO_ELIGIBLE_PANEL",
    "assign_project",
    "auto_assign_all",
    "set_project_panel",
    "teams_for_panel",
    "unassign_project",
]
