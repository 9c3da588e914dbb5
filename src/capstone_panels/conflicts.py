"""Guide-on-own-panel conflict checks."""
from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from .models.records import GuideProjects, Project
from .models.results import AssignCheck, GuideRelation

GuideIndex = Mapping[str, GuideRelation]


def build_guide_index(
    guide_projects: Iterable[GuideProjects],
    projects: Optional[Iterable[Project]] = None,
) -> Dict[str, GuideRelation]:
    """Map project id -> guide relation.

    Projects that carry ``guide_id`` themselves are indexed first; the
    guide -> projects feed then overrides them, since it carries names.
    """
    index: Dict[str, GuideRelation] = {}
    for project in projects or []:
        if project.guide_id:
            index[project.project_id] = GuideRelation(project_id=project.project_id, guide_id=project.guide_id)
    for entry in guide_projects:
        for project in entry.guided_projects:
            index[project.project_id] = GuideRelation(
                project_id=project.project_id,
                guide_id=entry.faculty.id,
                guide_name=entry.faculty.name,
            )
    return index


def can_assign(project_id: str, panel_faculty_ids: Iterable[str], guide_index: GuideIndex) -> AssignCheck:
    relation = guide_index.get(project_id)
    if relation is None:
        return AssignCheck(allowed=True)
    if relation.guide_id in set(panel_faculty_ids):
        guide = relation.guide_name or relation.guide_id
        return AssignCheck(allowed=False, reason=f"Cannot assign: {guide} is the guide for this project")
    return AssignCheck(allowed=True)


__all__ = ["GuideIndex", "build_guide_index", "can_assign"]
