"""
Review-completion aggregation.

A student's review counts as marked when any of its mark components holds a
positive number. Numeric strings are coerced; blanks, non-numeric text, zero
and negative values do not count.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .config import ALL_REVIEWS
from .models.records import MarkingSchema, Panel, Project, Review, schema_key
from .models.results import (
    PanelMarkStatus,
    PanelMarkSummary,
    PanelMarkTotals,
    PanelView,
    ProjectMarkInfo,
    ProjectMarkStatus,
    ReviewOption,
    TeamView,
)

logger = logging.getLogger("uvicorn.error")

SchemaLoader = Callable[[str, str], Optional[MarkingSchema]]


def _positive_number(value: Any) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, (int, float)):
        return not math.isnan(value) and value > 0
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return False
        try:
            numeric = float(trimmed)
        except ValueError:
            return False
        return not math.isnan(numeric) and numeric > 0
    return False


def review_has_positive_marks(review: Optional[Review]) -> bool:
    if review is None:
        return False
    return any(_positive_number(value) for value in review.marks.values())


def resolve_context(project: Optional[Project], panel: Optional[Panel]) -> Tuple[Optional[str], Optional[str]]:
    school = (project.school if project else None) or (panel.school if panel else None)
    department = (project.department if project else None) or (panel.department if panel else None)
    if not school or not department:
        return None, None
    return school, department


class SchemaCache:
    """Per-run marking schema cache keyed by ``school|||department``.

    Missing schemas are cached too, so a context without one is fetched once.
    """

    def __init__(self, loader: SchemaLoader) -> None:
        self._loader = loader
        self._schemas: Dict[str, Optional[MarkingSchema]] = {}

    def get(self, school: Optional[str], department: Optional[str]) -> Optional[MarkingSchema]:
        key = schema_key(school, department)
        if key is None:
            return None
        if key not in self._schemas:
            self._schemas[key] = self._loader(school, department)
            if self._schemas[key] is None:
                logger.debug(f"No marking schema configured for {school} / {department}")
        return self._schemas[key]

    def prime(self, pairs: Iterable[Tuple[Optional[str], Optional[str]]]) -> None:
        for school, department in pairs:
            self.get(school, department)

    def schemas(self) -> List[MarkingSchema]:
        return [schema for schema in self._schemas.values() if schema is not None]

    def __contains__(self, key: str) -> bool:
        return key in self._schemas


def compute_project_mark_status(
    project: Project,
    panel: Optional[Panel],
    schema_cache: SchemaCache,
    review_selection: str = ALL_REVIEWS,
) -> ProjectMarkInfo:
    total_students = len(project.students)
    if total_students == 0:
        return ProjectMarkInfo()

    school, department = resolve_context(project, panel)
    schema = schema_cache.get(school, department)
    panel_reviews = schema.panel_reviews() if schema else []
    if not panel_reviews:
        return ProjectMarkInfo(total_students=total_students, status=ProjectMarkStatus.NO_SCHEMA)

    if review_selection and review_selection != ALL_REVIEWS:
        selected = [r for r in panel_reviews if r.review_name == review_selection]
    else:
        selected = panel_reviews
    if not selected:
        return ProjectMarkInfo(
            review_names=[r.review_name for r in panel_reviews],
            total_students=total_students,
            status=ProjectMarkStatus.NO_REVIEW,
        )

    review_names = [r.review_name for r in selected]
    with_marks = 0
    fully_marked = 0
    for student in project.students:
        marked = [review_has_positive_marks(student.reviews.get(name)) for name in review_names]
        if any(marked):
            with_marks += 1
        if all(marked):
            fully_marked += 1

    project_fully_marked = fully_marked == total_students
    project_marked = with_marks > 0
    if project_fully_marked:
        status = ProjectMarkStatus.FULL
    elif project_marked:
        status = ProjectMarkStatus.PARTIAL
    else:
        status = ProjectMarkStatus.NONE
    return ProjectMarkInfo(
        review_names=review_names,
        total_students=total_students,
        students_with_marks=with_marks,
        students_fully_marked=fully_marked,
        project_marked=project_marked,
        project_fully_marked=project_fully_marked,
        status=status,
    )


def _panel_of(view: PanelView) -> Panel:
    return Panel.model_construct(
        panel_id=view.panel_id,
        faculty_ids=view.faculty_ids,
        school=view.school,
        department=view.department,
        venue=view.venue,
    )


def compute_panel_mark_summary(
    panel: PanelView,
    schema_cache: SchemaCache,
    review_selection: str = ALL_REVIEWS,
) -> PanelMarkSummary:
    record = _panel_of(panel)
    teams = [
        team.model_copy(
            update={"mark_status": compute_project_mark_status(team.project, record, schema_cache, review_selection)}
        )
        for team in panel.teams
    ]

    total = len(teams)
    fully = sum(1 for team in teams if team.mark_status.project_fully_marked)
    marked = sum(1 for team in teams if team.mark_status.project_marked)
    if total == 0:
        status = PanelMarkStatus.NO_PROJECTS
    elif fully == total:
        status = PanelMarkStatus.ALL
    elif marked == 0:
        status = PanelMarkStatus.NONE
    else:
        status = PanelMarkStatus.PARTIAL

    return PanelMarkSummary(
        teams=teams,
        summary=PanelMarkTotals(
            total_projects=total,
            fully_marked_projects=fully,
            marked_projects=marked,
            partial_projects=max(marked - fully, 0),
            unmarked_projects=max(total - marked, 0),
            status=status,
        ),
    )


def prime_for_panels(schema_cache: SchemaCache, panels: Iterable[PanelView]) -> None:
    """Load the schema of every context referenced by the panels' teams."""
    pairs = []
    for view in panels:
        record = _panel_of(view)
        for team in view.teams:
            pairs.append(resolve_context(team.project, record))
    schema_cache.prime(pairs)


def build_review_options(schema_cache: SchemaCache) -> List[ReviewOption]:
    options: Dict[str, ReviewOption] = {}
    for schema in schema_cache.schemas():
        for review in schema.panel_reviews():
            if review.review_name and review.review_name not in options:
                options[review.review_name] = ReviewOption(value=review.review_name, label=review.label)
    return sorted(options.values(), key=lambda option: option.label)


__all__ = [
    "SchemaCache",
    "build_review_options",
    "compute_panel_mark_summary",
    "compute_project_mark_status",
    "prime_for_panels",
    "resolve_context",
    "review_has_positive_marks",
]
