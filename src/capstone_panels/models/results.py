"""
Pydantic models returned by the engines and the aggregator.

Aggregation outcomes such as a missing marking schema are status values on
these models, not exceptions.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .records import Context, Panel, Project


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class ProjectMarkStatus(str, Enum):
    """Mark completion of one project over a review selection."""
    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"
    NO_SCHEMA = "no-schema"
    NO_REVIEW = "no-review"


class PanelMarkStatus(str, Enum):
    """Mark completion rolled up over a panel's teams."""
    ALL = "all"
    PARTIAL = "partial"
    NONE = "none"
    NO_PROJECTS = "no-projects"


# -----------------------------------------------------------------------------
# Conflict resolution and assignment
# -----------------------------------------------------------------------------

class GuideRelation(BaseModel):
    project_id: str
    guide_id: str
    guide_name: Optional[str] = None


class AssignCheck(BaseModel):
    allowed: bool
    reason: Optional[str] = None


class AssignmentOutcome(BaseModel):
    project_id: str
    panel_id: Optional[str] = None
    previous_panel_id: Optional[str] = None
    changed: bool = True


class SkippedProject(BaseModel):
    project_id: str
    reason: str


class AutoAssignResult(BaseModel):
    assigned: List[AssignmentOutcome] = Field(default_factory=list)
    skipped: List[SkippedProject] = Field(default_factory=list)


class PanelTeamAvailability(BaseModel):
    """Unassigned teams a panel may take, and those its members guide."""
    panel_id: str
    available: List[Project] = Field(default_factory=list)
    excluded: List[SkippedProject] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Panel formation
# -----------------------------------------------------------------------------

class AutoCreateResult(BaseModel):
    created: List[Panel] = Field(default_factory=list)
    unpaired: List[str] = Field(default_factory=list, description="Faculty ids left without a partner")
    existing_panels: int = 0
    force_additional: bool = False


class RemovedPanel(BaseModel):
    panel: Panel
    unassigned_project_ids: List[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Mark completion
# -----------------------------------------------------------------------------

class ProjectMarkInfo(BaseModel):
    review_names: List[str] = Field(default_factory=list)
    total_students: int = 0
    students_with_marks: int = 0
    students_fully_marked: int = 0
    project_marked: bool = False
    project_fully_marked: bool = False
    status: ProjectMarkStatus = ProjectMarkStatus.NONE


class PanelMarkTotals(BaseModel):
    total_projects: int = 0
    fully_marked_projects: int = 0
    marked_projects: int = 0
    partial_projects: int = 0
    unmarked_projects: int = 0
    status: PanelMarkStatus = PanelMarkStatus.NO_PROJECTS


class TeamView(BaseModel):
    id: str
    name: str
    domain: str = "N/A"
    members: List[str] = Field(default_factory=list)
    project: Project
    mark_status: Optional[ProjectMarkInfo] = None


class PanelView(BaseModel):
    """A panel joined with its faculty details and assigned teams."""
    panel_id: str
    faculty_ids: List[str] = Field(default_factory=list)
    faculty_names: List[str] = Field(default_factory=list)
    faculty_employee_ids: List[str] = Field(default_factory=list)
    venue: Optional[str] = None
    school: str
    department: str
    teams: List[TeamView] = Field(default_factory=list)
    mark_summary: Optional[PanelMarkTotals] = None

    def faculty_labels(self) -> List[str]:
        labels = []
        for idx, name in enumerate(self.faculty_names):
            emp_id = self.faculty_employee_ids[idx] if idx < len(self.faculty_employee_ids) else ""
            labels.append(f"{name} (#{emp_id})" if emp_id else name)
        return labels


class PanelMarkSummary(BaseModel):
    teams: List[TeamView] = Field(default_factory=list)
    summary: PanelMarkTotals


class ReviewOption(BaseModel):
    value: str
    label: str


class PanelBoard(BaseModel):
    """Payload consumed by the presentation layer."""
    context: Context
    review_selection: str
    mark_filter: str
    panels: List[PanelView] = Field(default_factory=list)
    review_options: List[ReviewOption] = Field(default_factory=list)
    contexts: List[Context] = Field(default_factory=list)


__all__ = [
    "AssignCheck",
    "AssignmentOutcome",
    "AutoAssignResult",
    "AutoCreateResult",
    "GuideRelation",
    "PanelBoard",
    "PanelMarkStatus",
    "PanelMarkSummary",
    "PanelMarkTotals",
    "PanelTeamAvailability",
    "PanelView",
    "ProjectMarkInfo",
    "ProjectMarkStatus",
    "RemovedPanel",
    "ReviewOption",
    "SkippedProject",
    "TeamView",
]
