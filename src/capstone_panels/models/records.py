"""
Pydantic records exchanged with the data-fetch collaborators.

One typed contract is used for every store and API payload. Field names are
snake_case; the camelCase names used by the admin UI are accepted as aliases.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import SCHEMA_KEY_SEPARATOR


class RecordModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# -----------------------------------------------------------------------------
# Context
# -----------------------------------------------------------------------------

class Context(BaseModel):
    """A (school, department) pair; the partitioning key for all state."""
    model_config = ConfigDict(frozen=True)

    school: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)

    @property
    def key(self) -> str:
        return schema_key(self.school, self.department)

    @property
    def slug(self) -> str:
        """Directory name: readable prefix plus a digest of the exact pair."""
        pair = json.dumps([self.school, self.department])
        digest = hashlib.sha1(pair.encode("utf-8")).hexdigest()[:12]
        return f"{slugify(f'{self.school}--{self.department}')}-{digest}"

    def __str__(self) -> str:
        return f"{self.school} / {self.department}"


def schema_key(school: Optional[str], department: Optional[str]) -> Optional[str]:
    if not school or not department:
        return None
    return f"{school}{SCHEMA_KEY_SEPARATOR}{department}"


def slugify(value: str) -> str:
    return (
        value.lower()
        .replace(" ", "-")
        .replace("/", "-")
        .replace("|", "-")
        .replace(".", "-")
    )


# -----------------------------------------------------------------------------
# People and panels
# -----------------------------------------------------------------------------

class Faculty(RecordModel):
    id: str
    employee_id: str = Field("", alias="employeeId")
    name: str
    email: Optional[str] = Field(None, alias="emailId")
    specializations: List[str] = Field(default_factory=list, alias="specialization")


class Panel(RecordModel):
    panel_id: str = Field(..., alias="panelId")
    faculty_ids: List[str] = Field(..., alias="facultyIds")
    school: str
    department: str
    venue: Optional[str] = None

    @field_validator("faculty_ids")
    @classmethod
    def two_distinct_members(cls, value: List[str]) -> List[str]:
        if len(value) != 2 or len(set(value)) != 2:
            raise ValueError("a panel needs exactly two distinct faculty ids")
        return value

    @property
    def pair(self) -> frozenset:
        return frozenset(self.faculty_ids)


# -----------------------------------------------------------------------------
# Projects, students and reviews
# -----------------------------------------------------------------------------

class Attendance(RecordModel):
    value: bool = False


class Review(RecordModel):
    marks: Dict[str, Any] = Field(default_factory=dict)
    locked: bool = False
    attendance: Attendance = Field(default_factory=Attendance)
    comments: Optional[str] = None


class Student(RecordModel):
    reg_no: str = Field(..., alias="regNo")
    name: str = ""
    reviews: Dict[str, Review] = Field(default_factory=dict)


class Project(RecordModel):
    project_id: str = Field(..., alias="projectId")
    name: str
    domain: Optional[str] = None
    specialization: Optional[str] = None
    school: Optional[str] = None
    department: Optional[str] = None
    guide_id: Optional[str] = Field(None, alias="guideId")
    panel_id: Optional[str] = Field(None, alias="panelId")
    students: List[Student] = Field(default_factory=list)

    @property
    def member_names(self) -> List[str]:
        return [student.name or student.reg_no for student in self.students]


# -----------------------------------------------------------------------------
# Marking schema
# -----------------------------------------------------------------------------

class FacultyType(str, Enum):
    """Faculty role that owns a review."""
    GUIDE = "guide"
    PANEL = "panel"


class Component(RecordModel):
    name: str
    weight: float = 0


class Deadline(RecordModel):
    start: datetime = Field(..., alias="from")
    end: datetime = Field(..., alias="to")


class ReviewDefinition(RecordModel):
    review_name: str = Field(..., alias="reviewName")
    display_name: Optional[str] = Field(None, alias="displayName")
    faculty_type: FacultyType = Field(..., alias="facultyType")
    components: List[Component] = Field(default_factory=list)
    deadline: Optional[Deadline] = None
    requires_ppt: bool = Field(False, alias="requiresPPT")

    @property
    def label(self) -> str:
        return self.display_name or self.review_name


class MarkingSchema(RecordModel):
    school: str
    department: str
    reviews: List[ReviewDefinition] = Field(default_factory=list)

    def panel_reviews(self) -> List[ReviewDefinition]:
        return [review for review in self.reviews if review.faculty_type == FacultyType.PANEL]


# -----------------------------------------------------------------------------
# Fetch envelopes
# -----------------------------------------------------------------------------

class PanelProjects(RecordModel):
    panel_id: str = Field(..., alias="panelId")
    projects: List[Project] = Field(default_factory=list)


class GuideProjects(RecordModel):
    faculty: Faculty
    guided_projects: List[Project] = Field(default_factory=list, alias="guidedProjects")


__all__ = [
    "Attendance",
    "Component",
    "Context",
    "Deadline",
    "Faculty",
    "FacultyType",
    "GuideProjects",
    "MarkingSchema",
    "Panel",
    "PanelProjects",
    "Project",
    "Review",
    "ReviewDefinition",
    "Student",
    "schema_key",
    "slugify",
]
