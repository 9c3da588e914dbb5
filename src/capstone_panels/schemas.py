from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models.records import Context


class ContextRequest(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    school: str = Field(..., min_length=1, description="School of the admin context")
    department: str = Field(..., min_length=1, description="Department of the admin context")

    @property
    def context(self) -> Context:
        return Context(school=self.school, department=self.department)


class CreatePanelRequest(ContextRequest):
    faculty1_id: Optional[str] = Field(None, alias="faculty1Id")
    faculty2_id: Optional[str] = Field(None, alias="faculty2Id")
    venue: Optional[str] = None


class AutoCreateRequest(ContextRequest):
    force_additional: bool = Field(False, alias="forceAdditional")


class AssignRequest(ContextRequest):
    panel_id: Optional[str] = Field(None, alias="panelId", description="Target panel; null releases the project")
    project_id: str = Field(..., alias="projectId")


class AutoAssignRequest(ContextRequest):
    reserve: int = Field(0, ge=0, alias="buffer", description="Panels held back from auto-assignment")
    prefer_specialization: bool = Field(False, alias="preferSpecialization")
