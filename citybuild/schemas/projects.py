#citybuild/schemas/projects.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field, model_validator

from citybuild.models.enums import FileCategory, ProjectStatus
from citybuild.schemas.primitives import CamelModel, Money, NonNegInt, UtcDatetime


class PlanFile(CamelModel):
    id: str
    name: str
    type: str = Field(..., description="MIME type")
    size: NonNegInt
    url: str
    uploaded_at: UtcDatetime
    category: Optional[FileCategory] = None


class Project(CamelModel):
    id: str = Field(..., min_length=1)
    name: str
    description: str
    gc_id: str
    status: ProjectStatus = ProjectStatus.draft
    plan_files: List[PlanFile] = Field(default_factory=list)
    estimated_cost: Optional[Money] = None
    timeline: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @model_validator(mode="after")
    def _updated_not_before_created(self):
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt must not be earlier than createdAt.")
        return self


class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=256)
    description: str = Field(..., min_length=1)
    gc_id: str = Field(..., min_length=1)
    status: ProjectStatus = ProjectStatus.draft
    plan_files: List[PlanFile] = Field(default_factory=list)
    estimated_cost: Optional[Money] = None
    timeline: Optional[str] = None


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=256)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    plan_files: Optional[List[PlanFile]] = None
    estimated_cost: Optional[Money] = None
    timeline: Optional[str] = None


class FileDescriptor(CamelModel):
    """What the mock upload validates; bytes are never stored."""

    name: str = Field(..., min_length=1)
    type: str
    size: NonNegInt


class UploadedFile(CamelModel):
    id: str
    url: str
