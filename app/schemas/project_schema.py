# app/schemas/project_schema.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.project import ProjectStatusEnum, ServiceTypeEnum


class ProjectBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=10000)
    service_type: ServiceTypeEnum = ServiceTypeEnum.design
    required_skills: List[str] = []
    budget: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    deadline: Optional[datetime] = None


class ProjectCreate(ProjectBase):
    # a client may park a project as draft before publishing it
    as_draft: bool = False

    @field_validator('title')
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Title must not be blank')
        return v

    @field_validator('required_skills')
    @classmethod
    def clean_skills(cls, v: List[str]) -> List[str]:
        # drop blanks and duplicates, keep order
        seen = []
        for skill in (s.strip() for s in v):
            if skill and skill not in seen:
                seen.append(skill)
        return seen


class ProjectOut(ProjectBase):
    model_config = ConfigDict(from_attributes=True)

    project_id: str
    client_id: str
    status: ProjectStatusEnum
    created_at: datetime
    updated_at: datetime
