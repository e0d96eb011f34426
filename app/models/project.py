# models/project.py
from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, String, TEXT, Numeric, DateTime, ForeignKey, Enum, CHAR, JSON
from sqlalchemy.orm import relationship
from app.core.database import Base


class ProjectStatusEnum(str, enum.Enum):
    draft = "draft"
    open = "open"
    in_progress = "in_progress"
    under_review = "under_review"
    completed = "completed"
    cancelled = "cancelled"


class ServiceTypeEnum(str, enum.Enum):
    design = "design"
    campaign = "campaign"
    full_package = "full_package"


class Project(Base):
    __tablename__ = "projects"

    project_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(TEXT, nullable=False, default="")
    service_type = Column(
        Enum(ServiceTypeEnum, values_callable=lambda obj: [e.value for e in obj]),
        default=ServiceTypeEnum.design,
        nullable=False
    )
    required_skills = Column(JSON, default=list)
    budget = Column(Numeric(12, 2), nullable=False)
    deadline = Column(DateTime, nullable=True)
    status = Column(
        Enum(ProjectStatusEnum, values_callable=lambda obj: [e.value for e in obj]),
        default=ProjectStatusEnum.open,
        nullable=False,
        index=True
    )
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    client = relationship("User", back_populates="projects_owned")

    proposals = relationship(
        "Proposal",
        back_populates="project",
        cascade="all, delete-orphan"
    )

    # one contract per accepted proposal; a project normally has one
    contracts = relationship("Contract", back_populates="project")
