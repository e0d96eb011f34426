# app/schemas/proposal_schema.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.proposal import ProposalStatusEnum
from app.schemas.project_schema import ProjectOut
from app.schemas.user_schema import UserBrief


class ProposalCreate(BaseModel):
    # project_id comes from the URL, freelancer_id from the token
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    delivery_days: int = Field(7, ge=1, le=365)
    message: Optional[str] = None


class ProposalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    proposal_id: str
    project_id: str
    freelancer_id: str
    price: Decimal
    delivery_days: int
    message: Optional[str] = None
    status: ProposalStatusEnum
    created_at: datetime
    updated_at: datetime


# client view: who sent the proposal
class ProposalOutWithFreelancer(ProposalOut):
    freelancer: Optional[UserBrief] = None


# freelancer view: which project it was for
class ProposalOutWithProject(ProposalOut):
    project: Optional[ProjectOut] = None
