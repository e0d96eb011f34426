# app/schemas/dispute_schema.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.dispute import DisputeStatusEnum


class DisputeCreate(BaseModel):
    reason: str = Field(..., max_length=5000)


class DisputeResolve(BaseModel):
    resolution: str = Field(..., min_length=1, max_length=5000)
    cancel_contract: bool = False
    admin_notes: Optional[str] = Field(None, max_length=5000)


class DisputeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    dispute_id: str
    contract_id: str
    reported_by: str
    reason: str
    status: DisputeStatusEnum
    resolution: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AdminLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    log_id: str
    admin_id: str
    action: str
    details: Optional[dict] = None
    created_at: datetime
