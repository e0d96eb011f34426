# app/schemas/contract_schema.py

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.contract import ContractStatusEnum
from app.models.payment import PaymentStatusEnum
from app.schemas.project_schema import ProjectOut
from app.schemas.user_schema import UserBrief
from app.schemas.wallet_schema import WalletOut
from app.utils.contract_state_machine import ContractActionEnum


class ContractNote(BaseModel):
    """Optional note posted into the contract thread with submit / revision"""
    note: Optional[str] = None


class ContractCancel(BaseModel):
    reason: Optional[str] = None


class ContractOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    contract_id: str
    project_id: str
    proposal_id: Optional[str] = None
    client_id: str
    freelancer_id: str
    amount: Decimal
    platform_fee: Decimal
    freelancer_net: Decimal
    status: ContractStatusEnum
    revision_count: int
    start_date: datetime
    deadline: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    project: Optional[ProjectOut] = None
    client: Optional[UserBrief] = None
    freelancer: Optional[UserBrief] = None


class ContractDetailOut(ContractOut):
    # what the caller may do next, so the UI does not re-encode the rules
    allowed_actions: List[ContractActionEnum] = []
    can_release_payment: bool = False


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    contract_id: str
    payer_id: str
    amount: Decimal
    platform_fee: Decimal
    status: PaymentStatusEnum
    created_at: datetime


class SettlementOut(BaseModel):
    contract: ContractOut
    payment: PaymentOut
    wallet: WalletOut
    freelancer_net: Decimal = Field(..., description="Amount credited to the freelancer wallet")
