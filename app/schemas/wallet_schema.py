# app/schemas/wallet_schema.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.wallet import WithdrawalStatusEnum


class WalletOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    wallet_id: str
    user_id: str
    balance: Decimal
    total_earned: Decimal
    updated_at: Optional[datetime] = None


class WalletSummaryOut(WalletOut):
    # balance minus what pending withdrawal requests already claim
    pending_withdrawals: Decimal
    available: Decimal


class WithdrawalCreate(BaseModel):
    # no gt=0 here: non-positive amounts are rejected by the ledger itself
    amount: Decimal = Field(..., max_digits=12, decimal_places=2)


class WithdrawalDecision(BaseModel):
    reason: Optional[str] = None


class WithdrawalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    withdrawal_id: str
    wallet_id: str
    user_id: str
    amount: Decimal
    status: WithdrawalStatusEnum
    created_at: datetime
    updated_at: datetime


class EarningOut(BaseModel):
    contract_id: str
    project_title: str
    amount: Decimal
    platform_fee: Decimal
    earned: Decimal
    completed_at: datetime
