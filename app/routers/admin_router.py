# app/routers/admin_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.core.security import require_roles
from app.models.user import User, UserRoleEnum
from app.models.wallet import WithdrawalStatusEnum
from app.services.admin_service import AdminService
from app.services.dispute_service import DisputeService
from app.services.wallet_service import WalletService
from app.schemas.dispute_schema import AdminLogOut, DisputeOut, DisputeResolve
from app.schemas.wallet_schema import WithdrawalDecision, WithdrawalOut

require_admin = require_roles(UserRoleEnum.admin)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)]
)


# ---- withdrawals ----

@router.get("/withdrawals", response_model=List[WithdrawalOut], summary="Withdrawal queue")
async def api_list_withdrawals(
    status_filter: Optional[WithdrawalStatusEnum] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await WalletService(db).list_withdrawals(admin, status_filter)


@router.post("/withdrawals/{withdrawal_id}/approve", response_model=WithdrawalOut)
async def api_approve_withdrawal(
    withdrawal_id: str,
    data: Optional[WithdrawalDecision] = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    pending -> approved; the amount is debited from the wallet
    """
    return await WalletService(db).approve_withdrawal(withdrawal_id, admin, data.reason if data else None)


@router.post("/withdrawals/{withdrawal_id}/reject", response_model=WithdrawalOut)
async def api_reject_withdrawal(
    withdrawal_id: str,
    data: Optional[WithdrawalDecision] = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await WalletService(db).reject_withdrawal(withdrawal_id, admin, data.reason if data else None)


@router.post("/withdrawals/{withdrawal_id}/process", response_model=WithdrawalOut)
async def api_process_withdrawal(
    withdrawal_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    approved -> processed, once the payout left the platform
    """
    return await WalletService(db).mark_withdrawal_processed(withdrawal_id, admin)


# ---- disputes ----

@router.get("/disputes", response_model=List[DisputeOut], summary="Disputes")
async def api_list_disputes(
    unresolved_only: bool = False,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await DisputeService(db).list_disputes(admin, unresolved_only)


@router.post("/disputes/{dispute_id}/resolve", response_model=DisputeOut)
async def api_resolve_dispute(
    dispute_id: str,
    data: DisputeResolve,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Close a dispute; `cancel_contract=true` also cancels the contract
    """
    return await DisputeService(db).resolve_dispute(
        dispute_id, admin, data.resolution, data.cancel_contract, data.admin_notes
    )


# ---- audit ----

@router.get("/logs", response_model=List[AdminLogOut], summary="Admin audit log")
async def api_list_admin_logs(
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await AdminService(db).list_admin_logs(admin, limit)
