# app/routers/wallet_router.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.services.wallet_service import WalletService
from app.schemas.wallet_schema import EarningOut, WalletSummaryOut, WithdrawalCreate, WithdrawalOut

router = APIRouter(
    prefix="/wallet",
    tags=["Wallet"],
    dependencies=[Depends(get_current_user)]
)


def get_wallet_service(db: AsyncSession = Depends(get_db)) -> WalletService:
    return WalletService(db)


@router.get("/me", response_model=WalletSummaryOut, summary="My wallet")
async def api_get_my_wallet(
    service: WalletService = Depends(get_wallet_service),
    current_user: User = Depends(get_current_user)
):
    """
    Balance, lifetime earnings, and what is still available after
    pending withdrawal requests
    """
    return await service.get_my_wallet(current_user)


@router.get("/earnings", response_model=List[EarningOut], summary="Settled contracts")
async def api_list_my_earnings(
    service: WalletService = Depends(get_wallet_service),
    current_user: User = Depends(get_current_user)
):
    return await service.list_my_earnings(current_user)


@router.get("/withdrawals", response_model=List[WithdrawalOut], summary="My withdrawal requests")
async def api_list_my_withdrawals(
    service: WalletService = Depends(get_wallet_service),
    current_user: User = Depends(get_current_user)
):
    return await service.list_my_withdrawals(current_user)


@router.post(
    "/withdrawals",
    response_model=WithdrawalOut,
    status_code=status.HTTP_201_CREATED,
    summary="Request a withdrawal"
)
async def api_request_withdrawal(
    data: WithdrawalCreate,
    service: WalletService = Depends(get_wallet_service),
    current_user: User = Depends(get_current_user)
):
    return await service.request_withdrawal(current_user, data.amount)
