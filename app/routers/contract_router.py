# app/routers/contract_router.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.services.contract_service import ContractService
from app.services.dispute_service import DisputeService
from app.services.escrow_service import EscrowService
from app.services.message_service import MessageService
from app.services.review_service import ReviewService
from app.schemas.contract_schema import (
    ContractCancel, ContractDetailOut, ContractNote, ContractOut, SettlementOut
)
from app.schemas.dispute_schema import DisputeCreate, DisputeOut
from app.schemas.message_schema import MessageIn, MessageOut
from app.schemas.review_schema import ReviewCreate, ReviewOut

from app.models.user import User
from app.core.security import get_current_user
from app.core.database import get_db

router = APIRouter(
    prefix="/contracts",
    tags=["Contracts"],
    dependencies=[Depends(get_current_user)]
)


def get_contract_service(db: AsyncSession = Depends(get_db)) -> ContractService:
    return ContractService(db)


@router.get(
    "/my",
    response_model=List[ContractOut],
    summary="My contracts"
)
async def api_get_my_contracts(
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    """
    Contracts where I am the client or the freelancer, newest first
    """
    return await service.get_my_contracts(current_user)


@router.get(
    "/{contract_id}",
    response_model=ContractDetailOut,
    summary="Contract details"
)
async def api_get_contract_details(
    contract_id: str,
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    """
    Includes `allowed_actions` for the caller. Only the parties (and admins)
    can see a contract.
    """
    return await service.get_contract_details(contract_id, current_user)


@router.post("/{contract_id}/submit", response_model=ContractOut, summary="(freelancer) Submit work")
async def api_submit_work(
    contract_id: str,
    data: Optional[ContractNote] = None,
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    return await service.submit_work(contract_id, current_user, data.note if data else None)


@router.post("/{contract_id}/request-revision", response_model=ContractOut, summary="(client) Request a revision")
async def api_request_revision(
    contract_id: str,
    data: Optional[ContractNote] = None,
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    return await service.request_revision(contract_id, current_user, data.note if data else None)


@router.post("/{contract_id}/approve", response_model=ContractOut, summary="(client) Approve submitted work")
async def api_approve_work(
    contract_id: str,
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    return await service.approve_work(contract_id, current_user)


@router.post("/{contract_id}/cancel", response_model=ContractOut, summary="Cancel an active contract")
async def api_cancel_contract(
    contract_id: str,
    data: Optional[ContractCancel] = None,
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    return await service.cancel_contract(contract_id, current_user, data.reason if data else None)


@router.post(
    "/{contract_id}/release-payment",
    response_model=SettlementOut,
    summary="(client) Release escrow to the freelancer"
)
async def api_release_payment(
    contract_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    approved -> completed. Credits amount minus platform fee to the
    freelancer's wallet exactly once; a repeat call returns 409.
    """
    result = await EscrowService(db).release_payment(contract_id, current_user)
    return SettlementOut.model_validate(result, from_attributes=True)


# ---- thread ----

@router.get("/{contract_id}/messages", response_model=List[MessageOut], summary="Contract thread")
async def api_list_messages(
    contract_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await MessageService(db).list_messages(contract_id, current_user)


@router.post(
    "/{contract_id}/messages",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    summary="Post to the contract thread"
)
async def api_send_message(
    contract_id: str,
    data: MessageIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await MessageService(db).send_message(contract_id, current_user, data.content, data.file_url)


# ---- reviews / disputes ----

@router.post(
    "/{contract_id}/reviews",
    response_model=ReviewOut,
    status_code=status.HTTP_201_CREATED,
    summary="Review the other party"
)
async def api_create_review(
    contract_id: str,
    data: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await ReviewService(db).create_review(contract_id, current_user, data.rating, data.comment)


@router.post(
    "/{contract_id}/disputes",
    response_model=DisputeOut,
    status_code=status.HTTP_201_CREATED,
    summary="Open a dispute"
)
async def api_open_dispute(
    contract_id: str,
    data: DisputeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await DisputeService(db).open_dispute(contract_id, current_user, data.reason)


@router.get("/{contract_id}/disputes", response_model=List[DisputeOut])
async def api_list_contract_disputes(
    contract_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await DisputeService(db).list_contract_disputes(contract_id, current_user)
