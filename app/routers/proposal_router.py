# app/routers/proposal_router.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.services.proposal_service import ProposalService
from app.schemas.contract_schema import ContractOut
from app.schemas.proposal_schema import (
    ProposalCreate,
    ProposalOut,
    ProposalOutWithFreelancer,
    ProposalOutWithProject
)

router = APIRouter(
    prefix="/proposals",
    tags=["Proposals"],
    dependencies=[Depends(get_current_user)]
)

# proposals are created under their project, so that route lives on /projects
project_proposal_router = APIRouter(
    prefix="/projects",
    tags=["Proposals"],
    dependencies=[Depends(get_current_user)]
)


def get_proposal_service(db: AsyncSession = Depends(get_db)) -> ProposalService:
    return ProposalService(db)


@project_proposal_router.post(
    "/{project_id}/proposals",
    response_model=ProposalOut,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a proposal"
)
async def submit_proposal(
    project_id: str,
    proposal_data: ProposalCreate,
    service: ProposalService = Depends(get_proposal_service),
    current_user: User = Depends(get_current_user)
):
    """
    (designer / media buyer) Offer a price and delivery time on an open project.
    One live proposal per project.
    """
    return await service.submit_proposal(project_id, current_user, proposal_data)


@project_proposal_router.get(
    "/{project_id}/proposals",
    response_model=List[ProposalOutWithFreelancer],
    summary="Proposals on my project"
)
async def list_project_proposals(
    project_id: str,
    service: ProposalService = Depends(get_proposal_service),
    current_user: User = Depends(get_current_user)
):
    return await service.list_project_proposals(project_id, current_user)


@router.get("/my", response_model=List[ProposalOutWithProject], summary="My proposals")
async def list_my_proposals(
    service: ProposalService = Depends(get_proposal_service),
    current_user: User = Depends(get_current_user)
):
    return await service.list_my_proposals(current_user)


@router.get("/{proposal_id}", response_model=ProposalOutWithProject)
async def get_proposal(
    proposal_id: str,
    service: ProposalService = Depends(get_proposal_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_proposal(proposal_id, current_user)


@router.post(
    "/{proposal_id}/accept",
    response_model=ContractOut,
    status_code=status.HTTP_201_CREATED,
    summary="Accept a proposal and start the contract"
)
async def accept_proposal(
    proposal_id: str,
    service: ProposalService = Depends(get_proposal_service),
    current_user: User = Depends(get_current_user)
):
    """
    (client) pending proposal -> accepted, contract created in_progress,
    project -> in_progress. All or nothing.
    """
    return await service.accept_proposal(proposal_id, current_user)


@router.post("/{proposal_id}/reject", response_model=ProposalOut)
async def reject_proposal(
    proposal_id: str,
    service: ProposalService = Depends(get_proposal_service),
    current_user: User = Depends(get_current_user)
):
    return await service.reject_proposal(proposal_id, current_user)


@router.post("/{proposal_id}/withdraw", response_model=ProposalOut)
async def withdraw_proposal(
    proposal_id: str,
    service: ProposalService = Depends(get_proposal_service),
    current_user: User = Depends(get_current_user)
):
    return await service.withdraw_proposal(proposal_id, current_user)
