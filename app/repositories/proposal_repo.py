# app/repositories/proposal_repo.py
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import joinedload, selectinload

from app.models.proposal import Proposal, ProposalStatusEnum

# pending or accepted: the freelancer is still in the running for the project
LIVE_PROPOSAL_STATUSES = (ProposalStatusEnum.pending, ProposalStatusEnum.accepted)


class ProposalRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_proposal_by_id(self, proposal_id: str) -> Optional[Proposal]:
        stmt = select(Proposal).where(Proposal.proposal_id == proposal_id).execution_options(
            populate_existing=True
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_proposal_by_id_with_project(self, proposal_id: str) -> Optional[Proposal]:
        """
        Load the proposal with its project (needed for ownership checks)
        """
        stmt = select(Proposal).where(Proposal.proposal_id == proposal_id).options(
            joinedload(Proposal.project)
        ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def check_live_proposal(self, project_id: str, freelancer_id: str) -> Optional[Proposal]:
        """
        A pending or accepted proposal by this freelancer on this project, if any
        """
        stmt = select(Proposal).where(
            Proposal.project_id == project_id,
            Proposal.freelancer_id == freelancer_id,
            Proposal.status.in_(LIVE_PROPOSAL_STATUSES)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_proposals_by_project_id(self, project_id: str) -> List[Proposal]:
        stmt = select(Proposal).where(Proposal.project_id == project_id).options(
            selectinload(Proposal.freelancer)
        ).order_by(Proposal.created_at.desc())
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def get_proposals_by_freelancer_id(self, freelancer_id: str) -> List[Proposal]:
        stmt = select(Proposal).where(Proposal.freelancer_id == freelancer_id).options(
            selectinload(Proposal.project)
        ).order_by(Proposal.created_at.desc())
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def create_proposal(self, proposal: Proposal) -> Proposal:
        self.db.add(proposal)
        await self.db.flush()
        await self.db.refresh(proposal)
        return proposal

    async def transition_status(
        self,
        proposal_id: str,
        expected: ProposalStatusEnum,
        new_status: ProposalStatusEnum,
    ) -> bool:
        """
        Compare-and-swap on proposal.status
        """
        stmt = (
            update(Proposal)
            .where(Proposal.proposal_id == proposal_id, Proposal.status == expected)
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def reject_pending_for_project(self, project_id: str) -> int:
        """
        Reject every pending proposal on a project (used when it is cancelled)
        """
        stmt = (
            update(Proposal)
            .where(Proposal.project_id == project_id, Proposal.status == ProposalStatusEnum.pending)
            .values(status=ProposalStatusEnum.rejected)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount
