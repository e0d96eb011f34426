# app/services/proposal_service.py

import logging
from datetime import datetime, timedelta
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    ConflictError, InputValidationError, InvalidTransitionError, NotFoundError, UnauthorizedError
)
from app.models.user import User
from app.models.contract import Contract, ContractStatusEnum
from app.models.notification import NotificationTypeEnum
from app.models.project import Project, ProjectStatusEnum
from app.models.proposal import Proposal, ProposalStatusEnum
from app.repositories.contract_repo import ContractRepository
from app.repositories.project_repo import ProjectRepository
from app.repositories.proposal_repo import ProposalRepository
from app.schemas.proposal_schema import ProposalCreate
from app.services.notification_service import NotificationService
from app.utils.money import compute_platform_fee, to_money

logger = logging.getLogger(__name__)


class ProposalService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.proposal_repo = ProposalRepository(db)
        self.project_repo = ProjectRepository(db)
        self.contract_repo = ContractRepository(db)
        self.notification_service = NotificationService(db)

    async def _get_proposal_for_client(self, proposal_id: str, client: User) -> Proposal:
        proposal = await self.proposal_repo.get_proposal_by_id_with_project(proposal_id)
        if not proposal:
            raise NotFoundError("Proposal not found")
        if proposal.project.client_id != client.user_id:
            raise UnauthorizedError("You do not own the project of this proposal")
        return proposal

    async def submit_proposal(
        self,
        project_id: str,
        freelancer: User,
        proposal_data: ProposalCreate
    ) -> Proposal:
        if not freelancer.is_freelancer:
            raise UnauthorizedError("Only freelancers can submit proposals")

        message = (proposal_data.message or "").strip() or None
        if message and len(message) > settings.NOTE_MAX_LENGTH:
            raise InputValidationError(f"Message exceeds {settings.NOTE_MAX_LENGTH} characters")

        # Step 1: validate against the project
        project = await self.project_repo.get_project_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        if project.status != ProjectStatusEnum.open:
            raise InvalidTransitionError("This project is not open for proposals")
        existing = await self.proposal_repo.check_live_proposal(project_id, freelancer.user_id)
        if existing:
            raise ConflictError("You already have an active proposal on this project")

        new_proposal = Proposal(
            project_id=project_id,
            freelancer_id=freelancer.user_id,
            price=to_money(proposal_data.price),
            delivery_days=proposal_data.delivery_days,
            message=message,
            status=ProposalStatusEnum.pending
        )

        # Step 2: proposal + notice to the client in one commit
        try:
            created_proposal = await self.proposal_repo.create_proposal(new_proposal)
            await self.notification_service.create_notification(
                user_id=project.client_id,
                type=NotificationTypeEnum.new_proposal,
                title=f"New proposal on \"{project.title}\"",
                message=f"{freelancer.full_name or freelancer.email} offered ${created_proposal.price:,} "
                        f"in {created_proposal.delivery_days} day(s).",
                reference_id=project.project_id
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Submitting proposal on project {project_id} failed", exc_info=True)
            raise

        logger.info(f"Proposal {created_proposal.proposal_id} submitted by {freelancer.user_id} on project {project_id}")
        return created_proposal

    async def withdraw_proposal(self, proposal_id: str, freelancer: User) -> Proposal:
        proposal = await self.proposal_repo.get_proposal_by_id(proposal_id)
        if not proposal:
            raise NotFoundError("Proposal not found")
        if proposal.freelancer_id != freelancer.user_id:
            raise UnauthorizedError("You can only withdraw your own proposals")
        if proposal.status != ProposalStatusEnum.pending:
            raise InvalidTransitionError(f"Cannot withdraw a proposal in status '{proposal.status.value}'")

        if not await self.proposal_repo.transition_status(
            proposal_id, ProposalStatusEnum.pending, ProposalStatusEnum.withdrawn
        ):
            raise ConflictError("Proposal was modified concurrently")
        await self.db.commit()
        await self.db.refresh(proposal)
        logger.info(f"Proposal {proposal_id} withdrawn")
        return proposal

    async def get_proposal(self, proposal_id: str, user: User) -> Proposal:
        """
        Visible to the freelancer who sent it and the client who owns the project
        """
        proposal = await self.proposal_repo.get_proposal_by_id_with_project(proposal_id)
        if not proposal:
            raise NotFoundError("Proposal not found")
        if user.user_id not in (proposal.freelancer_id, proposal.project.client_id):
            # hide existence from third parties
            raise NotFoundError("Proposal not found")
        return proposal

    async def list_project_proposals(self, project_id: str, client: User) -> List[Proposal]:
        project = await self.project_repo.get_project_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        if project.client_id != client.user_id:
            raise UnauthorizedError("You can only view proposals on your own projects")
        return await self.proposal_repo.get_proposals_by_project_id(project_id)

    async def list_my_proposals(self, freelancer: User) -> List[Proposal]:
        if not freelancer.is_freelancer:
            raise UnauthorizedError("Only freelancers have proposals")
        return await self.proposal_repo.get_proposals_by_freelancer_id(freelancer.user_id)

    def _contract_deadline(self, start: datetime, proposal: Proposal, project: Project) -> datetime:
        deadline = start + timedelta(days=proposal.delivery_days)
        if project.deadline and project.deadline < deadline:
            deadline = project.deadline
        return deadline

    async def accept_proposal(self, proposal_id: str, client: User) -> Contract:
        """
        Accept a pending proposal. In one transaction:
          1. proposal pending -> accepted
          2. contract created (amount = price, fee from the configured rate)
          3. project open -> in_progress
        Nothing is written if any step fails.
        """
        proposal = await self._get_proposal_for_client(proposal_id, client)
        project = proposal.project

        if proposal.status != ProposalStatusEnum.pending:
            raise InvalidTransitionError(f"Cannot accept a proposal in status '{proposal.status.value}'")
        if project.status != ProjectStatusEnum.open:
            raise InvalidTransitionError(f"Project is '{project.status.value}', not open for hiring")
        if await self.contract_repo.check_contract_exists_by_proposal(proposal_id):
            raise ConflictError("A contract already exists for this proposal")

        amount = to_money(proposal.price)
        start = datetime.now()
        contract = Contract(
            project_id=project.project_id,
            proposal_id=proposal.proposal_id,
            client_id=client.user_id,
            freelancer_id=proposal.freelancer_id,
            amount=amount,
            platform_fee=compute_platform_fee(amount, settings.PLATFORM_COMMISSION_RATE),
            status=ContractStatusEnum.in_progress,
            revision_count=0,
            start_date=start,
            deadline=self._contract_deadline(start, proposal, project)
        )

        try:
            # Step 1
            if not await self.proposal_repo.transition_status(
                proposal_id, ProposalStatusEnum.pending, ProposalStatusEnum.accepted
            ):
                raise ConflictError("Proposal was modified concurrently")

            # Step 2
            contract = await self.contract_repo.create_contract(contract)

            # Step 3
            if not await self.project_repo.transition_status(
                project.project_id, [ProjectStatusEnum.open], ProjectStatusEnum.in_progress
            ):
                raise ConflictError("Project is no longer open")

            await self.notification_service.create_notification(
                user_id=proposal.freelancer_id,
                type=NotificationTypeEnum.proposal_accepted,
                title=f"Your proposal for \"{project.title}\" was accepted",
                reference_id=proposal.proposal_id
            )
            await self.notification_service.create_notification(
                user_id=proposal.freelancer_id,
                type=NotificationTypeEnum.contract_created,
                title=f"Contract started: \"{project.title}\"",
                message=f"Amount ${contract.amount:,}, you will earn ${contract.freelancer_net:,}.",
                reference_id=contract.contract_id
            )
            await self.db.commit()
        except IntegrityError:
            # unique proposal_id on contracts: someone accepted it first
            await self.db.rollback()
            logger.error(f"Accepting proposal {proposal_id} hit a uniqueness conflict", exc_info=True)
            raise ConflictError("A contract already exists for this proposal")
        except Exception:
            await self.db.rollback()
            logger.error(f"Accepting proposal {proposal_id} failed, rolled back", exc_info=True)
            raise

        logger.info(
            f"Proposal {proposal_id} accepted -> contract {contract.contract_id} "
            f"(amount={contract.amount}, platform_fee={contract.platform_fee})"
        )
        return await self.contract_repo.get_contract_by_id(contract.contract_id)

    async def reject_proposal(self, proposal_id: str, client: User) -> Proposal:
        """
        pending -> rejected; the project and contracts are untouched
        """
        proposal = await self._get_proposal_for_client(proposal_id, client)
        if proposal.status != ProposalStatusEnum.pending:
            raise InvalidTransitionError(f"Cannot reject a proposal in status '{proposal.status.value}'")

        try:
            if not await self.proposal_repo.transition_status(
                proposal_id, ProposalStatusEnum.pending, ProposalStatusEnum.rejected
            ):
                raise ConflictError("Proposal was modified concurrently")
            await self.notification_service.create_notification(
                user_id=proposal.freelancer_id,
                type=NotificationTypeEnum.proposal_rejected,
                title=f"Your proposal for \"{proposal.project.title}\" was not accepted",
                reference_id=proposal.proposal_id
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Rejecting proposal {proposal_id} failed", exc_info=True)
            raise

        await self.db.refresh(proposal)
        logger.info(f"Proposal {proposal_id} rejected")
        return proposal
