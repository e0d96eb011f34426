# app/services/dispute_service.py

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ConflictError, InputValidationError, InvalidTransitionError, NotFoundError, UnauthorizedError
)
from app.models.dispute import Dispute, DisputeStatusEnum
from app.models.notification import NotificationTypeEnum
from app.models.project import ProjectStatusEnum
from app.models.user import User
from app.repositories.admin_log_repo import AdminLogRepository
from app.repositories.dispute_repo import DisputeRepository
from app.repositories.user_repo import UserRepository
from app.services.contract_service import ContractService
from app.services.notification_service import NotificationService
from app.utils.contract_state_machine import (
    ContractActionEnum, ContractPartyEnum, apply_action, is_terminal
)

logger = logging.getLogger(__name__)


class DisputeService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.dispute_repo = DisputeRepository(db)
        self.user_repo = UserRepository(db)
        self.admin_log_repo = AdminLogRepository(db)
        self.contract_service = ContractService(db)
        self.notification_service = NotificationService(db)

    async def open_dispute(self, contract_id: str, user: User, reason: str) -> Dispute:
        contract, party = await self.contract_service.get_contract_for_party(contract_id, user)
        if party not in (ContractPartyEnum.client, ContractPartyEnum.freelancer):
            raise UnauthorizedError("Only the contract parties can open a dispute")
        if is_terminal(contract.status):
            raise InvalidTransitionError(f"Cannot dispute a {contract.status.value} contract")

        reason = (reason or "").strip()
        if not reason:
            raise InputValidationError("A dispute needs a reason")
        if await self.dispute_repo.get_unresolved_for_contract(contract_id):
            raise ConflictError("This contract already has an open dispute")

        counterpart_id = contract.freelancer_id if party == ContractPartyEnum.client else contract.client_id
        project_title = contract.project.title if contract.project else "a contract"

        try:
            dispute = await self.dispute_repo.create_dispute(Dispute(
                contract_id=contract_id,
                reported_by=user.user_id,
                reason=reason,
                status=DisputeStatusEnum.open
            ))
            for recipient in [counterpart_id, *await self.user_repo.list_admin_ids()]:
                await self.notification_service.create_notification(
                    user_id=recipient,
                    type=NotificationTypeEnum.dispute_opened,
                    title=f"Dispute opened on \"{project_title}\"",
                    message=reason[:200],
                    reference_id=dispute.dispute_id
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Opening dispute on contract {contract_id} failed", exc_info=True)
            raise

        logger.info(f"Dispute {dispute.dispute_id} opened on contract {contract_id} by {user.user_id}")
        return dispute

    async def resolve_dispute(
        self,
        dispute_id: str,
        admin: User,
        resolution: str,
        cancel_contract: bool = False,
        admin_notes: Optional[str] = None
    ) -> Dispute:
        """
        Close a dispute. With `cancel_contract` the contract is cancelled
        through the regular state machine, in the same transaction.
        """
        if not admin.is_admin:
            raise UnauthorizedError("Admin privileges required")
        resolution = (resolution or "").strip()
        if not resolution:
            raise InputValidationError("A resolution is required")

        dispute = await self.dispute_repo.get_dispute_by_id(dispute_id)
        if not dispute:
            raise NotFoundError("Dispute not found")
        if dispute.status == DisputeStatusEnum.resolved:
            raise InvalidTransitionError("Dispute is already resolved")

        contract, _ = await self.contract_service.get_contract_for_party(dispute.contract_id, admin)
        result = None
        if cancel_contract:
            result = apply_action(contract.status, ContractPartyEnum.admin, ContractActionEnum.cancel)

        try:
            if not await self.dispute_repo.resolve(dispute_id, resolution, admin_notes):
                raise ConflictError("Dispute was modified concurrently")

            if result is not None:
                await self.contract_service.apply_transition(contract, result, actor=admin, note=resolution)
                if not await self.contract_service.project_repo.transition_status(
                    contract.project_id,
                    [ProjectStatusEnum.in_progress, ProjectStatusEnum.under_review],
                    ProjectStatusEnum.cancelled
                ):
                    raise ConflictError("Project was modified concurrently, reload and try again")

            await self.admin_log_repo.log(
                admin_id=admin.user_id,
                action="dispute_resolved",
                details={
                    "dispute_id": dispute_id,
                    "contract_id": contract.contract_id,
                    "cancel_contract": cancel_contract,
                    "resolution": resolution,
                }
            )
            for recipient in (contract.client_id, contract.freelancer_id):
                await self.notification_service.create_notification(
                    user_id=recipient,
                    type=NotificationTypeEnum.dispute_resolved,
                    title="A dispute on your contract was resolved",
                    message=resolution,
                    reference_id=dispute_id
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Resolving dispute {dispute_id} failed, rolled back", exc_info=True)
            raise

        logger.info(f"Dispute {dispute_id} resolved by admin {admin.user_id} (cancel_contract={cancel_contract})")
        return await self.dispute_repo.get_dispute_by_id(dispute_id)

    async def list_disputes(self, admin: User, unresolved_only: bool = False) -> List[Dispute]:
        if not admin.is_admin:
            raise UnauthorizedError("Admin privileges required")
        return await self.dispute_repo.list_disputes(unresolved_only)

    async def list_contract_disputes(self, contract_id: str, user: User) -> List[Dispute]:
        await self.contract_service.get_contract_for_party(contract_id, user)
        return await self.dispute_repo.list_disputes_by_contract(contract_id)
