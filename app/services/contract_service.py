# app/services/contract_service.py

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, InputValidationError, NotFoundError
from app.models.contract import Contract, ContractStatusEnum
from app.models.notification import NotificationTypeEnum
from app.models.project import ProjectStatusEnum
from app.models.user import User
from app.repositories.contract_repo import ContractRepository
from app.repositories.message_repo import MessageRepository
from app.repositories.project_repo import ProjectRepository
from app.schemas.contract_schema import ContractDetailOut
from app.services.notification_service import NotificationService
from app.utils.contract_state_machine import (
    ContractActionEnum, ContractPartyEnum, TransitionResult, allowed_actions, apply_action
)

logger = logging.getLogger(__name__)


def resolve_party(contract: Contract, user: User) -> Optional[ContractPartyEnum]:
    """Which side of the contract `user` acts as, if any."""
    if user.user_id == contract.client_id:
        return ContractPartyEnum.client
    if user.user_id == contract.freelancer_id:
        return ContractPartyEnum.freelancer
    if user.is_admin:
        return ContractPartyEnum.admin
    return None


class ContractService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.contract_repo = ContractRepository(db)
        self.project_repo = ProjectRepository(db)
        self.message_repo = MessageRepository(db)
        self.notification_service = NotificationService(db)

    async def get_contract_for_party(self, contract_id: str, user: User) -> tuple[Contract, ContractPartyEnum]:
        contract = await self.contract_repo.get_contract_by_id(contract_id)
        party = resolve_party(contract, user) if contract else None
        if party is None:
            # non-participants cannot tell a hidden contract from a missing one
            raise NotFoundError("Contract not found")
        return contract, party

    async def get_contract_details(self, contract_id: str, user: User) -> ContractDetailOut:
        contract, party = await self.get_contract_for_party(contract_id, user)
        detail = ContractDetailOut.model_validate(contract)
        detail.allowed_actions = allowed_actions(contract.status, party)
        detail.can_release_payment = (
            party == ContractPartyEnum.client and contract.status == ContractStatusEnum.approved
        )
        return detail

    async def get_my_contracts(self, user: User) -> List[Contract]:
        return await self.contract_repo.list_contracts_by_user(user.user_id)

    def _clean_note(self, note: Optional[str]) -> Optional[str]:
        note = (note or "").strip()
        if len(note) > settings.NOTE_MAX_LENGTH:
            raise InputValidationError(f"Note exceeds {settings.NOTE_MAX_LENGTH} characters")
        return note or None

    async def apply_transition(
        self,
        contract: Contract,
        result: TransitionResult,
        actor: Optional[User] = None,
        note: Optional[str] = None,
        **extra_values,
    ) -> None:
        """
        Persist a state-machine result inside the caller's unit of work:
        one conditional UPDATE on the status that was read, plus the note
        message. Does not commit.
        """
        values = dict(extra_values)
        if result.increments_revision:
            values["revision_count"] = contract.revision_count + 1
        if result.stamps_approved_at:
            values["approved_at"] = datetime.now()

        if not await self.contract_repo.transition_status(
            contract.contract_id, result.previous_status, result.next_status, **values
        ):
            raise ConflictError("Contract was modified concurrently, reload and try again")

        if note and result.note_prefix and actor is not None:
            await self.message_repo.save_message(
                contract_id=contract.contract_id,
                sender_id=actor.user_id,
                content=f"{result.note_prefix}:\n{note}"
            )

        logger.info(
            f"Contract {contract.contract_id}: {result.previous_status.value} -> {result.next_status.value}"
        )

    async def _run_action(
        self,
        contract_id: str,
        user: User,
        action: ContractActionEnum,
        note: Optional[str] = None,
    ) -> Contract:
        note = self._clean_note(note)
        contract, party = await self.get_contract_for_party(contract_id, user)
        result = apply_action(contract.status, party, action)

        notify_user_id = contract.client_id if party == ContractPartyEnum.freelancer else contract.freelancer_id
        project_title = contract.project.title if contract.project else "your project"
        titles = {
            ContractActionEnum.submit_work: f"Work submitted for \"{project_title}\"",
            ContractActionEnum.request_revision: f"Revision requested on \"{project_title}\"",
            ContractActionEnum.approve_work: f"Work approved on \"{project_title}\"",
            ContractActionEnum.cancel: f"Contract for \"{project_title}\" was cancelled",
        }

        try:
            await self.apply_transition(contract, result, actor=user, note=note)

            if result.next_status == ContractStatusEnum.cancelled:
                if not await self.project_repo.transition_status(
                    contract.project_id,
                    [ProjectStatusEnum.in_progress, ProjectStatusEnum.under_review],
                    ProjectStatusEnum.cancelled
                ):
                    raise ConflictError("Project was modified concurrently, reload and try again")
                notify_ids = {contract.client_id, contract.freelancer_id} - {user.user_id}
            else:
                notify_ids = {notify_user_id}

            for recipient in notify_ids:
                await self.notification_service.create_notification(
                    user_id=recipient,
                    type=NotificationTypeEnum.contract_status_changed,
                    title=titles[action],
                    message=note,
                    reference_id=contract.contract_id
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Contract {contract_id} {action.value} failed, rolled back", exc_info=True)
            raise

        return await self.contract_repo.get_contract_by_id(contract_id)

    async def submit_work(self, contract_id: str, user: User, note: Optional[str] = None) -> Contract:
        """(freelancer) in_progress | needs_revision -> submitted"""
        return await self._run_action(contract_id, user, ContractActionEnum.submit_work, note)

    async def request_revision(self, contract_id: str, user: User, note: Optional[str] = None) -> Contract:
        """(client) submitted -> needs_revision, revision_count + 1"""
        return await self._run_action(contract_id, user, ContractActionEnum.request_revision, note)

    async def approve_work(self, contract_id: str, user: User) -> Contract:
        """(client) submitted -> approved, stamps approved_at"""
        return await self._run_action(contract_id, user, ContractActionEnum.approve_work)

    async def cancel_contract(self, contract_id: str, user: User, reason: Optional[str] = None) -> Contract:
        """(either party or admin) any active status -> cancelled"""
        return await self._run_action(contract_id, user, ContractActionEnum.cancel, reason)
