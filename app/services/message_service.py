# app/services/message_service.py
# Contract thread: append-only messages between the two parties.

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import InputValidationError, InvalidTransitionError, UnauthorizedError
from app.models.message import Message
from app.models.notification import NotificationTypeEnum
from app.models.user import User
from app.repositories.message_repo import MessageRepository
from app.services.contract_service import ContractService
from app.services.notification_service import NotificationService
from app.utils.contract_state_machine import ContractPartyEnum, is_terminal

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.message_repo = MessageRepository(db)
        self.contract_service = ContractService(db)
        self.notification_service = NotificationService(db)

    async def list_messages(self, contract_id: str, user: User) -> List[Message]:
        """
        Thread history, oldest first. Reading marks the other party's
        messages as read.
        """
        contract, party = await self.contract_service.get_contract_for_party(contract_id, user)

        if party != ContractPartyEnum.admin:
            try:
                await self.message_repo.mark_messages_as_read(contract_id, user.user_id)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                logger.error(f"Marking messages read on contract {contract_id} failed", exc_info=True)
                raise

        return await self.message_repo.get_messages_by_contract_id(contract_id)

    async def send_message(
        self,
        contract_id: str,
        user: User,
        content: str,
        file_url: Optional[str] = None
    ) -> Message:
        contract, party = await self.contract_service.get_contract_for_party(contract_id, user)
        if party not in (ContractPartyEnum.client, ContractPartyEnum.freelancer):
            raise UnauthorizedError("Only the contract parties can post messages")
        if is_terminal(contract.status):
            raise InvalidTransitionError(f"Contract is {contract.status.value}; its thread is read-only")

        content = (content or "").strip()
        file_url = (file_url or "").strip() or None
        if not content and not file_url:
            raise InputValidationError("Message must have content or an attachment")
        if len(content) > settings.MESSAGE_MAX_LENGTH:
            raise InputValidationError(f"Message exceeds {settings.MESSAGE_MAX_LENGTH} characters")

        recipient_id = contract.freelancer_id if party == ContractPartyEnum.client else contract.client_id
        project_title = contract.project.title if contract.project else "your contract"
        sender_name = user.full_name or user.email.split("@")[0]
        preview = content[:30] + ("..." if len(content) > 30 else "") if content else "sent an attachment"

        try:
            new_message = await self.message_repo.save_message(
                contract_id=contract_id,
                sender_id=user.user_id,
                content=content,
                file_url=file_url
            )
            await self.notification_service.create_notification(
                user_id=recipient_id,
                type=NotificationTypeEnum.message_received,
                title=f"New message on \"{project_title}\"",
                message=f"{sender_name}: {preview}",
                reference_id=contract_id
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Posting message on contract {contract_id} failed", exc_info=True)
            raise

        await self.db.refresh(new_message)
        return new_message
