# app/repositories/message_repo.py

from typing import List

from sqlalchemy import and_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import joinedload

from app.models.message import Message


class MessageRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_messages_by_contract_id(self, contract_id: str, limit: int = 200, offset: int = 0) -> List[Message]:
        """
        Oldest first
        """
        stmt = (
            select(Message)
            .where(Message.contract_id == contract_id)
            .options(joinedload(Message.sender))
            .order_by(Message.created_at.asc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def save_message(self, contract_id: str, sender_id: str, content: str, file_url: str | None = None) -> Message:
        new_message = Message(
            contract_id=contract_id,
            sender_id=sender_id,
            content=content,
            file_url=file_url
        )
        self.db.add(new_message)
        await self.db.flush()
        await self.db.refresh(new_message)
        return new_message

    async def mark_messages_as_read(self, contract_id: str, user_id: str) -> None:
        """
        Mark the other party's messages in this contract thread as read
        """
        update_stmt = (
            update(Message)
            .where(
                and_(
                    Message.contract_id == contract_id,
                    Message.sender_id != user_id,
                    Message.is_read.is_(False)
                )
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(update_stmt)
