# app/models/message.py
from datetime import datetime
import uuid

from sqlalchemy import Column, String, Text, ForeignKey, DateTime, CHAR, Boolean
from sqlalchemy.orm import relationship
from app.core.database import Base


class Message(Base):
    """Append-only chat line attached to exactly one contract."""
    __tablename__ = "messages"

    message_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    contract_id = Column(CHAR(36), ForeignKey("contracts.contract_id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False, default="")
    file_url = Column(String(500))
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.now, index=True)

    contract = relationship("Contract", back_populates="messages")
    sender = relationship("User", lazy="selectin")
