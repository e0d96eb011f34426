# app/models/dispute.py
from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, Text, ForeignKey, DateTime, CHAR, Enum
from sqlalchemy.orm import relationship
from app.core.database import Base


class DisputeStatusEnum(str, enum.Enum):
    open = "open"
    under_review = "under_review"
    resolved = "resolved"


class Dispute(Base):
    __tablename__ = "disputes"

    dispute_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    contract_id = Column(CHAR(36), ForeignKey("contracts.contract_id", ondelete="CASCADE"), nullable=False, index=True)
    reported_by = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(
        Enum(DisputeStatusEnum, values_callable=lambda obj: [e.value for e in obj]),
        default=DisputeStatusEnum.open,
        nullable=False
    )
    resolution = Column(Text)
    admin_notes = Column(Text)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    contract = relationship("Contract")
