# app/models/notification.py
from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, String, TEXT, BOOLEAN, CHAR, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from app.core.database import Base


class NotificationTypeEnum(str, enum.Enum):
    new_proposal = "new_proposal"
    proposal_accepted = "proposal_accepted"
    proposal_rejected = "proposal_rejected"
    message_received = "message_received"
    payment_released = "payment_released"
    review_received = "review_received"
    contract_created = "contract_created"
    contract_status_changed = "contract_status_changed"
    dispute_opened = "dispute_opened"
    dispute_resolved = "dispute_resolved"
    withdrawal_approved = "withdrawal_approved"
    withdrawal_rejected = "withdrawal_rejected"


class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # recipient
    user_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(Enum(NotificationTypeEnum, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(TEXT)

    # id of the project / proposal / contract / withdrawal the notice is about
    reference_id = Column(CHAR(36), nullable=True)

    is_read = Column(BOOLEAN, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    user = relationship("User")
