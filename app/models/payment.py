# app/models/payment.py
from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, Numeric, DateTime, ForeignKey, Enum, CHAR
from sqlalchemy.orm import relationship
from app.core.database import Base


class PaymentStatusEnum(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    released = "released"
    refunded = "refunded"


class Payment(Base):
    __tablename__ = "payments"

    payment_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # unique: one settlement per contract
    contract_id = Column(CHAR(36), ForeignKey("contracts.contract_id", ondelete="RESTRICT"), unique=True, nullable=False, index=True)
    payer_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    platform_fee = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(
        Enum(PaymentStatusEnum, values_callable=lambda obj: [e.value for e in obj]),
        default=PaymentStatusEnum.pending,
        nullable=False
    )
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    contract = relationship("Contract", back_populates="payment")
