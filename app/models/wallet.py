# app/models/wallet.py
from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, Numeric, DateTime, ForeignKey, Enum, CHAR, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base


class WithdrawalStatusEnum(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    processed = "processed"


class Wallet(Base):
    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),
        CheckConstraint("total_earned >= 0", name="ck_wallets_total_earned_non_negative"),
    )

    wallet_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="RESTRICT"), unique=True, nullable=False, index=True)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    total_earned = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    user = relationship("User", back_populates="wallet")
    withdrawals = relationship("Withdrawal", back_populates="wallet", order_by="Withdrawal.created_at.desc()")


class Withdrawal(Base):
    __tablename__ = "withdrawals"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_withdrawals_amount_positive"),
    )

    withdrawal_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    wallet_id = Column(CHAR(36), ForeignKey("wallets.wallet_id", ondelete="RESTRICT"), nullable=False, index=True)
    user_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(
        Enum(WithdrawalStatusEnum, values_callable=lambda obj: [e.value for e in obj]),
        default=WithdrawalStatusEnum.pending,
        nullable=False,
        index=True
    )
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    wallet = relationship("Wallet", back_populates="withdrawals")
