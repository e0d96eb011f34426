# app/models/contract.py
from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, Numeric, DateTime, Integer, ForeignKey, Enum, CHAR
from sqlalchemy.orm import relationship
from app.core.database import Base


class ContractStatusEnum(str, enum.Enum):
    in_progress = "in_progress"
    submitted = "submitted"
    needs_revision = "needs_revision"
    approved = "approved"
    under_review = "under_review"
    completed = "completed"
    cancelled = "cancelled"


class Contract(Base):
    __tablename__ = "contracts"

    contract_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    project_id = Column(CHAR(36), ForeignKey("projects.project_id", ondelete="RESTRICT"), nullable=False, index=True)
    # unique: a proposal becomes at most one contract
    proposal_id = Column(CHAR(36), ForeignKey("proposals.proposal_id", ondelete="SET NULL"), unique=True, nullable=True, index=True)
    client_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False, index=True)
    freelancer_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    platform_fee = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(
        Enum(ContractStatusEnum, values_callable=lambda obj: [e.value for e in obj]),
        default=ContractStatusEnum.in_progress,
        nullable=False,
        index=True
    )
    revision_count = Column(Integer, default=0, nullable=False)

    start_date = Column(DateTime, default=datetime.now, nullable=False)
    deadline = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    proposal = relationship("Proposal", back_populates="contract")
    project = relationship("Project", back_populates="contracts")
    client = relationship("User", foreign_keys=[client_id], back_populates="contracts_as_client")
    freelancer = relationship("User", foreign_keys=[freelancer_id], back_populates="contracts_as_freelancer")

    messages = relationship(
        "Message",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="Message.created_at"
    )
    payment = relationship("Payment", back_populates="contract", uselist=False)

    @property
    def freelancer_net(self):
        return self.amount - self.platform_fee
