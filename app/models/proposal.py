# models/proposal.py
from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, Text, Numeric, Integer, ForeignKey, DateTime, Enum, CHAR
from sqlalchemy.orm import relationship
from app.core.database import Base


class ProposalStatusEnum(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    withdrawn = "withdrawn"


class Proposal(Base):
    __tablename__ = "proposals"

    proposal_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(CHAR(36), ForeignKey("projects.project_id"), nullable=False, index=True)
    freelancer_id = Column(CHAR(36), ForeignKey("users.user_id"), nullable=False, index=True)

    price = Column(Numeric(12, 2), nullable=False)
    delivery_days = Column(Integer, nullable=False, default=7)
    message = Column(Text)

    status = Column(
        Enum(ProposalStatusEnum, values_callable=lambda obj: [e.value for e in obj]),
        default=ProposalStatusEnum.pending,
        nullable=False
    )

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    project = relationship("Project", back_populates="proposals")
    freelancer = relationship("User", back_populates="proposals")

    # 1-to-1 with the contract it turned into
    contract = relationship(
        "Contract",
        back_populates="proposal",
        uselist=False
    )
