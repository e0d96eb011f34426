# app/models/review.py
from datetime import datetime
import uuid

from sqlalchemy import Column, Text, Integer, ForeignKey, DateTime, CHAR, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("contract_id", "reviewer_id", name="uq_reviews_contract_reviewer"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    review_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    contract_id = Column(CHAR(36), ForeignKey("contracts.contract_id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    target_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime, default=datetime.now)

    reviewer = relationship("User", foreign_keys=[reviewer_id], lazy="selectin")
