# app/schemas/review_schema.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user_schema import UserBrief


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    review_id: str
    contract_id: str
    reviewer_id: str
    target_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    reviewer: Optional[UserBrief] = None


class UserReviewsOut(BaseModel):
    user_id: str
    average_rating: Optional[float] = None
    count: int
    reviews: List[ReviewOut]
