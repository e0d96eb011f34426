# app/repositories/review_repo.py
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.review import Review


class ReviewRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_review(self, review: Review) -> Review:
        self.db.add(review)
        await self.db.flush()
        await self.db.refresh(review)
        return review

    async def get_review(self, contract_id: str, reviewer_id: str) -> Optional[Review]:
        stmt = select(Review).where(
            Review.contract_id == contract_id,
            Review.reviewer_id == reviewer_id
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_reviews_for_target(self, target_id: str) -> List[Review]:
        stmt = (
            select(Review)
            .where(Review.target_id == target_id)
            .order_by(Review.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()
