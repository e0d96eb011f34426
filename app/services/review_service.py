# app/services/review_service.py

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, InputValidationError, InvalidTransitionError, UnauthorizedError
from app.models.contract import ContractStatusEnum
from app.models.notification import NotificationTypeEnum
from app.models.review import Review
from app.models.user import User
from app.repositories.review_repo import ReviewRepository
from app.schemas.review_schema import ReviewOut, UserReviewsOut
from app.services.contract_service import ContractService
from app.services.notification_service import NotificationService
from app.utils.contract_state_machine import ContractPartyEnum

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.review_repo = ReviewRepository(db)
        self.contract_service = ContractService(db)
        self.notification_service = NotificationService(db)

    async def create_review(
        self,
        contract_id: str,
        user: User,
        rating: int,
        comment: Optional[str] = None
    ) -> Review:
        """
        Each party may review the other once, after the contract is completed
        """
        contract, party = await self.contract_service.get_contract_for_party(contract_id, user)
        if party == ContractPartyEnum.client:
            target_id = contract.freelancer_id
        elif party == ContractPartyEnum.freelancer:
            target_id = contract.client_id
        else:
            raise UnauthorizedError("Only the contract parties can leave a review")

        if contract.status != ContractStatusEnum.completed:
            raise InvalidTransitionError("Reviews can only be left on completed contracts")
        if not 1 <= rating <= 5:
            raise InputValidationError("Rating must be between 1 and 5")
        if await self.review_repo.get_review(contract_id, user.user_id):
            raise ConflictError("You have already reviewed this contract")

        try:
            review = await self.review_repo.create_review(Review(
                contract_id=contract_id,
                reviewer_id=user.user_id,
                target_id=target_id,
                rating=rating,
                comment=(comment or "").strip() or None
            ))
            await self.notification_service.create_notification(
                user_id=target_id,
                type=NotificationTypeEnum.review_received,
                title=f"You received a {rating}-star review",
                message=review.comment,
                reference_id=contract_id
            )
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("You have already reviewed this contract")
        except Exception:
            await self.db.rollback()
            logger.error(f"Review on contract {contract_id} failed", exc_info=True)
            raise

        logger.info(f"Review {review.review_id}: {user.user_id} -> {target_id} ({rating})")
        return review

    async def list_reviews_for_user(self, user_id: str) -> UserReviewsOut:
        reviews = await self.review_repo.list_reviews_for_target(user_id)
        average = round(sum(r.rating for r in reviews) / len(reviews), 2) if reviews else None
        return UserReviewsOut(
            user_id=user_id,
            average_rating=average,
            count=len(reviews),
            reviews=[ReviewOut.model_validate(r) for r in reviews]
        )
