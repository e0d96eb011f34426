# app/routers/user_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.review_schema import UserReviewsOut
from app.schemas.user_schema import UserOut
from app.services.review_service import ReviewService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)]  # every route needs a login
)


@router.get("/me", response_model=UserOut)
async def read_users_me(
    current_user: User = Depends(get_current_user)
):
    """
    Current user's account (no password hash)
    """
    return current_user


@router.get(
    "/{user_id}/reviews",
    response_model=UserReviewsOut,
    summary="Reviews received by a user"
)
async def api_get_user_reviews(
    user_id: str,
    db: AsyncSession = Depends(get_db)
):
    return await ReviewService(db).list_reviews_for_user(user_id)
