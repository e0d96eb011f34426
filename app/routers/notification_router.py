# app/routers/notification_router.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.models.user import User
from app.core.security import get_current_user
from app.services.notification_service import NotificationService
from app.schemas.notification_schema import NotificationOut

router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"]
)


@router.get(
    "/my",
    response_model=List[NotificationOut],
    summary="My notifications"
)
async def get_my_notifications(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Newest first. Clients poll this endpoint.
    """
    service = NotificationService(db)
    return await service.get_my_notifications(current_user)


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationOut,
    summary="Mark a notification as read"
)
async def mark_as_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = NotificationService(db)
    return await service.mark_notification_as_read(notification_id, current_user)
