# app/services/notification_service.py

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, UnauthorizedError
from app.models.user import User
from app.models.notification import Notification, NotificationTypeEnum
from app.repositories.notification_repo import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = NotificationRepository(db)

    async def create_notification(
        self,
        user_id: str,
        type: NotificationTypeEnum,
        title: str,
        message: Optional[str] = None,
        reference_id: Optional[str] = None
    ) -> Notification:
        """
        (internal) Called by the other services inside their own unit of
        work, so the notice commits or rolls back together with the change
        it announces.
        """
        new_notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            reference_id=reference_id,
            is_read=False
        )
        logger.info(f"Notification {type.value} for User ID: {user_id}, Title: {title}, Ref: {reference_id}")
        return await self.repo.create_notification(new_notification)

    async def get_my_notifications(self, user: User) -> List[Notification]:
        return await self.repo.list_notifications_by_user(user.user_id)

    async def mark_notification_as_read(
        self,
        notification_id: str,
        user: User
    ) -> Notification:
        notification = await self.repo.get_notification_by_id(notification_id)

        if not notification:
            raise NotFoundError("Notification not found")

        # users may only touch their own notifications
        if notification.user_id != user.user_id:
            raise UnauthorizedError("Not your notification")

        if notification.is_read:
            return notification

        notification = await self.repo.mark_as_read(notification)
        await self.db.commit()
        return notification
