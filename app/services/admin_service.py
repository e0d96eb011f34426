# app/services/admin_service.py

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UnauthorizedError
from app.models.admin_log import AdminLog
from app.models.user import User
from app.repositories.admin_log_repo import AdminLogRepository


class AdminService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.admin_log_repo = AdminLogRepository(db)

    async def list_admin_logs(self, admin: User, limit: int = 100) -> List[AdminLog]:
        """Audit trail of admin decisions, newest first"""
        if not admin.is_admin:
            raise UnauthorizedError("Admin privileges required")
        return await self.admin_log_repo.list_logs(limit)
