# app/repositories/admin_log_repo.py
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.admin_log import AdminLog


class AdminLogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(self, admin_id: str, action: str, details: Dict[str, Any]) -> AdminLog:
        entry = AdminLog(admin_id=admin_id, action=action, details=details)
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def list_logs(self, limit: int = 100) -> List[AdminLog]:
        stmt = select(AdminLog).order_by(AdminLog.created_at.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all()
