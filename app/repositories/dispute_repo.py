# app/repositories/dispute_repo.py
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.dispute import Dispute, DisputeStatusEnum

UNRESOLVED_STATUSES = (DisputeStatusEnum.open, DisputeStatusEnum.under_review)


class DisputeRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_dispute(self, dispute: Dispute) -> Dispute:
        self.db.add(dispute)
        await self.db.flush()
        await self.db.refresh(dispute)
        return dispute

    async def get_dispute_by_id(self, dispute_id: str) -> Optional[Dispute]:
        stmt = (
            select(Dispute)
            .where(Dispute.dispute_id == dispute_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_unresolved_for_contract(self, contract_id: str) -> Optional[Dispute]:
        stmt = select(Dispute).where(
            Dispute.contract_id == contract_id,
            Dispute.status.in_(UNRESOLVED_STATUSES)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_disputes_by_contract(self, contract_id: str) -> List[Dispute]:
        stmt = (
            select(Dispute)
            .where(Dispute.contract_id == contract_id)
            .order_by(Dispute.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_disputes(self, unresolved_only: bool = False) -> List[Dispute]:
        stmt = select(Dispute).order_by(Dispute.created_at.asc())
        if unresolved_only:
            stmt = stmt.where(Dispute.status.in_(UNRESOLVED_STATUSES))
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def resolve(self, dispute_id: str, resolution: str, admin_notes: str | None) -> bool:
        stmt = (
            update(Dispute)
            .where(Dispute.dispute_id == dispute_id, Dispute.status.in_(UNRESOLVED_STATUSES))
            .values(status=DisputeStatusEnum.resolved, resolution=resolution, admin_notes=admin_notes)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
