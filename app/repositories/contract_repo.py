# app/repositories/contract_repo.py

from typing import Any, List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import joinedload
from sqlalchemy.sql.expression import or_, exists

from app.models.contract import Contract, ContractStatusEnum


class ContractRepository:
    """
    CRUD and conditional status updates on the 'contracts' table
    """
    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_common_contract_options(self):
        """
        Eager loading needed by ContractOut, avoids N+1 queries
        """
        return [
            joinedload(Contract.project),
            joinedload(Contract.client),
            joinedload(Contract.freelancer),
        ]

    async def create_contract(self, contract: Contract) -> Contract:
        self.db.add(contract)
        await self.db.flush()
        return contract

    async def check_contract_exists_by_proposal(self, proposal_id: str) -> bool:
        stmt = select(exists().where(Contract.proposal_id == proposal_id))
        result = await self.db.execute(stmt)
        return result.scalar()

    async def get_contract_by_id(self, contract_id: str) -> Optional[Contract]:
        stmt = (
            select(Contract)
            .where(Contract.contract_id == contract_id)
            .options(*self._get_common_contract_options())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_contracts_by_user(self, user_id: str) -> List[Contract]:
        """
        Every contract the user is party to (as client or as freelancer)
        """
        stmt = select(Contract).where(
            or_(
                Contract.client_id == user_id,
                Contract.freelancer_id == user_id
            )
        ).order_by(Contract.updated_at.desc())
        stmt = stmt.options(*self._get_common_contract_options())

        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_completed_contracts_for_freelancer(self, freelancer_id: str) -> List[Contract]:
        stmt = (
            select(Contract)
            .where(
                Contract.freelancer_id == freelancer_id,
                Contract.status == ContractStatusEnum.completed
            )
            .options(joinedload(Contract.project))
            .order_by(Contract.updated_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def transition_status(
        self,
        contract_id: str,
        expected: ContractStatusEnum,
        new_status: ContractStatusEnum,
        **values: Any,
    ) -> bool:
        """
        Compare-and-swap on contract.status; extra column values (e.g.
        approved_at, revision_count) are written in the same statement.
        Returns False when the contract is no longer in `expected`.
        """
        stmt = (
            update(Contract)
            .where(Contract.contract_id == contract_id, Contract.status == expected)
            .values(status=new_status, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
