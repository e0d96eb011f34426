# app/repositories/payment_repo.py
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql.expression import exists

from app.models.payment import Payment


class PaymentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_payment(self, payment: Payment) -> Payment:
        self.db.add(payment)
        await self.db.flush()
        return payment

    async def check_payment_exists_by_contract(self, contract_id: str) -> bool:
        stmt = select(exists().where(Payment.contract_id == contract_id))
        result = await self.db.execute(stmt)
        return result.scalar()

    async def get_payment_by_contract(self, contract_id: str) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.contract_id == contract_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()
