# app/repositories/wallet_repo.py
# Wallet and withdrawal ledger. Every balance change is a single SQL
# statement so concurrent settlements / withdrawals cannot lose updates.
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.wallet import Wallet, Withdrawal, WithdrawalStatusEnum
from app.utils.money import to_money

logger = logging.getLogger(__name__)


class WalletRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_wallet_by_user_id(self, user_id: str, for_update: bool = False) -> Optional[Wallet]:
        stmt = (
            select(Wallet)
            .where(Wallet.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            # row lock for check-then-insert on withdrawals
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_or_create_wallet(self, user_id: str) -> Wallet:
        """
        Wallets are created lazily, on first read or first credit.
        The insert runs in a SAVEPOINT: if a concurrent transaction created
        the wallet first, only the savepoint is rolled back and the winner's
        row is returned.
        """
        wallet = await self.get_wallet_by_user_id(user_id)
        if wallet:
            return wallet
        try:
            async with self.db.begin_nested():
                wallet = Wallet(user_id=user_id, balance=Decimal("0"), total_earned=Decimal("0"))
                self.db.add(wallet)
        except IntegrityError:
            logger.info(f"Wallet for user {user_id} was created concurrently, reusing it")
            wallet = await self.get_wallet_by_user_id(user_id)
            if wallet is None:
                raise
        return wallet

    async def credit(self, user_id: str, delta: Decimal) -> bool:
        """
        balance += delta, total_earned += delta in one UPDATE
        """
        stmt = (
            update(Wallet)
            .where(Wallet.user_id == user_id)
            .values(
                balance=Wallet.balance + delta,
                total_earned=Wallet.total_earned + delta,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def debit(self, wallet_id: str, amount: Decimal) -> bool:
        """
        balance -= amount, only if the balance covers it
        """
        stmt = (
            update(Wallet)
            .where(Wallet.wallet_id == wallet_id, Wallet.balance >= amount)
            .values(balance=Wallet.balance - amount)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def refresh(self, wallet: Wallet) -> Wallet:
        await self.db.refresh(wallet)
        return wallet


class WithdrawalRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_withdrawal(self, withdrawal: Withdrawal) -> Withdrawal:
        self.db.add(withdrawal)
        await self.db.flush()
        await self.db.refresh(withdrawal)
        return withdrawal

    async def get_withdrawal_by_id(self, withdrawal_id: str) -> Optional[Withdrawal]:
        stmt = (
            select(Withdrawal)
            .where(Withdrawal.withdrawal_id == withdrawal_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_withdrawals_by_user(self, user_id: str) -> List[Withdrawal]:
        stmt = (
            select(Withdrawal)
            .where(Withdrawal.user_id == user_id)
            .order_by(Withdrawal.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_withdrawals(self, status: Optional[WithdrawalStatusEnum] = None) -> List[Withdrawal]:
        stmt = select(Withdrawal).order_by(Withdrawal.created_at.asc())
        if status is not None:
            stmt = stmt.where(Withdrawal.status == status)
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def sum_pending_amount(self, wallet_id: str) -> Decimal:
        """
        Funds already promised to pending withdrawal requests
        """
        stmt = select(func.coalesce(func.sum(Withdrawal.amount), 0)).where(
            Withdrawal.wallet_id == wallet_id,
            Withdrawal.status == WithdrawalStatusEnum.pending
        )
        result = await self.db.execute(stmt)
        return to_money(result.scalar() or 0)

    async def transition_status(
        self,
        withdrawal_id: str,
        expected: WithdrawalStatusEnum,
        new_status: WithdrawalStatusEnum,
    ) -> bool:
        stmt = (
            update(Withdrawal)
            .where(Withdrawal.withdrawal_id == withdrawal_id, Withdrawal.status == expected)
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
