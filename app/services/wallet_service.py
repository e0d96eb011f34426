# app/services/wallet_service.py

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ConflictError, InputValidationError, InsufficientBalanceError, InvalidTransitionError,
    NotFoundError, UnauthorizedError
)
from app.models.notification import NotificationTypeEnum
from app.models.user import User
from app.models.wallet import Withdrawal, WithdrawalStatusEnum
from app.repositories.admin_log_repo import AdminLogRepository
from app.repositories.contract_repo import ContractRepository
from app.repositories.wallet_repo import WalletRepository, WithdrawalRepository
from app.schemas.wallet_schema import EarningOut, WalletSummaryOut
from app.services.notification_service import NotificationService
from app.utils.money import compute_freelancer_net, to_money

logger = logging.getLogger(__name__)


class WalletService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.wallet_repo = WalletRepository(db)
        self.withdrawal_repo = WithdrawalRepository(db)
        self.contract_repo = ContractRepository(db)
        self.admin_log_repo = AdminLogRepository(db)
        self.notification_service = NotificationService(db)

    # ---- user side ----

    async def get_my_wallet(self, user: User) -> WalletSummaryOut:
        if not user.is_freelancer:
            raise UnauthorizedError("Only freelancers have wallets")
        wallet = await self.wallet_repo.get_or_create_wallet(user.user_id)
        # persists a lazily created wallet
        await self.db.commit()
        wallet = await self.wallet_repo.refresh(wallet)

        pending = await self.withdrawal_repo.sum_pending_amount(wallet.wallet_id)
        return WalletSummaryOut(
            wallet_id=wallet.wallet_id,
            user_id=wallet.user_id,
            balance=to_money(wallet.balance),
            total_earned=to_money(wallet.total_earned),
            updated_at=wallet.updated_at,
            pending_withdrawals=pending,
            available=to_money(wallet.balance) - pending
        )

    async def list_my_withdrawals(self, user: User) -> List[Withdrawal]:
        return await self.withdrawal_repo.list_withdrawals_by_user(user.user_id)

    async def list_my_earnings(self, user: User) -> List[EarningOut]:
        """
        One line per settled contract, newest first
        """
        contracts = await self.contract_repo.list_completed_contracts_for_freelancer(user.user_id)
        return [
            EarningOut(
                contract_id=c.contract_id,
                project_title=c.project.title if c.project else "",
                amount=c.amount,
                platform_fee=c.platform_fee,
                earned=compute_freelancer_net(c.amount, c.platform_fee),
                completed_at=c.updated_at
            )
            for c in contracts
        ]

    async def request_withdrawal(self, user: User, amount: Decimal) -> Withdrawal:
        """
        Reserve `amount` for payout. The balance itself is debited when an
        admin approves; until then the request counts against `available`.
        """
        if not user.is_freelancer:
            raise UnauthorizedError("Only freelancers can request withdrawals")
        amount = to_money(amount)
        if amount <= 0:
            raise InputValidationError("Withdrawal amount must be greater than zero")

        try:
            await self.wallet_repo.get_or_create_wallet(user.user_id)
            # lock the wallet row so two requests cannot both pass the check
            wallet = await self.wallet_repo.get_wallet_by_user_id(user.user_id, for_update=True)
            pending = await self.withdrawal_repo.sum_pending_amount(wallet.wallet_id)
            available = to_money(wallet.balance) - pending
            if amount > available:
                raise InsufficientBalanceError(
                    f"Insufficient balance: requested ${amount:,}, available ${available:,}"
                )

            withdrawal = await self.withdrawal_repo.create_withdrawal(Withdrawal(
                wallet_id=wallet.wallet_id,
                user_id=user.user_id,
                amount=amount,
                status=WithdrawalStatusEnum.pending
            ))
            await self.db.commit()
        except InsufficientBalanceError:
            await self.db.rollback()
            raise
        except Exception:
            await self.db.rollback()
            logger.error(f"Withdrawal request by {user.user_id} failed", exc_info=True)
            raise

        logger.info(f"Withdrawal {withdrawal.withdrawal_id} requested: ${amount} by {user.user_id}")
        return withdrawal

    # ---- admin side ----

    def _require_admin(self, user: User) -> None:
        if not user.is_admin:
            raise UnauthorizedError("Admin privileges required")

    async def _get_withdrawal(self, withdrawal_id: str) -> Withdrawal:
        withdrawal = await self.withdrawal_repo.get_withdrawal_by_id(withdrawal_id)
        if not withdrawal:
            raise NotFoundError("Withdrawal not found")
        return withdrawal

    async def list_withdrawals(self, admin: User, status: Optional[WithdrawalStatusEnum] = None) -> List[Withdrawal]:
        self._require_admin(admin)
        return await self.withdrawal_repo.list_withdrawals(status)

    async def _decide(
        self,
        withdrawal_id: str,
        admin: User,
        expected: WithdrawalStatusEnum,
        new_status: WithdrawalStatusEnum,
        reason: Optional[str] = None,
    ) -> Withdrawal:
        self._require_admin(admin)
        withdrawal = await self._get_withdrawal(withdrawal_id)
        if withdrawal.status != expected:
            raise InvalidTransitionError(
                f"Cannot move a '{withdrawal.status.value}' withdrawal to '{new_status.value}'"
            )

        try:
            if not await self.withdrawal_repo.transition_status(withdrawal_id, expected, new_status):
                raise ConflictError("Withdrawal was modified concurrently")

            if new_status == WithdrawalStatusEnum.approved:
                # the reserved funds leave the wallet now
                if not await self.wallet_repo.debit(withdrawal.wallet_id, withdrawal.amount):
                    raise InsufficientBalanceError("Wallet balance no longer covers this withdrawal")

            await self.admin_log_repo.log(
                admin_id=admin.user_id,
                action=f"withdrawal_{new_status.value}",
                details={
                    "withdrawal_id": withdrawal_id,
                    "user_id": withdrawal.user_id,
                    "amount": str(withdrawal.amount),
                    "reason": reason,
                }
            )

            notice_type = {
                WithdrawalStatusEnum.approved: NotificationTypeEnum.withdrawal_approved,
                WithdrawalStatusEnum.rejected: NotificationTypeEnum.withdrawal_rejected,
            }.get(new_status)
            if notice_type is not None:
                await self.notification_service.create_notification(
                    user_id=withdrawal.user_id,
                    type=notice_type,
                    title=f"Your withdrawal of ${withdrawal.amount:,} was {new_status.value}",
                    message=reason,
                    reference_id=withdrawal_id
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Withdrawal {withdrawal_id} -> {new_status.value} failed, rolled back", exc_info=True)
            raise

        logger.info(f"Withdrawal {withdrawal_id}: {expected.value} -> {new_status.value} by admin {admin.user_id}")
        return await self._get_withdrawal(withdrawal_id)

    async def approve_withdrawal(self, withdrawal_id: str, admin: User, reason: Optional[str] = None) -> Withdrawal:
        """pending -> approved, debits the wallet"""
        return await self._decide(
            withdrawal_id, admin, WithdrawalStatusEnum.pending, WithdrawalStatusEnum.approved, reason
        )

    async def reject_withdrawal(self, withdrawal_id: str, admin: User, reason: Optional[str] = None) -> Withdrawal:
        """pending -> rejected, the reservation is released and the balance is untouched"""
        return await self._decide(
            withdrawal_id, admin, WithdrawalStatusEnum.pending, WithdrawalStatusEnum.rejected, reason
        )

    async def mark_withdrawal_processed(self, withdrawal_id: str, admin: User) -> Withdrawal:
        """approved -> processed, once the payout has actually been sent"""
        return await self._decide(
            withdrawal_id, admin, WithdrawalStatusEnum.approved, WithdrawalStatusEnum.processed
        )
