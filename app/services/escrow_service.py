# app/services/escrow_service.py
"""
Escrow settlement: releases an approved contract's money to the freelancer.

Everything happens in one database transaction:

    1. payment row (status released)         -- unique per contract
    2. contract approved -> completed        -- conditional UPDATE
    3. project -> completed
    4. wallet credit (amount - platform_fee) -- single SQL increment
    5. notification to the freelancer

If any step fails the transaction is rolled back: the contract stays
approved and no credit is visible. A second release on the same contract
is refused with ConflictError and never credits twice.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, InvalidTransitionError, UnauthorizedError
from app.models.contract import Contract, ContractStatusEnum
from app.models.notification import NotificationTypeEnum
from app.models.payment import Payment, PaymentStatusEnum
from app.models.project import ProjectStatusEnum
from app.models.user import User
from app.models.wallet import Wallet
from app.repositories.payment_repo import PaymentRepository
from app.repositories.project_repo import ProjectRepository
from app.repositories.wallet_repo import WalletRepository
from app.services.contract_service import ContractService
from app.services.notification_service import NotificationService
from app.utils.contract_state_machine import ContractActionEnum, ContractPartyEnum, apply_action
from app.utils.money import compute_freelancer_net

logger = logging.getLogger(__name__)


@dataclass
class SettlementResult:
    contract: Contract
    payment: Payment
    wallet: Wallet
    freelancer_net: Decimal


class EscrowService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.contract_service = ContractService(db)
        self.payment_repo = PaymentRepository(db)
        self.project_repo = ProjectRepository(db)
        self.wallet_repo = WalletRepository(db)
        self.notification_service = NotificationService(db)

    async def release_payment(self, contract_id: str, client: User) -> SettlementResult:
        contract, party = await self.contract_service.get_contract_for_party(contract_id, client)
        if party != ContractPartyEnum.client:
            raise UnauthorizedError("Only the client of this contract can release payment")

        # idempotency: a settled contract is a conflict, never a second credit
        if contract.status == ContractStatusEnum.completed or \
                await self.payment_repo.check_payment_exists_by_contract(contract_id):
            raise ConflictError("Payment for this contract has already been released")
        if contract.status != ContractStatusEnum.approved:
            raise InvalidTransitionError(
                f"Payment can only be released for approved contracts (status '{contract.status.value}')"
            )

        result = apply_action(contract.status, ContractPartyEnum.system, ContractActionEnum.complete)
        net = compute_freelancer_net(contract.amount, contract.platform_fee)

        try:
            # Step 1: payment record
            payment = await self.payment_repo.create_payment(Payment(
                contract_id=contract.contract_id,
                payer_id=client.user_id,
                amount=contract.amount,
                platform_fee=contract.platform_fee,
                status=PaymentStatusEnum.released
            ))

            # Step 2: approved -> completed, only if still approved
            await self.contract_service.apply_transition(contract, result, actor=client)

            # Step 3: project completed
            if not await self.project_repo.transition_status(
                contract.project_id,
                [ProjectStatusEnum.in_progress, ProjectStatusEnum.under_review],
                ProjectStatusEnum.completed
            ):
                raise ConflictError("Project was modified concurrently, please retry")

            # Step 4: credit the freelancer
            wallet = await self.wallet_repo.get_or_create_wallet(contract.freelancer_id)
            if not await self.wallet_repo.credit(contract.freelancer_id, net):
                raise ConflictError("Freelancer wallet could not be credited")

            # Step 5: tell the freelancer
            await self.notification_service.create_notification(
                user_id=contract.freelancer_id,
                type=NotificationTypeEnum.payment_released,
                title="Payment Released!",
                message=f"${net:,} has been added to your wallet.",
                reference_id=contract.contract_id
            )

            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # unique payments.contract_id: a concurrent release won
            if await self.payment_repo.check_payment_exists_by_contract(contract_id):
                logger.warning(f"Settlement of contract {contract_id} lost a race to a concurrent release")
                raise ConflictError("Payment for this contract has already been released")
            logger.error(f"Settlement of contract {contract_id} failed, rolled back", exc_info=True)
            raise
        except Exception:
            await self.db.rollback()
            logger.error(f"Settlement of contract {contract_id} failed, rolled back", exc_info=True)
            raise

        wallet = await self.wallet_repo.refresh(wallet)
        logger.info(
            f"Contract {contract_id} settled: amount={contract.amount} fee={contract.platform_fee} "
            f"net={net} credited to wallet {wallet.wallet_id} (balance={wallet.balance})"
        )
        return SettlementResult(
            contract=await self.contract_service.contract_repo.get_contract_by_id(contract_id),
            payment=payment,
            wallet=wallet,
            freelancer_net=net
        )
