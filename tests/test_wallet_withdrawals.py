from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.core.exceptions import (
    ConflictError, InputValidationError, InsufficientBalanceError, InvalidTransitionError, NotFoundError,
    UnauthorizedError
)
from app.models.admin_log import AdminLog
from app.models.user import UserRoleEnum
from app.models.wallet import Wallet, Withdrawal, WithdrawalStatusEnum
from app.repositories.wallet_repo import WalletRepository, WithdrawalRepository
from app.services.escrow_service import EscrowService
from app.services.wallet_service import WalletService


@pytest.fixture
def funded_freelancer(db, make_approved_contract):
    """Freelancer whose wallet holds exactly $100.00 after one settlement."""
    async def _make():
        # 111.11 - 11.11 fee = 100.00
        client, freelancer, contract = await make_approved_contract(price="111.11")
        await EscrowService(db).release_payment(contract.contract_id, client)
        return freelancer

    return _make


async def test_wallet_summary(db, funded_freelancer):
    freelancer = await funded_freelancer()
    summary = await WalletService(db).get_my_wallet(freelancer)
    assert summary.balance == Decimal("100.00")
    assert summary.total_earned == Decimal("100.00")
    assert summary.pending_withdrawals == Decimal("0.00")
    assert summary.available == Decimal("100.00")


async def test_wallet_is_created_lazily(db, make_user):
    freelancer = await make_user(UserRoleEnum.media_buyer)
    summary = await WalletService(db).get_my_wallet(freelancer)
    assert summary.balance == Decimal("0.00")
    assert await WalletRepository(db).get_wallet_by_user_id(freelancer.user_id) is not None


async def test_clients_have_no_wallet(db, make_user):
    client = await make_user(UserRoleEnum.client)
    with pytest.raises(UnauthorizedError):
        await WalletService(db).get_my_wallet(client)


async def test_overdraw_is_refused_and_writes_nothing(db, funded_freelancer):
    freelancer = await funded_freelancer()
    freelancer_id = freelancer.user_id

    with pytest.raises(InsufficientBalanceError):
        await WalletService(db).request_withdrawal(freelancer, Decimal("150.00"))

    count = (await db.execute(select(func.count()).select_from(Withdrawal))).scalar()
    assert count == 0
    wallet = await WalletRepository(db).get_wallet_by_user_id(freelancer_id)
    assert wallet.balance == Decimal("100.00")


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5.00")])
async def test_non_positive_amount_is_invalid(db, funded_freelancer, amount):
    freelancer = await funded_freelancer()
    with pytest.raises(InputValidationError):
        await WalletService(db).request_withdrawal(freelancer, amount)


async def test_pending_requests_reserve_funds(db, funded_freelancer):
    freelancer = await funded_freelancer()
    service = WalletService(db)

    first = await service.request_withdrawal(freelancer, Decimal("60.00"))
    assert first.status == WithdrawalStatusEnum.pending

    # only 40.00 is left to request
    await db.refresh(freelancer)
    with pytest.raises(InsufficientBalanceError):
        await service.request_withdrawal(freelancer, Decimal("50.00"))

    await db.refresh(freelancer)
    summary = await service.get_my_wallet(freelancer)
    assert summary.balance == Decimal("100.00")
    assert summary.pending_withdrawals == Decimal("60.00")
    assert summary.available == Decimal("40.00")


async def test_approve_debits_then_process(db, funded_freelancer, make_user):
    freelancer = await funded_freelancer()
    admin = await make_user(UserRoleEnum.admin)
    service = WalletService(db)
    withdrawal = await service.request_withdrawal(freelancer, Decimal("30.00"))

    approved = await service.approve_withdrawal(withdrawal.withdrawal_id, admin)
    assert approved.status == WithdrawalStatusEnum.approved
    wallet = await WalletRepository(db).get_wallet_by_user_id(freelancer.user_id)
    assert wallet.balance == Decimal("70.00")
    # earnings history is not a balance
    assert wallet.total_earned == Decimal("100.00")

    processed = await service.mark_withdrawal_processed(withdrawal.withdrawal_id, admin)
    assert processed.status == WithdrawalStatusEnum.processed

    actions = (await db.execute(select(AdminLog.action).order_by(AdminLog.created_at))).scalars().all()
    assert actions == ["withdrawal_approved", "withdrawal_processed"]


async def test_reject_leaves_balance_and_frees_reservation(db, funded_freelancer, make_user):
    freelancer = await funded_freelancer()
    admin = await make_user(UserRoleEnum.admin)
    service = WalletService(db)
    withdrawal = await service.request_withdrawal(freelancer, Decimal("100.00"))

    rejected = await service.reject_withdrawal(withdrawal.withdrawal_id, admin, "Payout details missing")
    assert rejected.status == WithdrawalStatusEnum.rejected

    summary = await service.get_my_wallet(freelancer)
    assert summary.balance == Decimal("100.00")
    assert summary.available == Decimal("100.00")


async def test_withdrawal_transitions_are_one_way(db, funded_freelancer, make_user):
    freelancer = await funded_freelancer()
    admin = await make_user(UserRoleEnum.admin)
    service = WalletService(db)
    withdrawal = await service.request_withdrawal(freelancer, Decimal("10.00"))

    with pytest.raises(InvalidTransitionError):
        await service.mark_withdrawal_processed(withdrawal.withdrawal_id, admin)

    await service.reject_withdrawal(withdrawal.withdrawal_id, admin)
    with pytest.raises(InvalidTransitionError):
        await service.approve_withdrawal(withdrawal.withdrawal_id, admin)


async def test_admin_only(db, funded_freelancer):
    freelancer = await funded_freelancer()
    service = WalletService(db)
    withdrawal = await service.request_withdrawal(freelancer, Decimal("10.00"))

    with pytest.raises(UnauthorizedError):
        await service.approve_withdrawal(withdrawal.withdrawal_id, freelancer)
    with pytest.raises(UnauthorizedError):
        await service.list_withdrawals(freelancer)


async def test_unknown_withdrawal(db, make_user):
    admin = await make_user(UserRoleEnum.admin)
    with pytest.raises(NotFoundError):
        await WalletService(db).approve_withdrawal("00000000-0000-0000-0000-000000000000", admin)


async def test_earnings_list_settled_contracts(db, funded_freelancer):
    freelancer = await funded_freelancer()
    earnings = await WalletService(db).list_my_earnings(freelancer)
    assert len(earnings) == 1
    assert earnings[0].amount == Decimal("111.11")
    assert earnings[0].platform_fee == Decimal("11.11")
    assert earnings[0].earned == Decimal("100.00")


async def test_approve_loses_to_concurrent_reject(db, other_db, funded_freelancer, make_user, run_after_first):
    freelancer = await funded_freelancer()
    admin = await make_user(UserRoleEnum.admin)
    withdrawal = await WalletService(db).request_withdrawal(freelancer, Decimal("40.00"))
    withdrawal_id, freelancer_id = withdrawal.withdrawal_id, freelancer.user_id

    async def reject_elsewhere():
        await WalletService(other_db).reject_withdrawal(withdrawal_id, admin, "Bank details missing")

    run_after_first(WithdrawalRepository, "get_withdrawal_by_id", reject_elsewhere)
    with pytest.raises(ConflictError):
        await WalletService(db).approve_withdrawal(withdrawal_id, admin)

    withdrawal = await WithdrawalRepository(db).get_withdrawal_by_id(withdrawal_id)
    assert withdrawal.status == WithdrawalStatusEnum.rejected
    wallet = await WalletRepository(db).get_wallet_by_user_id(freelancer_id)
    assert wallet.balance == Decimal("100.00")
    actions = (await db.execute(select(AdminLog.action))).scalars().all()
    assert actions == ["withdrawal_rejected"]


async def test_wallet_created_concurrently_is_reused(db, other_db, make_user, run_after_first):
    freelancer = await make_user(UserRoleEnum.designer)
    freelancer_id = freelancer.user_id

    async def open_wallet_elsewhere():
        other_db.add(Wallet(user_id=freelancer_id, balance=Decimal("0"), total_earned=Decimal("0")))
        await other_db.commit()

    # the lookup finds nothing, then another request creates the wallet
    run_after_first(WalletRepository, "get_wallet_by_user_id", open_wallet_elsewhere)
    summary = await WalletService(db).get_my_wallet(freelancer)

    assert summary.balance == Decimal("0.00")
    wallets = (await db.execute(select(Wallet).where(Wallet.user_id == freelancer_id))).scalars().all()
    assert [w.wallet_id for w in wallets] == [summary.wallet_id]
