import pytest
from sqlalchemy import select

from app.core.exceptions import ConflictError, InputValidationError, InvalidTransitionError, UnauthorizedError
from app.models.admin_log import AdminLog
from app.models.contract import ContractStatusEnum
from app.models.dispute import DisputeStatusEnum
from app.models.notification import Notification, NotificationTypeEnum
from app.models.project import ProjectStatusEnum
from app.models.user import UserRoleEnum
from app.repositories.project_repo import ProjectRepository
from app.services.contract_service import ContractService
from app.services.dispute_service import DisputeService
from app.services.escrow_service import EscrowService
from app.services.review_service import ReviewService


# ---- reviews ----

async def test_both_parties_review_once(db, make_approved_contract):
    client, freelancer, contract = await make_approved_contract()
    await EscrowService(db).release_payment(contract.contract_id, client)
    service = ReviewService(db)

    review = await service.create_review(contract.contract_id, client, 5, "Fast and sharp work")
    assert review.target_id == freelancer.user_id
    await service.create_review(contract.contract_id, freelancer, 4)

    with pytest.raises(ConflictError):
        await service.create_review(contract.contract_id, client, 3)

    summary = await service.list_reviews_for_user(freelancer.user_id)
    assert summary.count == 1
    assert summary.average_rating == 5.0


async def test_review_needs_completed_contract(db, make_approved_contract):
    client, _, contract = await make_approved_contract()
    with pytest.raises(InvalidTransitionError):
        await ReviewService(db).create_review(contract.contract_id, client, 5)


async def test_rating_bounds(db, make_approved_contract):
    client, _, contract = await make_approved_contract()
    await EscrowService(db).release_payment(contract.contract_id, client)
    with pytest.raises(InputValidationError):
        await ReviewService(db).create_review(contract.contract_id, client, 6)


async def test_user_without_reviews(db, make_user):
    user = await make_user(UserRoleEnum.designer)
    summary = await ReviewService(db).list_reviews_for_user(user.user_id)
    assert summary.count == 0
    assert summary.average_rating is None


# ---- disputes ----

async def test_open_dispute_notifies_counterpart_and_admins(db, make_contract, make_user):
    admin = await make_user(UserRoleEnum.admin)
    client, freelancer, contract = await make_contract()

    dispute = await DisputeService(db).open_dispute(contract.contract_id, client, "Missed two deadlines")
    assert dispute.status == DisputeStatusEnum.open

    recipients = set((await db.execute(
        select(Notification.user_id).where(Notification.type == NotificationTypeEnum.dispute_opened)
    )).scalars().all())
    assert recipients == {freelancer.user_id, admin.user_id}


async def test_one_open_dispute_per_contract(db, make_contract):
    client, freelancer, contract = await make_contract()
    service = DisputeService(db)
    await service.open_dispute(contract.contract_id, client, "Quality issues")
    with pytest.raises(ConflictError):
        await service.open_dispute(contract.contract_id, freelancer, "Scope creep")


async def test_blank_reason_is_rejected(db, make_contract):
    client, _, contract = await make_contract()
    with pytest.raises(InputValidationError):
        await DisputeService(db).open_dispute(contract.contract_id, client, "  ")


async def test_resolve_without_cancelling(db, make_contract, make_user):
    admin = await make_user(UserRoleEnum.admin)
    client, _, contract = await make_contract()
    service = DisputeService(db)
    dispute = await service.open_dispute(contract.contract_id, client, "Slow replies")

    resolved = await service.resolve_dispute(dispute.dispute_id, admin, "Parties agreed on a new date")
    assert resolved.status == DisputeStatusEnum.resolved
    assert resolved.resolution == "Parties agreed on a new date"

    contract, _ = await ContractService(db).get_contract_for_party(contract.contract_id, client)
    assert contract.status == ContractStatusEnum.in_progress

    with pytest.raises(InvalidTransitionError):
        await service.resolve_dispute(dispute.dispute_id, admin, "Again")


async def test_resolve_with_cancellation(db, make_contract, make_user):
    admin = await make_user(UserRoleEnum.admin)
    client, freelancer, contract = await make_contract()
    await ContractService(db).submit_work(contract.contract_id, freelancer)
    service = DisputeService(db)
    dispute = await service.open_dispute(contract.contract_id, client, "Delivered files are unusable")

    await service.resolve_dispute(
        dispute.dispute_id, admin, "Refund client", cancel_contract=True, admin_notes="Checked the files"
    )

    contract, _ = await ContractService(db).get_contract_for_party(contract.contract_id, client)
    assert contract.status == ContractStatusEnum.cancelled
    project = await ProjectRepository(db).get_project_by_id(contract.project_id)
    assert project.status == ProjectStatusEnum.cancelled

    log = (await db.execute(select(AdminLog))).scalars().one()
    assert log.action == "dispute_resolved"
    assert log.details["cancel_contract"] is True


async def test_only_admins_resolve(db, make_contract):
    client, _, contract = await make_contract()
    service = DisputeService(db)
    dispute = await service.open_dispute(contract.contract_id, client, "Late")
    with pytest.raises(UnauthorizedError):
        await service.resolve_dispute(dispute.dispute_id, client, "I win")
