import pytest

from app.core.exceptions import InvalidTransitionError, UnauthorizedError
from app.models.contract import ContractStatusEnum as S
from app.utils.contract_state_machine import (
    ACTIVE_STATUSES, TERMINAL_STATUSES,
    ContractActionEnum as A, ContractPartyEnum as P,
    allowed_actions, apply_action, is_terminal,
)


def test_freelancer_submits_from_in_progress_and_needs_revision():
    for status in (S.in_progress, S.needs_revision):
        result = apply_action(status, P.freelancer, A.submit_work)
        assert result.previous_status == status
        assert result.next_status == S.submitted


def test_request_revision_counts():
    result = apply_action(S.submitted, P.client, A.request_revision)
    assert result.next_status == S.needs_revision
    assert result.increments_revision
    assert not result.stamps_approved_at


def test_approve_stamps_approved_at():
    result = apply_action(S.submitted, P.client, A.approve_work)
    assert result.next_status == S.approved
    assert result.stamps_approved_at


def test_only_system_completes():
    assert apply_action(S.approved, P.system, A.complete).next_status == S.completed
    with pytest.raises(UnauthorizedError):
        apply_action(S.approved, P.client, A.complete)


def test_wrong_party_is_unauthorized():
    with pytest.raises(UnauthorizedError):
        apply_action(S.in_progress, P.client, A.submit_work)
    with pytest.raises(UnauthorizedError):
        apply_action(S.submitted, P.freelancer, A.approve_work)


def test_approve_from_in_progress_is_invalid():
    with pytest.raises(InvalidTransitionError):
        apply_action(S.in_progress, P.client, A.approve_work)


@pytest.mark.parametrize("status", sorted(ACTIVE_STATUSES))
@pytest.mark.parametrize("party", [P.client, P.freelancer, P.admin])
def test_any_active_contract_can_be_cancelled(status, party):
    assert apply_action(status, party, A.cancel).next_status == S.cancelled


@pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES))
@pytest.mark.parametrize("action", list(A))
def test_terminal_statuses_accept_nothing(status, action):
    with pytest.raises(InvalidTransitionError):
        apply_action(status, P.system, action)
    assert is_terminal(status)


def test_allowed_actions_per_party():
    assert set(allowed_actions(S.submitted, P.client)) == {A.request_revision, A.approve_work, A.cancel}
    assert set(allowed_actions(S.submitted, P.freelancer)) == {A.cancel}
    assert allowed_actions(S.completed, P.client) == []
