# app/utils/contract_state_machine.py
"""
Contract lifecycle rules.

A pure function of (current status, acting party, requested action). It
never touches the database: the contract service applies the returned
result with a conditional UPDATE on the status it read.

    in_progress --submit_work(freelancer)--> submitted
    needs_revision --submit_work(freelancer)--> submitted
    submitted --request_revision(client)--> needs_revision   (revision_count += 1)
    submitted --approve_work(client)--> approved             (approved_at = now)
    approved --complete(system)--> completed                 (escrow settlement only)
    <any active> --cancel(client | freelancer | admin)--> cancelled
"""
import enum
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from app.core.exceptions import InvalidTransitionError, UnauthorizedError
from app.models.contract import ContractStatusEnum


class ContractActionEnum(str, enum.Enum):
    submit_work = "submit_work"
    request_revision = "request_revision"
    approve_work = "approve_work"
    complete = "complete"
    cancel = "cancel"


class ContractPartyEnum(str, enum.Enum):
    client = "client"
    freelancer = "freelancer"
    system = "system"
    admin = "admin"


ACTIVE_STATUSES = frozenset({
    ContractStatusEnum.in_progress,
    ContractStatusEnum.submitted,
    ContractStatusEnum.needs_revision,
    ContractStatusEnum.approved,
    ContractStatusEnum.under_review,
})

TERMINAL_STATUSES = frozenset({
    ContractStatusEnum.completed,
    ContractStatusEnum.cancelled,
})


@dataclass(frozen=True)
class TransitionResult:
    previous_status: ContractStatusEnum
    next_status: ContractStatusEnum
    increments_revision: bool = False
    stamps_approved_at: bool = False
    # prefix for the optional note posted into the contract thread
    note_prefix: Optional[str] = None


@dataclass(frozen=True)
class _Rule:
    next_status: ContractStatusEnum
    parties: Tuple[ContractPartyEnum, ...]
    increments_revision: bool = False
    stamps_approved_at: bool = False
    note_prefix: Optional[str] = None


_S = ContractStatusEnum
_A = ContractActionEnum
_P = ContractPartyEnum

_submit = _Rule(_S.submitted, (_P.freelancer,), note_prefix="Work Submitted")

TRANSITIONS: Dict[Tuple[ContractStatusEnum, ContractActionEnum], _Rule] = {
    (_S.in_progress, _A.submit_work): _submit,
    (_S.needs_revision, _A.submit_work): _submit,
    (_S.submitted, _A.request_revision): _Rule(
        _S.needs_revision, (_P.client,), increments_revision=True, note_prefix="Revision Requested"
    ),
    (_S.submitted, _A.approve_work): _Rule(_S.approved, (_P.client,), stamps_approved_at=True),
    (_S.approved, _A.complete): _Rule(_S.completed, (_P.system,)),
}

for _status in ACTIVE_STATUSES:
    TRANSITIONS[(_status, _A.cancel)] = _Rule(
        _S.cancelled, (_P.client, _P.freelancer, _P.admin), note_prefix="Contract Cancelled"
    )


def apply_action(
    status: ContractStatusEnum,
    party: ContractPartyEnum,
    action: ContractActionEnum,
) -> TransitionResult:
    """
    Resolve the next status for `action` requested by `party`.

    Raises InvalidTransitionError when the action is not available from
    `status` (every action from completed / cancelled), and
    UnauthorizedError when it is, but not for this party.
    """
    status = ContractStatusEnum(status)
    rule = TRANSITIONS.get((status, ContractActionEnum(action)))
    if rule is None:
        raise InvalidTransitionError(
            f"Cannot {ContractActionEnum(action).value} a contract in status '{status.value}'"
        )
    if ContractPartyEnum(party) not in rule.parties:
        raise UnauthorizedError(
            f"The {ContractPartyEnum(party).value} may not {ContractActionEnum(action).value} this contract"
        )
    return TransitionResult(
        previous_status=status,
        next_status=rule.next_status,
        increments_revision=rule.increments_revision,
        stamps_approved_at=rule.stamps_approved_at,
        note_prefix=rule.note_prefix,
    )


def allowed_actions(status: ContractStatusEnum, party: ContractPartyEnum) -> List[ContractActionEnum]:
    """Actions `party` may take next; empty for terminal contracts."""
    status = ContractStatusEnum(status)
    return [
        action for (from_status, action), rule in TRANSITIONS.items()
        if from_status == status and party in rule.parties
    ]


def is_terminal(status: ContractStatusEnum) -> bool:
    return ContractStatusEnum(status) in TERMINAL_STATUSES
