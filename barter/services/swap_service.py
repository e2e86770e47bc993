# barter/services/swap_service.py
"""
Swap Request Engine
State machine for swap requests:

    PENDING  -> ACCEPTED | REJECTED | CANCELLED
    ACCEPTED -> COMPLETED | CANCELLED

REJECTED, CANCELLED and COMPLETED are terminal. Transitions never cascade into
conversations or ratings; callers refetch whatever depends on the request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from barter.crud import swap as swap_crud
from barter.crud import user as user_crud
from barter.exceptions import (
    DuplicateRequest,
    IllegalTransition,
    InvalidParticipants,
    NotFound,
    NotOwner,
    SkillOwnershipMismatch,
)
from barter.models.swap import SwapRequest, SwapStatus

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS = {
    SwapStatus.PENDING: frozenset({SwapStatus.ACCEPTED, SwapStatus.REJECTED, SwapStatus.CANCELLED}),
    SwapStatus.ACCEPTED: frozenset({SwapStatus.COMPLETED, SwapStatus.CANCELLED}),
}

TERMINAL_STATUSES = frozenset({SwapStatus.REJECTED, SwapStatus.CANCELLED, SwapStatus.COMPLETED})

# Only the counterparty answers a request; either side may cancel or complete.
COUNTERPARTY_ONLY = frozenset({SwapStatus.ACCEPTED, SwapStatus.REJECTED})

DIRECTIONS = ("sent", "received")


# ======================
# HELPERS
# ======================

def is_terminal(status: SwapStatus) -> bool:
    return SwapStatus(status) in TERMINAL_STATUSES


def can_transition(current: SwapStatus, target: SwapStatus) -> bool:
    return SwapStatus(target) in ALLOWED_TRANSITIONS.get(SwapStatus(current), frozenset())


def _load_for_participant(db: Session, request_id: int, actor_id: int) -> SwapRequest:
    swap = swap_crud.get_swap_request(db, request_id)
    if swap is None or actor_id not in swap.participant_ids:
        raise NotFound("Swap request not found", request_id=request_id)
    return swap


def describe(swap: SwapRequest, viewer_id: int) -> Dict[str, Any]:
    """Flat view of a request as seen by one participant."""
    my_rating = next((r for r in swap.ratings if r.from_user_id == viewer_id), None)
    status = SwapStatus(swap.status)
    return {
        "id": swap.id,
        "from_user_id": swap.from_user_id,
        "from_user_name": swap.from_user.name if swap.from_user else None,
        "to_user_id": swap.to_user_id,
        "to_user_name": swap.to_user.name if swap.to_user else None,
        "skill_offered_id": swap.skill_offered_id,
        "skill_offered_name": swap.skill_offered.name if swap.skill_offered else None,
        "skill_wanted_id": swap.skill_wanted_id,
        "skill_wanted_name": swap.skill_wanted.name if swap.skill_wanted else None,
        "status": status,
        "message": swap.message,
        "created_at": swap.created_at,
        "updated_at": swap.updated_at,
        "my_rating_id": my_rating.id if my_rating else None,
        "can_rate": status == SwapStatus.COMPLETED and my_rating is None,
    }


# ======================
# CREATE
# ======================

def create_swap_request(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    skill_offered_id: int,
    skill_wanted_id: int,
    message: Optional[str] = None,
) -> SwapRequest:
    """
    Create a PENDING swap request.

    Ownership is re-checked here even though the profile layer validates it
    too; callers are not trusted.

    Raises:
        InvalidParticipants: requester and counterparty are the same user
        NotFound: counterparty does not exist
        SkillOwnershipMismatch: offered/wanted skill not owned by the right user
        DuplicateRequest: an identical request is still open
    """
    if from_user_id == to_user_id:
        raise InvalidParticipants()

    if user_crud.get_user(db, to_user_id) is None:
        raise NotFound("User not found", user_id=to_user_id)

    if user_crud.get_owned_skill(db, skill_offered_id, from_user_id) is None:
        raise SkillOwnershipMismatch(
            "The offered skill does not exist or does not belong to you",
            skill_id=skill_offered_id,
        )
    if user_crud.get_owned_skill(db, skill_wanted_id, to_user_id) is None:
        raise SkillOwnershipMismatch(
            "The wanted skill does not exist or does not belong to that user",
            skill_id=skill_wanted_id,
        )

    existing = swap_crud.find_active_duplicate(
        db, from_user_id, to_user_id, skill_offered_id, skill_wanted_id
    )
    if existing is not None:
        raise DuplicateRequest(request_id=existing.id)

    cleaned = message.strip() if message else None
    try:
        swap = swap_crud.create_swap_request(
            db,
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            skill_offered_id=skill_offered_id,
            skill_wanted_id=skill_wanted_id,
            message=cleaned or None,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(swap)
    logger.info(
        "Swap request created (id=%s, from=%s, to=%s)",
        swap.id,
        from_user_id,
        to_user_id,
    )
    return swap


# ======================
# TRANSITION
# ======================

def transition_swap_request(
    db: Session,
    request_id: int,
    actor_id: int,
    target_status: SwapStatus,
    expected_status: Optional[SwapStatus] = None,
) -> SwapRequest:
    """
    Move a request to ``target_status``.

    The write is a conditional update on the status the engine (or the caller,
    via ``expected_status``) last observed. If another participant changed the
    request in between, this call loses with IllegalTransition instead of
    overwriting their change. Nothing is retried here.

    Raises:
        NotFound: unknown request, or actor is not a participant
        IllegalTransition: terminal state, illegal edge, wrong actor, or a
            concurrent change won the race
    """
    target = SwapStatus(target_status)
    swap = _load_for_participant(db, request_id, actor_id)
    current = SwapStatus(swap.status)

    if expected_status is not None and SwapStatus(expected_status) != current:
        raise IllegalTransition(
            f"Request is {current.value}, not {SwapStatus(expected_status).value}",
            request_id=request_id,
        )

    if is_terminal(current):
        raise IllegalTransition(
            f"Request is already {current.value.lower()}",
            request_id=request_id,
        )

    if not can_transition(current, target):
        raise IllegalTransition(
            f"Cannot move a {current.value.lower()} request to {target.value.lower()}",
            request_id=request_id,
        )

    if target in COUNTERPARTY_ONLY and actor_id != swap.to_user_id:
        raise IllegalTransition(
            "Only the recipient can accept or reject a request",
            request_id=request_id,
        )

    try:
        won = swap_crud.compare_and_set_status(db, swap.id, current, target)
        if not won:
            db.rollback()
            logger.warning(
                "Swap transition lost to a concurrent update (id=%s, actor=%s, %s->%s)",
                request_id,
                actor_id,
                current.value,
                target.value,
            )
            raise IllegalTransition(
                "This request was changed by the other participant. Refresh and try again",
                request_id=request_id,
            )
        db.commit()
    except IllegalTransition:
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(swap)
    logger.info(
        "Swap request transitioned (id=%s, actor=%s, %s->%s)",
        request_id,
        actor_id,
        current.value,
        target.value,
    )
    return swap


# ======================
# READ
# ======================

def list_swap_requests(db: Session, user_id: int, direction: str) -> List[SwapRequest]:
    """Requests the user sent or received, most recent first."""
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}")
    return swap_crud.list_swap_requests(db, user_id, direction)


def get_swap_request(db: Session, request_id: int, actor_id: int) -> SwapRequest:
    return _load_for_participant(db, request_id, actor_id)


# ======================
# WITHDRAW
# ======================

def withdraw_swap_request(db: Session, request_id: int, actor_id: int) -> int:
    """
    Delete a request on behalf of its requester.

    Completed requests are kept forever because ratings point at them. Any
    conversation linked to the request survives without the link.

    Raises:
        NotFound: unknown request, or actor is not a participant
        NotOwner: actor is the counterparty, not the requester
        IllegalTransition: the request is completed
    """
    swap = _load_for_participant(db, request_id, actor_id)
    if swap.from_user_id != actor_id:
        raise NotOwner("Only the requester can withdraw a swap request", request_id=request_id)
    if SwapStatus(swap.status) == SwapStatus.COMPLETED:
        raise IllegalTransition("Completed swaps cannot be withdrawn", request_id=request_id)

    try:
        deleted = swap_crud.delete_swap_request(db, swap.id)
        if not deleted:
            db.rollback()
            raise IllegalTransition("Completed swaps cannot be withdrawn", request_id=request_id)
        db.commit()
    except IllegalTransition:
        raise
    except Exception:
        db.rollback()
        raise

    logger.info("Swap request withdrawn (id=%s, actor=%s)", request_id, actor_id)
    return request_id
