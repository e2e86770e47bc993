# barter/crud/swap.py
"""
Swap Request CRUD Operations
Persistence for the swap request lifecycle. Status changes go through
compare_and_set_status so concurrent transitions cannot overwrite each other.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from barter.models.conversation import Conversation
from barter.models.swap import SwapRequest, SwapStatus
from barter.utils.clock import utcnow

ACTIVE_STATUSES = (SwapStatus.PENDING, SwapStatus.ACCEPTED)


def create_swap_request(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    skill_offered_id: int,
    skill_wanted_id: int,
    message: Optional[str] = None,
) -> SwapRequest:
    """
    Insert a new PENDING swap request.

    Args:
        db: Database session
        from_user_id: Requester user ID
        to_user_id: Counterparty user ID
        skill_offered_id: Skill owned by the requester
        skill_wanted_id: Skill owned by the counterparty
        message: Optional note to the counterparty

    Returns:
        Created SwapRequest (flushed, not committed)
    """
    now = utcnow()
    swap = SwapRequest(
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        skill_offered_id=skill_offered_id,
        skill_wanted_id=skill_wanted_id,
        message=message,
        status=SwapStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    db.add(swap)
    db.flush()
    return swap


def get_swap_request(db: Session, request_id: int) -> Optional[SwapRequest]:
    return db.query(SwapRequest).filter(SwapRequest.id == request_id).first()


def find_active_duplicate(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    skill_offered_id: int,
    skill_wanted_id: int,
) -> Optional[SwapRequest]:
    """An open (pending or accepted) request with the same users and skills."""
    return db.query(SwapRequest).filter(
        SwapRequest.from_user_id == from_user_id,
        SwapRequest.to_user_id == to_user_id,
        SwapRequest.skill_offered_id == skill_offered_id,
        SwapRequest.skill_wanted_id == skill_wanted_id,
        SwapRequest.status.in_(ACTIVE_STATUSES),
    ).first()


def list_swap_requests(
    db: Session,
    user_id: int,
    direction: str,
    since: Optional[datetime] = None,
    statuses: Optional[Iterable[SwapStatus]] = None,
) -> List[SwapRequest]:
    """
    Requests sent or received by a user, most recent first.

    Args:
        db: Database session
        user_id: User ID
        direction: "sent" or "received"
        since: Only requests updated at or after this time
        statuses: Optional status filter

    Returns:
        List of SwapRequest objects
    """
    if direction == "sent":
        query = db.query(SwapRequest).filter(SwapRequest.from_user_id == user_id)
    elif direction == "received":
        query = db.query(SwapRequest).filter(SwapRequest.to_user_id == user_id)
    else:
        raise ValueError(f"Unknown direction: {direction!r}")

    if since is not None:
        query = query.filter(SwapRequest.updated_at >= since)
    if statuses:
        query = query.filter(SwapRequest.status.in_(list(statuses)))

    return query.order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc()).all()


def compare_and_set_status(
    db: Session,
    request_id: int,
    expected: SwapStatus,
    target: SwapStatus,
) -> bool:
    """
    Single conditional UPDATE: only applies while the stored status is still
    ``expected``.

    Returns:
        True if this call won the update, False if the row moved on
    """
    updated = db.query(SwapRequest).filter(
        SwapRequest.id == request_id,
        SwapRequest.status == expected,
    ).update(
        {"status": target, "updated_at": utcnow()},
        synchronize_session=False,
    )
    return updated == 1


def delete_swap_request(db: Session, request_id: int) -> bool:
    """
    Delete a request unless it has been completed meanwhile. Linked
    conversations stay and lose the back-reference.

    Returns:
        True if the row was deleted
    """
    db.query(Conversation).filter(
        Conversation.swap_request_id == request_id
    ).update({"swap_request_id": None}, synchronize_session=False)
    deleted = db.query(SwapRequest).filter(
        SwapRequest.id == request_id,
        SwapRequest.status != SwapStatus.COMPLETED,
    ).delete(synchronize_session=False)
    return deleted == 1


def count_completed_for(db: Session, user_id: int) -> int:
    return db.query(SwapRequest).filter(
        (SwapRequest.from_user_id == user_id) | (SwapRequest.to_user_id == user_id),
        SwapRequest.status == SwapStatus.COMPLETED,
    ).count()


def count_pending_received(db: Session, user_id: int) -> int:
    return db.query(SwapRequest).filter(
        SwapRequest.to_user_id == user_id,
        SwapRequest.status == SwapStatus.PENDING,
    ).count()
