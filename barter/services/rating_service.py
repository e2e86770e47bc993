# barter/services/rating_service.py
"""
Rating Ledger
Business logic for rating completed swaps.

A swap can be rated once by each participant, only after it is COMPLETED. The
rated user is always the other participant of the swap; callers never choose
it.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from barter.crud import rating as rating_crud
from barter.crud import swap as swap_crud
from barter.exceptions import (
    DuplicateRating,
    InvalidRating,
    NotFound,
    NotOwner,
    NotParticipant,
    SwapNotCompleted,
)
from barter.models.rating import Rating
from barter.models.swap import SwapStatus

logger = logging.getLogger(__name__)


# ======================
# VALIDATION HELPERS
# ======================

def validate_rating(value: Any) -> int:
    """
    Accept whole numbers 1..5 only.

    Raises:
        InvalidRating: bools, fractions, non-numbers, or out of range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRating()
    if not (1 <= value <= 5):
        raise InvalidRating()
    return value


def _clean_comment(comment: Optional[str]) -> Optional[str]:
    if comment is None:
        return None
    cleaned = comment.strip()
    return cleaned or None


def rating_to_dict(entry: Rating) -> Dict[str, Any]:
    swap = entry.swap
    return {
        "id": entry.id,
        "swap_id": entry.swap_id,
        "from_user_id": entry.from_user_id,
        "from_user_name": entry.from_user.name if entry.from_user else None,
        "to_user_id": entry.to_user_id,
        "to_user_name": entry.to_user.name if entry.to_user else None,
        "rating": entry.rating,
        "comment": entry.comment,
        "skill_offered_name": swap.skill_offered.name if swap and swap.skill_offered else None,
        "skill_wanted_name": swap.skill_wanted.name if swap and swap.skill_wanted else None,
        "created_at": entry.created_at,
        "updated_at": entry.updated_at,
    }


# ======================
# RATE
# ======================

def rate_swap(
    db: Session,
    swap_id: int,
    from_user_id: int,
    rating: Any,
    comment: Optional[str] = None,
) -> Rating:
    """
    File a rating for a completed swap.

    Args:
        db: Database session
        swap_id: Swap request identifier
        from_user_id: Participant filing the rating
        rating: Whole number 1..5
        comment: Optional text comment

    Returns:
        The stored Rating

    Raises:
        NotFound: unknown swap
        SwapNotCompleted: swap status is not COMPLETED
        NotParticipant: rater is neither side of the swap
        DuplicateRating: rater already rated this swap
        InvalidRating: rating is not a whole number 1..5
    """
    swap = swap_crud.get_swap_request(db, swap_id)
    if swap is None:
        raise NotFound("Swap request not found", swap_id=swap_id)

    if SwapStatus(swap.status) != SwapStatus.COMPLETED:
        raise SwapNotCompleted(swap_id=swap_id)

    if from_user_id not in swap.participant_ids:
        raise NotParticipant(swap_id=swap_id)

    if rating_crud.get_rating_for(db, swap_id, from_user_id) is not None:
        raise DuplicateRating(swap_id=swap_id)

    value = validate_rating(rating)
    cleaned = _clean_comment(comment)

    # The rated user is whichever participant is not rating
    to_user_id = swap.to_user_id if swap.from_user_id == from_user_id else swap.from_user_id

    try:
        entry = rating_crud.create_rating(
            db,
            swap_id=swap_id,
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            rating=value,
            comment=cleaned,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            "Concurrent duplicate rating rejected (swap=%s, rater=%s)",
            swap_id,
            from_user_id,
        )
        raise DuplicateRating(swap_id=swap_id)

    db.refresh(entry)
    logger.info(
        "Rating filed (id=%s, swap=%s, from=%s, to=%s)",
        entry.id,
        swap_id,
        from_user_id,
        to_user_id,
    )
    return entry


# ======================
# UPDATE
# ======================

def update_rating(
    db: Session,
    rating_id: int,
    actor_id: int,
    rating: Any,
    comment: Optional[str] = None,
) -> Rating:
    """
    Overwrite a rating's value (and comment, when given) in place.

    The swap link, the rated user and created_at never change.

    Raises:
        NotFound: unknown rating
        NotOwner: actor did not file this rating
        InvalidRating: rating is not a whole number 1..5
    """
    entry = rating_crud.get_rating(db, rating_id)
    if entry is None:
        raise NotFound("Rating not found", rating_id=rating_id)
    if entry.from_user_id != actor_id:
        raise NotOwner("You can only update your own ratings", rating_id=rating_id)

    value = validate_rating(rating)
    cleaned = _clean_comment(comment)

    try:
        rating_crud.update_rating(db, entry, rating=value, comment=cleaned)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(entry)
    logger.info("Rating updated (id=%s, actor=%s)", rating_id, actor_id)
    return entry


# ======================
# AGGREGATES & LISTINGS
# ======================

def average_for(db: Session, user_id: int) -> float:
    """Mean of ratings received; 0 when there are none."""
    average, _ = rating_crud.calculate_average(db, user_id)
    return average


def rating_summary(db: Session, user_id: int) -> Dict[str, Any]:
    average, total = rating_crud.calculate_average(db, user_id)
    distribution = rating_crud.get_rating_distribution(db, user_id)
    return {
        "user_id": user_id,
        "average_rating": round(average, 2),
        "total_ratings": total,
        "distribution": distribution,
    }


def ratings_given(db: Session, user_id: int, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
    return [rating_to_dict(r) for r in rating_crud.list_given(db, user_id, limit, offset)]


def ratings_received(db: Session, user_id: int, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
    return [rating_to_dict(r) for r in rating_crud.list_received(db, user_id, limit, offset)]
