# barter/crud/rating.py
"""
Rating CRUD Operations
One rating per (swap, rater); aggregates are computed on read.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from barter.models.rating import Rating
from barter.models.swap import SwapRequest
from barter.utils.clock import utcnow


def create_rating(
    db: Session,
    swap_id: int,
    from_user_id: int,
    to_user_id: int,
    rating: int,
    comment: Optional[str] = None,
) -> Rating:
    """
    Insert a rating row.

    Raises:
        IntegrityError (at flush): a rating for (swap_id, from_user_id) exists
    """
    now = utcnow()
    entry = Rating(
        swap_id=swap_id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        rating=rating,
        comment=comment,
        created_at=now,
        updated_at=now,
    )
    db.add(entry)
    db.flush()
    return entry


def get_rating(db: Session, rating_id: int) -> Optional[Rating]:
    return db.query(Rating).filter(Rating.id == rating_id).first()


def get_rating_for(db: Session, swap_id: int, from_user_id: int) -> Optional[Rating]:
    return db.query(Rating).filter(
        Rating.swap_id == swap_id,
        Rating.from_user_id == from_user_id,
    ).first()


def update_rating(
    db: Session,
    entry: Rating,
    rating: int,
    comment: Optional[str] = None,
) -> Rating:
    entry.rating = rating
    if comment is not None:
        entry.comment = comment
    entry.updated_at = utcnow()
    db.flush()
    return entry


def calculate_average(db: Session, user_id: int) -> Tuple[float, int]:
    """
    Average rating received by a user.

    Returns:
        Tuple of (average_rating, total_ratings); (0.0, 0) when none exist
    """
    result = db.query(
        func.avg(Rating.rating).label("avg_rating"),
        func.count(Rating.id).label("total"),
    ).filter(
        Rating.to_user_id == user_id
    ).first()

    avg_rating = float(result.avg_rating) if result.avg_rating is not None else 0.0
    total = int(result.total) if result.total else 0
    return (avg_rating, total)


def get_rating_distribution(db: Session, user_id: int) -> Dict[int, int]:
    distribution = {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    results = db.query(
        Rating.rating,
        func.count(Rating.id).label("count"),
    ).filter(
        Rating.to_user_id == user_id
    ).group_by(
        Rating.rating
    ).all()

    for value, count in results:
        distribution[value] = count
    return distribution


def list_given(db: Session, user_id: int, limit: int = 50, offset: int = 0) -> List[Rating]:
    return (
        db.query(Rating)
        .options(
            joinedload(Rating.to_user),
            joinedload(Rating.swap).joinedload(SwapRequest.skill_offered),
            joinedload(Rating.swap).joinedload(SwapRequest.skill_wanted),
        )
        .filter(Rating.from_user_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def list_received(db: Session, user_id: int, limit: int = 50, offset: int = 0) -> List[Rating]:
    return (
        db.query(Rating)
        .options(
            joinedload(Rating.from_user),
            joinedload(Rating.swap).joinedload(SwapRequest.skill_offered),
            joinedload(Rating.swap).joinedload(SwapRequest.skill_wanted),
        )
        .filter(Rating.to_user_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
