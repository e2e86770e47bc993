# barter/api/ratings.py
"""
Rating API

Endpoints:
- POST /ratings/ - Rate a completed swap
- PATCH /ratings/{rating_id} - Update my rating
- GET /ratings/given - Ratings I gave
- GET /ratings/received - Ratings I received
- GET /ratings/users/{user_id}/average - Average rating of a user
- GET /ratings/users/{user_id}/summary - Average, count and distribution
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from barter.api.errors import http_error
from barter.database import get_db
from barter.exceptions import ExchangeError
from barter.models.user import User
from barter.schemas.rating import (
    AverageRatingResponse,
    RatingCreate,
    RatingMutationResponse,
    RatingResponse,
    RatingSummary,
    RatingUpdate,
)
from barter.services import rating_service
from barter.services.sync_service import refetch_after
from barter.utils.security import get_current_user

router = APIRouter(prefix="/ratings", tags=["ratings"])


# ======================
# RATE SWAP
# ======================
@router.post("/", response_model=RatingMutationResponse, status_code=status.HTTP_201_CREATED)
def rate_swap(
    payload: RatingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Rate the other participant of a completed swap.

    Requirements:
    - Swap must be completed
    - I must be one of its two participants
    - One rating per swap per participant
    - Rating must be a whole number 1-5
    """
    try:
        entry = rating_service.rate_swap(
            db,
            swap_id=payload.swap_id,
            from_user_id=current_user.id,
            rating=payload.rating,
            comment=payload.comment,
        )
    except ExchangeError as exc:
        raise http_error(exc)

    return RatingMutationResponse(
        rating=RatingResponse(**rating_service.rating_to_dict(entry)),
        refetch=refetch_after("ratings.rate", swap_id=entry.swap_id),
    )


# ======================
# UPDATE RATING
# ======================
@router.patch("/{rating_id}", response_model=RatingMutationResponse)
def update_rating(
    rating_id: int,
    payload: RatingUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        entry = rating_service.update_rating(
            db,
            rating_id=rating_id,
            actor_id=current_user.id,
            rating=payload.rating,
            comment=payload.comment,
        )
    except ExchangeError as exc:
        raise http_error(exc)

    return RatingMutationResponse(
        rating=RatingResponse(**rating_service.rating_to_dict(entry)),
        refetch=refetch_after("ratings.update", swap_id=entry.swap_id),
    )


# ======================
# LISTINGS
# ======================
@router.get("/given", response_model=List[RatingResponse])
def get_given_ratings(
    limit: int = 50,
    offset: int = 0,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return [
        RatingResponse(**r)
        for r in rating_service.ratings_given(db, current_user.id, limit=limit, offset=offset)
    ]


@router.get("/received", response_model=List[RatingResponse])
def get_received_ratings(
    limit: int = 50,
    offset: int = 0,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return [
        RatingResponse(**r)
        for r in rating_service.ratings_received(db, current_user.id, limit=limit, offset=offset)
    ]


# ======================
# AGGREGATES (public)
# ======================
@router.get("/users/{user_id}/average", response_model=AverageRatingResponse)
def get_average_rating(user_id: int, db: Session = Depends(get_db)):
    """Average of ratings received; 0 for users nobody has rated."""
    return AverageRatingResponse(
        user_id=user_id,
        average_rating=rating_service.average_for(db, user_id),
    )


@router.get("/users/{user_id}/summary", response_model=RatingSummary)
def get_rating_summary(user_id: int, db: Session = Depends(get_db)):
    return RatingSummary(**rating_service.rating_summary(db, user_id))
