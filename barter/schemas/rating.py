# barter/schemas/rating.py
"""
Rating Pydantic Schemas
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


# ======================
# REQUEST MODELS
# ======================

class RatingBase(BaseModel):
    # Range and whole-number checks happen in the ledger (INVALID_RATING)
    rating: Union[int, float] = Field(..., description="Whole number from 1 to 5")
    comment: Optional[str] = Field(None, max_length=1000, description="Comment (max 1000 chars)")

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v):
        """Whitespace-only comments are stored as no comment."""
        if v is None:
            return None
        return v.strip() or None


class RatingCreate(RatingBase):
    swap_id: int = Field(..., description="Completed swap being rated")


class RatingUpdate(RatingBase):
    pass


# ======================
# RESPONSE MODELS
# ======================

class RatingResponse(BaseModel):
    id: int
    swap_id: int
    from_user_id: int
    from_user_name: Optional[str] = None
    to_user_id: int
    to_user_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    skill_offered_name: Optional[str] = None
    skill_wanted_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RatingMutationResponse(BaseModel):
    rating: RatingResponse
    refetch: List[str] = Field(default_factory=list)


class RatingSummary(BaseModel):
    user_id: int
    average_rating: float = Field(..., description="Average rating (0-5), 0 when unrated")
    total_ratings: int
    distribution: Dict[int, int] = Field(..., description="Count of each rating (1-5)")


class AverageRatingResponse(BaseModel):
    user_id: int
    average_rating: float
