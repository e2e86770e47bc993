# barter/schemas/swap.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from barter.models.swap import SwapStatus


# ======================
# SWAP REQUEST MODELS
# ======================

class SwapRequestCreate(BaseModel):
    to_user_id: int = Field(..., description="User the request is sent to")
    skill_offered_id: int = Field(..., description="Requester's skill on offer")
    skill_wanted_id: int = Field(..., description="Counterparty's skill wanted")
    message: Optional[str] = Field(None, max_length=1000, description="Optional note")


class SwapTransition(BaseModel):
    target_status: SwapStatus
    expected_status: Optional[SwapStatus] = Field(
        None,
        description="Status the client last saw; the change is refused if it moved on",
    )


# ======================
# SWAP RESPONSE MODELS
# ======================

class SwapRequestResponse(BaseModel):
    id: int
    from_user_id: int
    from_user_name: Optional[str] = None
    to_user_id: int
    to_user_name: Optional[str] = None
    skill_offered_id: int
    skill_offered_name: Optional[str] = None
    skill_wanted_id: int
    skill_wanted_name: Optional[str] = None
    status: SwapStatus
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    my_rating_id: Optional[int] = None
    can_rate: bool = False

    model_config = ConfigDict(from_attributes=True)


class SwapMutationResponse(BaseModel):
    swap: SwapRequestResponse
    refetch: List[str] = Field(default_factory=list)


class SwapWithdrawResponse(BaseModel):
    id: int
    message: str
    refetch: List[str] = Field(default_factory=list)
