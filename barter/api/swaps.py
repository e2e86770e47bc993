# barter/api/swaps.py
"""
Swap Request API

Endpoints:
- POST /swaps/ - Create a swap request
- GET /swaps/?direction=sent|received - List my requests
- GET /swaps/{request_id} - Get one request
- PATCH /swaps/{request_id}/status - Accept, reject, cancel or complete
- DELETE /swaps/{request_id} - Withdraw my request
"""

from typing import List, Literal

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from barter.api.errors import http_error
from barter.database import get_db
from barter.exceptions import ExchangeError
from barter.models.user import User
from barter.schemas.swap import (
    SwapMutationResponse,
    SwapRequestCreate,
    SwapRequestResponse,
    SwapTransition,
    SwapWithdrawResponse,
)
from barter.services import swap_service
from barter.services.sync_service import refetch_after
from barter.utils.security import get_current_user

router = APIRouter(prefix="/swaps", tags=["swaps"])


# ======================
# CREATE SWAP REQUEST
# ======================
@router.post("/", response_model=SwapMutationResponse, status_code=status.HTTP_201_CREATED)
def create_swap_request(
    payload: SwapRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Send a swap request to another user.

    The offered skill must be mine and the wanted skill must be theirs.
    """
    try:
        swap = swap_service.create_swap_request(
            db,
            from_user_id=current_user.id,
            to_user_id=payload.to_user_id,
            skill_offered_id=payload.skill_offered_id,
            skill_wanted_id=payload.skill_wanted_id,
            message=payload.message,
        )
    except ExchangeError as exc:
        raise http_error(exc)

    return SwapMutationResponse(
        swap=SwapRequestResponse(**swap_service.describe(swap, current_user.id)),
        refetch=refetch_after("swaps.create", swap_id=swap.id),
    )


# ======================
# LIST / GET
# ======================
@router.get("/", response_model=List[SwapRequestResponse])
def list_swap_requests(
    direction: Literal["sent", "received"] = "received",
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Requests I sent or received, most recent first."""
    swaps = swap_service.list_swap_requests(db, current_user.id, direction)
    return [SwapRequestResponse(**swap_service.describe(s, current_user.id)) for s in swaps]


@router.get("/{request_id}", response_model=SwapRequestResponse)
def get_swap_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        swap = swap_service.get_swap_request(db, request_id, current_user.id)
    except ExchangeError as exc:
        raise http_error(exc)
    return SwapRequestResponse(**swap_service.describe(swap, current_user.id))


# ======================
# TRANSITION
# ======================
@router.patch("/{request_id}/status", response_model=SwapMutationResponse)
def transition_swap_request(
    request_id: int,
    payload: SwapTransition,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Change a request's status.

    - ACCEPTED / REJECTED: recipient only, from PENDING
    - CANCELLED: either side, from PENDING or ACCEPTED
    - COMPLETED: either side, from ACCEPTED

    A 409 means the request moved on (possibly because the other side acted
    first); refetch and decide again.
    """
    try:
        swap = swap_service.transition_swap_request(
            db,
            request_id=request_id,
            actor_id=current_user.id,
            target_status=payload.target_status,
            expected_status=payload.expected_status,
        )
    except ExchangeError as exc:
        raise http_error(exc)

    return SwapMutationResponse(
        swap=SwapRequestResponse(**swap_service.describe(swap, current_user.id)),
        refetch=refetch_after("swaps.transition", swap_id=swap.id),
    )


# ======================
# WITHDRAW
# ======================
@router.delete("/{request_id}", response_model=SwapWithdrawResponse)
def withdraw_swap_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete my own request unless it has been completed."""
    try:
        swap_service.withdraw_swap_request(db, request_id, current_user.id)
    except ExchangeError as exc:
        raise http_error(exc)

    return SwapWithdrawResponse(
        id=request_id,
        message="Swap request withdrawn",
        refetch=refetch_after("swaps.withdraw", swap_id=request_id),
    )
