# barter/api/sync.py
"""
Polling endpoints

Clients poll these instead of subscribing to a push channel:
- GET /sync/policy - Polling cadence
- GET /sync/conversations?since= - Conversation list changes
- GET /sync/conversations/{conversation_id}/messages?after_id= - New messages
- GET /sync/swaps?since= - Swap request changes
- GET /sync/dashboard - Counters for the dashboard
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from barter.api.errors import http_error
from barter.database import get_db
from barter.exceptions import ExchangeError
from barter.models.user import User
from barter.schemas.sync import (
    ConversationFeed,
    DashboardStats,
    MessageFeed,
    SwapFeed,
    SyncPolicy,
)
from barter.services import sync_service
from barter.utils.security import get_current_user

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/policy", response_model=SyncPolicy)
def get_sync_policy():
    return SyncPolicy(**sync_service.sync_policy())


@router.get("/conversations", response_model=ConversationFeed)
def poll_conversations(
    since: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pass the previous response's server_time as ``since``."""
    return ConversationFeed(**sync_service.conversation_feed(db, current_user.id, since=since))


@router.get("/conversations/{conversation_id}/messages", response_model=MessageFeed)
def poll_messages(
    conversation_id: int,
    after_id: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pass the previous response's next_after_id as ``after_id``."""
    try:
        feed = sync_service.message_feed(
            db, conversation_id, current_user.id, after_id=after_id, limit=limit
        )
    except ExchangeError as exc:
        raise http_error(exc)
    return MessageFeed(**feed)


@router.get("/swaps", response_model=SwapFeed)
def poll_swaps(
    since: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return SwapFeed(**sync_service.swap_feed(db, current_user.id, since=since))


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return DashboardStats(**sync_service.dashboard(db, current_user.id))
