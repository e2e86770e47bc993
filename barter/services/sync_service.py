# barter/services/sync_service.py
"""
Sync / Reconciliation contract

There is no push channel. Clients poll the conversation list every
CONVERSATION_POLL_SECONDS and an open conversation every MESSAGE_POLL_SECONDS,
and after every mutation they refetch the query keys listed by refetch_after().
Nothing here blocks waiting on another client, and no mutation updates another
aggregate on the server.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from barter.config import settings
from barter.crud import conversation as conversation_crud
from barter.crud import swap as swap_crud
from barter.crud import rating as rating_crud
from barter.services import conversation_service, swap_service
from barter.utils.clock import as_naive_utc, utcnow


# Query keys a client must invalidate after each mutation. "{...}" parts are
# filled from the ids passed to refetch_after().
REFETCH_KEYS = {
    "swaps.create": ["swaps.sent", "dashboard"],
    "swaps.transition": ["swaps.sent", "swaps.received", "swaps.detail:{swap_id}", "dashboard"],
    "swaps.withdraw": ["swaps.sent", "swaps.received", "conversations", "dashboard"],
    "conversations.open": ["conversations"],
    "messages.send": ["messages:{conversation_id}", "conversations"],
    "messages.read": ["messages:{conversation_id}", "conversations", "dashboard"],
    "ratings.rate": ["ratings.given", "ratings.received", "swaps.detail:{swap_id}", "dashboard"],
    "ratings.update": ["ratings.given", "ratings.received", "dashboard"],
}


def refetch_after(operation: str, **ids: Any) -> List[str]:
    """
    Keys to invalidate after ``operation``.

    >>> refetch_after("messages.send", conversation_id=7)
    ['messages:7', 'conversations']
    """
    try:
        templates = REFETCH_KEYS[operation]
    except KeyError:
        raise ValueError(f"Unknown operation: {operation!r}") from None
    return [template.format(**ids) for template in templates]


def _cursor_now() -> datetime:
    """Server time to hand back as the next ``since`` cursor."""
    return utcnow() - timedelta(seconds=settings.SYNC_CURSOR_GRACE_SECONDS)


def sync_policy() -> Dict[str, int]:
    return {
        "conversation_list_seconds": settings.CONVERSATION_POLL_SECONDS,
        "messages_seconds": settings.MESSAGE_POLL_SECONDS,
        "message_page_size": settings.MESSAGE_PAGE_DEFAULT,
    }


def conversation_feed(db: Session, user_id: int, since: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Conversations changed at or after ``since`` (all of them without a cursor).

    server_time is taken before reading and moved back by the grace window,
    so a write stamped before this call but committed after it still shows
    up in the next poll. The price is that recent rows may be sent twice.
    """
    server_time = _cursor_now()
    conversations = conversation_service.list_conversations(db, user_id, since=as_naive_utc(since))
    return {
        "server_time": server_time,
        "conversations": conversations,
        "total_unread": conversation_crud.total_unread(db, user_id),
    }


def message_feed(
    db: Session,
    conversation_id: int,
    requester_id: int,
    after_id: Optional[int] = None,
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Messages newer than the ``after_id`` cursor, oldest first. Without a
    cursor this is the latest page, same as get_messages.
    """
    if after_id is None:
        messages = conversation_service.get_messages(db, conversation_id, requester_id, limit)
    else:
        messages = conversation_service.get_messages_after(
            db, conversation_id, requester_id, after_id, limit
        )
    next_cursor = max((m.id for m in messages), default=after_id)
    return {
        "conversation_id": conversation_id,
        "messages": [conversation_service.message_to_dict(m) for m in messages],
        "next_after_id": next_cursor,
    }


def swap_feed(db: Session, user_id: int, since: Optional[datetime] = None) -> Dict[str, Any]:
    server_time = _cursor_now()
    cursor = as_naive_utc(since)
    sent = swap_crud.list_swap_requests(db, user_id, "sent", since=cursor)
    received = swap_crud.list_swap_requests(db, user_id, "received", since=cursor)
    return {
        "server_time": server_time,
        "sent": [swap_service.describe(s, user_id) for s in sent],
        "received": [swap_service.describe(s, user_id) for s in received],
    }


def dashboard(db: Session, user_id: int) -> Dict[str, Any]:
    average, total = rating_crud.calculate_average(db, user_id)
    return {
        "user_id": user_id,
        "successful_swaps": swap_crud.count_completed_for(db, user_id),
        "pending_received": swap_crud.count_pending_received(db, user_id),
        "average_rating": round(average, 2),
        "total_ratings": total,
        "unread_messages": conversation_crud.total_unread(db, user_id),
    }
