# barter/services/conversation_service.py
"""
Conversation Store
Two-party conversations, their messages and unread state.

Conversations are created at most once per unordered user pair. Messages are
ordered by the timestamp the store assigns when they are written; a message is
visible to the next read as soon as send_message returns.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from barter.config import settings
from barter.crud import conversation as conversation_crud
from barter.crud import swap as swap_crud
from barter.crud import user as user_crud
from barter.exceptions import (
    AccessDenied,
    ContentTooLong,
    EmptyContent,
    InvalidParticipants,
    NotFound,
)
from barter.models.conversation import Conversation, Message, MessageType
from barter.utils.clock import utcnow

logger = logging.getLogger(__name__)


# ======================
# HELPERS
# ======================

def _require_participant(db: Session, conversation_id: int, user_id: int) -> Conversation:
    conversation = conversation_crud.get_conversation(db, conversation_id)
    if conversation is None:
        raise NotFound("Conversation not found", conversation_id=conversation_id)
    if not conversation_crud.is_participant(db, conversation_id, user_id):
        raise AccessDenied(conversation_id=conversation_id, user_id=user_id)
    return conversation


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.MESSAGE_PAGE_DEFAULT
    return max(1, min(int(limit), settings.MESSAGE_PAGE_MAX))


def message_to_dict(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "sender_id": message.sender_id,
        "content": message.content,
        "type": MessageType(message.type),
        "read": bool(message.read),
        "created_at": message.created_at,
    }


def conversation_to_dict(conversation: Conversation) -> Dict[str, Any]:
    return {
        "id": conversation.id,
        "participant_ids": conversation.participant_ids,
        "participants": [
            {"id": user.id, "name": user.name}
            for user in sorted(conversation.participants, key=lambda u: u.id)
        ],
        "swap_request_id": conversation.swap_request_id,
        "created_at": conversation.created_at,
        "updated_at": conversation.updated_at,
    }


# ======================
# FIND OR CREATE
# ======================

def find_or_create_conversation(
    db: Session,
    user_a_id: int,
    user_b_id: int,
    swap_request_id: Optional[int] = None,
) -> Conversation:
    """
    Return the conversation for this unordered pair, creating it if needed.

    An existing conversation is returned unchanged, even when a different
    ``swap_request_id`` is passed. If two first contacts race, the unique
    pair key rejects the second insert and that caller gets the winner's row.

    Raises:
        InvalidParticipants: both ids are the same user
        NotFound: the other user or the referenced swap does not exist, or
            the swap is not between these two users
    """
    if user_a_id == user_b_id:
        raise InvalidParticipants("You cannot start a conversation with yourself")

    existing = conversation_crud.get_conversation_for_pair(db, user_a_id, user_b_id)
    if existing is not None:
        return existing

    if user_crud.get_user(db, user_b_id) is None or user_crud.get_user(db, user_a_id) is None:
        raise NotFound("User not found")

    if swap_request_id is not None:
        swap = swap_crud.get_swap_request(db, swap_request_id)
        if swap is None or set(swap.participant_ids) != {user_a_id, user_b_id}:
            raise NotFound("Swap request not found", request_id=swap_request_id)

    try:
        conversation = conversation_crud.create_conversation(
            db, user_a_id, user_b_id, swap_request_id=swap_request_id
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        winner = conversation_crud.get_conversation_for_pair(db, user_a_id, user_b_id)
        if winner is None:
            raise
        logger.warning(
            "Concurrent conversation create resolved to existing (id=%s, users=%s,%s)",
            winner.id,
            user_a_id,
            user_b_id,
        )
        return winner

    db.refresh(conversation)
    logger.info(
        "Conversation created (id=%s, users=%s,%s, swap=%s)",
        conversation.id,
        user_a_id,
        user_b_id,
        swap_request_id,
    )
    return conversation


def find_conversation_between(db: Session, user_a_id: int, user_b_id: int) -> Optional[Conversation]:
    """Lookup only; never creates."""
    return conversation_crud.get_conversation_for_pair(db, user_a_id, user_b_id)


def get_conversation(db: Session, conversation_id: int, requester_id: int) -> Conversation:
    return _require_participant(db, conversation_id, requester_id)


# ======================
# MESSAGES
# ======================

def get_messages(
    db: Session,
    conversation_id: int,
    requester_id: int,
    limit: Optional[int] = None,
) -> List[Message]:
    """
    The most recent ``limit`` messages (default 100), oldest first.

    Raises:
        NotFound: no such conversation
        AccessDenied: requester is not a participant
    """
    _require_participant(db, conversation_id, requester_id)
    return conversation_crud.list_latest_messages(db, conversation_id, clamp_limit(limit))


def get_messages_after(
    db: Session,
    conversation_id: int,
    requester_id: int,
    after_id: int,
    limit: Optional[int] = None,
) -> List[Message]:
    _require_participant(db, conversation_id, requester_id)
    return conversation_crud.list_messages_after(db, conversation_id, after_id, clamp_limit(limit))


def _clean_content(content: Optional[str], message_type: MessageType) -> str:
    """Blank check on the stripped text; TEXT is stored exactly as sent."""
    content = content or ""
    if not content.strip():
        if message_type == MessageType.IMAGE:
            raise EmptyContent("An image message needs an image URL")
        raise EmptyContent()
    stored = content.strip() if message_type == MessageType.IMAGE else content
    if len(stored) > settings.MESSAGE_MAX_LENGTH:
        raise ContentTooLong(
            f"Message is too long (max {settings.MESSAGE_MAX_LENGTH} characters)"
        )
    return stored


def send_message(
    db: Session,
    conversation_id: int,
    sender_id: int,
    content: str,
    message_type: MessageType = MessageType.TEXT,
) -> Message:
    """
    Store a message and bump the conversation's updated_at.

    Not idempotent: a retried call stores a second message. The returned row
    carries the server-assigned id and timestamp that replace any optimistic
    local copy on the client.

    Raises:
        NotFound: no such conversation
        AccessDenied: sender is not a participant
        EmptyContent: blank content
        ContentTooLong: content over MESSAGE_MAX_LENGTH
    """
    message_type = MessageType(message_type)
    _require_participant(db, conversation_id, sender_id)
    cleaned = _clean_content(content, message_type)

    try:
        # Row lock serializes sends per conversation; timestamps never go backwards
        conversation = conversation_crud.lock_conversation(db, conversation_id)
        now = max(utcnow(), conversation.updated_at)
        conversation_crud.touch_conversation(db, conversation, now)
        message = conversation_crud.create_message(
            db,
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=cleaned,
            message_type=message_type,
            created_at=now,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(message)
    logger.info(
        "Message stored (id=%s, conversation=%s, sender=%s, type=%s)",
        message.id,
        conversation_id,
        sender_id,
        message_type.value,
    )
    return message


def mark_read(db: Session, conversation_id: int, reader_id: int) -> int:
    """
    Mark every message from the other participant as read.

    Idempotent; returns how many messages changed on this call.
    """
    _require_participant(db, conversation_id, reader_id)
    try:
        updated = conversation_crud.mark_messages_read(db, conversation_id, reader_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    if updated:
        logger.info(
            "Messages marked read (conversation=%s, reader=%s, count=%s)",
            conversation_id,
            reader_id,
            updated,
        )
    return updated


# ======================
# LIST VIEW
# ======================

def list_conversations(db: Session, user_id: int, since=None) -> List[Dict[str, Any]]:
    """
    Conversations for a user, newest activity first, each with its last
    message and the number of unread messages from the other participant.
    """
    conversations = conversation_crud.list_user_conversations(db, user_id, since=since)
    conversation_ids = [c.id for c in conversations]
    counts = conversation_crud.unread_counts(db, user_id, conversation_ids)
    latest = conversation_crud.latest_messages(db, conversation_ids)

    summaries = []
    for conversation in conversations:
        last = latest.get(conversation.id)
        item = conversation_to_dict(conversation)
        item["last_message"] = message_to_dict(last) if last else None
        item["unread_count"] = counts.get(conversation.id, 0)
        summaries.append(item)
    return summaries
