# barter/crud/conversation.py
"""
Conversation & Message CRUD Operations
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from barter.models.conversation import (
    Conversation,
    ConversationParticipant,
    Message,
    MessageType,
    pair_key,
)
from barter.utils.clock import utcnow


# ======================
# CONVERSATIONS
# ======================

def get_conversation(db: Session, conversation_id: int) -> Optional[Conversation]:
    return db.query(Conversation).filter(Conversation.id == conversation_id).first()


def get_conversation_for_pair(db: Session, user_a_id: int, user_b_id: int) -> Optional[Conversation]:
    return db.query(Conversation).filter(
        Conversation.participant_key == pair_key(user_a_id, user_b_id)
    ).first()


def create_conversation(
    db: Session,
    user_a_id: int,
    user_b_id: int,
    swap_request_id: Optional[int] = None,
) -> Conversation:
    """
    Insert a conversation plus its two participant rows.

    The unique participant_key makes a concurrent duplicate fail at flush
    with IntegrityError.
    """
    now = utcnow()
    conversation = Conversation(
        participant_key=pair_key(user_a_id, user_b_id),
        swap_request_id=swap_request_id,
        created_at=now,
        updated_at=now,
    )
    conversation.participant_links = [
        ConversationParticipant(user_id=user_id)
        for user_id in sorted({user_a_id, user_b_id})
    ]
    db.add(conversation)
    db.flush()
    return conversation


def lock_conversation(db: Session, conversation_id: int) -> Optional[Conversation]:
    """Re-read the conversation under a row lock (no-op lock on SQLite)."""
    return (
        db.query(Conversation)
        .filter(Conversation.id == conversation_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def is_participant(db: Session, conversation_id: int, user_id: int) -> bool:
    return db.query(ConversationParticipant).filter(
        ConversationParticipant.conversation_id == conversation_id,
        ConversationParticipant.user_id == user_id,
    ).first() is not None


def list_user_conversations(
    db: Session,
    user_id: int,
    since: Optional[datetime] = None,
) -> List[Conversation]:
    """
    Conversations the user takes part in, most recently active first.

    With ``since``, a conversation is included when it had a new message or
    when this user last marked it read at or after the cursor.
    """
    query = (
        db.query(Conversation)
        .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.id)
        .filter(ConversationParticipant.user_id == user_id)
        .options(selectinload(Conversation.participant_links).selectinload(ConversationParticipant.user))
    )
    if since is not None:
        query = query.filter(
            or_(
                Conversation.updated_at >= since,
                ConversationParticipant.last_read_at >= since,
            )
        )
    return query.order_by(Conversation.updated_at.desc(), Conversation.id.desc()).all()


def touch_conversation(db: Session, conversation: Conversation, at: datetime) -> None:
    conversation.updated_at = at
    db.flush()


# ======================
# MESSAGES
# ======================

def create_message(
    db: Session,
    conversation_id: int,
    sender_id: int,
    content: str,
    message_type: MessageType = MessageType.TEXT,
    created_at: Optional[datetime] = None,
) -> Message:
    message = Message(
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        type=message_type,
        read=False,
        created_at=created_at or utcnow(),
    )
    db.add(message)
    db.flush()
    return message


def list_latest_messages(db: Session, conversation_id: int, limit: int) -> List[Message]:
    """The most recent ``limit`` messages, returned oldest first."""
    newest_first = (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )
    newest_first.reverse()
    return newest_first


def list_messages_after(
    db: Session,
    conversation_id: int,
    after_id: int,
    limit: int,
) -> List[Message]:
    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id, Message.id > after_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .limit(limit)
        .all()
    )


def latest_messages(db: Session, conversation_ids: List[int]) -> Dict[int, Message]:
    """Newest message of each conversation in one query, keyed by conversation id."""
    if not conversation_ids:
        return {}
    ranked = (
        db.query(
            Message.id.label("id"),
            func.row_number().over(
                partition_by=Message.conversation_id,
                order_by=(Message.created_at.desc(), Message.id.desc()),
            ).label("position"),
        )
        .filter(Message.conversation_id.in_(conversation_ids))
        .subquery()
    )
    rows = (
        db.query(Message)
        .join(ranked, ranked.c.id == Message.id)
        .filter(ranked.c.position == 1)
        .all()
    )
    return {message.conversation_id: message for message in rows}


def mark_messages_read(db: Session, conversation_id: int, reader_id: int) -> int:
    """
    Flag every unread message from the other side as read and move the
    reader's read watermark. Returns rows changed; nothing moves when 0.
    """
    updated = db.query(Message).filter(
        Message.conversation_id == conversation_id,
        Message.sender_id != reader_id,
        Message.read.is_(False),
    ).update({"read": True}, synchronize_session=False)
    if updated:
        db.query(ConversationParticipant).filter(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.user_id == reader_id,
        ).update({"last_read_at": utcnow()}, synchronize_session=False)
    return int(updated)


def unread_counts(db: Session, user_id: int, conversation_ids: List[int]) -> Dict[int, int]:
    """Unread messages addressed to ``user_id``, keyed by conversation id."""
    if not conversation_ids:
        return {}
    rows = (
        db.query(Message.conversation_id, func.count(Message.id))
        .filter(
            Message.conversation_id.in_(conversation_ids),
            Message.sender_id != user_id,
            Message.read.is_(False),
        )
        .group_by(Message.conversation_id)
        .all()
    )
    return {conversation_id: int(count) for conversation_id, count in rows}


def total_unread(db: Session, user_id: int) -> int:
    return (
        db.query(Message)
        .join(
            ConversationParticipant,
            ConversationParticipant.conversation_id == Message.conversation_id,
        )
        .filter(
            ConversationParticipant.user_id == user_id,
            Message.sender_id != user_id,
            Message.read.is_(False),
        )
        .count()
    )
