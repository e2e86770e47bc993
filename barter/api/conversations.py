# barter/api/conversations.py
"""
Conversation & Messaging API

Endpoints:
- POST /conversations/ - Open (find or create) a conversation
- GET /conversations/ - My conversations with last message and unread count
- GET /conversations/with/{user_id} - Existing conversation with a user, if any
- GET /conversations/{conversation_id} - Conversation detail
- GET /conversations/{conversation_id}/messages - Latest messages, oldest first
- POST /conversations/{conversation_id}/messages - Send a message
- POST /conversations/{conversation_id}/read - Mark incoming messages read
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from barter.api.errors import http_error
from barter.database import get_db
from barter.exceptions import ExchangeError
from barter.models.user import User
from barter.schemas.conversation import (
    ConversationCreate,
    ConversationOpenResponse,
    ConversationResponse,
    ConversationSummary,
    MarkReadResponse,
    MessageCreate,
    MessageResponse,
    MessageSendResponse,
)
from barter.services import conversation_service
from barter.services.sync_service import refetch_after
from barter.utils.security import get_current_user

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.post("/", response_model=ConversationOpenResponse)
def open_conversation(
    payload: ConversationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Open the conversation with another user.

    Calling this again (from either side) returns the same conversation.
    """
    try:
        conversation = conversation_service.find_or_create_conversation(
            db,
            current_user.id,
            payload.participant_id,
            swap_request_id=payload.swap_request_id,
        )
    except ExchangeError as exc:
        raise http_error(exc)

    return ConversationOpenResponse(
        conversation=ConversationResponse(**conversation_service.conversation_to_dict(conversation)),
        refetch=refetch_after("conversations.open", conversation_id=conversation.id),
    )


@router.get("/", response_model=List[ConversationSummary])
def list_my_conversations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return [
        ConversationSummary(**item)
        for item in conversation_service.list_conversations(db, current_user.id)
    ]


@router.get("/with/{user_id}", response_model=Optional[ConversationResponse])
def find_conversation_with(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Lookup only; returns null instead of creating."""
    conversation = conversation_service.find_conversation_between(db, current_user.id, user_id)
    if conversation is None:
        return None
    return ConversationResponse(**conversation_service.conversation_to_dict(conversation))


@router.get("/{conversation_id}", response_model=ConversationResponse)
def get_conversation(
    conversation_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        conversation = conversation_service.get_conversation(db, conversation_id, current_user.id)
    except ExchangeError as exc:
        raise http_error(exc)
    return ConversationResponse(**conversation_service.conversation_to_dict(conversation))


@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
def get_messages(
    conversation_id: int,
    limit: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Most recent messages (default 100), oldest first."""
    try:
        messages = conversation_service.get_messages(db, conversation_id, current_user.id, limit)
    except ExchangeError as exc:
        raise http_error(exc)
    return [MessageResponse(**conversation_service.message_to_dict(m)) for m in messages]


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageSendResponse,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    conversation_id: int,
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Send a message.

    Not idempotent: retrying stores another copy. The response carries the
    server id and timestamp that replace the client's optimistic copy.
    """
    try:
        message = conversation_service.send_message(
            db,
            conversation_id=conversation_id,
            sender_id=current_user.id,
            content=payload.content,
            message_type=payload.type,
        )
    except ExchangeError as exc:
        raise http_error(exc)

    return MessageSendResponse(
        message=MessageResponse(**conversation_service.message_to_dict(message)),
        refetch=refetch_after("messages.send", conversation_id=conversation_id),
    )


@router.post("/{conversation_id}/read", response_model=MarkReadResponse)
def mark_conversation_read(
    conversation_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        updated = conversation_service.mark_read(db, conversation_id, current_user.id)
    except ExchangeError as exc:
        raise http_error(exc)

    return MarkReadResponse(
        conversation_id=conversation_id,
        updated=updated,
        refetch=refetch_after("messages.read", conversation_id=conversation_id),
    )
