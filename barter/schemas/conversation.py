# barter/schemas/conversation.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from barter.models.conversation import MessageType
from barter.schemas.user import UserSummary


# ======================
# REQUEST MODELS
# ======================

class ConversationCreate(BaseModel):
    participant_id: int = Field(..., description="The other participant")
    swap_request_id: Optional[int] = Field(None, description="Swap this conversation is about")


class MessageCreate(BaseModel):
    # Blank content is rejected by the service with EMPTY_CONTENT
    content: str
    type: MessageType = MessageType.TEXT


# ======================
# RESPONSE MODELS
# ======================

class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    sender_id: int
    content: str
    type: MessageType
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationResponse(BaseModel):
    id: int
    participant_ids: List[int]
    participants: List[UserSummary] = Field(default_factory=list)
    swap_request_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ConversationSummary(ConversationResponse):
    """List item: conversation plus last message and unread count."""
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0


class ConversationOpenResponse(BaseModel):
    conversation: ConversationResponse
    refetch: List[str] = Field(default_factory=list)


class MessageSendResponse(BaseModel):
    message: MessageResponse
    refetch: List[str] = Field(default_factory=list)


class MarkReadResponse(BaseModel):
    conversation_id: int
    updated: int
    refetch: List[str] = Field(default_factory=list)
