# barter/schemas/sync.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from barter.schemas.conversation import ConversationSummary, MessageResponse
from barter.schemas.swap import SwapRequestResponse


class SyncPolicy(BaseModel):
    conversation_list_seconds: int
    messages_seconds: int
    message_page_size: int


class ConversationFeed(BaseModel):
    server_time: datetime
    conversations: List[ConversationSummary]
    total_unread: int


class MessageFeed(BaseModel):
    conversation_id: int
    messages: List[MessageResponse]
    next_after_id: Optional[int] = None


class SwapFeed(BaseModel):
    server_time: datetime
    sent: List[SwapRequestResponse]
    received: List[SwapRequestResponse]


class DashboardStats(BaseModel):
    user_id: int
    successful_swaps: int
    pending_received: int
    average_rating: float
    total_ratings: int
    unread_messages: int
