# barter/models/__init__.py
# Import models in dependency order
from .user import User, Skill
from .swap import SwapRequest, SwapStatus
from .conversation import Conversation, ConversationParticipant, Message, MessageType
from .rating import Rating

__all__ = [
    "User",
    "Skill",
    "SwapRequest",
    "SwapStatus",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "MessageType",
    "Rating",
]
