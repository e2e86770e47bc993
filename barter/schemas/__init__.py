# barter/schemas/__init__.py

# Auth schemas
from .auth import TokenData

# User schemas
from .user import UserSummary

# Swap schemas
from .swap import (
    SwapRequestCreate,
    SwapTransition,
    SwapRequestResponse,
    SwapMutationResponse,
    SwapWithdrawResponse,
)

# Conversation schemas
from .conversation import (
    ConversationCreate,
    ConversationResponse,
    ConversationSummary,
    ConversationOpenResponse,
    MessageCreate,
    MessageResponse,
    MessageSendResponse,
    MarkReadResponse,
)

# Rating schemas
from .rating import (
    RatingCreate,
    RatingUpdate,
    RatingResponse,
    RatingMutationResponse,
    RatingSummary,
    AverageRatingResponse,
)

# Sync schemas
from .sync import (
    SyncPolicy,
    ConversationFeed,
    MessageFeed,
    SwapFeed,
    DashboardStats,
)

__all__ = [
    "TokenData",
    "UserSummary",
    "SwapRequestCreate",
    "SwapTransition",
    "SwapRequestResponse",
    "SwapMutationResponse",
    "SwapWithdrawResponse",
    "ConversationCreate",
    "ConversationResponse",
    "ConversationSummary",
    "ConversationOpenResponse",
    "MessageCreate",
    "MessageResponse",
    "MessageSendResponse",
    "MarkReadResponse",
    "RatingCreate",
    "RatingUpdate",
    "RatingResponse",
    "RatingMutationResponse",
    "RatingSummary",
    "AverageRatingResponse",
    "SyncPolicy",
    "ConversationFeed",
    "MessageFeed",
    "SwapFeed",
    "DashboardStats",
]
