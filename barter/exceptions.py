"""Exchange errors: the caller-facing failure kinds of the swap core.

Every kind is recoverable by the caller (refresh and retry, pick another
status, stop rating twice). Each carries a stable ``code``, the HTTP status the
API layer answers with, and a short message a client can show as-is.
"""

from typing import Any, Dict, Optional


class ExchangeError(Exception):
    """Base class for all swap/conversation/rating failures."""

    code = "EXCHANGE_ERROR"
    http_status = 400
    user_message = "The request could not be completed"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.user_message
        self.context = context
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


# ======================
# SWAP REQUEST ENGINE
# ======================

class InvalidParticipants(ExchangeError):
    code = "INVALID_PARTICIPANTS"
    user_message = "You cannot send a swap request to yourself"


class SkillOwnershipMismatch(ExchangeError):
    code = "SKILL_OWNERSHIP_MISMATCH"
    user_message = "The selected skills do not belong to the right users"


class IllegalTransition(ExchangeError):
    code = "ILLEGAL_TRANSITION"
    http_status = 409
    user_message = "This request can no longer be changed that way. Refresh and try again"


class NotFound(ExchangeError):
    code = "NOT_FOUND"
    http_status = 404
    user_message = "Not found"


class DuplicateRequest(ExchangeError):
    code = "DUPLICATE_REQUEST"
    http_status = 409
    user_message = "A similar swap request is already open"


# ======================
# CONVERSATION STORE
# ======================

class AccessDenied(ExchangeError):
    code = "ACCESS_DENIED"
    http_status = 403
    user_message = "You are not part of this conversation"


class EmptyContent(ExchangeError):
    code = "EMPTY_CONTENT"
    http_status = 422
    user_message = "Message cannot be empty"


class ContentTooLong(ExchangeError):
    code = "CONTENT_TOO_LONG"
    http_status = 422
    user_message = "Message is too long"


# ======================
# RATING LEDGER
# ======================

class SwapNotCompleted(ExchangeError):
    code = "SWAP_NOT_COMPLETED"
    http_status = 409
    user_message = "You can only rate completed swaps"


class NotParticipant(ExchangeError):
    code = "NOT_PARTICIPANT"
    http_status = 403
    user_message = "You can only rate swaps you took part in"


class DuplicateRating(ExchangeError):
    code = "DUPLICATE_RATING"
    http_status = 409
    user_message = "You already rated this swap"


class InvalidRating(ExchangeError):
    code = "INVALID_RATING"
    http_status = 422
    user_message = "Rating must be a whole number from 1 to 5"


class NotOwner(ExchangeError):
    code = "NOT_OWNER"
    http_status = 403
    user_message = "You can only change your own entries"
