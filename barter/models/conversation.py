# barter/models/conversation.py
import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, Enum
from sqlalchemy.orm import relationship

from barter.database import Base
from barter.utils.clock import utcnow


class MessageType(str, enum.Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"


def pair_key(user_a_id: int, user_b_id: int) -> str:
    """Order-independent key for a two-party conversation."""
    low, high = sorted((int(user_a_id), int(user_b_id)))
    return f"{low}:{high}"


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, index=True)
    # Unique per unordered participant pair; this is what serializes find-or-create
    participant_key = Column(String(64), unique=True, nullable=False)
    swap_request_id = Column(
        Integer, ForeignKey("swap_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, nullable=False, index=True)

    participant_links = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        cascade="all, delete-orphan",
    )
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.id",
    )
    swap_request = relationship("SwapRequest")

    @property
    def participant_ids(self):
        return sorted(link.user_id for link in self.participant_links)

    @property
    def participants(self):
        return [link.user for link in self.participant_links]


class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"

    conversation_id = Column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE"), primary_key=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    # Read watermark; lets incremental conversation feeds pick up read-only changes
    last_read_at = Column(TIMESTAMP, nullable=True)

    conversation = relationship("Conversation", back_populates="participant_links")
    user = relationship("User")


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    type = Column(Enum(MessageType, name="message_type"), default=MessageType.TEXT, nullable=False)
    # Per message rather than per recipient: conversations are two-party
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False, index=True)

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User")
