# barter/models/swap.py
import enum

from sqlalchemy import Column, Integer, Text, ForeignKey, TIMESTAMP, Enum, CheckConstraint
from sqlalchemy.orm import relationship

from barter.database import Base
from barter.utils.clock import utcnow


class SwapStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class SwapRequest(Base):
    __tablename__ = "swap_requests"

    id = Column(Integer, primary_key=True, index=True)
    from_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    to_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    skill_offered_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    skill_wanted_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    status = Column(
        Enum(SwapStatus, name="swap_status"),
        default=SwapStatus.PENDING,
        nullable=False,
        index=True,
    )
    message = Column(Text)
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("from_user_id <> to_user_id", name="check_swap_distinct_users"),
    )

    # Relationships
    from_user = relationship("User", foreign_keys=[from_user_id], back_populates="sent_swap_requests")
    to_user = relationship("User", foreign_keys=[to_user_id], back_populates="received_swap_requests")
    skill_offered = relationship("Skill", foreign_keys=[skill_offered_id])
    skill_wanted = relationship("Skill", foreign_keys=[skill_wanted_id])
    ratings = relationship("Rating", back_populates="swap")

    @property
    def participant_ids(self):
        return (self.from_user_id, self.to_user_id)
