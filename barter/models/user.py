from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship
from barter.database import Base


# ---------------- USER ----------------
# Profiles are maintained by the profile service; only the fields the swap
# core reads live here.
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    skills = relationship("Skill", back_populates="user", cascade="all, delete-orphan")
    sent_swap_requests = relationship(
        "SwapRequest", foreign_keys="SwapRequest.from_user_id", back_populates="from_user"
    )
    received_swap_requests = relationship(
        "SwapRequest", foreign_keys="SwapRequest.to_user_id", back_populates="to_user"
    )
    ratings_given = relationship("Rating", foreign_keys="Rating.from_user_id", back_populates="from_user")
    ratings_received = relationship("Rating", foreign_keys="Rating.to_user_id", back_populates="to_user")


# ---------------- SKILL ----------------
class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String(100), nullable=False)
    category = Column(String(50), default="General")
    description = Column(Text)
    skill_type = Column(String(20), nullable=False, default="offered")  # 'offered' or 'wanted'
    created_at = Column(TIMESTAMP, server_default=func.now())

    user = relationship("User", back_populates="skills")
