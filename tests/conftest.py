"""Pytest bootstrap: in-memory database and small factories."""

import os
from pathlib import Path
import sys

# Settings are read at import time; point them at a throwaway database first
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret")

# Ensure project root is on sys.path so `import barter` works without install
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

import pytest
from sqlalchemy.orm import sessionmaker

from barter import models  # noqa: F401 - register tables on Base.metadata
from barter.database import Base, create_db_engine
from barter.models.swap import SwapRequest, SwapStatus
from barter.models.user import Skill, User
from barter.utils.clock import utcnow


# ======================
# TEST DATABASE SETUP
# ======================

@pytest.fixture
def engine():
    engine = create_db_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def db_session(engine):
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ======================
# FACTORIES
# ======================

def create_user(db, name: str = "User", email: str = None) -> User:
    user = User(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_skill(db, user: User, name: str, skill_type: str = "offered") -> Skill:
    skill = Skill(user_id=user.id, name=name, category="General", skill_type=skill_type)
    db.add(skill)
    db.commit()
    db.refresh(skill)
    return skill


def create_swap(db, from_user: User, to_user: User, status: SwapStatus = SwapStatus.PENDING) -> SwapRequest:
    """Insert a request directly in any status, bypassing the engine."""
    offered = create_skill(db, from_user, f"Offer {from_user.name}")
    wanted = create_skill(db, to_user, f"Want {to_user.name}")
    now = utcnow()
    swap = SwapRequest(
        from_user_id=from_user.id,
        to_user_id=to_user.id,
        skill_offered_id=offered.id,
        skill_wanted_id=wanted.id,
        status=status,
        created_at=now,
        updated_at=now,
    )
    db.add(swap)
    db.commit()
    db.refresh(swap)
    return swap


@pytest.fixture
def alice(db_session):
    return create_user(db_session, "Alice")


@pytest.fixture
def bob(db_session):
    return create_user(db_session, "Bob")


@pytest.fixture
def carol(db_session):
    return create_user(db_session, "Carol")
