"""Seed two demo users with skills and print bearer tokens for local runs.

Usage:
  ENABLE_DEMO_SEED=true python -m barter.scripts.seed_demo
"""

import os
import sys
from typing import Dict, List, Optional

from barter import models
from barter.crud import user as user_crud
from barter.database import Base, SessionLocal, engine
from barter.utils.security import create_access_token


DEMO_USERS: List[Dict] = [
    {
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "offered": [("Graphic Design", "Design"), ("Adobe Photoshop", "Design")],
        "wanted": [("React", "Development"), ("Spanish", "Language")],
    },
    {
        "name": "Bob Smith",
        "email": "bob@example.com",
        "offered": [("React", "Development"), ("Node.js", "Development")],
        "wanted": [("Graphic Design", "Design")],
    },
]


def _is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def _seed_user(db, profile: Dict) -> models.User:
    existing = user_crud.get_user_by_email(db, profile["email"])
    if existing:
        return existing

    user = user_crud.create_user(db, name=profile["name"], email=profile["email"])
    for name, category in profile["offered"]:
        user_crud.create_skill(db, user.id, name, category=category, skill_type="offered")
    for name, category in profile["wanted"]:
        user_crud.create_skill(db, user.id, name, category=category, skill_type="wanted")
    return user


def seed_demo() -> int:
    try:
        if not _is_truthy(os.getenv("ENABLE_DEMO_SEED")):
            raise ValueError("Seeding disabled. Set ENABLE_DEMO_SEED=true to run.")

        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            users = [_seed_user(db, profile) for profile in DEMO_USERS]
            db.commit()
            for user in users:
                token = create_access_token({"sub": user.email})
                print(f"{user.name} (id={user.id}): {token}")
        finally:
            db.close()
        return 0
    except Exception as exc:
        print(f"Demo seed failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(seed_demo())
