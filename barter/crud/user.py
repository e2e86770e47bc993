from typing import Optional

from sqlalchemy.orm import Session

from barter import models


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()


def get_skill(db: Session, skill_id: int) -> Optional[models.Skill]:
    return db.query(models.Skill).filter(models.Skill.id == skill_id).first()


def get_owned_skill(db: Session, skill_id: int, user_id: int) -> Optional[models.Skill]:
    """Skill row only if it belongs to ``user_id``."""
    return db.query(models.Skill).filter(
        models.Skill.id == skill_id,
        models.Skill.user_id == user_id,
    ).first()


def create_user(db: Session, name: str, email: str, is_public: bool = True) -> models.User:
    user = models.User(name=name, email=email, is_public=is_public)
    db.add(user)
    db.flush()
    return user


def create_skill(
    db: Session,
    user_id: int,
    name: str,
    category: str = "General",
    skill_type: str = "offered",
    description: Optional[str] = None,
) -> models.Skill:
    skill = models.Skill(
        user_id=user_id,
        name=name,
        category=category,
        skill_type=skill_type,
        description=description,
    )
    db.add(skill)
    db.flush()
    return skill
