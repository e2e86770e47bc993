from typing import Optional

from pydantic import BaseModel, EmailStr


class TokenData(BaseModel):
    """Claims the API trusts from an already-issued bearer token."""
    email: EmailStr
    role: Optional[str] = None
