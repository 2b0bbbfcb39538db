from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from .base import CamelModel


# ======================
# TOKEN SCHEMAS
# ======================

class Token(BaseModel):
    access_token: str
    token_type: str
    role: str


class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None


# ======================
# USER AUTHENTICATION SCHEMAS
# ======================

class RegisterRequest(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    email: EmailStr
    # Bcrypt limit is 72 bytes
    password: str = Field(..., min_length=6, max_length=72)
    # Admins are created by the bootstrap script only.
    role: Literal["mentee", "mentor"] = "mentee"
    bio: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
