# minigram/users/schemas.py
from datetime import datetime

from pydantic import EmailStr, Field

from minigram.core.schemas import CamelModel, Envelope

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    password_confirm: str = Field(..., min_length=1, max_length=128)


class UserLogin(CamelModel):
    # str y no EmailStr: un email mal formado también es "Invalid credentials".
    # Opcionales: el service responde "Email and password are required"
    email: str | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=128)


class ProfileUpdate(CamelModel):
    full_name: str | None = Field(None, max_length=50)
    bio: str | None = Field(None, max_length=500)
    profile_image: str | None = None


class UserMini(CamelModel):
    id: int
    username: str | None = None
    full_name: str | None = None
    profile_image: str | None = None


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    full_name: str | None = None
    bio: str | None = None
    profile_image: str | None = None
    followers: list[UserMini] = []
    following: list[UserMini] = []
    follower_count: int = 0
    following_count: int = 0
    created_at: datetime | None = None


class UserEnvelope(Envelope):
    user: UserOut
