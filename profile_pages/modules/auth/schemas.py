from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal

from profile_pages.core.schemas import CamelModel

UserRole = Literal["user", "admin"]


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    username: str = Field(min_length=1)
    name: str = Field(min_length=1)


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class Identity(CamelModel):
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    role: UserRole = "user"


class MeResponse(Identity):
    is_admin: bool = False


class CanEditResponse(CamelModel):
    username: str
    can_edit: bool
