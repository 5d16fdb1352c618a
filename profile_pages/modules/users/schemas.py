from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from profile_pages.core.schemas import CamelModel
from profile_pages.modules.auth.schemas import UserRole


class Profile(CamelModel):
    id: str
    username: str
    name: str
    bio: str = ""
    image: str
    role: UserRole = "user"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    image: Optional[str] = None


class AdminUserCreate(BaseModel):
    email: str
    password: str = Field(min_length=6)
    username: str = Field(min_length=1)
    name: str = Field(min_length=1)


class AdminUserCreateResponse(CamelModel):
    user_id: str
    email: str
    username: str


class BulkUserInput(CamelModel):
    email: str
    username: str
    name: str
    password: str


class BulkUserResult(CamelModel):
    success: bool
    email: str
    username: str
    error: Optional[str] = None


class BulkUserRequest(BaseModel):
    users: List[BulkUserInput]


class BulkUserResponse(CamelModel):
    results: List[BulkUserResult]
    succeeded: int
    failed: int


class DeleteUserResponse(BaseModel):
    deleted: bool
