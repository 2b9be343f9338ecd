from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from edublog.utils.utils import new_id, utcnow


class UserRole(str, Enum):
    student = "student"
    teacher = "teacher"
    admin = "admin"


class User(SQLModel, table=True):
    """User model represents a registered account (student, teacher or admin)."""
    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    email: str = Field(unique=True, index=True, max_length=100)
    name: str = Field(max_length=100)
    password_hash: str = Field(exclude=True)
    role: UserRole = Field(default=UserRole.student, index=True)
    is_active: bool = Field(default=True, index=True)
    avatar_url: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
