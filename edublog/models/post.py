from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from sqlalchemy import Column
from sqlmodel import SQLModel, Field, JSON

from edublog.utils.utils import new_id, utcnow


class PostStatus(str, Enum):
    draft = "draft"
    published = "published"
    scheduled = "scheduled"
    private = "private"


class Post(SQLModel, table=True):
    """A post document. Comments are embedded, ``{id, author, author_id, content, created_at}`` each."""
    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    title: str = Field(max_length=200)
    content: str = Field(max_length=5000)
    # display name of the author, not a user id
    author: str = Field(max_length=100, index=True)
    category: str = Field(max_length=100)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    published: bool = Field(default=True)
    status: PostStatus = Field(default=PostStatus.published, index=True)
    scheduled_at: Optional[datetime] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    comments: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
