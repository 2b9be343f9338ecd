from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import StringConstraints

from edublog.models import Post, PostStatus
from edublog.schemas.base import CamelModel, UtcDateTime

Title = Annotated[str, StringConstraints(min_length=1, max_length=200)]
Content = Annotated[str, StringConstraints(min_length=1, max_length=5000)]
Category = Annotated[str, StringConstraints(min_length=1, max_length=100)]
CommentText = Annotated[str, StringConstraints(min_length=1, max_length=500)]

T = TypeVar("T")


class PostCreateRequest(CamelModel):
    """Body of ``POST /posts``. A client-supplied ``author`` is dropped, the server sets it."""
    title: Title
    content: Content
    category: Category
    tags: List[str] = []
    published: bool = True
    status: PostStatus = PostStatus.published
    scheduled_at: Optional[UtcDateTime] = None


class PostUpdateRequest(CamelModel):
    title: Optional[Title] = None
    content: Optional[Content] = None
    category: Optional[Category] = None
    tags: Optional[List[str]] = None
    published: Optional[bool] = None
    status: Optional[PostStatus] = None
    scheduled_at: Optional[UtcDateTime] = None


class CommentCreateRequest(CamelModel):
    content: CommentText


class CommentUpdateRequest(CamelModel):
    content: CommentText


class CommentResponse(CamelModel):
    id: str
    author: str
    author_id: str
    content: str
    created_at: UtcDateTime


class PostResponse(CamelModel):
    id: str
    title: str
    content: str
    author: str
    category: str
    tags: List[str]
    published: bool
    status: PostStatus
    scheduled_at: Optional[UtcDateTime] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime
    comments: List[CommentResponse] = []

    @staticmethod
    def from_post(post: Post) -> 'PostResponse':
        data = post.model_dump()
        data["tags"] = post.tags or []
        data["comments"] = post.comments or []
        return PostResponse.model_validate(data)


class PaginatedResponse(CamelModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int
