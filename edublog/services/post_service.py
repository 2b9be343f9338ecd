import logging
import math
from typing import List, Optional

from sqlalchemy import and_, exists, func, or_
from sqlmodel import Session, col, select

from edublog.auth import permissions
from edublog.models import Post, PostStatus
from edublog.schemas.post_schema import (
    CommentCreateRequest,
    CommentUpdateRequest,
    PaginatedResponse,
    PostCreateRequest,
    PostResponse,
    PostUpdateRequest,
)
from edublog.schemas.user_schema import UserResponse
from edublog.utils.exceptions import ForbiddenException, NotFoundException
from edublog.utils.utils import new_id, utcnow

logger = logging.getLogger(__name__)

# fields the update endpoint may clear by sending null
NULLABLE_FIELDS = {"scheduled_at"}


def _post_not_found(post_id: str) -> NotFoundException:
    return NotFoundException(f"Post with ID {post_id} not found")


def _comment_not_found(comment_id: str) -> NotFoundException:
    return NotFoundException(f"Comment with ID {comment_id} not found")


def _get_post(db: Session, post_id: str) -> Post:
    post = db.get(Post, post_id)
    if not post:
        raise _post_not_found(post_id)
    return post


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _paginate(db: Session, condition, page: int, limit: int) -> PaginatedResponse[PostResponse]:
    skip = (page - 1) * limit
    statement = (
        select(Post)
        .where(condition)
        .order_by(col(Post.created_at).desc())
        .offset(skip)
        .limit(limit)
    )
    posts = db.exec(statement).all()
    total = db.exec(select(func.count()).select_from(Post).where(condition)).one()
    return PaginatedResponse[PostResponse](
        data=[PostResponse.from_post(post) for post in posts],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


def published_condition():
    return col(Post.status) == PostStatus.published


def teacher_condition(author_name: Optional[str]):
    """Everything but other people's private posts."""
    shared = col(Post.status).in_([PostStatus.published, PostStatus.draft, PostStatus.scheduled])
    if author_name is None:
        return shared
    return or_(shared, and_(col(Post.status) == PostStatus.private, col(Post.author) == author_name))


def _contains(expression, pattern: str):
    # casefold() is registered on SQLite connections by make_engine
    return func.casefold(expression).like(pattern, escape="\\")


def search_condition(query: str):
    pattern = f"%{_escape_like(query.casefold())}%"
    # one row per tag, so a match never spans two tags or the JSON punctuation
    tag = func.json_each(Post.tags).table_valued("value").alias("tag")
    return and_(
        published_condition(),
        or_(
            _contains(col(Post.title), pattern),
            _contains(col(Post.content), pattern),
            exists().where(_contains(tag.c.value, pattern)),
        ),
    )


def create_post(db: Session, post_req: PostCreateRequest, author: UserResponse) -> PostResponse:
    post = Post(**post_req.model_dump(), author=author.name)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info(f"Post {post.id} created by {author.id} with status {post.status.value}")
    return PostResponse.from_post(post)


def list_published(db: Session, page: int = 1, limit: int = 10) -> PaginatedResponse[PostResponse]:
    return _paginate(db, published_condition(), page, limit)


def list_for_teachers(db: Session, page: int = 1, limit: int = 10,
                      author_name: Optional[str] = None) -> PaginatedResponse[PostResponse]:
    return _paginate(db, teacher_condition(author_name), page, limit)


def search_posts(db: Session, query: str, page: int = 1, limit: int = 10) -> PaginatedResponse[PostResponse]:
    return _paginate(db, search_condition(query), page, limit)


def get_post(db: Session, post_id: str, requester: Optional[UserResponse] = None) -> PostResponse:
    post = _get_post(db, post_id)
    role = requester.role if requester else None
    name = requester.name if requester else None
    if not permissions.can_read_post(post, role, name):
        # hidden posts look exactly like missing ones
        raise _post_not_found(post_id)
    return PostResponse.from_post(post)


def update_post(db: Session, post_id: str, update_req: PostUpdateRequest) -> PostResponse:
    post = _get_post(db, post_id)
    for key, value in update_req.model_dump(exclude_unset=True).items():
        if value is None and key not in NULLABLE_FIELDS:
            continue
        setattr(post, key, value)
    post.updated_at = utcnow()
    db.add(post)
    db.commit()
    db.refresh(post)
    return PostResponse.from_post(post)


def delete_post(db: Session, post_id: str) -> None:
    post = _get_post(db, post_id)
    db.delete(post)
    db.commit()
    logger.info(f"Post {post_id} deleted")


def _save_comments(db: Session, post: Post, comments: List[dict]) -> PostResponse:
    # JSON columns are not mutation-tracked, always assign a new list
    post.comments = comments
    post.updated_at = utcnow()
    db.add(post)
    db.commit()
    db.refresh(post)
    return PostResponse.from_post(post)


def _find_comment(post: Post, comment_id: str) -> int:
    for index, comment in enumerate(post.comments or []):
        if comment.get("id") == comment_id:
            return index
    raise _comment_not_found(comment_id)


def add_comment(db: Session, post_id: str, comment_req: CommentCreateRequest,
                author: UserResponse) -> PostResponse:
    # read-modify-write, concurrent additions to the same post can overwrite each other
    post = _get_post(db, post_id)
    comment = {
        "id": new_id(),
        "author": author.name,
        "author_id": author.id,
        "content": comment_req.content,
        "created_at": utcnow().isoformat(),
    }
    return _save_comments(db, post, [*(post.comments or []), comment])


def update_comment(db: Session, post_id: str, comment_id: str, comment_req: CommentUpdateRequest,
                   user: UserResponse) -> PostResponse:
    post = _get_post(db, post_id)
    index = _find_comment(post, comment_id)
    comment = post.comments[index]
    if not permissions.can_edit_comment(comment, user.id, user.role):
        raise ForbiddenException("Not allowed to edit this comment")

    comments = list(post.comments)
    comments[index] = {**comment, "content": comment_req.content}
    return _save_comments(db, post, comments)


def delete_comment(db: Session, post_id: str, comment_id: str, user: UserResponse) -> PostResponse:
    post = _get_post(db, post_id)
    index = _find_comment(post, comment_id)
    comment = post.comments[index]
    if not permissions.can_delete_comment(comment, user.id, user.role):
        raise ForbiddenException("Not allowed to delete this comment")

    comments = list(post.comments)
    del comments[index]
    if comment.get("author_id") != user.id:
        logger.info(f"Comment {comment_id} on post {post_id} removed by {user.role.value} {user.id}")
    return _save_comments(db, post, comments)
