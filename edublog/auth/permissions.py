"""Role and ownership predicates for posts and comments.

Roles form a closed set (see ``UserRole``); every check here is a plain function
of the requester's role/identity and the resource, with no database access.
"""
from typing import Any, Dict, Optional

from edublog.models import Post, PostStatus, UserRole

POST_MANAGER_ROLES = frozenset({UserRole.teacher, UserRole.admin})

# scheduled posts stay hidden like drafts until something publishes them
UNRELEASED_STATUSES = frozenset({PostStatus.draft, PostStatus.scheduled})


def has_role(role: Optional[str], allowed) -> bool:
    return role is not None and role in allowed


def can_manage_posts(role: Optional[str]) -> bool:
    """Create, update and delete posts. Any teacher may edit any other teacher's post."""
    return has_role(role, POST_MANAGER_ROLES)


def can_read_post(post: Post, role: Optional[str] = None, name: Optional[str] = None) -> bool:
    if post.status == PostStatus.published:
        return True
    if post.status in UNRELEASED_STATUSES:
        # authorship does not help a student here, the role gate wins
        return can_manage_posts(role)
    if post.status == PostStatus.private:
        return name is not None and name == post.author
    return False


def can_edit_comment(comment: Dict[str, Any], user_id: str, role: Optional[str]) -> bool:
    return comment.get("author_id") == user_id or role == UserRole.admin


def can_delete_comment(comment: Dict[str, Any], user_id: str, role: Optional[str]) -> bool:
    return comment.get("author_id") == user_id or has_role(role, POST_MANAGER_ROLES)
