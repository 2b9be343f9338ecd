from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session

from edublog.auth.auth_handler import get_current_user, get_optional_user, require_roles
from edublog.configs.database import get_db
from edublog.models import UserRole
from edublog.schemas.post_schema import (
    CommentCreateRequest,
    CommentUpdateRequest,
    PaginatedResponse,
    PostCreateRequest,
    PostResponse,
    PostUpdateRequest,
)
from edublog.schemas.user_schema import UserResponse
from edublog.services import post_service
from edublog.utils.responses import EnvelopeRoute

router = APIRouter(prefix="/posts", tags=["posts"], route_class=EnvelopeRoute)

teacher_or_admin = require_roles(UserRole.teacher, UserRole.admin)

Page = Annotated[int, Query(ge=1)]
Limit = Annotated[int, Query(ge=1, le=100)]


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(post_req: PostCreateRequest, db: Session = Depends(get_db),
                current_user: UserResponse = Depends(teacher_or_admin)):
    return post_service.create_post(db, post_req, current_user)


@router.get("", response_model=PaginatedResponse[PostResponse])
def list_posts(page: Page = 1, limit: Limit = 10, db: Session = Depends(get_db)):
    return post_service.list_published(db, page, limit)


@router.get("/all", response_model=PaginatedResponse[PostResponse])
def list_all_posts(page: Page = 1, limit: Limit = 10, db: Session = Depends(get_db),
                   current_user: UserResponse = Depends(teacher_or_admin)):
    return post_service.list_for_teachers(db, page, limit, current_user.name)


@router.get("/search", response_model=PaginatedResponse[PostResponse])
def search_posts(query: str = Query(..., min_length=1, max_length=100), page: Page = 1, limit: Limit = 10,
                 db: Session = Depends(get_db)):
    return post_service.search_posts(db, query, page, limit)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: str, db: Session = Depends(get_db),
             current_user: Optional[UserResponse] = Depends(get_optional_user)):
    return post_service.get_post(db, post_id, current_user)


@router.patch("/{post_id}", response_model=PostResponse)
def update_post(post_id: str, update_req: PostUpdateRequest, db: Session = Depends(get_db),
                _: UserResponse = Depends(teacher_or_admin)):
    return post_service.update_post(db, post_id, update_req)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(post_id: str, db: Session = Depends(get_db), _: UserResponse = Depends(teacher_or_admin)):
    post_service.delete_post(db, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/comments", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def add_comment(post_id: str, comment_req: CommentCreateRequest, db: Session = Depends(get_db),
                current_user: UserResponse = Depends(get_current_user)):
    return post_service.add_comment(db, post_id, comment_req, current_user)


@router.patch("/{post_id}/comments/{comment_id}", response_model=PostResponse)
def update_comment(post_id: str, comment_id: str, comment_req: CommentUpdateRequest,
                   db: Session = Depends(get_db), current_user: UserResponse = Depends(get_current_user)):
    return post_service.update_comment(db, post_id, comment_id, comment_req, current_user)


@router.delete("/{post_id}/comments/{comment_id}", response_model=PostResponse)
def delete_comment(post_id: str, comment_id: str, db: Session = Depends(get_db),
                   current_user: UserResponse = Depends(get_current_user)):
    return post_service.delete_comment(db, post_id, comment_id, current_user)
