from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from edublog.auth.auth_handler import TokenService, get_current_user, get_token_service, require_roles
from edublog.configs.database import get_db
from edublog.models import UserRole
from edublog.schemas.token import RefreshRequest, Token
from edublog.schemas.user_schema import (
    AuthResponse,
    ChangePasswordRequest,
    UpdateProfileRequest,
    UserLoginRequest,
    UserRegisterRequest,
    UserResponse,
)
from edublog.services import user_service
from edublog.utils.responses import EnvelopeRoute

router = APIRouter(prefix="/auth", tags=["auth"], route_class=EnvelopeRoute)

admin_only = require_roles(UserRole.admin)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_req: UserRegisterRequest, db: Session = Depends(get_db),
             tokens: TokenService = Depends(get_token_service)):
    return user_service.register(db, tokens, user_req)


@router.post("/login", response_model=AuthResponse)
def login(login_req: UserLoginRequest, db: Session = Depends(get_db),
          tokens: TokenService = Depends(get_token_service)):
    return user_service.login(db, tokens, login_req)


@router.post("/refresh", response_model=Token)
def refresh(refresh_req: RefreshRequest, db: Session = Depends(get_db),
            tokens: TokenService = Depends(get_token_service)):
    return user_service.refresh_tokens(db, tokens, refresh_req.refresh_token)


@router.get("/profile", response_model=UserResponse)
def get_profile(current_user: UserResponse = Depends(get_current_user)):
    return current_user


@router.patch("/profile", response_model=UserResponse)
def update_profile(update_req: UpdateProfileRequest, db: Session = Depends(get_db),
                   current_user: UserResponse = Depends(get_current_user)):
    return user_service.update_profile(db, current_user.id, update_req)


@router.patch("/change-password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(password_req: ChangePasswordRequest, db: Session = Depends(get_db),
                    current_user: UserResponse = Depends(get_current_user)):
    user_service.change_password(db, current_user.id, password_req)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/teachers", response_model=List[UserResponse])
def list_teachers(db: Session = Depends(get_db), _: UserResponse = Depends(admin_only)):
    return user_service.find_users_by_role(db, UserRole.teacher)


@router.get("/students", response_model=List[UserResponse])
def list_students(db: Session = Depends(get_db), _: UserResponse = Depends(admin_only)):
    return user_service.find_users_by_role(db, UserRole.student)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, db: Session = Depends(get_db), _: UserResponse = Depends(admin_only)):
    user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
