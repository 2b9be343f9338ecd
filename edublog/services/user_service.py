import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from edublog.auth.auth_handler import (
    REFRESH_TOKEN,
    TokenService,
    get_password_hash,
    pwd_context,
    resolve_active_user,
    verify_password,
)
from edublog.models import User, UserRole
from edublog.schemas.token import Token
from edublog.schemas.user_schema import (
    AuthResponse,
    ChangePasswordRequest,
    UpdateProfileRequest,
    UserLoginRequest,
    UserRegisterRequest,
    UserResponse,
)
from edublog.utils.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
    UnauthorizedException,
)
from edublog.utils.utils import is_valid_id, utcnow

logger = logging.getLogger(__name__)

# Same message for unknown email, inactive account and wrong password
INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_IN_USE = "Email already in use"
USER_NOT_FOUND = "User not found"

REGISTRABLE_ROLES = frozenset({UserRole.student, UserRole.teacher})


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    statement = select(User).where(User.email == email)
    return db.exec(statement).first()


def _check_credentials(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if user is None:
        # keep the unknown-email path as slow as a real hash check
        pwd_context.dummy_verify()
        return None
    if not verify_password(password, user.password_hash) or not user.is_active:
        return None
    return user


def _issue_auth_response(tokens: TokenService, user: User) -> AuthResponse:
    pair = tokens.issue_token_pair(user.id, user.email, user.role)
    return AuthResponse(
        user=UserResponse.from_user(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )


def register(db: Session, tokens: TokenService, user_req: UserRegisterRequest) -> AuthResponse:
    role = UserRole(user_req.role)
    if role not in REGISTRABLE_ROLES:
        raise BadRequestException(f"Role '{role.value}' cannot be self-registered")

    if get_user_by_email(db, user_req.email):
        raise ConflictException(EMAIL_IN_USE)

    user = User(
        email=user_req.email,
        name=user_req.name,
        password_hash=get_password_hash(user_req.password),
        role=role,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        db.rollback()
        raise ConflictException(EMAIL_IN_USE)
    db.refresh(user)
    logger.info(f"Registered {role.value} account {user.id}")
    return _issue_auth_response(tokens, user)


def login(db: Session, tokens: TokenService, login_req: UserLoginRequest) -> AuthResponse:
    user = _check_credentials(db, login_req.email, login_req.password)
    if user is None:
        logger.warning("Rejected login attempt")
        raise UnauthorizedException(INVALID_CREDENTIALS)

    user.last_login = utcnow()
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} logged in")
    return _issue_auth_response(tokens, user)


def validate_credentials(db: Session, email: str, password: str) -> Optional[UserResponse]:
    """Like login without side effects. Returns None instead of raising, whatever goes wrong."""
    try:
        user = _check_credentials(db, email, password)
    except Exception:
        logger.exception("Credential check failed")
        return None
    return UserResponse.from_user(user) if user else None


def refresh_tokens(db: Session, tokens: TokenService, refresh_token: str) -> Token:
    payload = tokens.validate(refresh_token, REFRESH_TOKEN)
    user = resolve_active_user(db, payload)
    return tokens.issue_token_pair(user.id, user.email, user.role)


def find_by_id(db: Session, user_id: str) -> UserResponse:
    if not is_valid_id(user_id):
        raise BadRequestException("Invalid user id")
    user = db.get(User, user_id)
    if not user:
        raise NotFoundException(USER_NOT_FOUND)
    return UserResponse.from_user(user)


def update_profile(db: Session, user_id: str, update_req: UpdateProfileRequest) -> UserResponse:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundException(USER_NOT_FOUND)

    if update_req.email is not None and update_req.email != user.email:
        existing = get_user_by_email(db, update_req.email)
        if existing and existing.id != user.id:
            raise ConflictException(EMAIL_IN_USE)

    for key, value in update_req.model_dump(exclude_none=True).items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictException(EMAIL_IN_USE)
    db.refresh(user)
    return UserResponse.from_user(user)


def change_password(db: Session, user_id: str, password_req: ChangePasswordRequest) -> None:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundException(USER_NOT_FOUND)
    if not verify_password(password_req.current_password, user.password_hash):
        raise UnauthorizedException("Current password is incorrect")

    user.password_hash = get_password_hash(password_req.new_password)
    user.updated_at = utcnow()
    db.add(user)
    db.commit()
    logger.info(f"User {user.id} changed password")


def find_users_by_role(db: Session, role: UserRole) -> List[UserResponse]:
    statement = (
        select(User)
        .where(User.role == role, User.is_active == True)  # noqa: E712
        .order_by(User.created_at.desc())
    )
    return [UserResponse.from_user(user) for user in db.exec(statement).all()]


def delete_user(db: Session, user_id: str) -> None:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundException(USER_NOT_FOUND)
    db.delete(user)
    db.commit()
    logger.info(f"Deleted user {user_id}")
