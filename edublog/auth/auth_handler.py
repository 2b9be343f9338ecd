import logging
from datetime import datetime, timedelta, UTC
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from sqlmodel import Session

from edublog.auth import permissions
from edublog.configs.database import get_db
from edublog.configs.settings import Settings
from edublog.models import User, UserRole
from edublog.schemas.token import Token, TokenPayload
from edublog.schemas.user_schema import UserResponse
from edublog.utils.exceptions import ForbiddenException, UnauthorizedException

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
BCRYPT_ROUNDS = 12
ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


class TokenService:
    """Issues and checks the signed access/refresh token pair.

    Both tokens carry ``sub`` (user id), ``email`` and ``role``; the ``type`` claim
    keeps a refresh token from being accepted where an access token is expected.
    There is no revocation list, logging out means discarding the tokens client-side.
    """

    def __init__(self, settings: Settings):
        self._secret = settings.JWT_SECRET
        self._access_ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self._refresh_ttl = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    def _encode(self, subject_id: str, email: str, role, token_type: str, ttl: timedelta) -> str:
        to_encode = {
            "sub": subject_id,
            "email": email,
            "role": UserRole(role).value,
            "type": token_type,
            "exp": datetime.now(UTC) + ttl,
        }
        return jwt.encode(to_encode, self._secret, algorithm=ALGORITHM)

    def issue_token_pair(self, subject_id: str, email: str, role) -> Token:
        return Token(
            access_token=self._encode(subject_id, email, role, ACCESS_TOKEN, self._access_ttl),
            refresh_token=self._encode(subject_id, email, role, REFRESH_TOKEN, self._refresh_ttl),
        )

    def validate(self, token: str, token_type: str = ACCESS_TOKEN) -> TokenPayload:
        try:
            payload = TokenPayload.model_validate(jwt.decode(token, self._secret, algorithms=[ALGORITHM]))
        except (JWTError, ValidationError):
            raise UnauthorizedException("Invalid or expired token")
        if payload.type != token_type:
            raise UnauthorizedException("Invalid or expired token")
        return payload


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def resolve_active_user(db_session: Session, payload: TokenPayload) -> User:
    """A valid token is not enough: the account must still exist and be active."""
    user = db_session.get(User, payload.sub)
    if not user or not user.is_active:
        raise UnauthorizedException("User not found or inactive")
    return user


def get_current_user(
        token: Optional[str] = Depends(oauth2_scheme),
        db: Session = Depends(get_db),
        tokens: TokenService = Depends(get_token_service),
) -> UserResponse:
    if not token:
        raise UnauthorizedException("Not authenticated")
    payload = tokens.validate(token)
    return UserResponse.from_user(resolve_active_user(db, payload))


def get_optional_user(
        token: Optional[str] = Depends(oauth2_scheme),
        db: Session = Depends(get_db),
        tokens: TokenService = Depends(get_token_service),
) -> Optional[UserResponse]:
    if not token:
        return None
    try:
        return get_current_user(token, db, tokens)
    except UnauthorizedException:
        logger.debug("Ignoring unusable bearer token on optional-auth route")
        return None


def require_roles(*roles: UserRole):
    def dependency(current_user: UserResponse = Depends(get_current_user)) -> UserResponse:
        if not permissions.has_role(current_user.role, roles):
            raise ForbiddenException("Access denied. Insufficient permissions.")
        return current_user

    return dependency
