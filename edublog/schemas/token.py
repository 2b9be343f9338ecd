from pydantic import BaseModel

from edublog.models import UserRole
from edublog.schemas.base import CamelModel


class Token(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(CamelModel):
    refresh_token: str


class TokenPayload(BaseModel):
    sub: str
    email: str
    role: UserRole
    type: str
