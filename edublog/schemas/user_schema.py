from typing import Annotated, Literal, Optional

from pydantic import EmailStr, Field, StringConstraints, field_validator, model_validator

from edublog.models import UserRole, User
from edublog.schemas.base import CamelModel, UtcDateTime

EMAIL_MAX_LENGTH = 100

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
Password = Annotated[str, StringConstraints(min_length=6, max_length=50)]


def check_email_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"email must be at most {EMAIL_MAX_LENGTH} characters")
    return value


class UserRegisterRequest(CamelModel):
    email: EmailStr
    name: Name
    password: Password
    # admin accounts are only created by the seeding command
    role: Literal["student", "teacher"] = "student"

    @field_validator("email")
    @classmethod
    def email_length(cls, value):
        return check_email_length(value)


class UserLoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UpdateProfileRequest(CamelModel):
    name: Optional[Name] = None
    email: Optional[EmailStr] = None

    @field_validator("email")
    @classmethod
    def email_length(cls, value):
        return check_email_length(value)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.name is None and self.email is None:
            raise ValueError("at least one field (name or email) must be provided")
        return self


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: Password

    @model_validator(mode="after")
    def new_password_differs(self):
        if self.current_password == self.new_password:
            raise ValueError("new password must differ from the current password")
        return self


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole
    is_active: bool
    avatar_url: Optional[str] = None
    last_login: Optional[UtcDateTime] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime

    @staticmethod
    def from_user(user: User) -> 'UserResponse':
        # model_dump() honours exclude=True on password_hash
        return UserResponse.model_validate(user.model_dump())


class AuthResponse(CamelModel):
    user: UserResponse
    access_token: str
    refresh_token: str
