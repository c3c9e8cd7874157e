"""Request/response schemas for user signup, login and password endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.core.security import NAME_MAX_LEN, NAME_MIN_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN


class SignupRequest(BaseModel):
    """New account details. passwordConfirm is checked and then discarded."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(
        ..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN, description="Display name"
    )
    email: EmailStr = Field(..., description="Unique email address")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    password_confirm: str = Field(
        ..., alias="passwordConfirm", max_length=PASSWORD_MAX_LEN, description="Must equal password"
    )


class LoginRequest(BaseModel):
    """Credentials for login. Presence is checked by the handler."""

    email: str | None = Field(default=None, max_length=320)
    password: str | None = Field(default=None, max_length=PASSWORD_MAX_LEN)


class ForgotPasswordRequest(BaseModel):
    email: str | None = Field(default=None, max_length=320)


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str | None = Field(default=None, max_length=PASSWORD_MAX_LEN)
    password_confirm: str | None = Field(
        default=None, alias="passwordConfirm", max_length=PASSWORD_MAX_LEN
    )


class UpdatePasswordRequest(BaseModel):
    """Current password must match before the new one is accepted."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str | None = Field(
        default=None, alias="currentPassword", max_length=PASSWORD_MAX_LEN
    )
    new_password: str | None = Field(
        default=None, alias="newPassword", max_length=PASSWORD_MAX_LEN
    )
    new_password_confirm: str | None = Field(
        default=None, alias="newPasswordConfirm", max_length=PASSWORD_MAX_LEN
    )


class UserOut(BaseModel):
    """Public view of a user (never includes password or reset fields)."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    email: str
    role: str
    created_at: datetime | None = Field(default=None, alias="createdAt")


class UserData(BaseModel):
    user: UserOut


class UserResponse(BaseModel):
    """Response carrying a single user (signup, me)."""

    status: str = "success"
    data: UserData


class AuthResponse(BaseModel):
    """Response for every endpoint that issues a session token."""

    status: str = "success"
    token: str = Field(..., description="JWT session token")
    data: UserData


class UsersData(BaseModel):
    users: list[UserOut]


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    status: str = "success"
    results: int
    data: UsersData


class MessageResponse(BaseModel):
    status: str = "success"
    message: str
