"""Auth dependencies (get_current_user, restrict_to) and session-token issuance."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import (
    INVALID_TOKEN_MESSAGE,
    ErrorKind,
    ForbiddenError,
    UnauthenticatedError,
)
from app.core.security import create_access_token, decode_access_token
from app.models import User
from app.schemas.auth import AuthResponse, UserData, UserOut
from app.services.users import changed_password_after, get_user_by_id

security = HTTPBearer(auto_error=False)


def get_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """Bearer token from the Authorization header, else the session cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(get_settings().JWT_COOKIE_NAME) or None


def get_current_user(
    token: Annotated[str | None, Depends(get_token)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """
    Dependency: resolve the session token to a live user. Raises 401 when the
    token is missing, invalid or expired, when the user no longer exists, or
    when the password changed after the token was issued.
    """
    if not token:
        raise UnauthenticatedError("You are not logged in! Please log in to get access.")
    # jwt errors propagate to the error normalizer (invalid vs expired message).
    payload = decode_access_token(token)
    try:
        user_id = int(payload["sub"])
        issued_at = int(payload["iat"])
    except (KeyError, TypeError, ValueError):
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE, ErrorKind.INVALID_TOKEN)
    user = get_user_by_id(db, user_id)
    if user is None:
        raise UnauthenticatedError("The user belonging to this token does no longer exist.")
    if changed_password_after(user, issued_at):
        raise UnauthenticatedError("User recently changed password! Please log in again.")
    return user


def restrict_to(*roles: str) -> Callable[[User], User]:
    """Dependency factory: require the current user's role to be one of roles (403 otherwise)."""
    allowed = frozenset(roles)

    def role_guard(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user is None or current_user.role not in allowed:
            raise ForbiddenError()
        return current_user

    return role_guard


require_admin = restrict_to("admin")


def send_token(user: User, response: Response) -> AuthResponse:
    """Issue a session token for user: set the HTTP-only cookie and build the body."""
    settings = get_settings()
    token = create_access_token(sub=user.id)
    response.set_cookie(
        key=settings.JWT_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return AuthResponse(token=token, data=UserData(user=UserOut.model_validate(user)))
