"""User endpoints: signup, login, logout, password update/reset and admin listing."""

import logging
from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin, send_token
from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import AppError, BadRequestError, NotFoundError
from app.models import User
from app.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    UpdatePasswordRequest,
    UserData,
    UserOut,
    UserResponse,
    UsersData,
    UsersListResponse,
)
from app.services import email as email_service
from app.services.email import EmailDeliveryError
from app.services.users import (
    authenticate,
    change_password,
    clear_password_reset,
    create_user,
    get_user_by_email,
    list_active_users,
    reset_password,
    start_password_reset,
)

logger = logging.getLogger(__name__)
router = APIRouter()

RESET_EMAIL_SUBJECT = "Your password reset token (valid for {minutes} min)"
RESET_EMAIL_BODY = (
    "Forgot your password? Submit a PATCH request with your new password and "
    "passwordConfirm to: {url}\n"
    "If you didn't forget your password, please ignore this email!"
)


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Create a user account with role 'user'. The response never includes the password."""
    user = create_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        password_confirm=body.password_confirm,
    )
    return UserResponse(data=UserData(user=UserOut.model_validate(user)))


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT session token.
    Include the token in the Authorization header as: Bearer <token>,
    or rely on the HTTP-only cookie set by this response.
    """
    if not body.email or not body.password:
        raise BadRequestError("Please provide email and password")
    user = authenticate(db, body.email, body.password)
    logger.info("Login succeeded", extra={"user_id": user.id})
    return send_token(user, response)


@router.get("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    """Overwrite the session cookie with a short-lived placeholder."""
    settings = get_settings()
    response.set_cookie(
        key=settings.JWT_COOKIE_NAME,
        value="loggedout",
        max_age=10,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return MessageResponse(message="Logged out")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """
    Email a one-time password reset link to the user.

    Only the token's hash is stored. If the email cannot be delivered the
    stored token is cleared so it can never be used.
    """
    if not body.email:
        raise BadRequestError("Please inform a correct email.")
    try:
        validate_email(body.email, check_deliverability=False)
    except EmailNotValidError:
        raise BadRequestError("Please inform a correct email.")

    user = get_user_by_email(db, body.email)
    if user is None:
        raise NotFoundError("There is no user with the informed email address")

    settings = get_settings()
    plain_token = start_password_reset(db, user, settings)
    reset_url = str(request.url_for("reset_password", token=plain_token))
    try:
        email_service.send_email(
            user.email,
            RESET_EMAIL_SUBJECT.format(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
            RESET_EMAIL_BODY.format(url=reset_url),
        )
    except EmailDeliveryError as e:
        logger.error(
            "Password reset email failed",
            extra={"user_id": user.id, "reason": e.message[:200]},
        )
        clear_password_reset(db, user)
        raise AppError(
            "There was an error sending the email. Try again later",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ) from e
    return MessageResponse(message="Token sent to email")


@router.patch("/reset-password/{token}", response_model=AuthResponse, name="reset_password")
def reset_password_route(
    token: str,
    body: ResetPasswordRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Consume a reset token, set the new password and log the user in."""
    user = reset_password(db, token, body.password, body.password_confirm)
    return send_token(user, response)


@router.patch("/update-my-password", response_model=AuthResponse)
def update_my_password(
    body: UpdatePasswordRequest,
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Change the caller's password (current password required) and issue a fresh token."""
    user = change_password(
        db,
        current_user,
        body.current_password,
        body.new_password,
        body.new_password_confirm,
    )
    return send_token(user, response)


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse(data=UserData(user=UserOut.model_validate(current_user)))


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all active users (admin only)."""
    users = list_active_users(db)
    return UsersListResponse(
        results=len(users),
        data=UsersData(users=[UserOut.model_validate(u) for u in users]),
    )
