"""User store and password lifecycle.

Writes go through explicit steps (validate -> transform -> persist) instead of
ORM hooks: a plaintext password is hashed before it ever reaches the model,
the confirmation value is never stored, and every default read excludes
inactive users.
"""

import functools
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.errors import BadRequestError, NotFoundError, UnauthenticatedError
from app.core.security import (
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from app.models import User
from app.models.user import USER_ROLES

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

INCORRECT_CREDENTIALS = "Incorrect email or password"
INVALID_RESET_TOKEN = "Token is invalid or has expired"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def get_user_by_email(db: Session, email: str, include_inactive: bool = False) -> User | None:
    query = db.query(User).filter(User.email == normalize_email(email))
    if not include_inactive:
        query = query.filter(User.active.is_(True))
    return query.first()


def get_user_by_id(db: Session, user_id: int, include_inactive: bool = False) -> User | None:
    query = db.query(User).filter(User.id == user_id)
    if not include_inactive:
        query = query.filter(User.active.is_(True))
    return query.first()


def list_active_users(db: Session) -> list[User]:
    return db.query(User).filter(User.active.is_(True)).order_by(User.id).all()


def validate_password(password: str | None) -> str:
    if not password or not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise BadRequestError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters."
        )
    return password


def ensure_passwords_match(password: str, password_confirm: str | None) -> None:
    if password_confirm is None or password != password_confirm:
        raise BadRequestError("Passwords are not the same")


def set_password(user: User, password: str | None, password_confirm: str | None) -> None:
    """
    Validate and hash a new password onto user (not committed).

    Existing users get password_changed_at stamped one second in the past so
    a token issued right after the change is still accepted.
    """
    password = validate_password(password)
    ensure_passwords_match(password, password_confirm)
    user.password_hash = hash_password(password)
    if user.id is not None:
        user.password_changed_at = datetime.now(UTC) - timedelta(seconds=1)


def changed_password_after(user: User, issued_at: int | float) -> bool:
    """
    True if the password changed after a token issued at issued_at (epoch seconds).

    Both sides compare at whole-second precision and the change is stamped one
    second early, so a token issued up to about two seconds before a change
    is still accepted.
    """
    if user.password_changed_at is None:
        return False
    changed = int(_as_utc(user.password_changed_at).timestamp())
    return changed > int(issued_at)


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    password_confirm: str | None,
    role: str = "user",
) -> User:
    """Persist a new user with a hashed password. Duplicate email raises IntegrityError."""
    if not name or not name.strip():
        raise BadRequestError("Please provide your name.")
    if len(name.strip()) > NAME_MAX_LEN:
        raise BadRequestError(f"Name must be at most {NAME_MAX_LEN} characters.")
    if role not in USER_ROLES:
        raise BadRequestError(f"role must be one of {list(USER_ROLES)}")
    user = User(name=name.strip(), email=normalize_email(email), role=role, active=True)
    set_password(user, password, password_confirm)
    db.add(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": role})
    return user


@functools.lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return hash_password("not-a-real-password")


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the user for valid credentials; same 401 for unknown email and wrong password."""
    user = get_user_by_email(db, email)
    if user is None:
        # Unknown emails still pay for one bcrypt check.
        verify_password(password, _dummy_password_hash())
        logger.info("Login failed: unknown email")
        raise UnauthenticatedError(INCORRECT_CREDENTIALS)
    if not verify_password(password, user.password_hash):
        logger.info("Login failed: wrong password", extra={"user_id": user.id})
        raise UnauthenticatedError(INCORRECT_CREDENTIALS)
    return user


def change_password(
    db: Session,
    user: User,
    current_password: str | None,
    new_password: str | None,
    new_password_confirm: str | None,
) -> User:
    if not current_password or not new_password:
        raise BadRequestError("Please provide current and new password")
    if not verify_password(current_password, user.password_hash):
        raise UnauthenticatedError("Your current password is wrong")
    set_password(user, new_password, new_password_confirm)
    db.commit()
    db.refresh(user)
    logger.info("Password changed", extra={"user_id": user.id})
    return user


def start_password_reset(db: Session, user: User, settings: "Settings") -> str:
    """Store the hash and expiry of a new reset token; return the plaintext token."""
    plain, token_hash = generate_reset_token()
    user.password_reset_token_hash = token_hash
    user.password_reset_expires = datetime.now(UTC) + timedelta(
        minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
    )
    db.commit()
    logger.info("Password reset token issued", extra={"user_id": user.id})
    return plain


def clear_password_reset(db: Session, user: User) -> None:
    user.password_reset_token_hash = None
    user.password_reset_expires = None
    db.commit()


def find_user_by_reset_token(db: Session, plain_token: str) -> User | None:
    """Active user whose stored reset hash matches and whose expiry is in the future."""
    return (
        db.query(User)
        .filter(
            User.password_reset_token_hash == hash_reset_token(plain_token),
            User.password_reset_expires > datetime.now(UTC),
            User.active.is_(True),
        )
        .first()
    )


def reset_password(
    db: Session,
    plain_token: str,
    password: str | None,
    password_confirm: str | None,
) -> User:
    """Consume a reset token: apply the new password and clear the reset fields in one commit."""
    if not password or not password_confirm:
        raise BadRequestError("Please inform password and password confirm.")
    user = find_user_by_reset_token(db, plain_token)
    if user is None:
        raise BadRequestError(INVALID_RESET_TOKEN)
    set_password(user, password, password_confirm)
    user.password_reset_token_hash = None
    user.password_reset_expires = None
    db.commit()
    db.refresh(user)
    logger.info("Password reset completed", extra={"user_id": user.id})
    return user


def require_user(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
