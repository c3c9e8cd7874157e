"""ORM model for application users (auth, password lifecycle and RBAC)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from app.models.base import Base

USER_ROLES = ("user", "admin")


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'user'
    password_changed_at: set whenever password_hash changes after creation.
    password_reset_token_hash / password_reset_expires: pending reset, cleared together.
    active: inactive users are excluded from default lookups.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")
    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    password_reset_token_hash = Column(String(64), nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
