"""Core: settings, database session, security primitives and error normalization."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.errors import AppError, ErrorKind, register_exception_handlers

__all__ = [
    "AppError",
    "ErrorKind",
    "get_db",
    "get_settings",
    "register_exception_handlers",
    "settings",
]
