"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    UpdatePasswordRequest,
    UserOut,
    UserResponse,
    UsersListResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.ticket import (
    CommentCreate,
    CommentOut,
    TicketCreate,
    TicketOut,
    TicketPriority,
    TicketResponse,
    TicketStatus,
    TicketsListResponse,
    TicketUpdate,
)

__all__ = [
    "AuthResponse",
    "CommentCreate",
    "CommentOut",
    "ForgotPasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "ResetPasswordRequest",
    "SignupRequest",
    "TicketCreate",
    "TicketOut",
    "TicketPriority",
    "TicketResponse",
    "TicketStatus",
    "TicketsListResponse",
    "TicketUpdate",
    "UpdatePasswordRequest",
    "UserOut",
    "UserResponse",
    "UsersListResponse",
]
