"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.ticket import Ticket, TicketComment
from app.models.user import User

__all__ = ["Base", "Ticket", "TicketComment", "User"]
