"""Ticket store: create, read, update and delete tickets and append comments."""

import logging

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models import Ticket, TicketComment

logger = logging.getLogger(__name__)

TICKET_NOT_FOUND = "Ticket not found"


def create_ticket(
    db: Session,
    title: str,
    description: str,
    created_by_id: int,
    priority: str | None = None,
    assigned_to_id: int | None = None,
) -> Ticket:
    ticket = Ticket(
        title=title.strip(),
        description=description,
        created_by_id=created_by_id,
        assigned_to_id=assigned_to_id,
        status="open",
        priority=priority or "medium",
    )
    db.add(ticket)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(ticket)
    logger.info(
        "Ticket created",
        extra={"ticket_id": ticket.id, "created_by_id": created_by_id},
    )
    return ticket


def list_tickets(db: Session) -> list[Ticket]:
    return db.query(Ticket).order_by(Ticket.id).all()


def list_tickets_for_user(db: Session, user_id: int) -> list[Ticket]:
    """Tickets whose creator is user_id."""
    return (
        db.query(Ticket)
        .filter(Ticket.created_by_id == user_id)
        .order_by(Ticket.id)
        .all()
    )


def get_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if ticket is None:
        raise NotFoundError(TICKET_NOT_FOUND)
    return ticket


def update_ticket(
    db: Session,
    ticket_id: int,
    title: str,
    description: str,
    status: str,
    priority: str,
) -> Ticket:
    """Replace the four editable fields of a ticket; 404 if it does not exist."""
    ticket = get_ticket(db, ticket_id)
    ticket.title = title.strip()
    ticket.description = description
    ticket.status = status
    ticket.priority = priority
    db.commit()
    db.refresh(ticket)
    logger.info("Ticket updated", extra={"ticket_id": ticket.id, "status": status})
    return ticket


def delete_ticket(db: Session, ticket_id: int) -> None:
    ticket = get_ticket(db, ticket_id)
    db.delete(ticket)
    db.commit()
    logger.info("Ticket deleted", extra={"ticket_id": ticket_id})


def add_comment(db: Session, ticket_id: int, author_id: int, text: str) -> Ticket:
    """
    Append one comment to a ticket.

    The comment is a single INSERT, so concurrent appends never overwrite each
    other and earlier comments keep their order.
    """
    ticket = get_ticket(db, ticket_id)
    db.add(TicketComment(ticket_id=ticket.id, author_id=author_id, text=text))
    db.commit()
    db.refresh(ticket)
    logger.info(
        "Comment added",
        extra={"ticket_id": ticket.id, "author_id": author_id},
    )
    return ticket
