"""Ticket endpoints: CRUD on support tickets plus the comments sub-resource."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin
from app.core.database import get_db
from app.core.errors import BadRequestError, ForbiddenError
from app.models import Ticket, User
from app.schemas.ticket import (
    CommentCreate,
    TicketCreate,
    TicketData,
    TicketOut,
    TicketResponse,
    TicketsData,
    TicketsListResponse,
    TicketUpdate,
)
from app.services import tickets as ticket_store
from app.services.users import require_user

router = APIRouter()


def _ticket_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse(data=TicketData(ticket=TicketOut.model_validate(ticket)))


def _tickets_response(tickets: list[Ticket]) -> TicketsListResponse:
    return TicketsListResponse(
        results=len(tickets),
        data=TicketsData(tickets=[TicketOut.model_validate(t) for t in tickets]),
    )


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


@router.get("", response_model=TicketsListResponse)
def list_all_tickets(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> TicketsListResponse:
    """List every ticket (admin only)."""
    return _tickets_response(ticket_store.list_tickets(db))


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
def create_ticket(
    body: TicketCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TicketResponse:
    """
    Open a ticket owned by the caller.

    An explicit createdBy is honoured only for admins filing on behalf of
    another user; anyone else gets 403 for a createdBy other than themselves.
    """
    if _is_blank(body.title) or _is_blank(body.description):
        raise BadRequestError("Please provide title and description.")

    created_by_id = current_user.id
    if body.created_by_id is not None and body.created_by_id != current_user.id:
        if current_user.role != "admin":
            raise ForbiddenError("You can only create tickets for yourself")
        created_by_id = require_user(db, body.created_by_id).id
    if body.assigned_to_id is not None:
        require_user(db, body.assigned_to_id)

    ticket = ticket_store.create_ticket(
        db,
        title=body.title,
        description=body.description,
        created_by_id=created_by_id,
        priority=body.priority,
        assigned_to_id=body.assigned_to_id,
    )
    return _ticket_response(ticket)


@router.get("/my-tickets", response_model=TicketsListResponse)
def list_my_tickets(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TicketsListResponse:
    """List tickets created by the caller."""
    return _tickets_response(ticket_store.list_tickets_for_user(db, current_user.id))


@router.get("/{ticket_id}", response_model=TicketResponse)
def get_ticket(
    ticket_id: int,
    _user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TicketResponse:
    return _ticket_response(ticket_store.get_ticket(db, ticket_id))


@router.put("/{ticket_id}", response_model=TicketResponse)
def update_ticket(
    ticket_id: int,
    body: TicketUpdate,
    _user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TicketResponse:
    """Replace title, description, status and priority. Partial payloads are rejected."""
    if (
        _is_blank(body.title)
        or _is_blank(body.description)
        or body.status is None
        or body.priority is None
    ):
        raise BadRequestError("Please provide title, description, status and priority.")
    ticket = ticket_store.update_ticket(
        db,
        ticket_id,
        title=body.title,
        description=body.description,
        status=body.status,
        priority=body.priority,
    )
    return _ticket_response(ticket)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ticket(
    ticket_id: int,
    _user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    ticket_store.delete_ticket(db, ticket_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{ticket_id}/comments", response_model=TicketResponse)
def add_comment(
    ticket_id: int,
    body: CommentCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TicketResponse:
    """Append a comment authored by the caller; earlier comments keep their order."""
    if _is_blank(body.comment):
        raise BadRequestError("Please provide comments.")
    ticket = ticket_store.add_comment(db, ticket_id, current_user.id, body.comment)
    return _ticket_response(ticket)
