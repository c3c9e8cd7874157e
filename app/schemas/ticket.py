"""Pydantic schemas for support tickets and their comments."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TicketStatus = Literal["open", "in_progress", "closed", "pending"]
TicketPriority = Literal["low", "medium", "high", "urgent"]

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 32_000
COMMENT_MAX_LENGTH = 10_000


class TicketCreate(BaseModel):
    """
    Request body for POST /tickets.

    title and description are required; their presence is checked by the
    handler so a missing field yields a single readable message.
    createdBy defaults to the caller and may only be overridden by an admin.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: TicketPriority | None = None
    created_by_id: int | None = Field(default=None, alias="createdBy")
    assigned_to_id: int | None = Field(default=None, alias="assignedTo")


class TicketUpdate(BaseModel):
    """Request body for PUT /tickets/{id}; all four fields must be present."""

    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    status: TicketStatus | None = None
    priority: TicketPriority | None = None


class CommentCreate(BaseModel):
    comment: str | None = Field(default=None, max_length=COMMENT_MAX_LENGTH)


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    author_id: int | None = Field(default=None, alias="author")
    text: str
    created_at: datetime | None = Field(default=None, alias="createdAt")


class TicketOut(BaseModel):
    """Public view of a ticket with its comments in insertion order."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    created_by_id: int = Field(..., alias="createdBy")
    assigned_to_id: int | None = Field(default=None, alias="assignedTo")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    comments: list[CommentOut] = Field(default_factory=list)


class TicketData(BaseModel):
    ticket: TicketOut


class TicketResponse(BaseModel):
    status: str = "success"
    data: TicketData


class TicketsData(BaseModel):
    tickets: list[TicketOut]


class TicketsListResponse(BaseModel):
    status: str = "success"
    results: int
    data: TicketsData
