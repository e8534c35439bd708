"""Ticket-related FastAPI routes."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from .utils import _parse_id as _parse_ticket_id

from Database.deps import get_db
from Park import ticket_service
from Park.structure import TicketView

from .models import MessageResponse, TicketCreate, TicketFields

logger = logging.getLogger(__name__)

TICKET = "ticket"

# mount api router
ticket_router = APIRouter()


@ticket_router.get(
    "",
    response_model=list[TicketView],
    status_code=status.HTTP_200_OK,
)
async def list_tickets(db=Depends(get_db)) -> list[TicketView]:
    """Every ticket, newest first, with its facility name."""

    return await run_in_threadpool(lambda: ticket_service.list_tickets(db))


@ticket_router.post(
    "",
    response_model=TicketView,
    status_code=status.HTTP_201_CREATED,
)
async def create_ticket(payload: TicketCreate, db=Depends(get_db)) -> TicketView:
    """
    Add a ticket line for a facility.

    Args:
        payload: Ticket fields; facility_id must reference an existing facility.
        db: Supabase client injected via dependency.

    Returns:
        The stored ticket with its facility name.
    """

    return await run_in_threadpool(
        lambda: ticket_service.create_ticket(
            db,
            facility_id=payload.facility_id,
            type=payload.type,
            price=payload.price,
            available=payload.available,
            description=payload.description,
            sold=payload.sold,
        )
    )


@ticket_router.api_route(
    "/{ticket_id}",
    methods=["PUT", "PATCH"],
    response_model=TicketView,
    status_code=status.HTTP_200_OK,
)
async def update_ticket(ticket_id: str, fields: TicketFields, db=Depends(get_db)) -> TicketView:
    """
    Update the supplied fields of an existing ticket.

    Args:
        ticket_id: UUID4 of the ticket to update.
        fields: Partial update payload; null values leave a field unchanged.
        db: Supabase client injected via dependency.

    Returns:
        The updated ticket with its facility name.
    """

    guid = _parse_ticket_id(ticket_id, logger, TICKET)
    updates = fields.model_dump(exclude_unset=True, exclude_none=True)
    return await run_in_threadpool(lambda: ticket_service.update_ticket(db, guid, updates))


@ticket_router.delete(
    "/{ticket_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_ticket(ticket_id: str, db=Depends(get_db)) -> MessageResponse:
    """
    Delete an existing ticket by identifier.

    Args:
        ticket_id: UUID4 of the ticket to delete.
        db: Supabase client injected via dependency.

    Returns:
        MessageResponse confirming deletion.
    """

    guid = _parse_ticket_id(ticket_id, logger, TICKET)
    await run_in_threadpool(lambda: ticket_service.delete_ticket(db, guid))
    return MessageResponse(status=status.HTTP_200_OK, message="Ticket deleted successfully")
