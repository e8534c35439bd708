"""Ticket inventory management.

Ticket rows only store ``facility_id``. The facility name returned with each
ticket is joined in at read time, so renaming or deleting a facility is
reflected on the next read.
"""

import logging
from typing import Any, Optional
from uuid import UUID

from Database.store import (
    FACILITIES_TABLE_NAME,
    TICKETS_TABLE_NAME,
    execute,
    fetch_record,
)
from errors import ValidationError
from Park.structure import Ticket, TicketView
from utils import model_error_message, require_cents, require_non_negative, require_text

logger = logging.getLogger(__name__)

TICKET = "ticket"
FACILITY = "facility"
UPDATABLE_FIELDS = ("facility_id", "type", "price", "description", "available", "sold")


def _facility_name(db: Any, facility_id: Optional[UUID], failure_detail: str) -> Optional[str]:
    if facility_id is None:
        return None
    facility = fetch_record(db, FACILITIES_TABLE_NAME, facility_id, FACILITY, failure_detail)
    return facility["name"]


def _build_ticket(payload: dict[str, Any]) -> Ticket:
    try:
        return Ticket(**payload)
    except ValueError as exc:
        raise ValidationError(model_error_message(exc)) from exc


def list_tickets(db: Any) -> list[TicketView]:
    """
    Return every ticket, newest first, with its facility name.

    Tickets pointing at a facility that no longer exists are skipped. Tickets
    without a facility are returned with ``facility_name`` set to None.
    """

    failure_detail = "Unable to retrieve tickets due to an internal error."
    tickets = execute(
        db.table(TICKETS_TABLE_NAME).select("*").order("created_at", desc=True),
        failure_detail=failure_detail,
        log_message="Failed to list tickets",
        log_context={},
    )
    facilities = execute(
        db.table(FACILITIES_TABLE_NAME).select("id, name"),
        failure_detail=failure_detail,
        log_message="Failed to list facilities for ticket join",
        log_context={},
    )
    names = {str(row["id"]): row["name"] for row in facilities.data}

    views: list[TicketView] = []
    for record in tickets.data:
        facility_id = record.get("facility_id")
        if facility_id is None:
            views.append(TicketView.from_record(record, None))
            continue
        if str(facility_id) not in names:
            logger.warning(
                "Skipping ticket with dangling facility reference",
                extra={"ticket_id": str(record.get("id")), "facility_id": str(facility_id)},
            )
            continue
        views.append(TicketView.from_record(record, names[str(facility_id)]))
    return views


def create_ticket(
    db: Any,
    facility_id: Optional[UUID],
    type: str | None,
    price: float | None,
    available: int | None = 0,
    description: str | None = "",
    sold: int | None = 0,
) -> TicketView:
    """
    Persist a new ticket line.

    Raises:
        ValidationError: On a blank type, negative price/counters or a price
            with fractions of a cent.
        NotFoundError: When facility_id is given but does not exist.
        InternalError: On store failures.
    """

    failure_detail = "Unable to create ticket due to an internal error."
    clean_type = require_text(type, "type")
    if price is None:
        raise ValidationError("price is required", field="price")
    require_non_negative(price, "price")
    require_cents(price, "price")
    require_non_negative(available, "available")
    require_non_negative(sold, "sold")

    facility_name = _facility_name(db, facility_id, failure_detail)

    ticket = _build_ticket(
        {
            "facility_id": facility_id,
            "type": clean_type,
            "price": price,
            "description": description or "",
            "available": available or 0,
            "sold": sold or 0,
        }
    )
    result = execute(
        db.table(TICKETS_TABLE_NAME).insert(ticket.to_dict()),
        failure_detail=failure_detail,
        log_message="Failed to insert ticket",
        log_context={"facility_id": str(facility_id)},
    )

    created_payload = result.data[0] if result.data else ticket.to_dict()
    logger.info("Ticket created", extra={"ticket_id": str(ticket.id)})
    return TicketView.from_record(created_payload, facility_name)


def update_ticket(db: Any, ticket_id: UUID, fields: dict[str, Any]) -> TicketView:
    """
    Apply a partial update to a ticket.

    Only keys present in ``fields`` with a non-None value are changed.

    Raises:
        NotFoundError: When the ticket, or a newly referenced facility, does not exist.
        ValidationError: On a blank type, negative price/counters or a price
            with fractions of a cent.
        InternalError: On store failures.
    """

    failure_detail = "Unable to update ticket due to an internal error."
    updates = {
        key: value
        for key, value in fields.items()
        if key in UPDATABLE_FIELDS and value is not None
    }
    if "type" in updates:
        updates["type"] = require_text(updates["type"], "type")
    if "price" in updates:
        require_cents(updates["price"], "price")

    existing = fetch_record(db, TICKETS_TABLE_NAME, ticket_id, TICKET, failure_detail)
    if not updates:
        current = Ticket(**existing)
        return TicketView.from_record(existing, _facility_name(db, current.facility_id, failure_detail))

    # validate the merged row before touching the store
    merged = _build_ticket({**existing, **updates})
    if "facility_id" in updates:
        _facility_name(db, merged.facility_id, failure_detail)
        updates["facility_id"] = str(merged.facility_id)

    execute(
        db.table(TICKETS_TABLE_NAME).update(updates).eq("id", str(ticket_id)),
        failure_detail=failure_detail,
        log_message="Failed to update ticket",
        log_context={"ticket_id": str(ticket_id), "updates": updates},
    )

    refreshed = fetch_record(db, TICKETS_TABLE_NAME, ticket_id, TICKET, failure_detail)
    updated = Ticket(**refreshed)
    logger.info("Ticket updated", extra={"ticket_id": str(ticket_id)})
    return TicketView.from_record(refreshed, _facility_name(db, updated.facility_id, failure_detail))


def delete_ticket(db: Any, ticket_id: UUID) -> None:
    """
    Delete a ticket line.

    Raises:
        NotFoundError: When the ticket does not exist.
        InternalError: On store failures.
    """

    failure_detail = "Unable to delete ticket due to an internal error."
    fetch_record(db, TICKETS_TABLE_NAME, ticket_id, TICKET, failure_detail)

    execute(
        db.table(TICKETS_TABLE_NAME).delete().eq("id", str(ticket_id)),
        failure_detail=failure_detail,
        log_message="Unable to delete ticket",
        log_context={"ticket_id": str(ticket_id)},
    )
    logger.info("Ticket deleted", extra={"ticket_id": str(ticket_id)})
