"""Facility management, including the cascade to tickets on delete."""

import logging
from typing import Any
from uuid import UUID

from Database.store import (
    FACILITIES_TABLE_NAME,
    TICKETS_TABLE_NAME,
    execute,
    fetch_record,
)
from errors import InternalError, ValidationError
from Park.structure import FACILITY_CATEGORIES, Facility
from utils import require_text

logger = logging.getLogger(__name__)

FACILITY = "facility"


def validate_facility_input(
    name: str | None,
    description: str | None,
    image: str | None,
    category: str | None,
) -> dict[str, str]:
    """Check a creation payload and fill in the defaults for image and category."""

    clean_category = (category or "ride").strip().lower()
    if clean_category not in FACILITY_CATEGORIES:
        raise ValidationError(
            f"category must be one of: {', '.join(FACILITY_CATEGORIES)}", field="category"
        )
    return {
        "name": require_text(name, "name"),
        "description": require_text(description, "description"),
        "image": (image or "").strip(),
        "category": clean_category,
    }


def create_facility(
    db: Any,
    name: str | None,
    description: str | None,
    image: str | None = None,
    category: str | None = None,
) -> Facility:
    """
    Persist a new facility.

    Raises:
        ValidationError: When name or description is missing, or the category is unknown.
        InternalError: On store failures.
    """

    facility = Facility(**validate_facility_input(name, description, image, category))

    result = execute(
        db.table(FACILITIES_TABLE_NAME).insert(facility.to_dict()),
        failure_detail="Unable to create facility due to an internal error.",
        log_message="Failed to insert facility",
        log_context={"facility_name": facility.name},
    )

    created_payload = result.data[0] if result.data else facility.to_dict()
    created = Facility(**created_payload)
    logger.info("Facility created", extra={"facility_id": str(created.id)})
    return created


def list_facilities(db: Any) -> list[Facility]:
    """Return every facility, newest first."""

    result = execute(
        db.table(FACILITIES_TABLE_NAME).select("*").order("created_at", desc=True),
        failure_detail="Unable to retrieve facilities due to an internal error.",
        log_message="Failed to list facilities",
        log_context={},
    )
    return [Facility(**row) for row in result.data]


def delete_facility(db: Any, facility_id: UUID) -> int:
    """
    Delete a facility and every ticket that references it.

    Tickets go first so no ticket is ever left pointing at a missing facility.

    Returns:
        The number of tickets removed along with the facility.

    Raises:
        NotFoundError: When the facility does not exist.
        InternalError: On store failures, including the partial failure where
            the tickets are gone but the facility row survived.
    """

    failure_detail = "Unable to delete facility due to an internal error."
    fetch_record(db, FACILITIES_TABLE_NAME, facility_id, FACILITY, failure_detail)

    removed = execute(
        db.table(TICKETS_TABLE_NAME).delete().eq("facility_id", str(facility_id)),
        failure_detail=failure_detail,
        log_message="Failed to delete tickets of facility",
        log_context={"facility_id": str(facility_id)},
    )
    removed_tickets = len(removed.data or [])

    try:
        db.table(FACILITIES_TABLE_NAME).delete().eq("id", str(facility_id)).execute()
    except Exception as exc:
        logger.exception(
            "Partial failure: facility tickets deleted but facility row kept",
            extra={"facility_id": str(facility_id), "removed_tickets": removed_tickets},
        )
        raise InternalError(failure_detail) from exc

    logger.info(
        "Facility deleted",
        extra={"facility_id": str(facility_id), "removed_tickets": removed_tickets},
    )
    return removed_tickets
