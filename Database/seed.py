"""Idempotent startup data: administrator account and sample park content."""

import logging
from typing import Any

from Accounts.account_service import ensure_admin_account
from Database.store import FACILITIES_TABLE_NAME, TICKETS_TABLE_NAME, execute
from Park.structure import Facility, Ticket
from utils import env_flag

logger = logging.getLogger(__name__)

SAMPLE_FACILITIES: list[dict[str, str]] = [
    {
        "name": "Roller Coaster",
        "description": "Experience the thrill of our high-speed roller coaster with loops and drops",
        "category": "ride",
        "image": "https://images.unsplash.com/photo-1578632767115-351597cf2477?ixlib=rb-4.0.3&auto=format&fit=crop&w=800&q=80",
    },
    {
        "name": "Water Slide",
        "description": "Cool off with our exciting water slide adventure",
        "category": "water",
        "image": "https://thumbs.dreamstime.com/z/water-slide-1112181.jpg",
    },
]

# created for every facility
SAMPLE_TICKET_TYPES: list[dict[str, Any]] = [
    {"type": "Adult", "price": 100, "description": "For visitors aged 13-64", "available": 150, "sold": 35},
    {"type": "Child", "price": 70, "description": "For visitors aged 3-12", "available": 200, "sold": 28},
]


def _table_is_empty(db: Any, table: str) -> bool:
    result = execute(
        db.table(table).select("id").limit(1),
        failure_detail=f"Unable to inspect {table}.",
        log_message="Failed to inspect table",
        log_context={"table": table},
    )
    return not result.data


def seed_sample_facilities(db: Any) -> int:
    """Insert the sample facilities when no facility exists yet."""

    if not _table_is_empty(db, FACILITIES_TABLE_NAME):
        return 0
    rows = [Facility(**payload).to_dict() for payload in SAMPLE_FACILITIES]
    execute(
        db.table(FACILITIES_TABLE_NAME).insert(rows),
        failure_detail="Unable to seed facilities.",
        log_message="Failed to insert sample facilities",
        log_context={},
    )
    logger.info("Sample facilities created", extra={"count": len(rows)})
    return len(rows)


def seed_sample_tickets(db: Any) -> int:
    """Insert an Adult and a Child ticket per facility when no ticket exists yet."""

    if not _table_is_empty(db, TICKETS_TABLE_NAME):
        return 0
    facilities = execute(
        db.table(FACILITIES_TABLE_NAME).select("id"),
        failure_detail="Unable to seed tickets.",
        log_message="Failed to list facilities for ticket seeding",
        log_context={},
    )
    rows = [
        Ticket(facility_id=facility["id"], **ticket_type).to_dict()
        for facility in facilities.data
        for ticket_type in SAMPLE_TICKET_TYPES
    ]
    if not rows:
        return 0
    execute(
        db.table(TICKETS_TABLE_NAME).insert(rows),
        failure_detail="Unable to seed tickets.",
        log_message="Failed to insert sample tickets",
        log_context={},
    )
    logger.info("Sample tickets created", extra={"count": len(rows)})
    return len(rows)


def initialize_data(db: Any, seed_samples: bool | None = None) -> None:
    """
    Run every startup seeding step.

    A failing step is logged and the next one still runs, so a seeding
    problem never stops the API from starting.
    """

    if seed_samples is None:
        seed_samples = env_flag("SEED_SAMPLE_DATA", default=True)

    steps = [ensure_admin_account]
    if seed_samples:
        steps += [seed_sample_facilities, seed_sample_tickets]

    for step in steps:
        try:
            step(db)
        except Exception:
            logger.exception("Startup seeding step failed", extra={"step": step.__name__})
