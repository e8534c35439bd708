"""Helpers shared by the services that talk to the Supabase tables."""

import logging
from typing import Any
from uuid import UUID

from errors import InternalError, NotFoundError

logger = logging.getLogger(__name__)

ACCOUNTS_TABLE_NAME = "accounts"
FACILITIES_TABLE_NAME = "facilities"
TICKETS_TABLE_NAME = "tickets"
PURCHASES_TABLE_NAME = "purchases"

RESERVE_INVENTORY_FUNCTION = "reserve_ticket_inventory"
RELEASE_INVENTORY_FUNCTION = "release_ticket_inventory"

UNIQUE_VIOLATION_CODE = "23505"


def execute(
    query: Any,
    failure_detail: str,
    log_message: str,
    log_context: dict[str, Any],
) -> Any:
    """
    Run a prepared Supabase query, mapping any failure to InternalError.

    Args:
        query: Query builder returned by ``db.table(...)`` or ``db.rpc(...)``.
        failure_detail: Message surfaced to the client when the query fails.
        log_message: Message logged together with the traceback.
        log_context: Extra context for the log record.

    Returns:
        The Supabase response object.

    Raises:
        InternalError: When the query raises for any reason.
    """

    try:
        return query.execute()
    except Exception as exc:
        logger.exception(log_message, extra=log_context)
        raise InternalError(failure_detail) from exc


def fetch_record(
    db: Any,
    table: str,
    guid: UUID,
    entity: str,
    failure_detail: str,
) -> dict[str, Any]:
    """
    Retrieve a single record by id or raise a domain error.

    Raises:
        NotFoundError: When no row carries the id.
        InternalError: On query failures.
    """

    result = execute(
        db.table(table).select("*").eq("id", str(guid)),
        failure_detail=failure_detail,
        log_message=f"Failed to fetch {entity}",
        log_context={f"{entity}_id": str(guid)},
    )

    if not result.data:
        raise NotFoundError(entity, guid)

    return result.data[0]


def is_unique_violation(error: Exception) -> bool:
    """
    Determine whether an API error represents a uniqueness constraint violation.

    Args:
        error: Exception raised by the persistence layer.

    Returns:
        True if the error indicates a duplicate/unique constraint conflict.
    """

    error_code = getattr(error, "code", None)
    if error_code == UNIQUE_VIOLATION_CODE:
        return True

    status_code_value = getattr(error, "status_code", None)
    if str(status_code_value) == "409":
        return True

    message = str(error).lower()
    return "duplicate key value" in message or "unique constraint" in message
