"""Purchase recording and the ticket inventory adjustment it drives.

The ``sold``/``available`` counters are only ever changed by the
``reserve_ticket_inventory`` and ``release_ticket_inventory`` database
functions. Each runs a single conditional UPDATE, so concurrent purchases of
the same ticket cannot lose updates or push ``available`` below zero.
"""

import logging
from typing import Any
from uuid import UUID

from Database.store import (
    ACCOUNTS_TABLE_NAME,
    PURCHASES_TABLE_NAME,
    RELEASE_INVENTORY_FUNCTION,
    RESERVE_INVENTORY_FUNCTION,
    TICKETS_TABLE_NAME,
    execute,
    fetch_record,
)
from errors import InsufficientInventoryError, InternalError, ValidationError
from Park.purchase import Purchase, PurchaseRecord
from utils import model_error_message, require_cents, require_non_negative, require_text

logger = logging.getLogger(__name__)

TICKET = "ticket"
USER = "user"


def validate_purchase_input(
    user_id: UUID,
    ticket_id: UUID,
    facility_name: str | None,
    type: str | None,
    price: float | None,
    quantity: int | None,
    total: float | None,
) -> Purchase:
    """Build the purchase record, raising ValidationError on bad amounts."""

    if quantity is None or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError("quantity must be a positive integer", field="quantity")
    if price is None:
        raise ValidationError("price is required", field="price")
    require_non_negative(price, "price")
    require_cents(price, "price")
    if total is None:
        raise ValidationError("total is required", field="total")
    require_cents(total, "total")

    try:
        return Purchase(
            user_id=user_id,
            ticket_id=ticket_id,
            facility_name=require_text(facility_name, "facility_name"),
            type=require_text(type, "type"),
            price=price,
            quantity=quantity,
            total=total,
        )
    except ValueError as exc:
        raise ValidationError(model_error_message(exc)) from exc


def _release_inventory(db: Any, ticket_id: UUID, quantity: int) -> None:
    """Give reserved tickets back after the purchase row could not be written."""

    try:
        db.rpc(
            RELEASE_INVENTORY_FUNCTION,
            {"p_ticket_id": str(ticket_id), "p_quantity": quantity},
        ).execute()
    except Exception:
        logger.exception(
            "Inventory release failed, ticket counters need manual repair",
            extra={"ticket_id": str(ticket_id), "quantity": quantity},
        )
        return
    logger.info(
        "Inventory released after failed purchase",
        extra={"ticket_id": str(ticket_id), "quantity": quantity},
    )


def purchase(
    db: Any,
    user_id: UUID,
    ticket_id: UUID,
    facility_name: str | None,
    type: str | None,
    price: float | None,
    quantity: int | None,
    total: float | None,
) -> PurchaseRecord:
    """
    Record a purchase and move ``quantity`` tickets from available to sold.

    Raises:
        ValidationError: When quantity is not positive, an amount has fractions
            of a cent, or total != price * quantity.
        NotFoundError: When the account or ticket does not exist.
        InsufficientInventoryError: When fewer than ``quantity`` tickets are available.
        InternalError: On store failures. If the purchase row cannot be written
            after the counters moved, the counters are released first.
    """

    failure_detail = "Unable to record purchase due to an internal error."
    record = validate_purchase_input(
        user_id, ticket_id, facility_name, type, price, quantity, total
    )
    log_context = {"ticket_id": str(ticket_id), "user_id": str(user_id), "quantity": record.quantity}

    fetch_record(db, ACCOUNTS_TABLE_NAME, user_id, USER, failure_detail)

    reserved = execute(
        db.rpc(
            RESERVE_INVENTORY_FUNCTION,
            {"p_ticket_id": str(ticket_id), "p_quantity": record.quantity},
        ),
        failure_detail=failure_detail,
        log_message="Failed to reserve ticket inventory",
        log_context=log_context,
    )
    if not reserved.data:
        # no row matched: either the ticket is gone or it has too few left
        fetch_record(db, TICKETS_TABLE_NAME, ticket_id, TICKET, failure_detail)
        logger.info("Purchase rejected, insufficient inventory", extra=log_context)
        raise InsufficientInventoryError(ticket_id, record.quantity)

    try:
        inserted = db.table(PURCHASES_TABLE_NAME).insert(record.to_dict()).execute()
    except Exception as exc:
        logger.exception(
            "Partial failure: inventory reserved but purchase not recorded",
            extra=log_context,
        )
        _release_inventory(db, ticket_id, record.quantity)
        raise InternalError(failure_detail) from exc

    created_payload = inserted.data[0] if inserted.data else record.to_dict()
    created = PurchaseRecord(**created_payload)
    logger.info("Purchase recorded", extra={**log_context, "purchase_id": str(created.id)})
    return created


def list_purchases(db: Any, user_id: UUID) -> list[PurchaseRecord]:
    """Return the purchases of one account, newest first."""

    result = execute(
        db.table(PURCHASES_TABLE_NAME)
        .select("*")
        .eq("user_id", str(user_id))
        .order("date", desc=True),
        failure_detail="Unable to retrieve purchases due to an internal error.",
        log_message="Failed to list purchases",
        log_context={"user_id": str(user_id)},
    )
    return [PurchaseRecord(**row) for row in result.data]
