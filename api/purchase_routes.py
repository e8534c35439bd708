"""Purchase-related FastAPI routes."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from .utils import _parse_id as _parse_user_id

from Database.deps import get_db
from Park import purchase_service
from Park.purchase import PurchaseRecord

from .models import PurchaseCreate

logger = logging.getLogger(__name__)

USER = "user"

# mount api router
purchase_router = APIRouter()


@purchase_router.get(
    "/{user_id}",
    response_model=list[PurchaseRecord],
    status_code=status.HTTP_200_OK,
)
async def list_purchases(user_id: str, db=Depends(get_db)) -> list[PurchaseRecord]:
    """A user's purchases, newest first."""

    guid = _parse_user_id(user_id, logger, USER)
    return await run_in_threadpool(lambda: purchase_service.list_purchases(db, guid))


@purchase_router.post(
    "",
    response_model=PurchaseRecord,
    status_code=status.HTTP_201_CREATED,
)
async def create_purchase(payload: PurchaseCreate, db=Depends(get_db)) -> PurchaseRecord:
    """
    Record a purchase and move the bought tickets from available to sold.

    Args:
        payload: Buyer, ticket, price snapshot, quantity and total.
        db: Supabase client injected via dependency.

    Returns:
        The stored purchase record.
    """

    return await run_in_threadpool(
        lambda: purchase_service.purchase(
            db,
            user_id=payload.user_id,
            ticket_id=payload.ticket_id,
            facility_name=payload.facility_name,
            type=payload.type,
            price=payload.price,
            quantity=payload.quantity,
            total=payload.total,
        )
    )
