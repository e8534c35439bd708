"""Facility-related FastAPI routes."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from .utils import _parse_id as _parse_facility_id

from Database.deps import get_db
from Park import facility_service
from Park.structure import Facility

from .models import FacilityCreate, MessageResponse

logger = logging.getLogger(__name__)

FACILITY = "facility"

# mount api router
facility_router = APIRouter()


@facility_router.get(
    "",
    response_model=list[Facility],
    status_code=status.HTTP_200_OK,
)
async def list_facilities(db=Depends(get_db)) -> list[Facility]:
    """Every facility, newest first."""

    return await run_in_threadpool(lambda: facility_service.list_facilities(db))


@facility_router.post(
    "",
    response_model=Facility,
    status_code=status.HTTP_201_CREATED,
)
async def create_facility(payload: FacilityCreate, db=Depends(get_db)) -> Facility:
    """
    Add a facility.

    Args:
        payload: Name and description are required; category defaults to ride.
        db: Supabase client injected via dependency.

    Returns:
        The stored facility.
    """

    return await run_in_threadpool(
        lambda: facility_service.create_facility(
            db,
            name=payload.name,
            description=payload.description,
            image=payload.image,
            category=payload.category,
        )
    )


@facility_router.delete(
    "/{facility_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_facility(facility_id: str, db=Depends(get_db)) -> MessageResponse:
    """
    Delete a facility together with all of its tickets.

    Args:
        facility_id: UUID4 of the facility to delete.
        db: Supabase client injected via dependency.

    Returns:
        MessageResponse confirming deletion.
    """

    guid = _parse_facility_id(facility_id, logger, FACILITY)
    await run_in_threadpool(lambda: facility_service.delete_facility(db, guid))
    return MessageResponse(status=status.HTTP_200_OK, message="Facility deleted successfully")
