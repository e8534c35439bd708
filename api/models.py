"""Shared API request and response models for the ticketing API.

Request models only check JSON shape. Required-field and range rules live
in the services so they hold for every caller. Request keys may be sent in
snake_case or camelCase (``facility_id`` or ``facilityId``); unknown keys are
rejected. Responses are always snake_case.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from Accounts.account import AccountSummary


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class SignupRequest(RequestModel):
    """Payload accepted by POST /api/signup."""

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(RequestModel):
    """Payload accepted by POST /api/login."""

    email: Optional[str] = None
    password: Optional[str] = None


class FacilityCreate(RequestModel):
    """Payload accepted when creating a facility."""

    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    category: Optional[str] = None


class TicketCreate(RequestModel):
    """Payload accepted when creating a ticket."""

    facility_id: Optional[UUID] = None
    type: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    available: Optional[int] = None
    sold: Optional[int] = None


class TicketFields(RequestModel):
    """Payload accepted when updating an existing ticket. null means unchanged."""

    facility_id: Optional[UUID] = None
    type: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    available: Optional[int] = None
    sold: Optional[int] = None


class PurchaseCreate(RequestModel):
    """Payload accepted when recording a purchase."""

    user_id: UUID
    ticket_id: UUID
    facility_name: Optional[str] = None
    type: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    total: Optional[float] = None


class MessageResponse(BaseModel):
    """Envelope for simple string responses."""

    status: int
    message: str


class AuthResponse(BaseModel):
    """Envelope returned by signup and login."""

    message: str
    user: AccountSummary
