'''
Facility and ticket models for the Park module.
'''
from uuid import UUID, uuid4
from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, model_validator, Field
from utils import utc_now

FacilityCategory = Literal['ride', 'water', 'family', 'show', 'dining', 'other']
FACILITY_CATEGORIES: tuple[str, ...] = ('ride', 'water', 'family', 'show', 'dining', 'other')


class Facility(BaseModel):

    id : UUID = Field(default_factory=lambda: uuid4(), frozen=True)
    name : str
    description : str
    image : str = ''
    category : FacilityCategory = 'ride'
    created_at : datetime = Field(default_factory=utc_now, frozen=True)

    @model_validator(mode="after")
    def validate_structure(self):
        if not self.name.strip() or not self.description.strip():
            raise ValueError("Facility name and description are required.")
        return self

    def to_dict(self) -> dict[str, str]:
        """
        Serialize the facility into a dictionary.

        Returns:
            dict[str, str]: Mapping with stringified identifiers and timestamps.
        """
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "category": self.category,
            "created_at": self.created_at.isoformat(),
        }


class Ticket(BaseModel):

    id : UUID = Field(default_factory=lambda: uuid4(), frozen=True)
    facility_id : Optional[UUID] = None
    type : str
    price : float
    description : str = ''
    available : int
    sold : int = 0
    created_at : datetime = Field(default_factory=utc_now, frozen=True)

    @model_validator(mode="after")
    def validate_structure(self):
        # counters and price never go below zero
        if self.price < 0:
            raise ValueError("Ticket price must not be negative.")
        if self.available < 0 or self.sold < 0:
            raise ValueError("Ticket counters must not be negative.")
        return self

    def to_dict(self) -> dict[str, str | int | float | None]:
        """
        Serialize the ticket into a dictionary.

        Returns:
            dict[str, str | int | float | None]: Mapping with stringified identifiers.
        """
        return {
            "id": str(self.id),
            "facility_id": str(self.facility_id) if self.facility_id else None,
            "type": self.type,
            "price": self.price,
            "description": self.description,
            "available": self.available,
            "sold": self.sold,
            "created_at": self.created_at.isoformat(),
        }


class TicketView(BaseModel):
    """Ticket joined with the name of its facility at read time."""

    id : UUID
    facility_id : Optional[UUID] = None
    facility_name : Optional[str] = None
    type : str
    price : float
    description : str = ''
    available : int
    sold : int
    created_at : datetime

    @classmethod
    def from_record(cls, record: dict, facility_name: Optional[str]) -> "TicketView":
        ticket = Ticket(**record)
        return cls(**ticket.model_dump(), facility_name=facility_name)
