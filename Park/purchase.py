from uuid import UUID, uuid4
from datetime import datetime
from pydantic import BaseModel, Field, model_validator
from utils import utc_now

# totals are compared to the cent
TOTAL_TOLERANCE = 0.005


class PurchaseRecord(BaseModel):
    """Immutable record of tickets bought by an account.

    facility_name, type and price are snapshots taken at the time of sale.
    Rows read back from the store are taken as stored: the database keeps
    price and total as NUMERIC(_, 2), each rounded on its own.
    """

    id : UUID = Field(default_factory=lambda: uuid4(), frozen=True)
    user_id : UUID = Field(frozen=True)
    ticket_id : UUID = Field(frozen=True)
    facility_name : str = Field(frozen=True)
    type : str = Field(frozen=True)
    price : float = Field(frozen=True)
    quantity : int = Field(frozen=True)
    total : float = Field(frozen=True)
    date : datetime = Field(default_factory=utc_now, frozen=True)

    def to_dict(self) -> dict[str, str | int | float]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "ticket_id": str(self.ticket_id),
            "facility_name": self.facility_name,
            "type": self.type,
            "price": self.price,
            "quantity": self.quantity,
            "total": self.total,
            "date": self.date.isoformat(),
        }


class Purchase(PurchaseRecord):
    """A purchase about to be written; amounts must agree."""

    @model_validator(mode="after")
    def validate_amounts(self):
        if self.quantity <= 0:
            raise ValueError("quantity must be a positive integer")
        if self.price < 0:
            raise ValueError("price must not be negative")
        if abs(self.total - self.price * self.quantity) > TOTAL_TOLERANCE:
            raise ValueError("total must equal price multiplied by quantity")
        return self
