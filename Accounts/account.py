"""Account model and its public summaries."""
from datetime import datetime
from email.utils import parseaddr
from pydantic import BaseModel, Field, field_validator
from typing import Literal
from uuid import UUID, uuid4

from utils import utc_now


def normalize_email(value: str) -> str:
    """
    Normalize and validate an email address.

    Args:
        value: Input email string.

    Returns:
        Trimmed, lowercased email string if valid.

    Raises:
        ValueError: If the email address is malformed.
    """
    lowered = value.strip().lower()
    parsed = parseaddr(lowered)[1]
    if "@" not in parsed or parsed != lowered:
        raise ValueError("Invalid email address format.")
    return lowered


class Account(BaseModel):
    """Stored account. Only the bcrypt hash of the password is kept."""

    id: UUID = Field(default_factory=uuid4, frozen=True)
    name: str
    email: str
    password_hash: str
    role: Literal["user", "admin"] = "user"
    created_at: datetime = Field(default_factory=utc_now, frozen=True)

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, value: str) -> str:
        return normalize_email(value)

    def summary(self) -> "AccountSummary":
        return AccountSummary(id=self.id, name=self.name, email=self.email, role=self.role)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "role": self.role,
            "created_at": self.created_at.isoformat(),
            }


class AccountSummary(BaseModel):
    """What signup and login hand back to the caller."""

    id: UUID
    name: str
    email: str
    role: Literal["user", "admin"]


class AccountListing(AccountSummary):
    """Account row as shown in the user listing."""

    created_at: datetime
