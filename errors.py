"""Domain errors shared by the account and park services."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when a required field is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)
        self.field = field


class NotFoundError(DomainError):
    """Raised when an identifier does not resolve to a stored record."""

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"{entity.capitalize()} not found",
        )
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(DomainError):
    """Raised when an account with the same email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(code=ErrorCode.CONFLICT, message="User already exists")
        self.email = email


class InvalidCredentialsError(DomainError):
    """Raised on login failure. Unknown email and wrong password look the same."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CREDENTIALS,
            message="Invalid email or password",
        )


class InsufficientInventoryError(DomainError):
    """Raised when a purchase asks for more tickets than are available."""

    def __init__(self, ticket_id: Any, requested: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message=f"Not enough tickets available to purchase {requested}",
        )
        self.ticket_id = ticket_id
        self.requested = requested


class InternalError(DomainError):
    """Raised when the persistence layer fails unexpectedly."""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(code=ErrorCode.INTERNAL_ERROR, message=message)
