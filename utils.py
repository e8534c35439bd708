import os
from datetime import datetime, timezone

from errors import ValidationError


def utc_now() -> datetime:
    '''Current time as an aware UTC datetime.'''
    return datetime.now(timezone.utc)

def env_flag(name: str, default: bool = True) -> bool:
    '''Read a boolean switch such as SEED_SAMPLE_DATA from the environment.'''
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}

def require_text(value: str | None, field: str) -> str:
    '''Return the stripped value, or raise if it is missing or blank.'''
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return str(value).strip()

def require_non_negative(value: float | int | None, field: str) -> None:
    '''Raise if a counter or price is negative.'''
    if value is not None and value < 0:
        raise ValidationError(f"{field} must not be negative", field=field)

def model_error_message(exc: ValueError) -> str:
    '''Flatten a pydantic validation error into a one-line message.'''
    errors = getattr(exc, "errors", None)
    if not callable(errors):
        return str(exc)
    return "; ".join(str(error.get("msg", "")).removeprefix("Value error, ") for error in errors())

def require_cents(value: float | None, field: str) -> None:
    '''Raise if a money amount carries fractions of a cent; prices are stored as NUMERIC(_, 2).'''
    if value is not None and abs(value * 100 - round(value * 100)) > 1e-6:
        raise ValidationError(f"{field} must have at most 2 decimal places", field=field)
