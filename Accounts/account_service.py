"""Account registration, authentication and the administrator bootstrap."""

import logging
import os
from typing import Any

from postgrest.exceptions import APIError

from Accounts.account import Account, AccountListing, AccountSummary, normalize_email
from Accounts.security import hash_password, verify_password
from Database.store import ACCOUNTS_TABLE_NAME, execute, is_unique_violation
from errors import (
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    ValidationError,
)
from utils import require_text

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@parmar.com"
DEFAULT_ADMIN_PASSWORD = "admin123"
ADMIN_NAME = "Admin User"


def admin_email() -> str:
    """Reserved administrator address, overridable through PARK_ADMIN_EMAIL."""

    return os.getenv("PARK_ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL).strip().lower()


def _admin_password() -> str:
    return os.getenv("PARK_ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)


def _validate_registration(name: str | None, email: str | None, password: str | None) -> tuple[str, str, str]:
    clean_name = require_text(name, "name")
    raw_email = require_text(email, "email")
    try:
        clean_email = normalize_email(raw_email)
    except ValueError as exc:
        raise ValidationError("email is not a valid address", field="email") from exc
    if not password:
        raise ValidationError("password is required", field="password")
    return clean_name, clean_email, password


def _email_taken(db: Any, email: str, failure_detail: str) -> bool:
    result = execute(
        db.table(ACCOUNTS_TABLE_NAME).select("id").eq("email", email),
        failure_detail=failure_detail,
        log_message="Failed to query accounts by email",
        log_context={"email": email},
    )
    return bool(result.data)


def _existing_admin(db: Any, failure_detail: str) -> dict[str, Any] | None:
    result = execute(
        db.table(ACCOUNTS_TABLE_NAME).select("id, email").eq("role", "admin").limit(1),
        failure_detail=failure_detail,
        log_message="Failed to query administrator account",
        log_context={},
    )
    return result.data[0] if result.data else None


def _insert_account(db: Any, account: Account) -> None:
    """Insert an account, turning a unique-constraint race into ConflictError."""

    try:
        db.table(ACCOUNTS_TABLE_NAME).insert(account.to_dict()).execute()
    except APIError as exc:
        if is_unique_violation(exc):
            logger.info(
                "Duplicate account creation blocked by unique constraint",
                extra={"email": account.email, "error_code": getattr(exc, "code", None)},
            )
            raise ConflictError(account.email) from exc
        logger.exception("Failed to insert account", extra={"email": account.email})
        raise InternalError("Server error") from exc
    except Exception as exc:
        logger.exception("Failed to insert account", extra={"email": account.email})
        raise InternalError("Server error") from exc


def register(db: Any, name: str | None, email: str | None, password: str | None) -> AccountSummary:
    """
    Create a new account.

    Raises:
        ValidationError: When a field is missing or the email is malformed.
        ConflictError: When the email is already registered.
        InternalError: On store failures.
    """

    clean_name, clean_email, clean_password = _validate_registration(name, email, password)

    if _email_taken(db, clean_email, failure_detail="Server error"):
        logger.info("Signup rejected, email already registered", extra={"email": clean_email})
        raise ConflictError(clean_email)

    role = "user"
    if clean_email == admin_email() and _existing_admin(db, failure_detail="Server error") is None:
        role = "admin"
    account = Account(
        name=clean_name,
        email=clean_email,
        password_hash=hash_password(clean_password),
        role=role,
    )
    _insert_account(db, account)

    logger.info("Account created", extra={"account_id": str(account.id), "role": role})
    return account.summary()


def authenticate(db: Any, email: str | None, password: str | None) -> AccountSummary:
    """
    Check an email/password pair.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password, indistinguishably.
        InternalError: On store failures.
    """

    try:
        clean_email = normalize_email(email or "")
    except ValueError as exc:
        raise InvalidCredentialsError() from exc

    result = execute(
        db.table(ACCOUNTS_TABLE_NAME).select("*").eq("email", clean_email),
        failure_detail="Server error",
        log_message="Failed to fetch account for login",
        log_context={"email": clean_email},
    )
    if not result.data:
        logger.info("Login rejected", extra={"email": clean_email})
        raise InvalidCredentialsError()

    account = Account(**result.data[0])
    if not verify_password(password or "", account.password_hash):
        logger.info("Login rejected", extra={"email": clean_email})
        raise InvalidCredentialsError()

    logger.info("Login succeeded", extra={"account_id": str(account.id)})
    return account.summary()


def list_accounts(db: Any) -> list[AccountListing]:
    """Return every account, newest first, without password hashes."""

    result = execute(
        db.table(ACCOUNTS_TABLE_NAME)
        .select("id, name, email, role, created_at")
        .order("created_at", desc=True),
        failure_detail="Unable to retrieve users due to an internal error.",
        log_message="Failed to list accounts",
        log_context={},
    )
    return [AccountListing(**row) for row in result.data]


def ensure_admin_account(db: Any) -> bool:
    """
    Create the administrator account when it is missing.

    An existing account with the reserved email is left untouched, so its
    password hash survives repeated runs. When any administrator already
    exists, for instance under an earlier PARK_ADMIN_EMAIL, none is added.

    Returns:
        True when an account was created.
    """

    email = admin_email()
    failure_detail = "Unable to bootstrap administrator account."
    existing = _existing_admin(db, failure_detail)
    if existing is not None:
        if existing.get("email") != email:
            logger.warning(
                "Administrator already exists under another email, not creating a second one",
                extra={"email": email, "existing_email": existing.get("email")},
            )
        return False
    if _email_taken(db, email, failure_detail=failure_detail):
        return False

    account = Account(
        name=ADMIN_NAME,
        email=email,
        password_hash=hash_password(_admin_password()),
        role="admin",
    )
    try:
        _insert_account(db, account)
    except ConflictError:
        # another worker created it between the check and the insert
        return False

    logger.info("Admin user created", extra={"email": email})
    return True
