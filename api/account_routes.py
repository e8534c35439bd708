"""Signup, login and account listing routes."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from Accounts import account_service
from Accounts.account import AccountListing
from Database.deps import get_db

from .models import AuthResponse, LoginRequest, SignupRequest

logger = logging.getLogger(__name__)

# mount api router
account_router = APIRouter()


@account_router.get(
    "/users",
    response_model=list[AccountListing],
    status_code=status.HTTP_200_OK,
)
async def list_users(db=Depends(get_db)) -> list[AccountListing]:
    """Every account, newest first. Password hashes are never selected."""

    return await run_in_threadpool(lambda: account_service.list_accounts(db))


@account_router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(payload: SignupRequest, db=Depends(get_db)) -> AuthResponse:
    """
    Register a new account.

    Args:
        payload: Name, email and plaintext password.
        db: Supabase client injected via dependency.

    Returns:
        AuthResponse wrapping the account summary.
    """

    summary = await run_in_threadpool(
        lambda: account_service.register(db, payload.name, payload.email, payload.password)
    )
    return AuthResponse(message="User created successfully", user=summary)


@account_router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
)
async def login(payload: LoginRequest, db=Depends(get_db)) -> AuthResponse:
    """
    Check an email/password pair.

    No token is issued; the caller keeps track of the returned account.
    """

    summary = await run_in_threadpool(
        lambda: account_service.authenticate(db, payload.email, payload.password)
    )
    return AuthResponse(message="Login successful", user=summary)
