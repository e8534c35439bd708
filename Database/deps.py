"""FastAPI dependencies for the database handle."""

from typing import Any

from fastapi import Request


def get_db(request: Request) -> Any:
    """Return the Supabase client created once by the application lifespan."""

    return request.app.state.db
