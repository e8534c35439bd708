'''
FastAPI application for the theme-park ticketing API.

The app exposes endpoints to manage accounts, facilities, tickets and purchases.

Available endpoints:
- /api/signup, /api/login, /api/users: register, authenticate and list accounts.
- /api/facilities: list, create and delete park facilities.
- /api/tickets: list, create, update and delete ticket inventory.
- /api/purchases: record purchases and list a user's purchase history.
'''

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from Database.db import ParkDB
from Database.seed import initialize_data

# routers
from api.account_routes import account_router
from api.errors import register_error_handlers
from api.facility_routes import facility_router
from api.models import MessageResponse
from api.purchase_routes import purchase_router
from api.ticket_routes import ticket_router

load_dotenv()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    app.state.db = ParkDB().client   # create ONCE
    logger.info("Connected to Supabase")
    await run_in_threadpool(lambda: initialize_data(app.state.db))
    yield

def create_app(use_lifespan: bool = True) -> FastAPI:
    '''Build the application. Tests pass use_lifespan=False and set app.state.db themselves.'''
    app = FastAPI(
        title="Theme Park Ticketing API",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(account_router, prefix="/api", tags=["Accounts"])
    app.include_router(facility_router, prefix="/api/facilities", tags=["Facilities"])
    app.include_router(ticket_router, prefix="/api/tickets", tags=["Tickets"])
    app.include_router(purchase_router, prefix="/api/purchases", tags=["Purchases"])

    @app.get("/")
    async def root():
        return {"message": "Welcome to the Theme Park Ticketing API"}

    @app.get("/api/health", response_model=MessageResponse)
    async def health_check() -> MessageResponse:
        return MessageResponse(status=status.HTTP_200_OK, message="Ticketing service is healthy")

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
