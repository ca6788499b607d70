"""
FastAPI application factory.

* Registers routes for auth, profile, menu, orders, deliveries, rides,
  notifications and admin.
* Translates domain errors (``MarketplaceError``) and request validation
  errors into JSON responses.
* Applies rate-limiting middleware.
* Closes the database pool on shutdown via lifespan events.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import (
    admin,
    auth,
    deliveries,
    menu,
    notifications,
    orders,
    profile,
    rides,
)
from src.config import settings
from src.domain.errors import MarketplaceError, Unauthorized
from src.infrastructure.database import dispose_engine

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the active transition policy on startup; release the pool on shutdown."""
    logger.info(
        "Starting marketplace API (enforce_transitions=%s)",
        settings.enforce_transitions,
    )
    yield
    await dispose_engine()


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.detail}, headers=headers
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.debug("Rejected payload on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400, content={"detail": jsonable_encoder(exc.errors())}
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace API",
        description=(
            "Customers, drivers, partners and administrators coordinating "
            "orders, deliveries and rides.  Every transition is gated by "
            "role and ownership and validated against its state machine."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Error translation
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Routers
    for module in (
        auth,
        profile,
        menu,
        orders,
        deliveries,
        rides,
        notifications,
        admin,
    ):
        app.include_router(module.router, prefix="/api/v1")

    return app
