"""FastAPI application entry point with lifespan management."""

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventdesk.api import (
    clients_router,
    dashboard_router,
    docusign_router,
    events_router,
    google_calendar_router,
    health_router,
    inquiries_router,
    leads_router,
)
from eventdesk.api.middleware import RequestContextMiddleware
from eventdesk.core.config import settings
from eventdesk.core.database import create_engine, create_session_factory
from eventdesk.core.errors import EventDeskError
from eventdesk.core.logging import configure_logging, get_logger
from eventdesk.core.redis import create_redis_pool
from eventdesk.core.sentry import init_sentry

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle resources.

    Startup:
        - Configure structured logging
        - Initialize Sentry error tracking
        - Create database engine and session factory
        - Establish Redis connection pool
        - Open the outbound HTTP client for Google and DocuSign

    Shutdown:
        - Close the HTTP client and Redis connections
        - Dispose database engine
    """
    # Configure logging first
    configure_logging()
    logger.info("Starting application", environment=settings.environment)

    # Initialize error tracking
    init_sentry()

    # Create database engine and session factory
    app.state.db_engine = create_engine()
    app.state.async_session = create_session_factory(app.state.db_engine)
    logger.info("Database engine created")

    # Create Redis connection pool
    app.state.redis = await create_redis_pool()
    logger.info("Redis pool created")

    app.state.http = httpx.AsyncClient(timeout=settings.provider_timeout_seconds)

    yield

    # Shutdown
    logger.info("Shutting down application")

    await app.state.http.aclose()

    # Close Redis connections
    await app.state.redis.aclose()
    logger.info("Redis pool closed")

    # Dispose database engine
    await app.state.db_engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="EventDesk",
    description="CRM for an event-production company: clients, inquiries, events and leads",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(EventDeskError)
async def handle_eventdesk_error(request: Request, exc: EventDeskError) -> JSONResponse:
    """Render domain errors as `{"error": message}` with their HTTP status."""
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and query strings are client errors (400)."""
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in errors
    )
    return JSONResponse(status_code=400, content={"error": message or "Invalid request"})


# Identity travels in the Authorization header; cookies are never read.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request context middleware
app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health_router)
app.include_router(clients_router)
app.include_router(inquiries_router)
app.include_router(events_router)
app.include_router(leads_router)
app.include_router(dashboard_router)
app.include_router(google_calendar_router)
app.include_router(docusign_router)
