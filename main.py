"""
Volunteer Network: Coordination & Recognition Engine

Main FastAPI application entry point.
"""

import asyncio
from contextlib import asynccontextmanager, suppress
from datetime import datetime
from typing import Dict, Any

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from config import get_settings
from exceptions import NotFoundError, InvalidStateError
from schemas.common import HealthCheckResponse
from models.base import init_db, get_session_factory, dispose_engine
from services.network import VolunteerNetwork
from services.ledger_store import LedgerStore
from api import api_router

# Configure logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Volunteer Network coordination engine")
    logger.info(f"Environment: {settings.environment}")

    network = VolunteerNetwork.from_settings(settings)
    app.state.network = network

    # Initialize database
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.warning(f"Database initialization skipped: {e}")
        logger.warning("API will start but ledger history will fail until DB is configured")

    ledger_store = LedgerStore(get_session_factory())
    ledger_store.attach(network.bus)
    app.state.ledger_store = ledger_store

    tasks = [
        asyncio.create_task(network.bus.run()),
        asyncio.create_task(network.ticker.run()),
    ]

    yield

    # Shutdown
    logger.info("Shutting down Volunteer Network coordination engine")
    for task in tasks:
        task.cancel()
    for task in tasks:
        with suppress(asyncio.CancelledError):
            await task
    await network.bus.drain()
    await dispose_engine()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ## Volunteer Network: Coordination & Recognition Engine

    Matches volunteers to emergency missions and keeps the network running:

    ### Features

    * **Volunteer Matching** - Rank available volunteers by skills, distance, experience, schedule and resources
    * **Mission Lifecycle** - Assign volunteers, start, complete or cancel missions
    * **Resource Sharing** - Short-term equipment loans between volunteers
    * **Recognition** - Points and milestone awards for completed work
    * **Training** - Programs, enrollment and certification
    * **Disaster Risk** - Multi-factor risk scoring with live weather and seismic feeds

    ### Match Recommendation

    * **Shortlisted** - score above 30
    * **Recommended** - score above 70
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": detail,
            "status_code": status_code,
            "path": str(request.url.path)
        }
    )


# Exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return _error_response(request, exc.status_code, exc.detail)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(request, 404, str(exc))


@app.exception_handler(InvalidStateError)
async def invalid_state_handler(request: Request, exc: InvalidStateError):
    return _error_response(request, 409, str(exc))


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return _error_response(request, 400, str(exc))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.debug else None,
            "path": str(request.url.path)
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"], response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(
        status="healthy",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        timestamp=datetime.utcnow(),
    )


# Root endpoint
@app.get("/", tags=["Root"])
async def root() -> Dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "description": "Volunteer coordination, recognition and disaster risk engine",
        "documentation": "/docs",
        "health_check": "/health",
        "api_prefix": settings.api_prefix
    }


# Include API router
app.include_router(api_router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
