"""
Table Reservation API - Main Application Entry Point

Books dining reservations and seats them at tables:
- Admission rules (future-only, closed day, operating window) before any write
- Seat/finish as single guarded transactions; a table is never double-booked
- Structured logging with request correlation
- Optional Redis cache for the table listing
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.logging import setup_logging, get_logger
from app.core.metrics import metrics_endpoint
from app.api.deps import get_gateway
from app.api.router import api_router
from app.api.middleware import RequestLoggingMiddleware
from app.api.exception_handlers import register_exception_handlers
from app.db.gateway import StorageGateway
from app.services.cache_service import get_redis, close_redis, get_cache_stats

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        opening_time=settings.OPENING_TIME,
        last_seating=settings.LAST_SEATING_TIME,
        closed_weekday=settings.CLOSED_WEEKDAY,
    )

    if await get_redis():
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Table list served from the database only")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Restaurant reservations and table seating",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # host-stand clients on the local network
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check(gateway: StorageGateway = Depends(get_gateway)):
    """
    Liveness plus a floor summary. The database being unreachable marks the
    service degraded; a missing cache does not.
    """
    try:
        tables = await gateway.count_tables_by_status()
        database = "ok"
    except SQLAlchemyError as e:
        logger.error("health_database_unreachable", error=str(e))
        tables = None
        database = "unreachable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "tables": tables,
        "cache": await get_cache_stats(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
