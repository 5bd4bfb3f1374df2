"""VenueHub — FastAPI application entry point."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.analytics import router as analytics_router
from app.api.v1.auth import router as auth_router
from app.api.v1.bookings import router as bookings_router
from app.api.v1.listings import router as listings_router
from app.api.v1.public_listings import router as public_listings_router
from app.config import settings
from app.database import async_session_factory, engine
from app.services.booking_service import complete_finished_bookings, expire_stale_bookings

# Configure root logger so all app.* loggers output to stderr (captured by Docker).
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


async def run_booking_sweep() -> None:
    """Expire stale holds and complete finished bookings in one transaction."""
    now = datetime.now(timezone.utc)
    async with async_session_factory() as session:
        await expire_stale_bookings(session, now)
        await complete_finished_bookings(session, now)
        await session.commit()


async def _sweep_forever(interval: int) -> None:
    while True:
        try:
            await run_booking_sweep()
        except Exception:
            logger.exception("Booking sweep failed")
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    sweep_task = None
    if settings.booking_sweep_interval_seconds > 0:
        sweep_task = asyncio.create_task(_sweep_forever(settings.booking_sweep_interval_seconds))
        logger.info("Booking sweep running every %ds", settings.booking_sweep_interval_seconds)
    yield
    # Shutdown — stop the sweep, then dispose engine connections
    if sweep_task is not None:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Hourly venue rental marketplace with itemized price quotes.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router)
app.include_router(listings_router)
app.include_router(public_listings_router)
app.include_router(bookings_router)
app.include_router(analytics_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
