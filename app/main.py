"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_settings
from app.dependencies import build_notification_service
from app.logging_config import configure_logging
from app.routers import health, incidents, notifications, profiles
from app.services.notification_queue import NotificationQueue


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the notification worker for the lifetime of the app."""
    configure_logging()
    queue = None
    settings = get_settings()
    if settings.notifications_enabled:
        queue = NotificationQueue(
            build_notification_service,
            drain_timeout=settings.notification_drain_seconds,
        )
        await queue.start()
    app.state.notification_queue = queue
    try:
        yield
    finally:
        if queue is not None:
            await queue.stop()
        app.state.notification_queue = None


app = FastAPI(title="Incident Snapper API", lifespan=lifespan)


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(health.router)
app.include_router(profiles.router)
app.include_router(incidents.router)
app.include_router(notifications.router)
