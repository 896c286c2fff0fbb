"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import init_db, close_db
from .routers import targets_router, probe_router, status_router, live_router
from .services.reconciler import state_reconciler
from .services.scheduler import scheduler_service

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting SiteWatch")

    await init_db()
    logger.info("Database initialized")

    # Cached target status may lag history after a crash between writes
    await state_reconciler.repair_all()

    if settings.run_scheduler:
        scheduler_service.start()

    yield

    scheduler_service.stop()
    await scheduler_service.drain(settings.shutdown_grace_seconds)
    await close_db()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SiteWatch",
        description="Website uptime monitoring - reachability, latency and history",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict to your domain
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(targets_router)
    app.include_router(probe_router)
    app.include_router(status_router)
    app.include_router(live_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "scheduler_running": scheduler_service.is_running,
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.web_port)
