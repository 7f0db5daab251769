"""
Main FastAPI application.

This is the entry point for the API server.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lifetasks import __version__
from lifetasks.core.config import settings
from lifetasks.core.logging import configure_logging
from lifetasks.errors import register_error_handlers
from lifetasks.routers import ai, auth, health, task
from lifetasks.workers.reminder_runner import ReminderSweepRunner

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    - On startup: configure logging, start the reminder sweep if enabled.
    - On shutdown: stop the sweep and wait for it to finish.
    """
    configure_logging(settings.LOG_LEVEL, debug=settings.DEBUG)
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.ENVIRONMENT)

    runner = None
    runner_task = None
    if settings.REMINDER_SWEEP_ENABLED:
        runner = ReminderSweepRunner()
        runner_task = asyncio.create_task(runner.run_forever())

    yield  # The server runs while we're "yielded" here

    if runner is not None:
        runner.request_stop()
        await runner_task
    logger.info("Shutting down %s", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Backend API for personal task management with AI assistance",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router)
app.include_router(task.router)
app.include_router(ai.router)


# Root endpoint
@app.get("/")
async def root():
    return {"name": settings.APP_NAME, "version": __version__}
