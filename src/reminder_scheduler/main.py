"""
FastAPI application entry point.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reminder_scheduler import __version__
from reminder_scheduler.api.router import router as scheduler_router
from reminder_scheduler.clock import LocalClock
from reminder_scheduler.config import Settings, get_settings
from reminder_scheduler.notify.config import NotifierConfig, get_notifier_config
from reminder_scheduler.notify.factory import build_notifier
from reminder_scheduler.notify.interface import Notifier
from reminder_scheduler.policy.eligibility import EligibilityPolicy, PolicySettings
from reminder_scheduler.reconciliation.service import ReconciliationRun, RunOptions
from reminder_scheduler.reconciliation.snapshot import SnapshotTracker
from reminder_scheduler.records.factory import build_record_store
from reminder_scheduler.records.interface import RecordStore
from reminder_scheduler.scheduler.cadence import build_cadence
from reminder_scheduler.scheduler.service import ReconciliationScheduler
from reminder_scheduler.shared.exceptions import ConfigurationError
from reminder_scheduler.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def build_scheduler(
    settings: Settings,
    store: RecordStore | None = None,
    notifier: Notifier | None = None,
    notifier_config: NotifierConfig | None = None,
) -> ReconciliationScheduler:
    """Wire store, notifier, policy and cadence into a scheduler.

    Raises:
        ConfigurationError: settings or notifier settings are invalid.
    """
    clock = LocalClock(settings.local_timezone)
    run = ReconciliationRun(
        store=store if store is not None else build_record_store(settings),
        policy=EligibilityPolicy(PolicySettings.from_settings(settings)),
        clock=clock,
        notifier=notifier,
        options=RunOptions.from_config(settings, notifier_config),
        tracker=SnapshotTracker() if settings.manual_detection_enabled else None,
    )
    return ReconciliationScheduler(
        run=run,
        cadence=build_cadence(settings),
        overlap_policy=settings.overlap_policy,
        clock=clock,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings or get_settings()
    setup_logging(settings.log_level)

    logger.info("Application starting", extra={"env": settings.app_env})

    owned: list[RecordStore | Notifier] = []
    if app.state.scheduler is None:
        try:
            notifier_config = get_notifier_config()
            notifier = build_notifier(notifier_config)
            store = build_record_store(settings)
            app.state.scheduler = build_scheduler(settings, store, notifier, notifier_config)
        except ConfigurationError:
            logger.exception("Invalid configuration; refusing to start")
            raise
        owned = [store] + ([notifier] if notifier is not None else [])

    scheduler: ReconciliationScheduler = app.state.scheduler
    if settings.scheduler_enabled:
        scheduler.start()
        logger.info("Scheduler enabled; background task created")
    else:
        logger.info("Scheduler disabled; manual triggers only")

    yield

    logger.info("Shutting down application")

    await scheduler.stop()
    for resource in owned:
        resource.close()

    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    scheduler: ReconciliationScheduler | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are resolved at startup, not here, so importing this module
    never requires a complete environment.
    """
    app = FastAPI(
        title="Reminder Scheduler",
        description="Due-date contact reminders reconciled against a record store",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.scheduler = scheduler

    @app.exception_handler(ConfigurationError)
    async def _configuration(_: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"detail": {"code": exc.error_code, "message": exc.message}},
        )

    app.include_router(scheduler_router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "reminder_scheduler.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
