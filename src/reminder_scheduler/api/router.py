"""
API router for scheduler operations.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from reminder_scheduler.api.schemas import (
    HealthResponse,
    RunStatisticsResponse,
    SchedulerStatusResponse,
)
from reminder_scheduler.reconciliation.models import TriggerSource
from reminder_scheduler.scheduler.service import ReconciliationScheduler, SchedulerBusyError
from reminder_scheduler.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["scheduler"])

BANNER = "Reminder scheduler is running."


def get_scheduler(request: Request) -> ReconciliationScheduler:
    """Dependency for the process-wide scheduler."""
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "SCHEDULER_UNAVAILABLE", "message": "Scheduler is not initialised"},
        )
    return scheduler


@router.get("/", response_class=PlainTextResponse, summary="Liveness banner")
async def root() -> str:
    return BANNER


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(request: Request) -> HealthResponse:
    scheduler: ReconciliationScheduler | None = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        return HealthResponse(status="degraded", scheduler="unavailable")
    # A started loop that is no longer alive died on an unexpected error.
    degraded = scheduler.is_started and not scheduler.is_alive
    return HealthResponse(
        status="degraded" if degraded else "healthy",
        scheduler=scheduler.state.value,
    )


@router.api_route(
    "/trigger-now",
    methods=["GET", "POST"],
    response_model=RunStatisticsResponse,
    summary="Run a reconciliation now",
    description="Runs one reconciliation through the scheduler gate and returns its statistics. "
    "Returns 409 when a run is already in progress and the overlap policy is reject.",
)
async def trigger_now(
    scheduler: Annotated[ReconciliationScheduler, Depends(get_scheduler)],
) -> RunStatisticsResponse:
    try:
        stats = await scheduler.trigger(TriggerSource.MANUAL)
    except SchedulerBusyError as e:
        logger.info("Manual trigger rejected; run in progress")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": e.error_code, "message": e.message},
        ) from e
    return RunStatisticsResponse.from_statistics(stats)


@router.get("/status", response_model=SchedulerStatusResponse, summary="Scheduler status")
async def scheduler_status(
    scheduler: Annotated[ReconciliationScheduler, Depends(get_scheduler)],
) -> SchedulerStatusResponse:
    last = scheduler.last_statistics
    return SchedulerStatusResponse(
        state=scheduler.state.value,
        loop_running=scheduler.is_alive,
        overlap_policy=scheduler.overlap_policy.value,
        cadence=repr(scheduler.cadence),
        last_run_at=scheduler.last_run_at,
        next_run_at=scheduler.next_run_at,
        runs_completed=scheduler.runs_completed,
        runs_errored=scheduler.runs_errored,
        ticks_skipped=scheduler.ticks_skipped,
        last_statistics=RunStatisticsResponse.from_statistics(last) if last else None,
    )
