"""
Pydantic schemas for the operational API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from reminder_scheduler.reconciliation.models import RunStatistics


class RunStatisticsResponse(BaseModel):
    """Summary of one reconciliation run."""

    run_id: str = Field(..., description="Identifier attached to every log line of the run")
    trigger_source: str = Field(..., description="startup, schedule or manual")
    status: Literal["completed", "errored"] = Field(..., description="Run outcome")
    started_at: datetime
    finished_at: datetime
    duration_seconds: float
    seen: int = Field(..., description="Records examined")
    triggered: int = Field(..., description="Contacts triggered (voice or callback)")
    reset: int = Field(..., description="Flags reset after the due date passed")
    skipped_weekend: int = Field(..., description="Weekend reminders routed to a text message")
    skipped_excluded: int = Field(..., description="Records on the do-not-call list")
    skipped_other: int = Field(..., description="Records outside any window")
    errored: int = Field(..., description="Records that failed validation or an external call")
    notified_not_flagged: int = Field(
        ..., description="Notifications sent whose store update then failed"
    )
    manual_changes: int = Field(..., description="Records changed by hand since the last poll")
    error: str | None = Field(None, description="Run-level failure, when status is errored")

    @classmethod
    def from_statistics(cls, stats: RunStatistics) -> "RunStatisticsResponse":
        return cls(
            run_id=stats.run_id,
            trigger_source=stats.trigger_source,
            status=stats.status.value,
            started_at=stats.started_at,
            finished_at=stats.finished_at,
            duration_seconds=stats.duration_seconds,
            seen=stats.seen,
            triggered=stats.triggered,
            reset=stats.reset,
            skipped_weekend=stats.skipped_weekend,
            skipped_excluded=stats.skipped_excluded,
            skipped_other=stats.skipped_other,
            errored=stats.errored,
            notified_not_flagged=stats.notified_not_flagged,
            manual_changes=stats.manual_changes,
            error=stats.error,
        )


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    scheduler: str = Field(..., description="Scheduler state: idle, running or unavailable")


class SchedulerStatusResponse(BaseModel):
    """Scheduler state and the outcome of the latest run."""

    state: str
    loop_running: bool
    overlap_policy: str
    cadence: str
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None
    runs_completed: int = 0
    runs_errored: int = 0
    ticks_skipped: int = 0
    last_statistics: RunStatisticsResponse | None = None
