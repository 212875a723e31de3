from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class TriggerSource(str, Enum):
    """Why a run started. Observability only; behaviour is identical."""

    STARTUP = "startup"
    SCHEDULE = "schedule"
    MANUAL = "manual"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    ERRORED = "errored"


@dataclass(frozen=True)
class RunStatistics:
    """Summary returned after a reconciliation run."""

    run_id: str
    trigger_source: str
    status: RunStatus
    started_at: datetime
    finished_at: datetime
    seen: int = 0
    triggered: int = 0
    reset: int = 0
    skipped_weekend: int = 0
    skipped_excluded: int = 0
    skipped_other: int = 0
    errored: int = 0
    notified_not_flagged: int = 0
    manual_changes: int = 0
    error: str | None = None

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


@dataclass
class RunTally:
    """Mutable counters while a run is in progress."""

    seen: int = 0
    triggered: int = 0
    reset: int = 0
    skipped_weekend: int = 0
    skipped_excluded: int = 0
    skipped_other: int = 0
    errored: int = 0
    notified_not_flagged: int = 0
    manual_changes: int = 0
    failed_record_ids: list[str] = field(default_factory=list)

    def record_error(self, record_id: str) -> None:
        self.errored += 1
        self.failed_record_ids.append(record_id)

    def finalize(
        self,
        *,
        run_id: str,
        trigger_source: str,
        status: RunStatus,
        started_at: datetime,
        finished_at: datetime,
        error: str | None = None,
    ) -> RunStatistics:
        return RunStatistics(
            run_id=run_id,
            trigger_source=trigger_source,
            status=status,
            started_at=started_at,
            finished_at=finished_at,
            seen=self.seen,
            triggered=self.triggered,
            reset=self.reset,
            skipped_weekend=self.skipped_weekend,
            skipped_excluded=self.skipped_excluded,
            skipped_other=self.skipped_other,
            errored=self.errored,
            notified_not_flagged=self.notified_not_flagged,
            manual_changes=self.manual_changes,
            error=error,
        )
