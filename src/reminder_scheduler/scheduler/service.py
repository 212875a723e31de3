"""
Reconciliation scheduler.

Drives reconciliation runs on a cadence and on demand. All runs go through a
single admission gate, so at most one run is in flight per process. The run
itself is synchronous and executes in a worker thread.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from enum import Enum

import anyio

from reminder_scheduler.clock import Clock, LocalClock
from reminder_scheduler.reconciliation.models import RunStatistics, RunStatus, TriggerSource
from reminder_scheduler.reconciliation.service import ReconciliationRun
from reminder_scheduler.scheduler.cadence import Cadence
from reminder_scheduler.shared.exceptions import ReminderSchedulerError
from reminder_scheduler.shared.logging import get_logger

logger = get_logger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class OverlapPolicy(str, Enum):
    """What a trigger does while another run holds the gate."""

    REJECT = "reject"
    QUEUE = "queue"


class SchedulerBusyError(ReminderSchedulerError):
    """A run is already in flight and the overlap policy is reject."""

    def __init__(self, message: str = "A reconciliation run is already in progress") -> None:
        super().__init__(message, error_code="SCHEDULER_BUSY")


class ReconciliationScheduler:
    """Cadence loop plus manual trigger around a ReconciliationRun."""

    def __init__(
        self,
        run: ReconciliationRun,
        cadence: Cadence,
        overlap_policy: OverlapPolicy | str = OverlapPolicy.REJECT,
        clock: Clock | None = None,
    ) -> None:
        self._run = run
        self._cadence = cadence
        self._overlap_policy = OverlapPolicy(overlap_policy)
        self._clock = clock or LocalClock()

        self._gate = asyncio.Lock()
        self._state = SchedulerState.IDLE
        self._task: asyncio.Task[None] | None = None

        self._last_statistics: RunStatistics | None = None
        self._last_run_at: datetime | None = None
        self._next_run_at: datetime | None = None

        self.runs_completed = 0
        self.runs_errored = 0
        self.ticks_skipped = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def overlap_policy(self) -> OverlapPolicy:
        return self._overlap_policy

    @property
    def cadence(self) -> Cadence:
        return self._cadence

    @property
    def last_statistics(self) -> RunStatistics | None:
        return self._last_statistics

    @property
    def last_run_at(self) -> datetime | None:
        return self._last_run_at

    @property
    def next_run_at(self) -> datetime | None:
        return self._next_run_at

    @property
    def is_started(self) -> bool:
        return self._task is not None

    @property
    def is_alive(self) -> bool:
        return self._task is not None and not self._task.done()

    async def trigger(self, source: TriggerSource | str = TriggerSource.MANUAL) -> RunStatistics:
        """Run once through the admission gate.

        Raises:
            SchedulerBusyError: a run is in flight and the policy is reject.
        """
        source = TriggerSource(source)
        # No await between the check and the acquire, so nothing can slip in.
        if self._overlap_policy is OverlapPolicy.REJECT and self._gate.locked():
            raise SchedulerBusyError()

        async with self._gate:
            return await self._execute(source)

    async def _execute(self, source: TriggerSource) -> RunStatistics:
        self._state = SchedulerState.RUNNING
        try:
            stats = await anyio.to_thread.run_sync(self._run.run, source.value)
        finally:
            self._state = SchedulerState.IDLE

        self._last_statistics = stats
        self._last_run_at = stats.finished_at
        if stats.status is RunStatus.ERRORED:
            self.runs_errored += 1
        else:
            self.runs_completed += 1
        return stats

    async def _tick(self, source: TriggerSource) -> None:
        try:
            await self.trigger(source)
        except SchedulerBusyError:
            self.ticks_skipped += 1
            logger.warning(
                "Scheduled run skipped; previous run still in progress",
                extra={"trigger_source": source.value},
            )
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled run failed", extra={"trigger_source": source.value})

    async def _run_loop(self) -> None:
        logger.info(
            "Scheduler loop started",
            extra={"cadence": repr(self._cadence), "overlap_policy": self._overlap_policy.value},
        )
        await self._tick(TriggerSource.STARTUP)
        while True:
            now = self._clock()
            self._next_run_at = self._cadence.next_run_after(now)
            delay = max(0.0, (self._next_run_at - now).total_seconds())
            logger.debug(
                "Next scheduled run",
                extra={"next_run_at": self._next_run_at.isoformat(), "delay_seconds": delay},
            )
            await asyncio.sleep(delay)
            await self._tick(TriggerSource.SCHEDULE)

    def start(self) -> None:
        """Start the background loop; the first run fires immediately."""
        if self.is_alive:
            return
        self._task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        """Cancel the loop. A run already in its worker thread finishes first."""
        task, self._task = self._task, None
        self._next_run_at = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Scheduler loop stopped")
