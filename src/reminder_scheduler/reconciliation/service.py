"""
Reconciliation run service.

One run fetches the record snapshot once, evaluates the eligibility policy
for every record and applies the resulting notification and store patch.
A failure on one record is logged and counted; it never aborts the run.
Only a failed fetch ends the run early, as ERRORED with nothing processed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from reminder_scheduler.clock import Clock, LocalClock
from reminder_scheduler.config import DEFAULT_MESSAGE_TEMPLATE, Settings
from reminder_scheduler.notify.config import NotifierConfig
from reminder_scheduler.notify.interface import NotificationReceipt, Notifier, NotifierError
from reminder_scheduler.policy.eligibility import EligibilityPolicy
from reminder_scheduler.policy.models import Action, Decision, DecisionKind, SkipReason
from reminder_scheduler.reconciliation.models import RunStatistics, RunStatus, RunTally, TriggerSource
from reminder_scheduler.reconciliation.snapshot import SnapshotTracker
from reminder_scheduler.records.interface import RecordStore, StoreUpdateError
from reminder_scheduler.records.models import ContactFlag, Record, RecordPatch
from reminder_scheduler.records.parsing import parse_due_date
from reminder_scheduler.shared.logging import get_logger, log_with_context, run_id_var

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunOptions:
    """Runtime knobs for the effects of a run."""

    place_calls: bool = True
    voice_callback_url: str = ""
    message_template: str = DEFAULT_MESSAGE_TEMPLATE

    @classmethod
    def from_config(cls, settings: Settings, notifier_config: NotifierConfig | None) -> "RunOptions":
        return cls(
            place_calls=notifier_config.place_calls if notifier_config else False,
            voice_callback_url=notifier_config.voice_callback_url if notifier_config else "",
            message_template=settings.message_template,
        )


class _TemplateValues(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class ReconciliationRun:
    """Runs one reconciliation pass per call to run().

    Not reentrant: the scheduler guarantees that at most one run is in
    flight, which also protects the snapshot tracker.
    """

    def __init__(
        self,
        store: RecordStore,
        policy: EligibilityPolicy,
        clock: Clock | None = None,
        notifier: Notifier | None = None,
        options: RunOptions | None = None,
        tracker: SnapshotTracker | None = None,
        run_id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._store = store
        self._policy = policy
        self._clock = clock or LocalClock()
        self._notifier = notifier
        self._options = options or RunOptions()
        self._tracker = tracker
        self._run_id_factory = run_id_factory

    def run(self, trigger_source: TriggerSource | str = TriggerSource.MANUAL) -> RunStatistics:
        run_id = self._run_id_factory()
        token = run_id_var.set(run_id)
        try:
            return self._run(run_id, str(getattr(trigger_source, "value", trigger_source)))
        finally:
            run_id_var.reset(token)

    def _run(self, run_id: str, trigger_source: str) -> RunStatistics:
        started_at = self._clock()
        tally = RunTally()
        logger.info(
            "Reconciliation run started",
            extra={"trigger_source": trigger_source, "now": started_at.isoformat()},
        )

        try:
            records = self._store.fetch_all()
        except Exception as e:
            logger.exception("Record fetch failed; run aborted", extra={"trigger_source": trigger_source})
            return tally.finalize(
                run_id=run_id,
                trigger_source=trigger_source,
                status=RunStatus.ERRORED,
                started_at=started_at,
                finished_at=self._clock(),
                error=str(e),
            )

        if not records:
            logger.warning("No records found in the store")

        if self._tracker is not None:
            if not self._tracker.has_baseline:
                logger.debug("No previous snapshot; manual change detection starts next run")
            manual = self._tracker.detect_manual_changes(records)
            tally.manual_changes = len(manual)
            for record_id in manual:
                logger.info("Manual change detected since last poll", extra={"record_id": record_id})

        post_run: list[Record] = []
        handled: set[str] = set()
        for record in records:
            if record.id in handled:
                logger.warning("Duplicate record id in snapshot; ignored", extra={"record_id": record.id})
                continue
            handled.add(record.id)
            tally.seen += 1

            try:
                post_run.append(self._reconcile(record, started_at, tally))
            except Exception:
                logger.exception("Error processing record", extra={"record_id": record.id})
                tally.record_error(record.id)
                post_run.append(record)

        if self._tracker is not None:
            self._tracker.remember(post_run)

        stats = tally.finalize(
            run_id=run_id,
            trigger_source=trigger_source,
            status=RunStatus.COMPLETED,
            started_at=started_at,
            finished_at=self._clock(),
        )
        log_with_context(
            logger,
            logging.INFO,
            "Reconciliation run completed",
            trigger_source=trigger_source,
            seen=stats.seen,
            triggered=stats.triggered,
            reset=stats.reset,
            skipped_weekend=stats.skipped_weekend,
            skipped_excluded=stats.skipped_excluded,
            skipped_other=stats.skipped_other,
            errored=stats.errored,
            notified_not_flagged=stats.notified_not_flagged,
            failed_record_ids=tally.failed_record_ids,
        )
        return stats

    def _reconcile(self, record: Record, now: datetime, tally: RunTally) -> Record:
        """Apply the decision for one record; returns the record as it should now be stored."""
        decision = self._policy.evaluate(record, now)
        context = {
            "record_id": record.id,
            "decision": decision.describe(),
            "days_until_due": decision.days_until_due,
        }

        if decision.kind is DecisionKind.SKIP:
            if decision.reason is SkipReason.EXCLUDED:
                tally.skipped_excluded += 1
            else:
                tally.skipped_other += 1
            logger.debug("Skipping record", extra=context)
            return record

        if decision.kind is DecisionKind.INVALID:
            logger.warning("Invalid record", extra=context)
            tally.record_error(record.id)
            return record

        if decision.kind is DecisionKind.RESET:
            logger.info("Resetting contact flag; due date passed", extra=context)
            updated = self._write(
                record,
                RecordPatch(
                    flag=ContactFlag.NEEDS_CONTACT,
                    fallback_required=False if record.fallback_required else None,
                ),
            )
            tally.reset += 1
            return updated

        if decision.kind is DecisionKind.WEEKEND_FALLBACK:
            logger.info("Reminder anchor on a weekend; using text message", extra=context)
            receipt = None
            if self._notifier is not None:
                receipt = self._notifier.send_message(self._destination(record), self._render(record, decision, now))
            updated = self._write_after_notify(
                record,
                RecordPatch(flag=ContactFlag.CONTACTED, fallback_required=True),
                receipt,
                tally,
            )
            tally.skipped_weekend += 1
            return updated

        logger.info("Triggering contact", extra=context)
        receipt = None
        if self._notifier is not None and self._options.place_calls:
            receipt = self._notifier.place_call(self._destination(record), self._options.voice_callback_url)

        if decision.action is Action.CALLBACK_CALL:
            patch = RecordPatch(callback_active=False)
        else:
            patch = RecordPatch(flag=ContactFlag.CONTACTED)
        updated = self._write_after_notify(record, patch, receipt, tally)
        tally.triggered += 1
        return updated

    def _write(self, record: Record, patch: RecordPatch) -> Record:
        if patch.is_empty:
            return record
        result = self._store.update(record.id, patch)
        if not result.ok:
            raise StoreUpdateError(
                message=f"Store rejected update for record {record.id}",
                error_code="UPDATE_REJECTED",
                response=result.error,
            )
        return patch.apply_to(record)

    def _write_after_notify(
        self,
        record: Record,
        patch: RecordPatch,
        receipt: NotificationReceipt | None,
        tally: RunTally,
    ) -> Record:
        try:
            return self._write(record, patch)
        except Exception:
            if receipt is not None:
                tally.notified_not_flagged += 1
                logger.error(
                    "Notification sent but record not updated; needs manual reconciliation",
                    extra={
                        "record_id": record.id,
                        "receipt_id": receipt.receipt_id,
                        "channel": receipt.channel.value,
                    },
                )
            raise

    @staticmethod
    def _destination(record: Record) -> str:
        if not record.phone_number:
            raise NotifierError(
                message=f"Record {record.id} has no phone number",
                error_code="MISSING_DESTINATION",
            )
        return record.phone_number

    def _render(self, record: Record, decision: Decision, now: datetime) -> str:
        due = parse_due_date(record.due_date, now.tzinfo)
        values = _TemplateValues(
            name=record.name or "there",
            due_date=due.isoformat() if due else str(record.due_date),
            days_until_due=decision.days_until_due if decision.days_until_due is not None else "",
        )
        return self._options.message_template.format_map(values)
