"""Passo de reconciliação temporal das atividades de reengajamento."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Optional

from core.telemetry import logger

from .contracts import (
    EligibilityQuery,
    EnrolmentCheck,
    NotificationSink,
    ReengagementStore,
)
from .metrics import inc_email, inc_transition
from .transitions import (
    complete_mark,
    incomplete_mark,
    is_deadline_elapsed,
    is_reminder_due,
    keeps_after_completion,
    mark_completed,
    register_reminder,
    start_tracking,
)
from .types import (
    ActivityConfig,
    CompletionMark,
    EmailPolicy,
    ReconcileSummary,
    TrackingRecord,
)

Snapshot = Dict[int, TrackingRecord]


class ReengagementReconciler:
    """Avança o ciclo de vida dos registros de uma atividade.

    Uma execução trabalha sobre um único snapshot em memória dos registros
    da atividade: primeiro a fase de prazo vencido, depois a de lembretes,
    de modo que a segunda enxergue o que a primeira deixou.
    """

    def __init__(
        self,
        store: ReengagementStore,
        enrolment: EnrolmentCheck,
        eligibility: EligibilityQuery,
        notifier: NotificationSink,
    ):
        self.store = store
        self.enrolment = enrolment
        self.eligibility = eligibility
        self.notifier = notifier

    def run(self, activity_id: int, now: int) -> ReconcileSummary:
        summary = ReconcileSummary(activity_id=activity_id)

        activity = self.store.get_activity(activity_id)
        if activity is None:
            logger.debug(
                "Reengagement run skipped: activity not found",
                extra={"activity_id": activity_id},
            )
            return summary

        snapshot: Snapshot = {
            record.user_id: record for record in self.store.list_tracking(activity.id)
        }

        self._onboard(activity, snapshot, now, summary)
        self._process_elapsed(activity, snapshot, now, summary)
        self._process_reminders(activity, snapshot, now, summary)

        logger.info("Reengagement run finished", extra=summary.as_log_extra())
        return summary

    def _onboard(
        self,
        activity: ActivityConfig,
        snapshot: Snapshot,
        now: int,
        summary: ReconcileSummary,
    ) -> None:
        candidates = sorted(set(self.eligibility.start_candidates(activity)))
        if candidates:
            logger.info(
                "Starting reengagement tracking",
                extra={"activity_id": activity.id, "users": len(candidates)},
            )

        for user_id in candidates:
            if user_id in snapshot:
                logger.debug(
                    "User already tracked, skipping start",
                    extra={"activity_id": activity.id, "user_id": user_id},
                )
                continue

            record = start_tracking(activity, user_id, now)
            record_id = self.store.insert_tracking(record)
            if record_id is None:
                summary.failed_writes += 1
                logger.warning(
                    "Failed to start reengagement tracking",
                    extra={"activity_id": activity.id, "user_id": user_id},
                )
                continue

            snapshot[user_id] = replace(record, id=record_id)
            if self.store.get_completion(activity.course_module_id, user_id) is None:
                mark_id = self.store.insert_completion(
                    incomplete_mark(activity, user_id, now)
                )
                if mark_id is None:
                    summary.failed_writes += 1
                    logger.warning(
                        "Failed to create incomplete completion record",
                        extra={
                            "activity_id": activity.id,
                            "user_id": user_id,
                            "course_module_id": activity.course_module_id,
                        },
                    )

            summary.started += 1
            inc_transition("started")

    def _process_elapsed(
        self,
        activity: ActivityConfig,
        snapshot: Snapshot,
        now: int,
        summary: ReconcileSummary,
    ) -> None:
        for user_id, record in list(snapshot.items()):
            if not is_deadline_elapsed(record, now):
                continue
            if not self._still_enrolled(activity, record, snapshot, summary):
                continue

            if self._complete(activity, user_id, now) is None:
                summary.failed_writes += 1
                logger.warning(
                    "Failed to update completion record, retrying next run",
                    extra={"activity_id": activity.id, "user_id": user_id},
                )
                continue

            if keeps_after_completion(activity, record):
                updated = mark_completed(record)
                ok = self.store.update_tracking(updated)
                if ok:
                    snapshot[user_id] = updated
                    logger.debug(
                        "User marked complete, keeping record for timed email",
                        extra={"activity_id": activity.id, "user_id": user_id},
                    )
            else:
                ok = self.store.delete_tracking(record)
                if ok:
                    del snapshot[user_id]
                    logger.debug(
                        "User marked complete, deleting tracking record",
                        extra={"activity_id": activity.id, "user_id": user_id},
                    )

            if not ok:
                # Sem e-mail: a próxima execução reavalia o registro.
                summary.failed_writes += 1
                logger.warning(
                    "Not emailing user due to failure to update tracking record",
                    extra={"activity_id": activity.id, "user_id": user_id},
                )
                continue

            summary.completed += 1
            inc_transition("completed")

            if activity.email_policy is EmailPolicy.ON_COMPLETION:
                self._email(activity, record, "completion", summary)

    def _process_reminders(
        self,
        activity: ActivityConfig,
        snapshot: Snapshot,
        now: int,
        summary: ReconcileSummary,
    ) -> None:
        for user_id, record in list(snapshot.items()):
            if not is_reminder_due(record, activity, now):
                continue
            if not self._still_enrolled(activity, record, snapshot, summary):
                continue

            if record.completed:
                if not self.store.delete_tracking(record):
                    summary.failed_writes += 1
                    logger.warning(
                        "Not emailing user due to failure to delete tracking record",
                        extra={"activity_id": activity.id, "user_id": user_id},
                    )
                    continue

                del snapshot[user_id]
                inc_transition("finished")
                logger.debug(
                    "User already marked complete, deleting tracking record",
                    extra={"activity_id": activity.id, "user_id": user_id},
                )
                self._email(activity, record, "timer", summary)
                continue

            updated = register_reminder(record, activity, now)
            if not self.store.update_tracking(updated):
                summary.failed_writes += 1
                logger.warning(
                    "Not emailing user due to failure to update tracking record",
                    extra={"activity_id": activity.id, "user_id": user_id},
                )
                continue

            snapshot[user_id] = updated
            summary.reminded += 1
            inc_transition("reminded")
            self._email(activity, updated, "timer", summary)

    def _still_enrolled(
        self,
        activity: ActivityConfig,
        record: TrackingRecord,
        snapshot: Snapshot,
        summary: ReconcileSummary,
    ) -> bool:
        if self.enrolment.is_enrolled(activity, record.user_id):
            return True

        if self.store.delete_tracking(record):
            snapshot.pop(record.user_id, None)
            summary.pruned += 1
            inc_transition("pruned")
            logger.info(
                "User no longer enrolled, tracking record deleted",
                extra={"activity_id": activity.id, "user_id": record.user_id},
            )
        else:
            summary.failed_writes += 1
        return False

    def _complete(
        self, activity: ActivityConfig, user_id: int, now: int
    ) -> Optional[CompletionMark]:
        existing = self.store.get_completion(activity.course_module_id, user_id)
        mark = complete_mark(existing, activity, user_id, now)

        if existing is None:
            logger.warning(
                "Could not find completion record, recreating",
                extra={
                    "user_id": user_id,
                    "course_module_id": activity.course_module_id,
                },
            )
            mark_id = self.store.insert_completion(mark)
            if mark_id is None:
                return None
            mark = replace(mark, id=mark_id)
        elif not self.store.update_completion(mark):
            return None

        self.notifier.invalidate_completion_cache(user_id, activity.course_id)
        self.notifier.completion_changed(mark, activity, user_id)
        return mark

    def _email(
        self,
        activity: ActivityConfig,
        record: TrackingRecord,
        trigger: str,
        summary: ReconcileSummary,
    ) -> None:
        logger.info(
            "Sending reengagement email",
            extra={
                "activity_id": activity.id,
                "user_id": record.user_id,
                "trigger": trigger,
            },
        )
        self.notifier.send_email(activity, record)
        summary.emailed += 1
        inc_email(trigger)


__all__ = ["ReengagementReconciler"]
