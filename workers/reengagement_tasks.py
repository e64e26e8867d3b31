"""Tasks Celery do ciclo de reengajamento."""

from __future__ import annotations

import time
from typing import Optional

from celery import Task

from core.config import settings
from core.reengagement import (
    generate_run_token,
    release_run_lock,
    try_acquire_run_lock,
)
from core.reengagement.metrics import inc_email
from core.telemetry import logger
from database.reengagement import ReengagementActivityRepository
from services.reengagement.mailer import ReengagementMailer
from workers.reengagement_utils import build_reconciler, parse_activity_id

from .celery_app import celery_app


@celery_app.task(name="workers.reengagement_tasks.dispatch_reengagement_runs")
def dispatch_reengagement_runs() -> int:
    """Enfileira uma execução por atividade ativa (Celery Beat)."""

    activity_ids = ReengagementActivityRepository.list_active_ids_sync()
    for activity_id in activity_ids:
        process_reengagement.apply_async(
            args=[{"rid": activity_id}],
            queue=settings.REENGAGEMENT_QUEUE,
        )

    logger.info(
        "Reengagement runs dispatched", extra={"activities": len(activity_ids)}
    )
    return len(activity_ids)


@celery_app.task(
    bind=True,
    name="workers.reengagement_tasks.process_reengagement",
)
def process_reengagement(
    self: Task, custom_data: Optional[dict], now: Optional[int] = None
) -> Optional[dict]:
    activity_id = parse_activity_id(custom_data)
    if activity_id is None:
        logger.debug("Reengagement run skipped: empty custom data")
        return None

    token = generate_run_token()
    if not try_acquire_run_lock(activity_id, token):
        logger.info(
            "Reengagement run already in progress",
            extra={"activity_id": activity_id},
        )
        return None

    run_at = int(now) if now is not None else int(time.time())
    try:
        summary = build_reconciler(run_at).run(activity_id, run_at)
    finally:
        release_run_lock(activity_id, token)

    return summary.as_log_extra()


@celery_app.task(
    bind=True,
    max_retries=3,
    name="workers.reengagement_tasks.send_reengagement_email",
)
def send_reengagement_email(
    self: Task, activity_id: int, user_id: int, snapshot: Optional[dict] = None
) -> int:
    activity = ReengagementActivityRepository.get_config_sync(activity_id)
    if not activity:
        logger.warning(
            "Reengagement email aborted: activity not found",
            extra={"activity_id": activity_id, "user_id": user_id},
        )
        return 0

    try:
        sent = ReengagementMailer().deliver(activity, user_id)
    except Exception as exc:  # noqa: BLE001
        if self.request.retries < self.max_retries:
            logger.warning(
                "Reengagement email failed, retrying",
                extra={
                    "activity_id": activity_id,
                    "user_id": user_id,
                    "error": str(exc),
                    "attempt": self.request.retries + 1,
                },
            )
            raise self.retry(countdown=2**self.request.retries, exc=exc)

        inc_email("delivery", status="failed")
        logger.error(
            "Reengagement email failed after retries",
            extra={
                "activity_id": activity_id,
                "user_id": user_id,
                "emails_sent": (snapshot or {}).get("emails_sent"),
                "error": str(exc),
            },
        )
        raise

    inc_email("delivery", status="sent" if sent else "skipped")
    return sent


__all__ = [
    "dispatch_reengagement_runs",
    "process_reengagement",
    "send_reengagement_email",
]
