"""Sink de notificações: e-mail, evento de conclusão e cache."""

from __future__ import annotations

from redis.exceptions import RedisError

from core.config import settings
from core.reengagement.metrics import inc_email
from core.reengagement.state import invalidate_completion_cache
from core.reengagement.types import ActivityConfig, CompletionMark, TrackingRecord
from core.telemetry import logger
from database.repos import EventRepository

COMPLETION_UPDATED_EVENT = "course_module_completion_updated"


def record_snapshot(record: TrackingRecord) -> dict:
    return {
        "id": record.id,
        "activity_id": record.activity_id,
        "user_id": record.user_id,
        "completion_deadline": record.completion_deadline,
        "email_deadline": record.email_deadline,
        "completed": record.completed,
        "emails_sent": record.emails_sent,
    }


class CeleryNotificationSink:
    """Despacha e-mails para a fila e registra efeitos colaterais."""

    def send_email(self, activity: ActivityConfig, record: TrackingRecord) -> None:
        from workers.reengagement_tasks import (  # import tardio para evitar ciclo
            send_reengagement_email,
        )

        try:
            send_reengagement_email.apply_async(
                args=[activity.id, record.user_id, record_snapshot(record)],
                queue=settings.REENGAGEMENT_QUEUE,
            )
        except Exception as exc:  # noqa: BLE001 - envio é fire-and-forget
            inc_email("enqueue", status="failed")
            logger.error(
                "Failed to enqueue reengagement email",
                extra={
                    "activity_id": activity.id,
                    "user_id": record.user_id,
                    "error": str(exc),
                },
            )

    def completion_changed(
        self, mark: CompletionMark, activity: ActivityConfig, user_id: int
    ) -> None:
        EventRepository.log_event_sync(
            COMPLETION_UPDATED_EVENT,
            object_id=mark.id,
            context_id=activity.course_module_id,
            related_user_id=user_id,
            payload={
                "relateduserid": user_id,
                "completionstate": int(mark.state),
                "reengagement_id": activity.id,
            },
        )

    def invalidate_completion_cache(self, user_id: int, course_id: int) -> None:
        try:
            invalidate_completion_cache(user_id, course_id)
        except RedisError as exc:
            logger.warning(
                "Failed to invalidate completion cache",
                extra={"user_id": user_id, "course_id": course_id, "error": str(exc)},
            )


__all__ = ["COMPLETION_UPDATED_EVENT", "CeleryNotificationSink", "record_snapshot"]
