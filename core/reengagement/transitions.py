"""Tabela de transições do registro de acompanhamento.

Funções puras: cada transição devolve um novo valor, nunca altera o
registro recebido. Os prazos só avançam.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .types import (
    COMPLETION_VIEWED,
    ActivityConfig,
    CompletionMark,
    CompletionState,
    EmailPolicy,
    TrackingRecord,
)


def start_tracking(activity: ActivityConfig, user_id: int, now: int) -> TrackingRecord:
    return TrackingRecord(
        activity_id=activity.id,
        user_id=user_id,
        completion_deadline=now + activity.duration_seconds,
        email_deadline=now + activity.email_delay_seconds,
    )


def incomplete_mark(activity: ActivityConfig, user_id: int, now: int) -> CompletionMark:
    return CompletionMark(
        course_module_id=activity.course_module_id,
        user_id=user_id,
        state=CompletionState.INCOMPLETE,
        time_modified=now,
    )


def complete_mark(
    existing: Optional[CompletionMark],
    activity: ActivityConfig,
    user_id: int,
    now: int,
) -> CompletionMark:
    """Marca concluída; recriada como vista quando a original sumiu."""

    if existing is None:
        return CompletionMark(
            course_module_id=activity.course_module_id,
            user_id=user_id,
            state=CompletionState.COMPLETE_PASS,
            viewed=COMPLETION_VIEWED,
            override_by=None,
            time_modified=now,
        )
    return replace(existing, state=CompletionState.COMPLETE_PASS, time_modified=now)


def is_deadline_elapsed(record: TrackingRecord, now: int) -> bool:
    return not record.completed and record.completion_deadline < now


def is_reminder_due(record: TrackingRecord, activity: ActivityConfig, now: int) -> bool:
    return (
        activity.email_policy is EmailPolicy.ON_TIMER
        and record.email_deadline < now
        and record.emails_sent < activity.reminder_limit
    )


def keeps_after_completion(activity: ActivityConfig, record: TrackingRecord) -> bool:
    """Só OnTimer sem nenhum lembrete enviado mantém o registro."""

    return activity.email_policy is EmailPolicy.ON_TIMER and record.emails_sent == 0


def mark_completed(record: TrackingRecord) -> TrackingRecord:
    return replace(record, completed=True)


def register_reminder(
    record: TrackingRecord, activity: ActivityConfig, now: int
) -> TrackingRecord:
    emails_sent = record.emails_sent + 1
    email_deadline = record.email_deadline
    if emails_sent < activity.reminder_limit:
        email_deadline = max(email_deadline, now + activity.email_delay_seconds)
    return replace(record, emails_sent=emails_sent, email_deadline=email_deadline)


__all__ = [
    "complete_mark",
    "incomplete_mark",
    "is_deadline_elapsed",
    "is_reminder_due",
    "keeps_after_completion",
    "mark_completed",
    "register_reminder",
    "start_tracking",
]
