"""Funções utilitárias para tasks de reengajamento."""

from __future__ import annotations

from typing import Optional

from core.reengagement import ReengagementReconciler
from database.reengagement import (
    SqlEligibilityQuery,
    SqlEnrolmentCheck,
    SqlReengagementStore,
)
from services.reengagement.notifier import CeleryNotificationSink


def build_reconciler(now: int) -> ReengagementReconciler:
    """Monta o reconciliador SQL com as consultas de matrícula fixadas em `now`."""

    def clock() -> int:
        return now

    return ReengagementReconciler(
        store=SqlReengagementStore(),
        enrolment=SqlEnrolmentCheck(clock=clock),
        eligibility=SqlEligibilityQuery(clock=clock),
        notifier=CeleryNotificationSink(),
    )


def parse_activity_id(custom_data) -> Optional[int]:
    """Extrai o id da atividade dos dados customizados da task."""

    if not custom_data:
        return None
    raw = custom_data.get("rid") if isinstance(custom_data, dict) else custom_data
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None
