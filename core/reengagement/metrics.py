"""Métricas Prometheus para o ciclo de reengajamento."""

from __future__ import annotations

from prometheus_client import Counter

REENGAGEMENT_TRANSITIONS = Counter(
    "reengagement_transitions_total",
    "Transições aplicadas aos registros de acompanhamento",
    labelnames=("transition",),
)

REENGAGEMENT_EMAILS = Counter(
    "reengagement_emails_total",
    "E-mails de reengajamento despachados",
    labelnames=("trigger", "status"),
)


def inc_transition(transition: str) -> None:
    REENGAGEMENT_TRANSITIONS.labels(transition=transition).inc()


def inc_email(trigger: str, status: str = "enqueued") -> None:
    REENGAGEMENT_EMAILS.labels(trigger=trigger, status=status).inc()


__all__ = ["inc_email", "inc_transition"]
