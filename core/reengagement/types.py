"""Tipos de domínio do ciclo de reengajamento."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Tuple


class EmailPolicy(IntEnum):
    """Quando a atividade envia e-mails."""

    NEVER = 0
    ON_COMPLETION = 1
    ON_TIMER = 2


class RecipientPolicy(IntEnum):
    """Quem recebe o e-mail de reengajamento."""

    USER = 0
    MANAGER = 1
    BOTH = 2


class CompletionState(IntEnum):
    INCOMPLETE = 0
    COMPLETE = 1
    COMPLETE_PASS = 2
    COMPLETE_FAIL = 3


COMPLETION_VIEWED = 1
COMPLETION_NOT_VIEWED = 0


@dataclass(frozen=True)
class EmailContent:
    subject: str = ""
    body: str = ""


@dataclass(frozen=True)
class ActivityConfig:
    """Configuração (somente leitura) de uma instância de reengajamento."""

    id: int
    course_id: int
    course_module_id: int
    duration_seconds: int
    email_delay_seconds: int
    email_policy: EmailPolicy = EmailPolicy.NEVER
    reminder_limit: int = 1
    name: str = ""
    recipient_policy: RecipientPolicy = RecipientPolicy.USER
    user_email: EmailContent = field(default_factory=EmailContent)
    manager_email: EmailContent = field(default_factory=EmailContent)
    third_party_email: EmailContent = field(default_factory=EmailContent)
    third_party_addresses: Tuple[str, ...] = ()
    suppress_target_module_id: Optional[int] = None
    course_short_name: str = ""
    course_full_name: str = ""


@dataclass(frozen=True)
class TrackingRecord:
    """Estado de um usuário em acompanhamento para uma atividade."""

    activity_id: int
    user_id: int
    completion_deadline: int
    email_deadline: int
    completed: bool = False
    emails_sent: int = 0
    id: Optional[int] = None


@dataclass(frozen=True)
class CompletionMark:
    """Marca de conclusão compartilhada com o subsistema de conclusão."""

    course_module_id: int
    user_id: int
    state: CompletionState
    time_modified: int
    viewed: int = COMPLETION_NOT_VIEWED
    override_by: Optional[int] = None
    id: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.state is not CompletionState.INCOMPLETE


@dataclass
class ReconcileSummary:
    """Contadores de uma execução do reconciliador."""

    activity_id: int
    started: int = 0
    completed: int = 0
    reminded: int = 0
    emailed: int = 0
    pruned: int = 0
    failed_writes: int = 0

    def as_log_extra(self) -> dict:
        return {
            "activity_id": self.activity_id,
            "started": self.started,
            "completed": self.completed,
            "reminded": self.reminded,
            "emailed": self.emailed,
            "pruned": self.pruned,
            "failed_writes": self.failed_writes,
        }


__all__ = [
    "COMPLETION_NOT_VIEWED",
    "COMPLETION_VIEWED",
    "ActivityConfig",
    "CompletionMark",
    "CompletionState",
    "EmailContent",
    "EmailPolicy",
    "RecipientPolicy",
    "ReconcileSummary",
    "TrackingRecord",
]
