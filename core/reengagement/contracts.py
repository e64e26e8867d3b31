"""Contratos dos colaboradores consumidos pelo reconciliador."""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

from .types import ActivityConfig, CompletionMark, TrackingRecord


class ReengagementStore(Protocol):
    """Armazenamento de registros de acompanhamento e marcas de conclusão.

    Escritas retornam ``True`` em caso de sucesso e ``False`` quando o
    armazenamento reporta falha; nenhuma exceção deve escapar.
    """

    def get_activity(self, activity_id: int) -> Optional[ActivityConfig]: ...

    def list_tracking(self, activity_id: int) -> List[TrackingRecord]: ...

    def insert_tracking(self, record: TrackingRecord) -> Optional[int]: ...

    def update_tracking(self, record: TrackingRecord) -> bool: ...

    def delete_tracking(self, record: TrackingRecord) -> bool: ...

    def get_completion(
        self, course_module_id: int, user_id: int
    ) -> Optional[CompletionMark]: ...

    def insert_completion(self, mark: CompletionMark) -> Optional[int]: ...

    def update_completion(self, mark: CompletionMark) -> bool: ...


class EnrolmentCheck(Protocol):
    def is_enrolled(self, activity: ActivityConfig, user_id: int) -> bool: ...


class EligibilityQuery(Protocol):
    def start_candidates(self, activity: ActivityConfig) -> Iterable[int]: ...


class NotificationSink(Protocol):
    def send_email(self, activity: ActivityConfig, record: TrackingRecord) -> None: ...

    def completion_changed(
        self, mark: CompletionMark, activity: ActivityConfig, user_id: int
    ) -> None: ...

    def invalidate_completion_cache(self, user_id: int, course_id: int) -> None: ...


__all__ = [
    "EligibilityQuery",
    "EnrolmentCheck",
    "NotificationSink",
    "ReengagementStore",
]
