"""Componentes core do ciclo de reengajamento."""

from .contracts import (
    EligibilityQuery,
    EnrolmentCheck,
    NotificationSink,
    ReengagementStore,
)
from .reconciler import ReengagementReconciler
from .state import (
    completion_cache_key,
    current_run_token,
    generate_run_token,
    invalidate_completion_cache,
    release_run_lock,
    try_acquire_run_lock,
)
from .types import (
    COMPLETION_NOT_VIEWED,
    COMPLETION_VIEWED,
    ActivityConfig,
    CompletionMark,
    CompletionState,
    EmailContent,
    EmailPolicy,
    RecipientPolicy,
    ReconcileSummary,
    TrackingRecord,
)

__all__ = [
    "COMPLETION_NOT_VIEWED",
    "COMPLETION_VIEWED",
    "ActivityConfig",
    "CompletionMark",
    "CompletionState",
    "EligibilityQuery",
    "EmailContent",
    "EmailPolicy",
    "EnrolmentCheck",
    "NotificationSink",
    "RecipientPolicy",
    "ReconcileSummary",
    "ReengagementReconciler",
    "ReengagementStore",
    "TrackingRecord",
    "completion_cache_key",
    "current_run_token",
    "generate_run_token",
    "invalidate_completion_cache",
    "release_run_lock",
    "try_acquire_run_lock",
]
