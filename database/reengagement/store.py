"""Implementações SQL dos colaboradores do reconciliador."""

from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional

from core.reengagement.types import ActivityConfig, CompletionMark, TrackingRecord

from .activity_repo import ReengagementActivityRepository
from .completion_repo import CompletionRepository
from .enrolment_repo import EnrolmentRepository
from .tracking_repo import ReengagementTrackingRepository

Clock = Callable[[], int]


def _wall_clock() -> int:
    return int(time.time())


class SqlReengagementStore:
    """Record store sobre as tabelas de reengajamento e de conclusão."""

    def get_activity(self, activity_id: int) -> Optional[ActivityConfig]:
        return ReengagementActivityRepository.get_config_sync(activity_id)

    def list_tracking(self, activity_id: int) -> List[TrackingRecord]:
        return ReengagementTrackingRepository.list_for_activity_sync(activity_id)

    def insert_tracking(self, record: TrackingRecord) -> Optional[int]:
        return ReengagementTrackingRepository.insert_sync(record)

    def update_tracking(self, record: TrackingRecord) -> bool:
        return ReengagementTrackingRepository.update_sync(record)

    def delete_tracking(self, record: TrackingRecord) -> bool:
        return ReengagementTrackingRepository.delete_sync(record.id)

    def get_completion(
        self, course_module_id: int, user_id: int
    ) -> Optional[CompletionMark]:
        return CompletionRepository.get_sync(course_module_id, user_id)

    def insert_completion(self, mark: CompletionMark) -> Optional[int]:
        return CompletionRepository.insert_sync(mark)

    def update_completion(self, mark: CompletionMark) -> bool:
        return CompletionRepository.update_sync(mark)


class SqlEnrolmentCheck:
    def __init__(self, clock: Clock = _wall_clock):
        self.clock = clock

    def is_enrolled(self, activity: ActivityConfig, user_id: int) -> bool:
        return EnrolmentRepository.is_active_sync(
            activity.course_id, user_id, self.clock()
        )


class SqlEligibilityQuery:
    def __init__(self, clock: Clock = _wall_clock):
        self.clock = clock

    def start_candidates(self, activity: ActivityConfig) -> Iterable[int]:
        return EnrolmentRepository.list_start_candidates_sync(activity, self.clock())


__all__ = ["SqlEligibilityQuery", "SqlEnrolmentCheck", "SqlReengagementStore"]
