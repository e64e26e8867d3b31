"""Repos de reengajamento."""

from .activity_repo import ReengagementActivityRepository
from .completion_repo import CompletionRepository
from .enrolment_repo import EnrolmentRepository
from .store import SqlEligibilityQuery, SqlEnrolmentCheck, SqlReengagementStore
from .tracking_repo import ReengagementTrackingRepository

__all__ = [
    "CompletionRepository",
    "EnrolmentRepository",
    "ReengagementActivityRepository",
    "ReengagementTrackingRepository",
    "SqlEligibilityQuery",
    "SqlEnrolmentCheck",
    "SqlReengagementStore",
]
