"""Repo de matrículas e elegibilidade para início do reengajamento."""

from __future__ import annotations

from typing import List

from sqlalchemy import and_, exists, or_

from core.reengagement.types import ActivityConfig, CompletionState
from database.models import (
    CourseModuleCompletion,
    Enrolment,
    ReengagementInProgress,
    User,
)
from database.repos import SessionLocal


def _active_enrolment_filters(course_id: int, now: int):
    return (
        Enrolment.course_id == course_id,
        Enrolment.status == "active",
        or_(Enrolment.time_start == 0, Enrolment.time_start <= now),
        or_(Enrolment.time_end == 0, Enrolment.time_end > now),
    )


class EnrolmentRepository:
    """Consultas de matrícula usadas pelo reconciliador."""

    @staticmethod
    def is_active_sync(course_id: int, user_id: int, now: int) -> bool:
        with SessionLocal() as session:
            row = (
                session.query(Enrolment.id)
                .join(User, User.id == Enrolment.user_id)
                .filter(
                    Enrolment.user_id == user_id,
                    User.deleted.is_(False),
                    *_active_enrolment_filters(course_id, now),
                )
                .first()
            )
            return row is not None

    @staticmethod
    def list_start_candidates_sync(activity: ActivityConfig, now: int) -> List[int]:
        """Usuários matriculados que ainda não começaram nem concluíram."""

        tracked = exists().where(
            and_(
                ReengagementInProgress.reengagement_id == activity.id,
                ReengagementInProgress.user_id == User.id,
            )
        )
        completed = exists().where(
            and_(
                CourseModuleCompletion.course_module_id == activity.course_module_id,
                CourseModuleCompletion.user_id == User.id,
                CourseModuleCompletion.completion_state
                != int(CompletionState.INCOMPLETE),
            )
        )
        with SessionLocal() as session:
            rows = (
                session.query(User.id)
                .join(Enrolment, Enrolment.user_id == User.id)
                .filter(
                    User.deleted.is_(False),
                    *_active_enrolment_filters(activity.course_id, now),
                    ~tracked,
                    ~completed,
                )
                .order_by(User.id)
                .all()
            )
            return [row[0] for row in rows]
