"""Repo para configuração das atividades de reengajamento."""

from __future__ import annotations

from typing import List, Optional

from core.reengagement.types import (
    ActivityConfig,
    EmailContent,
    EmailPolicy,
    RecipientPolicy,
)
from database.models import Course, ReengagementActivity
from database.repos import SessionLocal


def _split_addresses(raw: Optional[str]) -> tuple:
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def to_activity_config(activity: ReengagementActivity, course: Course) -> ActivityConfig:
    return ActivityConfig(
        id=activity.id,
        course_id=activity.course_id,
        course_module_id=activity.course_module_id,
        duration_seconds=activity.duration,
        email_delay_seconds=activity.emaildelay,
        email_policy=EmailPolicy(activity.emailuser),
        reminder_limit=activity.remindercount,
        name=activity.name or "",
        recipient_policy=RecipientPolicy(activity.emailrecipient),
        user_email=EmailContent(activity.emailsubject or "", activity.emailcontent or ""),
        manager_email=EmailContent(
            activity.emailsubjectmanager or "", activity.emailcontentmanager or ""
        ),
        third_party_email=EmailContent(
            activity.emailsubjectthirdparty or "",
            activity.emailcontentthirdparty or "",
        ),
        third_party_addresses=_split_addresses(activity.thirdpartyemails),
        suppress_target_module_id=activity.suppresstarget or None,
        course_short_name=course.shortname,
        course_full_name=course.fullname,
    )


class ReengagementActivityRepository:
    """Leitura das instâncias de reengajamento."""

    @staticmethod
    def get_config_sync(activity_id: int) -> Optional[ActivityConfig]:
        with SessionLocal() as session:
            row = (
                session.query(ReengagementActivity, Course)
                .join(Course, Course.id == ReengagementActivity.course_id)
                .filter(
                    ReengagementActivity.id == activity_id,
                    ReengagementActivity.is_active.is_(True),
                )
                .first()
            )
            if not row:
                return None
            activity, course = row
            return to_activity_config(activity, course)

    @staticmethod
    def list_active_ids_sync() -> List[int]:
        with SessionLocal() as session:
            rows = (
                session.query(ReengagementActivity.id)
                .filter(ReengagementActivity.is_active.is_(True))
                .order_by(ReengagementActivity.id)
                .all()
            )
            return [row[0] for row in rows]
