"""Substituição de placeholders nos e-mails de reengajamento."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from core.reengagement.types import ActivityConfig


@dataclass(frozen=True)
class TemplateContext:
    """Dados disponíveis para os placeholders ``%nome%``."""

    course_id: int
    course_short_name: str = ""
    course_full_name: str = ""
    activity_name: str = ""
    user_id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    city: Optional[str] = None
    institution: Optional[str] = None
    department: Optional[str] = None

    @classmethod
    def build(cls, activity: ActivityConfig, user) -> "TemplateContext":
        return cls(
            course_id=activity.course_id,
            course_short_name=activity.course_short_name,
            course_full_name=activity.course_full_name,
            activity_name=activity.name,
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            city=user.city,
            institution=user.institution,
            department=user.department,
        )

    def placeholders(self) -> Dict[str, str]:
        values = {
            "courseshortname": self.course_short_name,
            "coursefullname": self.course_full_name,
            "courseid": self.course_id,
            "activityname": self.activity_name,
            "userid": self.user_id,
            "userfirstname": self.first_name,
            "userlastname": self.last_name,
            "usercity": self.city,
            "userinstitution": self.institution,
            "userdepartment": self.department,
        }
        return {
            f"%{name}%": "" if value is None else str(value)
            for name, value in values.items()
        }


def render_template(text: Optional[str], context: TemplateContext) -> str:
    if not text:
        return ""
    rendered = text
    for placeholder, value in context.placeholders().items():
        rendered = rendered.replace(placeholder, value)
    return rendered


__all__ = ["TemplateContext", "render_template"]
