"""Repo para as marcas de conclusão de módulo."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from core.reengagement.types import CompletionMark, CompletionState
from core.telemetry import logger
from database.models import CourseModuleCompletion
from database.repos import SessionLocal


def to_completion_mark(row: CourseModuleCompletion) -> CompletionMark:
    return CompletionMark(
        id=row.id,
        course_module_id=row.course_module_id,
        user_id=row.user_id,
        state=CompletionState(row.completion_state),
        viewed=row.viewed,
        override_by=row.override_by,
        time_modified=row.time_modified,
    )


class CompletionRepository:
    """Leitura e escrita de ``course_modules_completion``."""

    @staticmethod
    def get_sync(course_module_id: int, user_id: int) -> Optional[CompletionMark]:
        with SessionLocal() as session:
            row = (
                session.query(CourseModuleCompletion)
                .filter(
                    CourseModuleCompletion.course_module_id == course_module_id,
                    CourseModuleCompletion.user_id == user_id,
                )
                .first()
            )
            return to_completion_mark(row) if row else None

    @staticmethod
    def insert_sync(mark: CompletionMark) -> Optional[int]:
        with SessionLocal() as session:
            row = CourseModuleCompletion(
                course_module_id=mark.course_module_id,
                user_id=mark.user_id,
                completion_state=int(mark.state),
                viewed=mark.viewed,
                override_by=mark.override_by,
                time_modified=mark.time_modified,
            )
            session.add(row)
            try:
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Failed to insert completion record",
                    extra={
                        "course_module_id": mark.course_module_id,
                        "user_id": mark.user_id,
                        "error": str(exc),
                    },
                )
                return None
            session.refresh(row)
            return row.id

    @staticmethod
    def update_sync(mark: CompletionMark) -> bool:
        if mark.id is None:
            return False
        with SessionLocal() as session:
            try:
                updated = (
                    session.query(CourseModuleCompletion)
                    .filter(CourseModuleCompletion.id == mark.id)
                    .update(
                        {
                            CourseModuleCompletion.completion_state: int(mark.state),
                            CourseModuleCompletion.time_modified: mark.time_modified,
                        },
                        synchronize_session=False,
                    )
                )
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Failed to update completion record",
                    extra={"completion_id": mark.id, "error": str(exc)},
                )
                return False
            return updated > 0
