"""Repo para os registros de acompanhamento em andamento."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.reengagement.types import TrackingRecord
from core.telemetry import logger
from database.models import ReengagementInProgress, User
from database.repos import SessionLocal


def to_tracking_record(row: ReengagementInProgress) -> TrackingRecord:
    return TrackingRecord(
        id=row.id,
        activity_id=row.reengagement_id,
        user_id=row.user_id,
        completion_deadline=row.completiontime,
        email_deadline=row.emailtime,
        completed=bool(row.completed),
        emails_sent=row.emailsent,
    )


class ReengagementTrackingRepository:
    """CRUD dos registros ``reengagement_inprogress``.

    Escritas retornam ``True``/``False`` (ou o id inserido) em vez de
    propagar erros do banco; o reconciliador decide o que pular.
    """

    @staticmethod
    def list_for_activity_sync(activity_id: int) -> List[TrackingRecord]:
        with SessionLocal() as session:
            rows = (
                session.query(ReengagementInProgress)
                .join(User, User.id == ReengagementInProgress.user_id)
                .filter(
                    ReengagementInProgress.reengagement_id == activity_id,
                    User.deleted.is_(False),
                )
                .order_by(ReengagementInProgress.id)
                .all()
            )
            return [to_tracking_record(row) for row in rows]

    @staticmethod
    def get_sync(activity_id: int, user_id: int) -> Optional[TrackingRecord]:
        with SessionLocal() as session:
            row = (
                session.query(ReengagementInProgress)
                .filter(
                    ReengagementInProgress.reengagement_id == activity_id,
                    ReengagementInProgress.user_id == user_id,
                )
                .first()
            )
            return to_tracking_record(row) if row else None

    @staticmethod
    def insert_sync(record: TrackingRecord) -> Optional[int]:
        with SessionLocal() as session:
            row = ReengagementInProgress(
                reengagement_id=record.activity_id,
                user_id=record.user_id,
                completiontime=record.completion_deadline,
                emailtime=record.email_deadline,
                completed=record.completed,
                emailsent=record.emails_sent,
            )
            session.add(row)
            try:
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Failed to insert tracking record",
                    extra={
                        "activity_id": record.activity_id,
                        "user_id": record.user_id,
                        "error": str(exc),
                    },
                )
                return None
            session.refresh(row)
            return row.id

    @staticmethod
    def update_sync(record: TrackingRecord) -> bool:
        if record.id is None:
            return False
        with SessionLocal() as session:
            try:
                updated = (
                    session.query(ReengagementInProgress)
                    .filter(ReengagementInProgress.id == record.id)
                    .update(
                        {
                            ReengagementInProgress.completiontime: record.completion_deadline,
                            ReengagementInProgress.emailtime: record.email_deadline,
                            ReengagementInProgress.completed: record.completed,
                            ReengagementInProgress.emailsent: record.emails_sent,
                        },
                        synchronize_session=False,
                    )
                )
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Failed to update tracking record",
                    extra={"record_id": record.id, "error": str(exc)},
                )
                return False
            return updated > 0

    @staticmethod
    def delete_sync(record_id: Optional[int]) -> bool:
        if record_id is None:
            return False
        with SessionLocal() as session:
            try:
                deleted = (
                    session.query(ReengagementInProgress)
                    .filter(ReengagementInProgress.id == record_id)
                    .delete(synchronize_session=False)
                )
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Failed to delete tracking record",
                    extra={"record_id": record_id, "error": str(exc)},
                )
                return False
            return deleted > 0
