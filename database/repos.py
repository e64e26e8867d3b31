"""
Repository Pattern para acesso ao banco
"""

import json
from typing import List, Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.config import settings
from core.telemetry import logger

from .models import Event, User, UserManager

# Configuração do engine
engine = create_engine(
    settings.DB_URL,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
    pool_recycle=3600,
    echo=False,
)

SessionLocal = sessionmaker(bind=engine)


class UserRepository:
    """Repository para operações com User"""

    @staticmethod
    def get_user_sync(user_id: int) -> Optional[User]:
        """Busca usuário ativo por ID"""
        with SessionLocal() as session:
            return (
                session.query(User)
                .filter(User.id == user_id, User.deleted.is_(False))
                .first()
            )

    @staticmethod
    def list_managers_sync(user_id: int) -> List[User]:
        """Lista gestores ativos de um usuário"""
        with SessionLocal() as session:
            return (
                session.query(User)
                .join(UserManager, UserManager.manager_id == User.id)
                .filter(UserManager.user_id == user_id, User.deleted.is_(False))
                .order_by(User.id)
                .all()
            )


class EventRepository:
    """Repository para eventos de auditoria"""

    @staticmethod
    def log_event_sync(
        event_type: str,
        *,
        object_id: Optional[int] = None,
        context_id: Optional[int] = None,
        related_user_id: Optional[int] = None,
        payload: Optional[dict] = None,
    ) -> Optional[Event]:
        """Registra evento; falhas são logadas e retornam None"""
        with SessionLocal() as session:
            event = Event(
                event_type=event_type,
                object_id=object_id,
                context_id=context_id,
                related_user_id=related_user_id,
                payload=json.dumps(payload or {}),
            )
            session.add(event)
            try:
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Failed to log event",
                    extra={"event_type": event_type, "error": str(exc)},
                )
                return None
            session.refresh(event)
            return event

    @staticmethod
    def list_events_sync(event_type: str) -> List[Event]:
        with SessionLocal() as session:
            return (
                session.query(Event)
                .filter(Event.event_type == event_type)
                .order_by(Event.id)
                .all()
            )
