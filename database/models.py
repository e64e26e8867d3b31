"""
SQLAlchemy Models
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    func,
)
from sqlalchemy.ext.declarative import declarative_base

Base = declarative_base()


class User(Base):
    """Modelo de Usuário"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(254), nullable=False)
    first_name = Column(String(128))
    last_name = Column(String(128))
    city = Column(String(120))
    institution = Column(String(255))
    department = Column(String(255))
    deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())


class UserManager(Base):
    """Relação usuário -> gestor (destinatário dos e-mails de gestor)"""

    __tablename__ = "user_managers"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    manager_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        Index("idx_user_manager_unique", "user_id", "manager_id", unique=True),
    )


class Course(Base):
    """Modelo de Curso"""

    __tablename__ = "courses"

    id = Column(Integer, primary_key=True)
    shortname = Column(String(255), nullable=False)
    fullname = Column(String(254), nullable=False)


class Enrolment(Base):
    """Matrícula de um usuário em um curso"""

    __tablename__ = "enrolments"

    id = Column(Integer, primary_key=True)
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status = Column(String(16), nullable=False, default="active")  # active, suspended
    time_start = Column(BigInteger, nullable=False, default=0)  # 0 = sem limite
    time_end = Column(BigInteger, nullable=False, default=0)  # 0 = sem limite

    __table_args__ = (
        Index("idx_enrolment_unique", "course_id", "user_id", unique=True),
    )


class ReengagementActivity(Base):
    """Instância de atividade de reengajamento em um curso"""

    __tablename__ = "reengagement"

    id = Column(Integer, primary_key=True)
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    course_module_id = Column(Integer, nullable=False, unique=True)
    name = Column(String(255), nullable=False, default="")
    duration = Column(Integer, nullable=False, default=604800)  # segundos
    emaildelay = Column(Integer, nullable=False, default=604800)  # segundos
    emailuser = Column(SmallInteger, nullable=False, default=0)  # EmailPolicy
    remindercount = Column(Integer, nullable=False, default=1)
    emailrecipient = Column(SmallInteger, nullable=False, default=0)  # RecipientPolicy
    emailsubject = Column(String(255))
    emailcontent = Column(Text)
    emailsubjectmanager = Column(String(255))
    emailcontentmanager = Column(Text)
    emailsubjectthirdparty = Column(String(255))
    emailcontentthirdparty = Column(Text)
    thirdpartyemails = Column(Text)  # separados por vírgula
    suppresstarget = Column(Integer)  # course_module_id alvo
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    __table_args__ = (Index("idx_reengagement_course", "course_id", "is_active"),)


class ReengagementInProgress(Base):
    """Registro de acompanhamento (um por usuário por atividade)"""

    __tablename__ = "reengagement_inprogress"

    id = Column(Integer, primary_key=True)
    reengagement_id = Column(
        Integer, ForeignKey("reengagement.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    completiontime = Column(BigInteger, nullable=False)
    emailtime = Column(BigInteger, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    emailsent = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index(
            "idx_reengagement_inprogress_unique",
            "reengagement_id",
            "user_id",
            unique=True,
        ),
        Index("idx_reengagement_inprogress_completion", "completiontime"),
        Index("idx_reengagement_inprogress_email", "emailtime"),
    )


class CourseModuleCompletion(Base):
    """Marca de conclusão de módulo (compartilhada com o subsistema de conclusão)"""

    __tablename__ = "course_modules_completion"

    id = Column(Integer, primary_key=True)
    course_module_id = Column(Integer, nullable=False)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    completion_state = Column(SmallInteger, nullable=False, default=0)
    viewed = Column(SmallInteger, nullable=False, default=0)
    override_by = Column(Integer)
    time_modified = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index(
            "idx_course_module_completion_unique",
            "course_module_id",
            "user_id",
            unique=True,
        ),
    )


class Event(Base):
    """Modelo de Evento/Log"""

    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    event_type = Column(String(64), nullable=False, index=True)
    object_id = Column(Integer)
    context_id = Column(Integer)
    related_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    payload = Column(String(2048))
    created_at = Column(DateTime, server_default=func.now(), index=True)
