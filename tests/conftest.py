"""
Configuração global do pytest
"""

from contextlib import ExitStack
from dataclasses import replace
from typing import Generator
from unittest.mock import patch

import pytest
from fakeredis import FakeRedis
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.reengagement import (
    ActivityConfig,
    CompletionState,
    EmailPolicy,
    ReengagementReconciler,
)
from database.models import (
    Base,
    Course,
    CourseModuleCompletion,
    Enrolment,
    ReengagementActivity,
    User,
)

T0 = 1_700_000_000

SESSION_FACTORIES = (
    "database.repos.SessionLocal",
    "database.reengagement.activity_repo.SessionLocal",
    "database.reengagement.completion_repo.SessionLocal",
    "database.reengagement.enrolment_repo.SessionLocal",
    "database.reengagement.tracking_repo.SessionLocal",
)


class InMemoryStore:
    """Record store em memória com falhas de escrita configuráveis."""

    def __init__(self):
        self.activities = {}
        self.tracking = {}
        self.completions = {}
        self.fail_tracking_writes = set()
        self.fail_completion_writes = False
        self.history = []
        self._next_id = 1

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def add_activity(self, activity: ActivityConfig) -> None:
        self.activities[activity.id] = activity

    def find(self, activity_id: int, user_id: int):
        for record in self.tracking.values():
            if record.activity_id == activity_id and record.user_id == user_id:
                return record
        return None

    def get_activity(self, activity_id):
        return self.activities.get(activity_id)

    def list_tracking(self, activity_id):
        return [r for r in self.tracking.values() if r.activity_id == activity_id]

    def insert_tracking(self, record):
        if self.find(record.activity_id, record.user_id) is not None:
            return None
        record = replace(record, id=self._new_id())
        self.tracking[record.id] = record
        self.history.append(record)
        return record.id

    def update_tracking(self, record):
        if record.user_id in self.fail_tracking_writes or record.id not in self.tracking:
            return False
        self.tracking[record.id] = record
        self.history.append(record)
        return True

    def delete_tracking(self, record):
        if record.user_id in self.fail_tracking_writes:
            return False
        return self.tracking.pop(record.id, None) is not None

    def get_completion(self, course_module_id, user_id):
        return self.completions.get((course_module_id, user_id))

    def insert_completion(self, mark):
        if self.fail_completion_writes:
            return None
        key = (mark.course_module_id, mark.user_id)
        if key in self.completions:
            return None
        mark = replace(mark, id=self._new_id())
        self.completions[key] = mark
        return mark.id

    def update_completion(self, mark):
        if self.fail_completion_writes:
            return False
        self.completions[(mark.course_module_id, mark.user_id)] = mark
        return True


class FakeEnrolment:
    def __init__(self):
        self.unenrolled = set()

    def unenrol(self, user_id: int) -> None:
        self.unenrolled.add(user_id)

    def is_enrolled(self, activity, user_id):
        return user_id not in self.unenrolled


class FakeEligibility:
    """Elegíveis configurados, menos os já acompanhados ou concluídos."""

    def __init__(self, store: InMemoryStore, enrolment: FakeEnrolment):
        self.store = store
        self.enrolment = enrolment
        self.users = set()
        self.respect_tracking = True

    def start_candidates(self, activity):
        candidates = set()
        for user_id in self.users - self.enrolment.unenrolled:
            mark = self.store.get_completion(activity.course_module_id, user_id)
            if mark and mark.state is not CompletionState.INCOMPLETE:
                continue
            if self.respect_tracking and self.store.find(activity.id, user_id):
                continue
            candidates.add(user_id)
        return candidates


class RecordingNotifier:
    def __init__(self):
        self.emails = []
        self.events = []
        self.invalidations = []

    def send_email(self, activity, record):
        self.emails.append(record)

    def completion_changed(self, mark, activity, user_id):
        self.events.append((mark, user_id))

    def invalidate_completion_cache(self, user_id, course_id):
        self.invalidations.append((user_id, course_id))


@pytest.fixture
def make_activity():
    def _make(**overrides) -> ActivityConfig:
        values = {
            "id": 1,
            "course_id": 10,
            "course_module_id": 100,
            "duration_seconds": 3600,
            "email_delay_seconds": 600,
            "email_policy": EmailPolicy.NEVER,
            "reminder_limit": 1,
            "name": "Volte ao curso",
        }
        values.update(overrides)
        return ActivityConfig(**values)

    return _make


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def enrolment() -> FakeEnrolment:
    return FakeEnrolment()


@pytest.fixture
def eligibility(memory_store, enrolment) -> FakeEligibility:
    return FakeEligibility(memory_store, enrolment)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def reconciler(memory_store, enrolment, eligibility, notifier) -> ReengagementReconciler:
    return ReengagementReconciler(
        store=memory_store,
        enrolment=enrolment,
        eligibility=eligibility,
        notifier=notifier,
    )


@pytest.fixture(scope="session")
def db_engine():
    """Cria engine de teste"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Cria sessão de teste"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()

    # Mock SessionLocal para repositórios usarem a mesma sessão
    with ExitStack() as stack:
        for target in SESSION_FACTORIES:
            factory = stack.enter_context(patch(target))
            factory.return_value.__enter__ = lambda self: session
            factory.return_value.__exit__ = lambda self, *args: None

        yield session

    session.rollback()
    session.close()
    # Limpa todas as tabelas após cada teste
    Base.metadata.drop_all(db_engine)
    Base.metadata.create_all(db_engine)


@pytest.fixture(scope="function")
def fake_redis():
    """Cria instância fake do Redis para testes"""
    redis = FakeRedis(decode_responses=True)
    yield redis
    redis.flushall()


@pytest.fixture(scope="function")
def mock_redis_client(fake_redis):
    """Substitui o redis_client do estado de reengajamento"""
    with patch("core.reengagement.state.redis_client", fake_redis):
        yield fake_redis


@pytest.fixture(scope="function")
def sample_course(db_session) -> Course:
    course = Course(id=10, shortname="PY101", fullname="Python Fundamentals")
    db_session.add(course)
    db_session.commit()
    return course


@pytest.fixture(scope="function")
def sample_users(db_session):
    users = [
        User(id=1, email="ana@example.com", first_name="Ana", last_name="Souza"),
        User(id=2, email="bruno@example.com", first_name="Bruno", last_name="Lima"),
        User(id=3, email="carla@example.com", first_name="Carla", last_name="Dias"),
        User(
            id=4,
            email="removed@example.com",
            first_name="Removido",
            deleted=True,
        ),
    ]
    db_session.add_all(users)
    db_session.commit()
    return users


@pytest.fixture(scope="function")
def sample_enrolments(db_session, sample_course, sample_users):
    enrolments = [
        Enrolment(course_id=sample_course.id, user_id=user.id, status="active")
        for user in sample_users
    ]
    db_session.add_all(enrolments)
    db_session.commit()
    return enrolments


@pytest.fixture(scope="function")
def sample_activity(db_session, sample_course) -> ReengagementActivity:
    activity = ReengagementActivity(
        id=1,
        course_id=sample_course.id,
        course_module_id=100,
        name="Volte ao curso",
        duration=3600,
        emaildelay=600,
        emailuser=int(EmailPolicy.ON_COMPLETION),
        remindercount=2,
        emailrecipient=0,
        emailsubject="Olá %userfirstname%",
        emailcontent="Continue %coursefullname%",
        thirdpartyemails="tutor@example.com, , coord@example.com",
        is_active=True,
    )
    db_session.add(activity)
    db_session.commit()
    return activity


@pytest.fixture(scope="function")
def completed_mark(db_session, sample_users) -> CourseModuleCompletion:
    mark = CourseModuleCompletion(
        course_module_id=100,
        user_id=sample_users[2].id,
        completion_state=int(CompletionState.COMPLETE_PASS),
        viewed=1,
        time_modified=T0,
    )
    db_session.add(mark)
    db_session.commit()
    return mark
