import os

# The app engine is built at import time; keep it off any real database during tests.
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"

from dataclasses import dataclass, field  # noqa: E402
from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Course, CourseSubject, Room, School, StaffMember, Subject  # noqa: E402


@dataclass
class SeededSchool:
    school_id: str
    admin_id: str
    room_ids: list[str] = field(default_factory=list)
    professor_ids: list[str] = field(default_factory=list)
    course_ids: list[str] = field(default_factory=list)
    subject_ids: list[str] = field(default_factory=list)
    course_subject_ids: list[str] = field(default_factory=list)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def school_factory(db_session):
    """Create a school with ``rooms`` rooms and ``pairings`` course-subject pairings.

    Pairings are spread over ``professors`` teachers (one teacher per pairing
    when omitted) inside a single course.
    """

    def create(*, name: str = "Colegio Uno", rooms: int = 2, pairings: int = 3, professors: int | None = None):
        school = School(name=name)
        db_session.add(school)
        db_session.flush()

        admin = StaffMember(school_id=school.id, first_name="Admin", last_name="Escolar", second_last_name=None)
        db_session.add(admin)

        room_rows = [Room(school_id=school.id, name=f"Sala {index + 1:02d}") for index in range(rooms)]
        teacher_rows = [
            StaffMember(school_id=school.id, first_name=f"Profe{index + 1}", last_name="Docente", second_last_name="Uno")
            for index in range(professors if professors is not None else max(pairings, 1))
        ]
        course = Course(school_id=school.id, name="1° Medio A", level="Media", year=date.today().year)
        subject_rows = [Subject(school_id=school.id, name=f"Materia {index + 1}") for index in range(pairings)]
        db_session.add_all([*room_rows, *teacher_rows, course, *subject_rows])
        db_session.flush()

        pairing_rows = [
            CourseSubject(
                course_id=course.id,
                subject_id=subject.id,
                professor_id=teacher_rows[index % len(teacher_rows)].id,
            )
            for index, subject in enumerate(subject_rows)
        ]
        db_session.add_all(pairing_rows)
        db_session.commit()

        return SeededSchool(
            school_id=school.id,
            admin_id=admin.id,
            room_ids=[room.id for room in room_rows],
            professor_ids=[teacher.id for teacher in teacher_rows],
            course_ids=[course.id],
            subject_ids=[subject.id for subject in subject_rows],
            course_subject_ids=[pairing.id for pairing in pairing_rows],
        )

    return create


@pytest.fixture()
def auth_headers():
    def build(colegio_id: str | None, subject: str = "admin-user") -> dict[str, str]:
        token = create_access_token(subject, colegio_id=colegio_id)
        return {"Authorization": f"Bearer {token}"}

    return build
