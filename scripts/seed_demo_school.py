"""Seed a demo school with rooms, staff, courses and course-subject pairings.

Run:
  PYTHONPATH=backend python scripts/seed_demo_school.py

Rooms are matched by name on re-runs; staff, courses and pairings are added
again each time. Prints an admin access token scoped to the seeded school so the proposal
endpoints can be exercised right away.
"""

from __future__ import annotations

from datetime import date
import os

from sqlalchemy import select

from app.core.security import create_access_token
from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.course import Course
from app.models.course_subject import CourseSubject
from app.models.room import Room
from app.models.school import School
from app.models.staff_member import StaffMember
from app.models.subject import Subject

SCHOOL_NAME = os.getenv("DEMO_SCHOOL_NAME", "Colegio Demo")
ROOM_NAMES = ["Sala 101", "Sala 102", "Sala 201", "Laboratorio"]
TEACHERS = [
    ("Ana", "Rojas", "Pérez"),
    ("Bruno", "Soto", None),
    ("Carla", "Muñoz", "Vera"),
]
ADMIN = ("Diego", "Fuentes", None)
COURSES = [("1° Básico A", "Básica"), ("2° Básico A", "Básica"), ("1° Medio A", "Media")]
SUBJECTS = ["Matemática", "Lenguaje", "Ciencias"]


def _get_or_create_school(db) -> School:
    school = db.execute(select(School).where(School.name == SCHOOL_NAME)).scalar_one_or_none()
    if school is None:
        school = School(name=SCHOOL_NAME)
        db.add(school)
        db.flush()
    return school


def _seed(db, school: School) -> StaffMember:
    existing_rooms = set(db.execute(select(Room.name).where(Room.school_id == school.id)).scalars())
    for name in ROOM_NAMES:
        if name not in existing_rooms:
            db.add(Room(school_id=school.id, name=name))

    admin = StaffMember(school_id=school.id, first_name=ADMIN[0], last_name=ADMIN[1], second_last_name=ADMIN[2])
    teachers = [
        StaffMember(school_id=school.id, first_name=first, last_name=last, second_last_name=second)
        for first, last, second in TEACHERS
    ]
    db.add_all([admin, *teachers])

    courses = [Course(school_id=school.id, name=name, level=level, year=date.today().year) for name, level in COURSES]
    subjects = [Subject(school_id=school.id, name=name) for name in SUBJECTS]
    db.add_all([*courses, *subjects])
    db.flush()

    for course_index, course in enumerate(courses):
        for subject_index, subject in enumerate(subjects):
            teacher = teachers[(course_index + subject_index) % len(teachers)]
            db.add(CourseSubject(course_id=course.id, subject_id=subject.id, professor_id=teacher.id))
    return admin


def main() -> None:
    ensure_runtime_schema_compatibility()
    db = SessionLocal()
    try:
        school = _get_or_create_school(db)
        admin = _seed(db, school)
        db.commit()
        school_id = school.id
        token = create_access_token(admin.id, colegio_id=school_id)
    finally:
        db.close()

    print(f"Seeded school {SCHOOL_NAME} ({school_id})")
    print(f"  rooms: {len(ROOM_NAMES)} | teachers: {len(TEACHERS)} | pairings: {len(COURSES) * len(SUBJECTS)}")
    print("Admin token:")
    print(f"  {token}")


if __name__ == "__main__":
    main()
