from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.models.class_schedule import ClassSchedule
from app.models.course import Course
from app.models.course_subject import CourseSubject
from app.models.room import Room
from app.models.staff_member import StaffMember
from app.models.subject import Subject
from app.schemas.assignments import (
    AppliedFilters,
    AssignmentCounts,
    WeeklyBlockOut,
    WeeklyDayOut,
    WeeklyScheduleFilters,
    WeeklyScheduleResponse,
)
from app.services.slot_catalog import DAY_OPTIONS, day_name, format_time_with_seconds, time_to_minutes


def get_assignment_counts(db: Session, school_id: str) -> AssignmentCounts:
    total_blocks = db.execute(
        select(func.count(ClassSchedule.id))
        .join(CourseSubject, CourseSubject.id == ClassSchedule.course_subject_id)
        .join(Course, Course.id == CourseSubject.course_id)
        .where(Course.school_id == school_id)
    ).scalar_one()
    professors_assigned = db.execute(
        select(func.count(func.distinct(CourseSubject.professor_id)))
        .join(Course, Course.id == CourseSubject.course_id)
        .where(Course.school_id == school_id)
    ).scalar_one()
    subjects_scheduled = db.execute(
        select(func.count(func.distinct(CourseSubject.subject_id)))
        .join(Course, Course.id == CourseSubject.course_id)
        .where(Course.school_id == school_id)
    ).scalar_one()
    courses_with_schedule = db.execute(
        select(func.count(func.distinct(Course.id)))
        .join(CourseSubject, CourseSubject.course_id == Course.id)
        .join(ClassSchedule, ClassSchedule.course_subject_id == CourseSubject.id)
        .where(Course.school_id == school_id)
    ).scalar_one()
    return AssignmentCounts(
        total_blocks=total_blocks,
        professors_assigned=professors_assigned,
        subjects_scheduled=subjects_scheduled,
        courses_with_schedule=courses_with_schedule,
    )


def get_weekly_schedule(
    db: Session,
    school_id: str,
    filters: WeeklyScheduleFilters | None = None,
) -> WeeklyScheduleResponse:
    criteria = filters or WeeklyScheduleFilters()
    if criteria.time_from and criteria.time_to:
        if time_to_minutes(criteria.time_from) >= time_to_minutes(criteria.time_to):
            raise ValidationError("Time range must have horaDesde earlier than horaHasta")

    query = (
        select(ClassSchedule, Room.name, CourseSubject, Course, Subject.name, StaffMember)
        .join(CourseSubject, CourseSubject.id == ClassSchedule.course_subject_id)
        .join(Course, Course.id == CourseSubject.course_id)
        .join(Subject, Subject.id == CourseSubject.subject_id)
        .join(StaffMember, StaffMember.id == CourseSubject.professor_id)
        .outerjoin(Room, Room.id == ClassSchedule.room_id)
        .where(Course.school_id == school_id, ClassSchedule.weekday.between(1, 5))
    )
    if criteria.course_id:
        query = query.where(Course.id == criteria.course_id)
    if criteria.subject_id:
        query = query.where(Subject.id == criteria.subject_id)
    if criteria.professor_id:
        query = query.where(CourseSubject.professor_id == criteria.professor_id)
    if criteria.room_id:
        query = query.where(ClassSchedule.room_id == criteria.room_id)
    if criteria.weekday:
        query = query.where(ClassSchedule.weekday == criteria.weekday)
    if criteria.time_from:
        query = query.where(ClassSchedule.start_time >= format_time_with_seconds(criteria.time_from))
    if criteria.time_to:
        query = query.where(ClassSchedule.end_time <= format_time_with_seconds(criteria.time_to))
    query = query.order_by(ClassSchedule.weekday, ClassSchedule.start_time, ClassSchedule.end_time)

    blocks = [
        WeeklyBlockOut(
            schedule_id=entry.id,
            weekday=entry.weekday,
            start_time=entry.start_time,
            end_time=entry.end_time,
            room_id=entry.room_id,
            room_name=room_name,
            course_subject_id=course_subject.id,
            course_id=course.id,
            course_name=course.name,
            course_level=course.level,
            subject_id=course_subject.subject_id,
            subject_name=subject_name,
            professor_id=professor.id,
            professor_full_name=professor.full_name,
        )
        for entry, room_name, course_subject, course, subject_name, professor in db.execute(query).all()
    ]

    days = [
        WeeklyDayOut(
            weekday=weekday,
            name=day_name(weekday),
            blocks=[block for block in blocks if block.weekday == weekday],
        )
        for weekday in DAY_OPTIONS
    ]
    return WeeklyScheduleResponse(
        days=days,
        total_blocks=len(blocks),
        applied_filters=AppliedFilters(**criteria.model_dump()),
    )
