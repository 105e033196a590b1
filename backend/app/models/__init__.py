from app.models.class_schedule import ClassSchedule  # noqa: F401
from app.models.course import Course  # noqa: F401
from app.models.course_subject import CourseSubject  # noqa: F401
from app.models.room import Room  # noqa: F401
from app.models.schedule_proposal import (  # noqa: F401
    ProposalStatus,
    ScheduleProposal,
    ScheduleProposalBlock,
)
from app.models.school import School  # noqa: F401
from app.models.staff_member import StaffMember  # noqa: F401
from app.models.subject import Subject  # noqa: F401
