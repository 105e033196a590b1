from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.models.course import Course
from app.models.course_subject import CourseSubject
from app.models.room import Room
from app.models.schedule_proposal import ScheduleProposal, ScheduleProposalBlock
from app.models.staff_member import StaffMember
from app.models.subject import Subject
from app.services.allocator import CourseSubjectPairing, ScheduleBlockDraft


class ProposalGateway:
    """Storage access for schedule proposals and their allocation inputs.

    Nothing here commits; the caller owns the transaction so that a proposal
    and its blocks are written or replaced as one unit.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def fetch_pairings(self, school_id: str) -> list[CourseSubjectPairing]:
        rows = self.db.execute(
            select(CourseSubject.id, CourseSubject.professor_id)
            .join(Course, Course.id == CourseSubject.course_id)
            .where(Course.school_id == school_id)
            .order_by(CourseSubject.created_at, CourseSubject.id)
        ).all()
        return [CourseSubjectPairing(course_subject_id=row[0], professor_id=row[1]) for row in rows]

    def fetch_rooms(self, school_id: str) -> list[str]:
        return list(
            self.db.execute(
                select(Room.id).where(Room.school_id == school_id).order_by(Room.name)
            ).scalars()
        )

    def find_proposal(self, school_id: str, proposal_id: str) -> ScheduleProposal | None:
        return self.db.execute(
            select(ScheduleProposal).where(
                ScheduleProposal.id == proposal_id,
                ScheduleProposal.school_id == school_id,
            )
        ).scalar_one_or_none()

    def persist_proposal(self, proposal: ScheduleProposal) -> ScheduleProposal:
        self.db.add(proposal)
        self.db.flush()
        return proposal

    def persist_blocks(self, proposal_id: str, blocks: Sequence[ScheduleBlockDraft]) -> None:
        self.db.add_all(
            ScheduleProposalBlock(
                proposal_id=proposal_id,
                professor_id=block.professor_id,
                course_subject_id=block.course_subject_id,
                room_id=block.room_id,
                weekday=block.weekday,
                start_time=block.start_time,
                end_time=block.end_time,
                notes=block.notes,
            )
            for block in blocks
        )
        self.db.flush()

    def delete_blocks(self, proposal_id: str) -> None:
        self.db.execute(delete(ScheduleProposalBlock).where(ScheduleProposalBlock.proposal_id == proposal_id))

    def delete_proposal(self, proposal: ScheduleProposal) -> None:
        self.delete_blocks(proposal.id)
        self.db.delete(proposal)
        self.db.flush()

    def count_proposals(self, school_id: str) -> int:
        return self.db.execute(
            select(func.count(ScheduleProposal.id)).where(ScheduleProposal.school_id == school_id)
        ).scalar_one()

    def list_proposal_rows(
        self,
        school_id: str,
        *,
        limit: int,
        offset: int,
    ) -> list[tuple[ScheduleProposal, int, StaffMember | None]]:
        block_counts = (
            select(
                ScheduleProposalBlock.proposal_id.label("proposal_id"),
                func.count(ScheduleProposalBlock.id).label("block_count"),
            )
            .group_by(ScheduleProposalBlock.proposal_id)
            .subquery()
        )
        rows = self.db.execute(
            select(ScheduleProposal, func.coalesce(block_counts.c.block_count, 0), StaffMember)
            .outerjoin(block_counts, block_counts.c.proposal_id == ScheduleProposal.id)
            .outerjoin(StaffMember, StaffMember.id == ScheduleProposal.created_by_id)
            .where(ScheduleProposal.school_id == school_id)
            .order_by(ScheduleProposal.created_at.desc(), ScheduleProposal.id)
            .limit(limit)
            .offset(offset)
        ).all()
        return [(row[0], int(row[1]), row[2]) for row in rows]

    def list_block_rows(self, proposal_id: str) -> list[tuple]:
        """Blocks of a proposal with display names, ordered by weekday and start."""
        return list(
            self.db.execute(
                select(
                    ScheduleProposalBlock,
                    Course.id,
                    Course.name,
                    Subject.name,
                    Room.name,
                    StaffMember,
                )
                .outerjoin(CourseSubject, CourseSubject.id == ScheduleProposalBlock.course_subject_id)
                .outerjoin(Course, Course.id == CourseSubject.course_id)
                .outerjoin(Subject, Subject.id == CourseSubject.subject_id)
                .outerjoin(Room, Room.id == ScheduleProposalBlock.room_id)
                .outerjoin(StaffMember, StaffMember.id == ScheduleProposalBlock.professor_id)
                .where(ScheduleProposalBlock.proposal_id == proposal_id)
                .order_by(
                    ScheduleProposalBlock.weekday,
                    ScheduleProposalBlock.start_time,
                    ScheduleProposalBlock.id,
                )
            ).all()
        )
