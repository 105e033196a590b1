from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
import logging
import math
import random
from time import perf_counter
from typing import Any

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from app.core.config import get_settings
from app.core.exceptions import ImmutableProposalError, NotFoundError, ValidationError
from app.models.schedule_proposal import ProposalStatus, ScheduleProposal
from app.schemas.proposal import (
    Pagination,
    ProposalBlockOut,
    ProposalDetailResponse,
    ProposalListItem,
    ProposalListResponse,
    ProposalOut,
)
from app.services.allocator import AllocationResult, build_schedule_blocks
from app.services.proposal_gateway import ProposalGateway

logger = logging.getLogger(__name__)

PROPOSAL_NOT_FOUND = "Schedule proposal not found"
ALLOWED_STATUSES = tuple(item.value for item in ProposalStatus)


@dataclass
class GenerationOutcome:
    proposal: ScheduleProposal
    block_count: int
    degraded_count: int


@lru_cache
def get_shared_rng() -> random.Random:
    """Process-wide generator, seeded once from `proposal_random_seed`.

    Successive generate and reroll calls draw from one sequence, so a reroll
    never replays the allocation it replaces even when a seed is configured.
    """
    return random.Random(get_settings().proposal_random_seed)


def parse_period_date(value: date | str, message: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError as exc:
        raise ValidationError(message, details={"value": raw}) from exc


def ensure_period_order(period_start: date, period_end: date) -> None:
    if period_end < period_start:
        raise ValidationError(
            "Period end cannot be earlier than period start",
            details={"periodoInicio": period_start.isoformat(), "periodoFin": period_end.isoformat()},
        )


def clean_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValidationError("Proposal name cannot be blank")
    return name


def clean_description(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def clamp_pagination(page: int | None, limit: int | None) -> tuple[int, int]:
    settings = get_settings()
    safe_limit = limit if limit is not None else settings.proposal_list_default_limit
    safe_limit = min(max(1, safe_limit), settings.proposal_list_max_limit)
    safe_page = max(1, page or 1)
    return safe_page, safe_limit


class ProposalService:
    """Generation, reroll, editing and status changes of schedule proposals.

    Every lookup is scoped to the caller's school; a proposal owned by
    another school is reported exactly like a missing one.
    """

    def __init__(self, db: Session, *, rng: random.Random | None = None) -> None:
        self.db = db
        self.gateway = ProposalGateway(db)
        self.rng = rng if rng is not None else get_shared_rng()

    def _get_proposal(self, school_id: str, proposal_id: str) -> ScheduleProposal:
        proposal = self.gateway.find_proposal(school_id, proposal_id)
        if proposal is None:
            raise NotFoundError(PROPOSAL_NOT_FOUND)
        return proposal

    def _allocate(self, school_id: str) -> AllocationResult:
        room_ids = self.gateway.fetch_rooms(school_id)
        if not room_ids:
            raise ValidationError("No rooms registered for this school")
        pairings = self.gateway.fetch_pairings(school_id)
        return build_schedule_blocks(pairings, room_ids, rng=self.rng)

    def generate(
        self,
        school_id: str,
        *,
        created_by_id: str | None,
        name: str,
        period_start: date | str,
        period_end: date | str,
        description: str | None = None,
    ) -> GenerationOutcome:
        started = perf_counter()
        start = parse_period_date(period_start, "Invalid proposal dates")
        end = parse_period_date(period_end, "Invalid proposal dates")
        ensure_period_order(start, end)
        cleaned_name = clean_name(name)

        allocation = self._allocate(school_id)
        proposal = ScheduleProposal(
            school_id=school_id,
            name=cleaned_name,
            period_start=start,
            period_end=end,
            status=ProposalStatus.draft,
            description=clean_description(description),
            created_by_id=created_by_id,
        )
        try:
            self.gateway.persist_proposal(proposal)
            if allocation.blocks:
                self.gateway.persist_blocks(proposal.id, allocation.blocks)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("PROPOSAL GENERATE FAILED | colegio_id=%s | name=%s", school_id, cleaned_name)
            raise
        self.db.refresh(proposal)

        logger.info(
            "PROPOSAL GENERATE COMPLETE | colegio_id=%s | proposal_id=%s | blocks=%s | degraded=%s | wall_ms=%s",
            school_id,
            proposal.id,
            len(allocation.blocks),
            allocation.degraded_count,
            int((perf_counter() - started) * 1000),
        )
        return GenerationOutcome(
            proposal=proposal,
            block_count=len(allocation.blocks),
            degraded_count=allocation.degraded_count,
        )

    def reroll(self, school_id: str, proposal_id: str) -> GenerationOutcome:
        started = perf_counter()
        proposal = self._get_proposal(school_id, proposal_id)
        if proposal.status == ProposalStatus.approved:
            raise ImmutableProposalError("Cannot reroll a proposal that is already approved")

        allocation = self._allocate(school_id)
        # Old and new blocks swap inside one transaction; readers never see an empty proposal.
        try:
            self.gateway.delete_blocks(proposal.id)
            if allocation.blocks:
                self.gateway.persist_blocks(proposal.id, allocation.blocks)
            proposal.updated_at = func.now()
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("PROPOSAL REROLL FAILED | colegio_id=%s | proposal_id=%s", school_id, proposal_id)
            raise
        self.db.refresh(proposal)

        logger.info(
            "PROPOSAL REROLL COMPLETE | colegio_id=%s | proposal_id=%s | blocks=%s | degraded=%s | wall_ms=%s",
            school_id,
            proposal.id,
            len(allocation.blocks),
            allocation.degraded_count,
            int((perf_counter() - started) * 1000),
        )
        return GenerationOutcome(
            proposal=proposal,
            block_count=len(allocation.blocks),
            degraded_count=allocation.degraded_count,
        )

    def update_metadata(self, school_id: str, proposal_id: str, changes: Mapping[str, Any]) -> ScheduleProposal:
        """Apply the provided fields only; absent keys leave the stored value."""
        proposal = self._get_proposal(school_id, proposal_id)
        if proposal.status == ProposalStatus.approved:
            raise ImmutableProposalError("Approved proposals cannot be edited")

        try:
            if changes.get("name"):
                proposal.name = clean_name(changes["name"])
            if "description" in changes:
                proposal.description = clean_description(changes["description"])
            if changes.get("period_start"):
                proposal.period_start = parse_period_date(changes["period_start"], "Invalid period start date")
            if changes.get("period_end"):
                proposal.period_end = parse_period_date(changes["period_end"], "Invalid period end date")
            ensure_period_order(proposal.period_start, proposal.period_end)
        except ValidationError:
            self.db.rollback()
            raise

        self.db.commit()
        self.db.refresh(proposal)
        logger.info(
            "PROPOSAL UPDATED | colegio_id=%s | proposal_id=%s | fields=%s",
            school_id,
            proposal.id,
            ",".join(sorted(changes)),
        )
        return proposal

    def update_status(self, school_id: str, proposal_id: str, status: str) -> ScheduleProposal:
        proposal = self._get_proposal(school_id, proposal_id)
        normalized = (status or "").strip().lower()
        if normalized not in ALLOWED_STATUSES:
            raise ValidationError("Invalid proposal status", details={"allowed": list(ALLOWED_STATUSES)})

        previous = proposal.status
        proposal.status = ProposalStatus(normalized)
        self.db.commit()
        self.db.refresh(proposal)
        logger.info(
            "PROPOSAL STATUS CHANGED | colegio_id=%s | proposal_id=%s | from=%s | to=%s",
            school_id,
            proposal.id,
            previous.value,
            proposal.status.value,
        )
        return proposal

    def delete(self, school_id: str, proposal_id: str) -> None:
        proposal = self._get_proposal(school_id, proposal_id)
        if proposal.status == ProposalStatus.approved:
            raise ImmutableProposalError("Approved proposals cannot be deleted")
        try:
            self.gateway.delete_proposal(proposal)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("PROPOSAL DELETE FAILED | colegio_id=%s | proposal_id=%s", school_id, proposal_id)
            raise
        logger.info("PROPOSAL DELETED | colegio_id=%s | proposal_id=%s", school_id, proposal_id)

    def list_proposals(self, school_id: str, page: int | None = 1, limit: int | None = None) -> ProposalListResponse:
        safe_page, safe_limit = clamp_pagination(page, limit)
        total = self.gateway.count_proposals(school_id)
        rows = self.gateway.list_proposal_rows(
            school_id,
            limit=safe_limit,
            offset=(safe_page - 1) * safe_limit,
        )
        items = [
            ProposalListItem(
                id=proposal.id,
                name=proposal.name,
                status=proposal.status,
                description=proposal.description,
                period_start=proposal.period_start,
                period_end=proposal.period_end,
                created_at=proposal.created_at,
                updated_at=proposal.updated_at,
                block_count=block_count,
                created_by_name=creator.full_name if creator is not None else None,
            )
            for proposal, block_count, creator in rows
        ]
        return ProposalListResponse(
            items=items,
            pagination=Pagination(
                total=total,
                page=safe_page,
                limit=safe_limit,
                total_pages=math.ceil(total / safe_limit),
            ),
        )

    def get_proposal_detail(self, school_id: str, proposal_id: str) -> ProposalDetailResponse:
        proposal = self._get_proposal(school_id, proposal_id)
        items = []
        for block, course_id, course_name, subject_name, room_name, professor in self.gateway.list_block_rows(proposal.id):
            items.append(
                ProposalBlockOut(
                    id=block.id,
                    professor_id=block.professor_id,
                    professor_full_name=professor.full_name if professor is not None else None,
                    course_subject_id=block.course_subject_id,
                    course_id=course_id,
                    course_name=course_name,
                    subject_name=subject_name,
                    room_id=block.room_id,
                    room_name=room_name,
                    weekday=block.weekday,
                    start_time=block.start_time,
                    end_time=block.end_time,
                    notes=block.notes,
                )
            )
        return ProposalDetailResponse(proposal=ProposalOut.model_validate(proposal), items=items)
