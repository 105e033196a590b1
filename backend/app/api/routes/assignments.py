import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import TokenClaims, get_colegio_id, get_db, get_token_claims
from app.core.config import get_settings
from app.schemas.assignments import (
    AssignmentCountsResponse,
    WeeklyScheduleFilters,
    WeeklyScheduleResponse,
)
from app.schemas.proposal import (
    OkResponse,
    ProposalCreate,
    ProposalDetailResponse,
    ProposalGenerationResponse,
    ProposalListResponse,
    ProposalOut,
    ProposalResponse,
    ProposalStatusUpdate,
    ProposalUpdate,
)
from app.services.assignments import get_assignment_counts, get_weekly_schedule
from app.services.proposals import GenerationOutcome, ProposalService

router = APIRouter()
logger = logging.getLogger(__name__)

LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_int_or_default(raw: str | None, default: int) -> int:
    """Leading integer of ``raw``; unparseable or zero values fall back to ``default``."""
    match = LEADING_INT.match(raw or "")
    return (int(match.group(1)) if match else 0) or default


def get_proposal_service(db: Session = Depends(get_db)) -> ProposalService:
    return ProposalService(db)


def _generation_response(outcome: GenerationOutcome) -> ProposalGenerationResponse:
    return ProposalGenerationResponse(
        proposal=ProposalOut.model_validate(outcome.proposal),
        block_count=outcome.block_count,
        degraded_assignments=outcome.degraded_count,
    )


@router.get("/counts", response_model=AssignmentCountsResponse)
def read_counts(
    colegio_id: str = Depends(get_colegio_id),
    db: Session = Depends(get_db),
) -> AssignmentCountsResponse:
    return AssignmentCountsResponse(counts=get_assignment_counts(db, colegio_id))


@router.get("/schedule", response_model=WeeklyScheduleResponse)
def read_weekly_schedule(
    filters: Annotated[WeeklyScheduleFilters, Query()],
    colegio_id: str = Depends(get_colegio_id),
    db: Session = Depends(get_db),
) -> WeeklyScheduleResponse:
    return get_weekly_schedule(db, colegio_id, filters)


@router.get("/proposals", response_model=ProposalListResponse)
def list_proposals(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    colegio_id: str = Depends(get_colegio_id),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalListResponse:
    return service.list_proposals(
        colegio_id,
        page=parse_int_or_default(page, 1),
        limit=parse_int_or_default(limit, get_settings().proposal_list_default_limit),
    )


@router.get("/proposals/{proposal_id}", response_model=ProposalDetailResponse)
def read_proposal(
    proposal_id: str,
    colegio_id: str = Depends(get_colegio_id),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalDetailResponse:
    return service.get_proposal_detail(colegio_id, proposal_id)


@router.post("/proposals", response_model=ProposalGenerationResponse, status_code=status.HTTP_201_CREATED)
def create_proposal(
    payload: ProposalCreate,
    colegio_id: str = Depends(get_colegio_id),
    claims: TokenClaims = Depends(get_token_claims),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalGenerationResponse:
    logger.info(
        "PROPOSAL GENERATE START | colegio_id=%s | created_by=%s | name=%s",
        colegio_id,
        claims.subject,
        payload.name,
    )
    outcome = service.generate(
        colegio_id,
        created_by_id=claims.subject,
        name=payload.name,
        period_start=payload.period_start,
        period_end=payload.period_end,
        description=payload.description,
    )
    return _generation_response(outcome)


@router.post("/proposals/{proposal_id}/reroll", response_model=ProposalGenerationResponse)
def reroll_proposal(
    proposal_id: str,
    colegio_id: str = Depends(get_colegio_id),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalGenerationResponse:
    return _generation_response(service.reroll(colegio_id, proposal_id))


@router.patch("/proposals/{proposal_id}", response_model=ProposalResponse)
def update_proposal(
    proposal_id: str,
    payload: ProposalUpdate,
    colegio_id: str = Depends(get_colegio_id),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalResponse:
    proposal = service.update_metadata(colegio_id, proposal_id, payload.model_dump(exclude_unset=True))
    return ProposalResponse(proposal=ProposalOut.model_validate(proposal))


@router.patch("/proposals/{proposal_id}/status", response_model=ProposalResponse)
def update_proposal_status(
    proposal_id: str,
    payload: ProposalStatusUpdate,
    colegio_id: str = Depends(get_colegio_id),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalResponse:
    proposal = service.update_status(colegio_id, proposal_id, payload.status)
    return ProposalResponse(proposal=ProposalOut.model_validate(proposal))


@router.delete("/proposals/{proposal_id}", response_model=OkResponse)
def delete_proposal(
    proposal_id: str,
    colegio_id: str = Depends(get_colegio_id),
    service: ProposalService = Depends(get_proposal_service),
) -> OkResponse:
    service.delete(colegio_id, proposal_id)
    return OkResponse()
