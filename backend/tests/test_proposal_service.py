from datetime import date
import random

import pytest
from sqlalchemy import func, select

from app.core.exceptions import ImmutableProposalError, NotFoundError, ValidationError
from app.models.schedule_proposal import ProposalStatus, ScheduleProposal, ScheduleProposalBlock
from app.core.config import get_settings
from app.services.proposal_gateway import ProposalGateway
from app.services.proposals import ProposalService, clamp_pagination, get_shared_rng, parse_period_date


def _service(db_session, seed: int = 7) -> ProposalService:
    return ProposalService(db_session, rng=random.Random(seed))


def _generate(service, seeded, **overrides):
    params = {
        "created_by_id": seeded.admin_id,
        "name": "Propuesta Marzo",
        "period_start": "2026-03-01",
        "period_end": "2026-07-31",
        "description": "Primer semestre",
    }
    params.update(overrides)
    return service.generate(seeded.school_id, **params)


def _block_ids(db_session, proposal_id: str) -> set[str]:
    return set(
        db_session.execute(
            select(ScheduleProposalBlock.id).where(ScheduleProposalBlock.proposal_id == proposal_id)
        ).scalars()
    )


def _count(db_session, model) -> int:
    return db_session.execute(select(func.count()).select_from(model)).scalar_one()


def test_generate_creates_draft_with_one_block_per_pairing(db_session, school_factory):
    seeded = school_factory(rooms=2, pairings=3)
    outcome = _generate(_service(db_session), seeded)

    assert outcome.proposal.status == ProposalStatus.draft
    assert outcome.proposal.period_start == date(2026, 3, 1)
    assert outcome.proposal.created_by_id == seeded.admin_id
    assert outcome.block_count == 3
    assert outcome.degraded_count == 0

    blocks = db_session.execute(
        select(ScheduleProposalBlock).where(ScheduleProposalBlock.proposal_id == outcome.proposal.id)
    ).scalars().all()
    assert {block.course_subject_id for block in blocks} == set(seeded.course_subject_ids)
    assert len({(block.room_id, block.weekday, block.start_time) for block in blocks}) == 3
    assert len({(block.professor_id, block.weekday, block.start_time) for block in blocks}) == 3
    assert all(block.room_id in seeded.room_ids for block in blocks)


def test_generate_without_pairings_creates_empty_proposal(db_session, school_factory):
    seeded = school_factory(rooms=1, pairings=0)
    outcome = _generate(_service(db_session), seeded)

    assert outcome.block_count == 0
    assert _block_ids(db_session, outcome.proposal.id) == set()


def test_generate_without_rooms_persists_nothing(db_session, school_factory):
    seeded = school_factory(rooms=0, pairings=2)

    with pytest.raises(ValidationError, match="No rooms"):
        _generate(_service(db_session), seeded)

    assert _count(db_session, ScheduleProposal) == 0


def test_generate_rejects_inverted_period_and_persists_nothing(db_session, school_factory):
    seeded = school_factory()

    with pytest.raises(ValidationError, match="Period end cannot be earlier"):
        _generate(_service(db_session), seeded, period_start="2026-08-01", period_end="2026-03-01")

    assert _count(db_session, ScheduleProposal) == 0
    assert _count(db_session, ScheduleProposalBlock) == 0


def test_generate_rejects_unparseable_dates(db_session, school_factory):
    seeded = school_factory()

    with pytest.raises(ValidationError, match="Invalid proposal dates"):
        _generate(_service(db_session), seeded, period_start="marzo")


def test_generate_over_capacity_reports_degraded_assignments(db_session, school_factory):
    seeded = school_factory(rooms=1, pairings=46)
    outcome = _generate(_service(db_session), seeded)

    assert outcome.block_count == 46
    assert outcome.degraded_count == 1


def test_reroll_replaces_every_block(db_session, school_factory):
    seeded = school_factory(rooms=2, pairings=4)
    service = _service(db_session)
    outcome = _generate(service, seeded)
    before = _block_ids(db_session, outcome.proposal.id)

    rerolled = service.reroll(seeded.school_id, outcome.proposal.id)
    after = _block_ids(db_session, outcome.proposal.id)

    assert rerolled.proposal.id == outcome.proposal.id
    assert rerolled.block_count == 4
    assert len(after) == 4
    assert before.isdisjoint(after)


def test_failed_reroll_keeps_previous_blocks(db_session, school_factory, monkeypatch):
    seeded = school_factory(rooms=2, pairings=3)
    service = _service(db_session)
    outcome = _generate(service, seeded)
    before = _block_ids(db_session, outcome.proposal.id)

    def _fail_insert(self, proposal_id, blocks):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(ProposalGateway, "persist_blocks", _fail_insert)

    with pytest.raises(RuntimeError, match="insert failed"):
        service.reroll(seeded.school_id, outcome.proposal.id)

    assert len(before) == 3
    assert _block_ids(db_session, outcome.proposal.id) == before


def test_reroll_of_approved_proposal_is_rejected_and_blocks_survive(db_session, school_factory):
    seeded = school_factory(rooms=2, pairings=3)
    service = _service(db_session)
    outcome = _generate(service, seeded)
    service.update_status(seeded.school_id, outcome.proposal.id, "approved")
    before = _block_ids(db_session, outcome.proposal.id)

    with pytest.raises(ImmutableProposalError):
        service.reroll(seeded.school_id, outcome.proposal.id)

    assert _block_ids(db_session, outcome.proposal.id) == before


def test_reroll_is_scoped_to_school(db_session, school_factory):
    first = school_factory(name="Colegio Uno")
    second = school_factory(name="Colegio Dos")
    service = _service(db_session)
    outcome = _generate(service, first)

    with pytest.raises(NotFoundError):
        service.reroll(second.school_id, outcome.proposal.id)
    with pytest.raises(NotFoundError):
        service.get_proposal_detail(second.school_id, outcome.proposal.id)
    with pytest.raises(NotFoundError):
        service.update_status(second.school_id, outcome.proposal.id, "approved")


def test_update_status_normalizes_case(db_session, school_factory):
    seeded = school_factory()
    service = _service(db_session)
    outcome = _generate(service, seeded)

    proposal = service.update_status(seeded.school_id, outcome.proposal.id, "  Rejected ")
    assert proposal.status == ProposalStatus.rejected


def test_invalid_status_leaves_stored_status(db_session, school_factory):
    seeded = school_factory()
    service = _service(db_session)
    outcome = _generate(service, seeded)

    with pytest.raises(ValidationError) as excinfo:
        service.update_status(seeded.school_id, outcome.proposal.id, "archived")

    assert excinfo.value.details == {"allowed": ["draft", "approved", "rejected"]}
    db_session.expire_all()
    stored = db_session.get(ScheduleProposal, outcome.proposal.id)
    assert stored.status == ProposalStatus.draft


def test_approved_proposal_can_return_to_draft(db_session, school_factory):
    seeded = school_factory()
    service = _service(db_session)
    outcome = _generate(service, seeded)
    service.update_status(seeded.school_id, outcome.proposal.id, "approved")

    proposal = service.update_status(seeded.school_id, outcome.proposal.id, "draft")
    assert proposal.status == ProposalStatus.draft


def test_update_metadata_applies_only_given_fields(db_session, school_factory):
    seeded = school_factory()
    service = _service(db_session)
    outcome = _generate(service, seeded)

    proposal = service.update_metadata(seeded.school_id, outcome.proposal.id, {"name": "  Propuesta Abril  "})
    assert proposal.name == "Propuesta Abril"
    assert proposal.description == "Primer semestre"
    assert proposal.period_end == date(2026, 7, 31)

    proposal = service.update_metadata(seeded.school_id, outcome.proposal.id, {"description": None})
    assert proposal.description is None

    proposal = service.update_metadata(seeded.school_id, outcome.proposal.id, {"period_end": "2026-12-15T00:00:00"})
    assert proposal.period_end == date(2026, 12, 15)


def test_update_metadata_rejects_inverted_period(db_session, school_factory):
    seeded = school_factory()
    service = _service(db_session)
    outcome = _generate(service, seeded)

    with pytest.raises(ValidationError):
        service.update_metadata(seeded.school_id, outcome.proposal.id, {"period_end": "2026-01-01"})

    db_session.expire_all()
    stored = db_session.get(ScheduleProposal, outcome.proposal.id)
    assert stored.period_end == date(2026, 7, 31)


@pytest.mark.parametrize(
    ("field", "message"),
    [("period_start", "Invalid period start date"), ("period_end", "Invalid period end date")],
)
def test_update_metadata_rejects_impossible_dates(db_session, school_factory, field, message):
    seeded = school_factory()
    service = _service(db_session)
    outcome = _generate(service, seeded)

    with pytest.raises(ValidationError, match=message):
        service.update_metadata(
            seeded.school_id,
            outcome.proposal.id,
            {"name": "Propuesta Nueva", field: "2026-02-30"},
        )

    db_session.expire_all()
    stored = db_session.get(ScheduleProposal, outcome.proposal.id)
    assert stored.name == "Propuesta Marzo"
    assert stored.period_start == date(2026, 3, 1)
    assert stored.period_end == date(2026, 7, 31)


def test_update_metadata_rejects_blank_name(db_session, school_factory):
    seeded = school_factory()
    service = _service(db_session)
    outcome = _generate(service, seeded)

    with pytest.raises(ValidationError, match="blank"):
        service.update_metadata(seeded.school_id, outcome.proposal.id, {"name": "   "})


def test_approved_proposal_cannot_be_edited_or_deleted(db_session, school_factory):
    seeded = school_factory()
    service = _service(db_session)
    outcome = _generate(service, seeded)
    service.update_status(seeded.school_id, outcome.proposal.id, "approved")

    with pytest.raises(ImmutableProposalError):
        service.update_metadata(seeded.school_id, outcome.proposal.id, {"name": "Otra propuesta"})
    with pytest.raises(ImmutableProposalError):
        service.delete(seeded.school_id, outcome.proposal.id)


def test_delete_removes_proposal_and_blocks(db_session, school_factory):
    seeded = school_factory(pairings=3)
    service = _service(db_session)
    outcome = _generate(service, seeded)
    proposal_id = outcome.proposal.id

    service.delete(seeded.school_id, proposal_id)

    assert _count(db_session, ScheduleProposal) == 0
    assert _block_ids(db_session, proposal_id) == set()
    with pytest.raises(NotFoundError):
        service.get_proposal_detail(seeded.school_id, proposal_id)


def test_list_proposals_paginates_and_counts_blocks(db_session, school_factory):
    seeded = school_factory(pairings=2)
    other = school_factory(name="Colegio Dos", pairings=1)
    service = _service(db_session)
    for index in range(3):
        _generate(service, seeded, name=f"Propuesta {index + 1}")
    _generate(service, other, created_by_id=other.admin_id)

    first_page = service.list_proposals(seeded.school_id, page=1, limit=2)
    second_page = service.list_proposals(seeded.school_id, page=2, limit=2)

    assert first_page.pagination.total == 3
    assert first_page.pagination.total_pages == 2
    assert len(first_page.items) == 2
    assert len(second_page.items) == 1
    all_items = [*first_page.items, *second_page.items]
    assert {item.name for item in all_items} == {"Propuesta 1", "Propuesta 2", "Propuesta 3"}
    assert all(item.block_count == 2 for item in all_items)
    assert all(item.created_by_name == "Admin Escolar " for item in all_items)


def test_list_proposals_empty_school(db_session, school_factory):
    seeded = school_factory()
    response = _service(db_session).list_proposals(seeded.school_id)

    assert response.items == []
    assert response.pagination.total == 0
    assert response.pagination.total_pages == 0
    assert response.pagination.limit == 20


def test_detail_lists_blocks_in_week_order(db_session, school_factory):
    seeded = school_factory(rooms=2, pairings=6, professors=2)
    service = _service(db_session)
    outcome = _generate(service, seeded)

    detail = service.get_proposal_detail(seeded.school_id, outcome.proposal.id)

    assert detail.proposal.id == outcome.proposal.id
    assert len(detail.items) == 6
    keys = [(item.weekday, item.start_time) for item in detail.items]
    assert keys == sorted(keys)
    first = detail.items[0]
    assert first.course_name == "1° Medio A"
    assert first.subject_name.startswith("Materia ")
    assert first.room_name.startswith("Sala ")
    assert first.professor_full_name.startswith("Profe")
    assert first.notes == "Generado automáticamente"


@pytest.mark.parametrize(
    ("page", "limit", "expected"),
    [
        (None, None, (1, 20)),
        (0, 0, (1, 1)),
        (-3, 5000, (1, 200)),
        (4, 50, (4, 50)),
    ],
)
def test_clamp_pagination(page, limit, expected):
    assert clamp_pagination(page, limit) == expected


def test_parse_period_date_accepts_datetimes():
    assert parse_period_date("2026-03-01", "bad") == date(2026, 3, 1)
    assert parse_period_date("2026-03-01T10:30:00", "bad") == date(2026, 3, 1)
    with pytest.raises(ValidationError, match="bad"):
        parse_period_date("", "bad")


@pytest.fixture()
def seeded_shared_rng(monkeypatch):
    monkeypatch.setattr(get_settings(), "proposal_random_seed", 1234)
    get_shared_rng.cache_clear()
    yield
    get_shared_rng.cache_clear()


def test_services_share_one_generator(db_session, seeded_shared_rng):
    assert ProposalService(db_session).rng is ProposalService(db_session).rng


def test_seeded_reroll_does_not_replay_previous_allocation(db_session, school_factory, seeded_shared_rng):
    seeded = school_factory(rooms=2, pairings=4)

    def _layout(proposal_id):
        rows = db_session.execute(
            select(
                ScheduleProposalBlock.course_subject_id,
                ScheduleProposalBlock.room_id,
                ScheduleProposalBlock.weekday,
                ScheduleProposalBlock.start_time,
            ).where(ScheduleProposalBlock.proposal_id == proposal_id)
        ).all()
        return {tuple(row) for row in rows}

    outcome = _generate(ProposalService(db_session), seeded)
    first = _layout(outcome.proposal.id)

    ProposalService(db_session).reroll(seeded.school_id, outcome.proposal.id)

    assert _layout(outcome.proposal.id) != first
