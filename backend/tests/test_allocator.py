from collections import Counter
import logging
import random

import pytest

from app.services.allocator import (
    AUTO_GENERATED_NOTE,
    CourseSubjectPairing,
    SlotClaims,
    build_schedule_blocks,
    pick_slot_for_professor,
)
from app.services.slot_catalog import SlotOption, build_slot_options


def _conflicts(blocks) -> tuple[int, int]:
    professor_keys = Counter((block.professor_id, block.weekday, block.start_time) for block in blocks)
    room_keys = Counter((block.room_id, block.weekday, block.start_time) for block in blocks)
    professor_conflicts = sum(count - 1 for count in professor_keys.values() if count > 1)
    room_conflicts = sum(count - 1 for count in room_keys.values() if count > 1)
    return professor_conflicts, room_conflicts


def _pairings(count: int, professors: int | None = None) -> list[CourseSubjectPairing]:
    professors = professors or count
    return [
        CourseSubjectPairing(course_subject_id=f"cs-{index}", professor_id=f"prof-{index % professors}")
        for index in range(count)
    ]


def test_three_pairings_two_rooms_have_distinct_keys():
    result = build_schedule_blocks(_pairings(3), ["room-a", "room-b"], rng=random.Random(1))

    assert len(result.blocks) == 3
    assert result.degraded_count == 0
    assert _conflicts(result.blocks) == (0, 0)
    assert [block.course_subject_id for block in result.blocks] == ["cs-0", "cs-1", "cs-2"]
    assert all(block.notes == AUTO_GENERATED_NOTE for block in result.blocks)


def test_blocks_use_catalog_slots_and_known_rooms():
    catalog = {(option.weekday, option.start_time, option.end_time) for option in build_slot_options()}
    rooms = ["room-a", "room-b", "room-c"]
    result = build_schedule_blocks(_pairings(20, professors=4), rooms, rng=random.Random(3))

    for block in result.blocks:
        assert (block.weekday, block.start_time, block.end_time) in catalog
        assert block.room_id in rooms


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_full_capacity_is_conflict_free(seed):
    rooms = ["room-a", "room-b"]
    result = build_schedule_blocks(_pairings(90), rooms, rng=random.Random(seed))

    assert len(result.blocks) == 90
    assert result.degraded_count == 0
    assert _conflicts(result.blocks) == (0, 0)


def test_shared_professors_never_double_booked():
    result = build_schedule_blocks(_pairings(40, professors=3), ["room-a", "room-b", "room-c"], rng=random.Random(11))

    assert result.degraded_count == 0
    assert _conflicts(result.blocks) == (0, 0)
    per_professor = Counter(block.professor_id for block in result.blocks)
    assert sum(per_professor.values()) == 40


def test_over_capacity_falls_back_and_reports_conflicts(caplog):
    caplog.set_level(logging.WARNING, logger="app.services.allocator")
    result = build_schedule_blocks(_pairings(46), ["only-room"], rng=random.Random(5))

    assert len(result.blocks) == 46
    assert result.degraded_count == 1
    _, room_conflicts = _conflicts(result.blocks)
    assert room_conflicts >= 1
    first_option = build_slot_options()[0]
    degraded = result.blocks[-1]
    assert (degraded.room_id, degraded.weekday, degraded.start_time) == (
        "only-room",
        first_option.weekday,
        first_option.start_time,
    )
    assert "SLOT ALLOCATION FALLBACK" in caplog.text


def test_same_professor_over_45_pairings_degrades():
    result = build_schedule_blocks(_pairings(46, professors=1), ["room-a", "room-b"], rng=random.Random(9))

    assert result.degraded_count == 1
    professor_conflicts, _ = _conflicts(result.blocks)
    assert professor_conflicts == 1


def test_pick_slot_fallback_claims_first_option_and_room():
    options = [SlotOption(weekday=1, start_time="07:30:00", end_time="08:30:00")]
    claims = SlotClaims()
    claims.claim("prof-x", "room-a", options[0])

    option, room_id, degraded = pick_slot_for_professor(options, ["room-a"], "prof-x", claims, random.Random(0))

    assert degraded is True
    assert option == options[0]
    assert room_id == "room-a"
    assert ("prof-x", 1, "07:30:00") in claims.professor_slots
    assert ("room-a", 1, "07:30:00") in claims.room_slots


def test_pick_slot_skips_claimed_combinations():
    options = [
        SlotOption(weekday=1, start_time="07:30:00", end_time="08:30:00"),
        SlotOption(weekday=1, start_time="08:30:00", end_time="09:30:00"),
    ]
    claims = SlotClaims()
    claims.claim("prof-x", "room-b", options[0])

    option, room_id, degraded = pick_slot_for_professor(options, ["room-a"], "prof-x", claims, random.Random(0))

    assert degraded is False
    assert option == options[1]
    assert room_id == "room-a"


def test_same_seed_reproduces_allocation():
    pairings = _pairings(12, professors=5)
    rooms = ["room-a", "room-b"]
    first = build_schedule_blocks(pairings, rooms, rng=random.Random(42))
    second = build_schedule_blocks(pairings, rooms, rng=random.Random(42))
    assert first.blocks == second.blocks


def test_randomization_spreads_over_the_week():
    result = build_schedule_blocks(_pairings(30), ["room-a"], rng=random.Random(8))
    assert len({block.weekday for block in result.blocks}) > 1


def test_claims_are_scoped_to_each_run():
    rooms = ["room-a"]
    first = build_schedule_blocks(_pairings(45), rooms, rng=random.Random(1))
    second = build_schedule_blocks(_pairings(45), rooms, rng=random.Random(2))

    assert first.claims is not second.claims
    assert first.degraded_count == 0
    assert second.degraded_count == 0


def test_no_pairings_returns_empty_result():
    result = build_schedule_blocks([], ["room-a"], rng=random.Random(0))
    assert result.blocks == []
    assert result.degraded_count == 0


def test_no_rooms_is_rejected():
    with pytest.raises(ValueError):
        build_schedule_blocks(_pairings(1), [], rng=random.Random(0))
