from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
import random
from typing import TypeVar

from app.services.slot_catalog import SlotOption, build_slot_options

logger = logging.getLogger(__name__)

AUTO_GENERATED_NOTE = "Generado automáticamente"

T = TypeVar("T")


@dataclass(frozen=True)
class CourseSubjectPairing:
    course_subject_id: str
    professor_id: str


@dataclass(frozen=True)
class ScheduleBlockDraft:
    professor_id: str
    course_subject_id: str
    room_id: str
    weekday: int
    start_time: str
    end_time: str
    notes: str | None = AUTO_GENERATED_NOTE


@dataclass
class SlotClaims:
    """Professor and room occupancy recorded during one allocation run."""

    professor_slots: set[tuple[str, int, str]] = field(default_factory=set)
    room_slots: set[tuple[str, int, str]] = field(default_factory=set)

    def is_free(self, professor_id: str, room_id: str, option: SlotOption) -> bool:
        return (
            (professor_id, option.weekday, option.start_time) not in self.professor_slots
            and (room_id, option.weekday, option.start_time) not in self.room_slots
        )

    def claim(self, professor_id: str, room_id: str, option: SlotOption) -> None:
        self.professor_slots.add((professor_id, option.weekday, option.start_time))
        self.room_slots.add((room_id, option.weekday, option.start_time))


@dataclass
class AllocationResult:
    blocks: list[ScheduleBlockDraft]
    claims: SlotClaims
    degraded_count: int = 0


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    copy = list(items)
    rng.shuffle(copy)
    return copy


def pick_slot_for_professor(
    options: Sequence[SlotOption],
    room_ids: Sequence[str],
    professor_id: str,
    claims: SlotClaims,
    rng: random.Random,
) -> tuple[SlotOption, str, bool]:
    """Return ``(slot, room_id, degraded)`` and record the claim.

    Slots are visited in random order and, for each slot, rooms in random
    order. When every combination is taken the first catalog slot and the
    first room are used anyway and ``degraded`` is True.
    """
    for option in shuffled(options, rng):
        for room_id in shuffled(room_ids, rng):
            if claims.is_free(professor_id, room_id, option):
                claims.claim(professor_id, room_id, option)
                return option, room_id, False

    fallback_option = options[0]
    fallback_room_id = room_ids[0]
    claims.claim(professor_id, fallback_room_id, fallback_option)
    return fallback_option, fallback_room_id, True


def build_schedule_blocks(
    pairings: Sequence[CourseSubjectPairing],
    room_ids: Sequence[str],
    *,
    rng: random.Random | None = None,
    options: Sequence[SlotOption] | None = None,
    claims: SlotClaims | None = None,
) -> AllocationResult:
    claims = claims if claims is not None else SlotClaims()
    if not pairings:
        return AllocationResult(blocks=[], claims=claims)
    if not room_ids:
        raise ValueError("At least one room is required to allocate schedule blocks")

    rng = rng or random.Random()
    options = list(options) if options is not None else build_slot_options()

    blocks: list[ScheduleBlockDraft] = []
    degraded = 0
    for pairing in pairings:
        option, room_id, was_degraded = pick_slot_for_professor(
            options,
            room_ids,
            pairing.professor_id,
            claims,
            rng,
        )
        if was_degraded:
            degraded += 1
            logger.warning(
                "SLOT ALLOCATION FALLBACK | course_subject_id=%s | professor_id=%s | room_id=%s | weekday=%s | start=%s",
                pairing.course_subject_id,
                pairing.professor_id,
                room_id,
                option.weekday,
                option.start_time,
            )
        blocks.append(
            ScheduleBlockDraft(
                professor_id=pairing.professor_id,
                course_subject_id=pairing.course_subject_id,
                room_id=room_id,
                weekday=option.weekday,
                start_time=option.start_time,
                end_time=option.end_time,
            )
        )

    return AllocationResult(blocks=blocks, claims=claims, degraded_count=degraded)
