from __future__ import annotations

from dataclasses import dataclass

DAY_OPTIONS: tuple[int, ...] = (1, 2, 3, 4, 5)
SLOT_STARTS: tuple[str, ...] = (
    "07:30",
    "08:30",
    "09:30",
    "10:30",
    "11:30",
    "12:30",
    "13:30",
    "14:30",
    "15:30",
)
SLOT_MINUTES = 60
DAY_NAMES: dict[int, str] = {
    1: "Lunes",
    2: "Martes",
    3: "Miércoles",
    4: "Jueves",
    5: "Viernes",
}


@dataclass(frozen=True)
class SlotOption:
    weekday: int
    start_time: str
    end_time: str


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def add_minutes(value: str, minutes: int) -> str:
    total = (time_to_minutes(value) + minutes) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def format_time_with_seconds(value: str) -> str:
    if len(value.split(":")) == 3:
        return value
    return f"{value}:00"


def day_name(weekday: int) -> str:
    return DAY_NAMES.get(weekday, f"Día {weekday}")


def build_slot_options() -> list[SlotOption]:
    """Every candidate weekly slot, ordered by weekday then start time."""
    options: list[SlotOption] = []
    for weekday in DAY_OPTIONS:
        for start in SLOT_STARTS:
            options.append(
                SlotOption(
                    weekday=weekday,
                    start_time=format_time_with_seconds(start),
                    end_time=format_time_with_seconds(add_minutes(start, SLOT_MINUTES)),
                )
            )
    return options
