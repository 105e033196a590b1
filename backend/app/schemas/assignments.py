from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class AssignmentCounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_blocks: int = Field(default=0, alias="totalBlocks")
    professors_assigned: int = Field(default=0, alias="professorsAssigned")
    subjects_scheduled: int = Field(default=0, alias="materiasProgramadas")
    courses_with_schedule: int = Field(default=0, alias="cursosWithHorario")


class AssignmentCountsResponse(BaseModel):
    ok: bool = True
    counts: AssignmentCounts


class WeeklyScheduleFilters(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str | None = Field(default=None, alias="salaId", max_length=36)
    course_id: str | None = Field(default=None, alias="cursoId", max_length=36)
    subject_id: str | None = Field(default=None, alias="materiaId", max_length=36)
    professor_id: str | None = Field(default=None, alias="profesorVinculoId", max_length=36)
    weekday: int | None = Field(default=None, alias="diaSemana", ge=1, le=5)
    time_from: str | None = Field(default=None, alias="horaDesde")
    time_to: str | None = Field(default=None, alias="horaHasta")

    @field_validator("time_from", "time_to")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value


class AppliedFilters(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str | None = Field(default=None, alias="salaId")
    course_id: str | None = Field(default=None, alias="cursoId")
    subject_id: str | None = Field(default=None, alias="materiaId")
    professor_id: str | None = Field(default=None, alias="profesorVinculoId")
    weekday: int | None = Field(default=None, alias="diaSemana")
    time_from: str | None = Field(default=None, alias="horaDesde")
    time_to: str | None = Field(default=None, alias="horaHasta")


class WeeklyBlockOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schedule_id: str = Field(alias="horarioId")
    weekday: int = Field(alias="diaSemana")
    start_time: str = Field(alias="horaInicio")
    end_time: str = Field(alias="horaFin")
    room_id: str | None = Field(default=None, alias="salaId")
    room_name: str | None = Field(default=None, alias="salaNombre")
    course_subject_id: str = Field(alias="cursoMateriaId")
    course_id: str = Field(alias="cursoId")
    course_name: str = Field(alias="cursoNombre")
    course_level: str | None = Field(default=None, alias="cursoNivel")
    subject_id: str = Field(alias="materiaId")
    subject_name: str = Field(alias="materiaNombre")
    professor_id: str = Field(alias="profesorVinculoId")
    professor_full_name: str = Field(alias="profesorFullName")


class WeeklyDayOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    weekday: int = Field(alias="diaSemana")
    name: str = Field(alias="nombre")
    blocks: list[WeeklyBlockOut] = Field(default_factory=list, alias="bloques")


class WeeklyScheduleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    days: list[WeeklyDayOut] = Field(default_factory=list)
    total_blocks: int = Field(default=0, alias="totalBloques")
    applied_filters: AppliedFilters = Field(alias="appliedFilters")
