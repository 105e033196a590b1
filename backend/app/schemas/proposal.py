from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.schedule_proposal import ProposalStatus


class ProposalCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="nombre", min_length=3, max_length=100)
    period_start: str = Field(alias="periodoInicio", min_length=1, max_length=40)
    period_end: str = Field(alias="periodoFin", min_length=1, max_length=40)
    description: str | None = Field(default=None, alias="descripcion", max_length=2000)


class ProposalUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, alias="nombre", min_length=3, max_length=100)
    period_start: str | None = Field(default=None, alias="periodoInicio", min_length=1, max_length=40)
    period_end: str | None = Field(default=None, alias="periodoFin", min_length=1, max_length=40)
    description: str | None = Field(default=None, alias="descripcion", max_length=2000)


class ProposalStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(alias="estado", min_length=1, max_length=20)


class ProposalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    school_id: str = Field(alias="colegioId")
    name: str = Field(alias="nombre")
    period_start: date = Field(alias="periodoInicio")
    period_end: date = Field(alias="periodoFin")
    status: ProposalStatus = Field(alias="estado")
    description: str | None = Field(default=None, alias="descripcion")
    created_by_id: str | None = Field(default=None, alias="createdBy")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class ProposalListItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(alias="nombre")
    status: ProposalStatus = Field(alias="estado")
    description: str | None = Field(default=None, alias="descripcion")
    period_start: date = Field(alias="periodoInicio")
    period_end: date = Field(alias="periodoFin")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    block_count: int = Field(default=0, alias="bloques")
    created_by_name: str | None = Field(default=None, alias="creadoPor")


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")


class ProposalBlockOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    professor_id: str = Field(alias="profesorVinculoId")
    professor_full_name: str | None = Field(default=None, alias="profesorFullName")
    course_subject_id: str = Field(alias="cursoMateriaId")
    course_id: str | None = Field(default=None, alias="cursoId")
    course_name: str | None = Field(default=None, alias="cursoNombre")
    subject_name: str | None = Field(default=None, alias="materiaNombre")
    room_id: str = Field(alias="salaId")
    room_name: str | None = Field(default=None, alias="salaNombre")
    weekday: int = Field(alias="diaSemana")
    start_time: str = Field(alias="horaInicio")
    end_time: str = Field(alias="horaFin")
    notes: str | None = Field(default=None, alias="observaciones")


class ProposalListResponse(BaseModel):
    ok: bool = True
    items: list[ProposalListItem] = Field(default_factory=list)
    pagination: Pagination


class ProposalDetailResponse(BaseModel):
    ok: bool = True
    proposal: ProposalOut
    items: list[ProposalBlockOut] = Field(default_factory=list)


class ProposalResponse(BaseModel):
    ok: bool = True
    proposal: ProposalOut


class ProposalGenerationResponse(ProposalResponse):
    model_config = ConfigDict(populate_by_name=True)

    block_count: int = Field(default=0, alias="bloques")
    degraded_assignments: int = Field(default=0, alias="degradedAssignments")


class OkResponse(BaseModel):
    ok: bool = True
