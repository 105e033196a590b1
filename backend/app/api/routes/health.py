from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.db.bootstrap import find_schema_gaps
from app.db.session import engine
from app.models.schedule_proposal import ScheduleProposal

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "service": get_settings().project_name}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _now()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    """Readiness: database reachable and the proposal tables match the models."""
    database: dict = {"ok": True, "schema_ok": False, "missing_tables": [], "missing_columns": {}, "error": None}
    proposals: int | None = None

    try:
        with engine.connect() as connection:
            missing_tables, missing_columns = find_schema_gaps(connection)
            database.update(
                missing_tables=missing_tables,
                missing_columns=missing_columns,
                schema_ok=not missing_tables and not missing_columns,
            )
            if database["schema_ok"]:
                proposals = connection.execute(select(func.count(ScheduleProposal.id))).scalar_one()
    except SQLAlchemyError as exc:  # pragma: no cover - environment dependent
        database.update(ok=False, error=str(exc))

    ready = database["ok"] and database["schema_ok"]
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ok" if ready else "degraded",
            "timestamp": _now(),
            "database": database,
            "proposals": {"total": proposals},
        },
    )
