# salesops/entrypoints/api/routers/jobs.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import require_api_key, require_head
from ....db import get_session
from ....jobs.proposals import run_auto_accept_job
from ....models import User
from ....schemas import JobResult
from ....service_layer.jobruns import recent_runs

router = APIRouter(tags=["jobs"], dependencies=[Depends(require_api_key)])


@router.post("/jobs/auto-accept-proposals", response_model=JobResult)
async def auto_accept_proposals(
    days: int | None = Query(None, ge=0),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_head),
) -> JobResult:
    try:
        res = await run_auto_accept_job(session, days=days)
    except Exception:
        # keep the failed JobRun row
        await session.commit()
        raise
    await session.commit()
    return JobResult(**res)


@router.get("/jobs/runs")
async def job_runs(
    job_name: str | None = Query(None),
    limit: int = Query(20, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_head),
) -> list[dict[str, Any]]:
    rows = await recent_runs(session, job_name=job_name, limit=limit)
    return [
        {
            "id": r.id,
            "job_name": r.job_name,
            "status": r.status.value,
            "started_at": r.started_at,
            "finished_at": r.finished_at,
            "error": r.error,
            "summary_json": r.summary_json,
        }
        for r in rows
    ]
