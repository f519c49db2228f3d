# salesops/service_layer/jobruns.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import JobRun, JobRunStatus

PROPOSAL_AUTO_ACCEPT_JOB = "proposal_auto_accept"


async def start_job(session: AsyncSession, job_name: str, meta: dict[str, Any] | None = None) -> JobRun:
    jr = JobRun(
        job_name=job_name,
        started_at=datetime.utcnow(),
        status=JobRunStatus.running,
        meta_json=json.dumps(meta or {}),
    )
    session.add(jr)
    await session.flush()
    return jr


async def finish_job_success(session: AsyncSession, jr: JobRun, summary: dict[str, Any]) -> None:
    jr.status = JobRunStatus.success
    jr.finished_at = datetime.utcnow()
    jr.summary_json = json.dumps(summary)
    jr.error = None
    await session.flush()


async def finish_job_fail(session: AsyncSession, jr: JobRun, err: Exception) -> None:
    jr.status = JobRunStatus.failed
    jr.finished_at = datetime.utcnow()
    jr.error = f"{type(err).__name__}: {err}"
    await session.flush()


async def recent_runs(session: AsyncSession, job_name: str | None = None, limit: int = 20) -> list[JobRun]:
    stmt = select(JobRun)
    if job_name:
        stmt = stmt.where(JobRun.job_name == job_name)
    stmt = stmt.order_by(desc(JobRun.started_at), desc(JobRun.id)).limit(limit)
    return list((await session.execute(stmt)).scalars().all())
