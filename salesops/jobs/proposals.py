# salesops/jobs/proposals.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..service_layer.jobruns import (
    PROPOSAL_AUTO_ACCEPT_JOB,
    finish_job_fail,
    finish_job_success,
    start_job,
)
from ..service_layer.use_cases.proposals import auto_accept_stale_proposals

log = logging.getLogger(__name__)


async def run_auto_accept_job(session: AsyncSession, *, days: int | None = None) -> dict[str, Any]:
    """
    One tracked run of the proposal auto-accept sweep.
    Flushes only; the caller commits (also after a failure, so the JobRun row is kept).
    """
    days = settings.PROPOSAL_AUTO_ACCEPT_DAYS if days is None else days
    jr = await start_job(session, PROPOSAL_AUTO_ACCEPT_JOB, meta={"days": days})
    try:
        accepted = await auto_accept_stale_proposals(session, days=days)
    except Exception as e:
        log.exception("proposal auto-accept failed")
        await finish_job_fail(session, jr, e)
        raise

    summary = {"job_run_id": jr.id, "accepted": accepted}
    await finish_job_success(session, jr, summary)
    if accepted:
        log.info("auto-accepted %s stale proposals", accepted)
    return summary
