# salesops/jobs/scheduler.py
from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..config import settings
from ..db import async_session
from .proposals import run_auto_accept_job

log = logging.getLogger(__name__)


async def _run_auto_accept() -> None:
    async with async_session() as session:
        try:
            await run_auto_accept_job(session)
        except Exception:
            # already logged and recorded on the JobRun; keep the scheduler alive
            log.warning("proposal auto-accept run failed; next run in %s min", settings.SCHED_PROPOSALS_INTERVAL_MINUTES)
        finally:
            await session.commit()


def build_scheduler() -> AsyncIOScheduler:
    sched = AsyncIOScheduler()
    sched.add_job(
        _run_auto_accept,
        "interval",
        minutes=settings.SCHED_PROPOSALS_INTERVAL_MINUTES,
        id="proposal_auto_accept",
        max_instances=1,
        coalesce=True,
    )
    return sched
