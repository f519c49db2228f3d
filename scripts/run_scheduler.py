from __future__ import annotations

import argparse
import asyncio
import logging

from salesops.config import settings
from salesops.db import async_session
from salesops.jobs.proposals import run_auto_accept_job
from salesops.jobs.scheduler import build_scheduler

log = logging.getLogger("run_scheduler")


def _quiet_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


async def _once(days: int | None) -> None:
    async with async_session() as session:
        try:
            res = await run_auto_accept_job(session, days=days)
        finally:
            await session.commit()
    log.info("auto-accept run: %s", res)


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--once", action="store_true", help="Run the proposal auto-accept sweep once and exit")
    parser.add_argument("--days", type=int, default=None, help="Override PROPOSAL_AUTO_ACCEPT_DAYS")
    args = parser.parse_args()

    _quiet_logging()

    if args.once:
        await _once(args.days)
        return

    scheduler = build_scheduler()
    scheduler.start()
    log.info(
        "Scheduler started (proposal auto-accept every %s min, after %s days)",
        settings.SCHED_PROPOSALS_INTERVAL_MINUTES,
        settings.PROPOSAL_AUTO_ACCEPT_DAYS,
    )

    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, asyncio.CancelledError):
        scheduler.shutdown()
        log.info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
