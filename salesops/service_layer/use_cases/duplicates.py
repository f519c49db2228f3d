# salesops/service_layer/use_cases/duplicates.py
from __future__ import annotations

import logging

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.leads import LeadRepository
from ...domain.transitions import LeadEvent, next_status
from ...models import Lead

log = logging.getLogger(__name__)

KEEP_ACTIONS = {"keep", "ignore"}
RESOLVE_ACTIONS = KEEP_ACTIONS | {"merge", "delete"}


async def list_possible_duplicates(session: AsyncSession) -> list[Lead]:
    stmt = (
        select(Lead)
        .where(Lead.possible_duplicate == True)  # noqa: E712
        .order_by(desc(Lead.created_at), desc(Lead.id))
    )
    return list((await session.execute(stmt)).scalars().all())


async def resolve_duplicate(
    session: AsyncSession,
    lead_id: int,
    action: str,
    *,
    merge_with_id: int | None = None,
) -> Lead | None:
    """
    keep / ignore: the lead is not a duplicate; flag and link are cleared.
    merge: the lead is folded into `merge_with_id`; it keeps the link and
           leaves the calling queue.
    delete: the lead is removed with everything attached to it.

    Returns the updated lead, or None after a delete.
    """
    action = (action or "").strip().lower()
    if action not in RESOLVE_ACTIONS:
        raise ValueError(f"Unknown action: {action!r}")

    repo = LeadRepository(session)
    lead = await repo.require(lead_id)

    if action == "delete":
        await repo.delete_cascade(lead.id)
        log.info("duplicate lead %s deleted", lead_id)
        return None

    if action in KEEP_ACTIONS:
        lead.status = next_status(lead.status, LeadEvent.DUPLICATE_KEPT)
        lead.possible_duplicate = False
        lead.duplicate_of_id = None
    else:
        if merge_with_id is None:
            raise ValueError("merge_with_id is required for merge")
        if merge_with_id == lead.id:
            raise ValueError("A lead cannot be merged into itself")
        await repo.require(merge_with_id)

        lead.status = next_status(lead.status, LeadEvent.DUPLICATE_MERGED)
        lead.possible_duplicate = False
        lead.duplicate_of_id = merge_with_id

    await session.flush()
    log.info("duplicate lead %s resolved with %s", lead.id, action)
    return lead
