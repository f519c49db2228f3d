# salesops/service_layer/use_cases/proposals.py
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.leads import LeadRepository
from ...domain.transitions import LeadEvent, can_apply, next_status
from ...models import Proposal, ProposalPlan, ProposalStatus

log = logging.getLogger(__name__)


class ProposalNotFound(LookupError):
    pass


def new_public_token() -> str:
    return secrets.token_hex(16)


async def create_proposal(
    session: AsyncSession,
    *,
    lead_id: int,
    plan: ProposalPlan,
    value: int = 0,
) -> Proposal:
    await LeadRepository(session).require(lead_id)
    row = Proposal(
        lead_id=lead_id,
        plan=plan,
        value=int(value or 0),
        status=ProposalStatus.DRAFT,
        public_token=new_public_token(),
    )
    session.add(row)
    await session.flush()
    return row


async def get_proposal(session: AsyncSession, proposal_id: int) -> Proposal:
    p = (await session.execute(select(Proposal).where(Proposal.id == proposal_id))).scalars().first()
    if p is None:
        raise ProposalNotFound(f"Proposal {proposal_id} not found")
    return p


async def get_by_token(session: AsyncSession, token: str) -> Proposal | None:
    return (await session.execute(select(Proposal).where(Proposal.public_token == token))).scalars().first()


async def send_proposal(session: AsyncSession, proposal_id: int, *, now: datetime | None = None) -> Proposal:
    p = await get_proposal(session, proposal_id)
    if p.status != ProposalStatus.DRAFT:
        raise ValueError(f"Only DRAFT proposals can be sent (proposal is {p.status.value})")
    p.status = ProposalStatus.SENT
    p.sent_at = now or datetime.utcnow()
    await session.flush()
    return p


async def list_proposals(session: AsyncSession, lead_id: int | None = None) -> list[Proposal]:
    stmt = select(Proposal)
    if lead_id is not None:
        stmt = stmt.where(Proposal.lead_id == lead_id)
    stmt = stmt.order_by(desc(Proposal.created_at), desc(Proposal.id))
    return list((await session.execute(stmt)).scalars().all())


async def auto_accept_stale_proposals(
    session: AsyncSession,
    *,
    days: int = 7,
    now: datetime | None = None,
) -> int:
    """
    SENT proposals with no answer for `days` are taken as accepted and their
    lead is marked sold. Leads already closed keep their status.
    """
    cutoff = (now or datetime.utcnow()) - timedelta(days=days)
    stmt = (
        select(Proposal)
        .where(Proposal.status == ProposalStatus.SENT)
        .where(func.coalesce(Proposal.sent_at, Proposal.created_at) < cutoff)
    )
    stale = list((await session.execute(stmt)).scalars().all())

    leads = LeadRepository(session)
    for p in stale:
        p.status = ProposalStatus.ACCEPTED
        lead = await leads.get(p.lead_id)
        if lead is None:
            continue
        if can_apply(lead.status, LeadEvent.DEAL_WON):
            lead.status = next_status(lead.status, LeadEvent.DEAL_WON)
        else:
            log.info("proposal %s accepted; lead %s stays %s", p.id, lead.id, lead.status.value)

    await session.flush()
    return len(stale)
