# salesops/adapters/repos/leads.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.errors import LeadNotFound
from ...domain.selection import EXCLUDED_STATUSES, MAX_ATTEMPTS
from ...domain.types import LeadSnapshot, LeadSummary
from ...models import CallLog, Deal, DealUpdate, Diagnosis, Lead, Proposal


def local_midnight_utc(now: datetime | None = None) -> datetime:
    """
    Start of the current local day, as a naive UTC datetime.

    `now` is naive UTC like every stored timestamp (default: utcnow).
    """
    now = now or datetime.utcnow()
    local_now = now.replace(tzinfo=timezone.utc).astimezone()
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc).replace(tzinfo=None)


def to_snapshot(lead: Lead) -> LeadSnapshot:
    return LeadSnapshot(
        id=lead.id,
        status=lead.status,
        attempts=lead.attempts or 0,
        priority_score=lead.priority_score or 0,
        possible_duplicate=bool(lead.possible_duplicate),
        assigned_to_id=lead.assigned_to_id,
        last_contact_at=lead.last_contact_at,
    )


class LeadRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, lead_id: int) -> Lead | None:
        return (await self.session.execute(select(Lead).where(Lead.id == lead_id))).scalars().first()

    async def require(self, lead_id: int) -> Lead:
        lead = await self.get(lead_id)
        if lead is None:
            raise LeadNotFound(lead_id)
        return lead

    async def fetch_all_lead_summaries(self) -> list[LeadSummary]:
        """One row per lead on file; fetched once per import batch."""
        q = select(Lead.id, Lead.company_name, Lead.phone_norm, Lead.cnpj, Lead.city, Lead.state)
        rows = (await self.session.execute(q)).all()
        return [
            LeadSummary(
                lead_id=r.id,
                company_name=r.company_name,
                phone_norm=r.phone_norm,
                cnpj=r.cnpj,
                city=r.city,
                state=r.state,
            )
            for r in rows
        ]

    async def fetch_eligible_leads(self, agent_id: int | None, limit: int) -> list[LeadSnapshot]:
        """
        Same filter and ordering as domain.selection, pushed down to SQL so
        only the top `limit` candidates are loaded.
        """
        owner_ok = Lead.assigned_to_id.is_(None)
        if agent_id is not None:
            owner_ok = owner_ok | (Lead.assigned_to_id == agent_id)

        q = (
            select(Lead)
            .where(Lead.status.not_in(list(EXCLUDED_STATUSES)))
            .where(func.coalesce(Lead.attempts, 0) < MAX_ATTEMPTS)
            .where(Lead.possible_duplicate.isnot(True))
            .where(owner_ok)
            .order_by(
                func.coalesce(Lead.attempts, 0).asc(),
                func.coalesce(Lead.priority_score, 0).desc(),
                Lead.last_contact_at.asc().nulls_first(),
                Lead.id.asc(),
            )
            .limit(limit)
        )
        rows = (await self.session.execute(q)).scalars().all()
        return [to_snapshot(l) for l in rows]

    async def call_counts_today(self, lead_ids: Iterable[int], now: datetime | None = None) -> dict[int, int]:
        ids = list(lead_ids)
        if not ids:
            return {}
        since = local_midnight_utc(now)
        q = (
            select(CallLog.lead_id, func.count())
            .where(CallLog.lead_id.in_(ids))
            .where(CallLog.created_at >= since)
            .group_by(CallLog.lead_id)
        )
        rows = (await self.session.execute(q)).all()
        return {int(lead_id): int(n) for lead_id, n in rows}

    async def call_count_today(self, lead_id: int, now: datetime | None = None) -> int:
        counts = await self.call_counts_today([lead_id], now=now)
        return counts.get(lead_id, 0)

    async def claim_if_unassigned(self, lead_id: int, user_id: int) -> bool:
        """
        Atomic conditional update: assigns the lead only if nobody owns it yet.
        Returns True when this call took ownership.
        """
        res = await self.session.execute(
            update(Lead)
            .where(Lead.id == lead_id)
            .where(Lead.assigned_to_id.is_(None))
            .values(assigned_to_id=user_id)
            .execution_options(synchronize_session=False)
        )
        return (res.rowcount or 0) > 0

    async def delete_cascade(self, lead_id: int) -> None:
        deal_ids = select(Deal.id).where(Deal.lead_id == lead_id)
        await self.session.execute(
            delete(DealUpdate)
            .where(DealUpdate.deal_id.in_(deal_ids))
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(delete(Deal).where(Deal.lead_id == lead_id))
        await self.session.execute(delete(CallLog).where(CallLog.lead_id == lead_id))
        await self.session.execute(delete(Diagnosis).where(Diagnosis.lead_id == lead_id))
        await self.session.execute(delete(Proposal).where(Proposal.lead_id == lead_id))
        await self.session.execute(delete(Lead).where(Lead.id == lead_id))
        await self.session.flush()
