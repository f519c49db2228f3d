# salesops/service_layer/use_cases/next_lead.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.leads import LeadRepository
from ...adapters.repos.settings import SettingsRepository
from ...domain.selection import RECESS_LOOKAHEAD, select_next_lead
from ...models import Lead


async def get_next_lead(session: AsyncSession, agent_id: int, *, now: datetime | None = None) -> Lead | None:
    """
    Read-only: nothing is reserved for the agent here. Ownership is taken
    when the agent logs a call (see use_cases.calls.log_call), so two agents
    asking at the same moment can be shown the same unowned lead.
    """
    leads = LeadRepository(session)
    recess = await SettingsRepository(session).load_recess_config()

    # top candidate + the recess lookahead window
    candidates = await leads.fetch_eligible_leads(agent_id, limit=1 + RECESS_LOOKAHEAD)

    calls_today: dict[int, int] = {}
    if recess.enabled and candidates:
        calls_today = await leads.call_counts_today([c.id for c in candidates], now=now)

    pick = select_next_lead(candidates, agent_id=agent_id, recess=recess, calls_today=calls_today)
    if pick is None:
        return None
    return await leads.get(pick.id)
