# salesops/service_layer/use_cases/calls.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.leads import LeadRepository
from ...adapters.repos.settings import SettingsRepository
from ...domain.errors import ProhibitedTermFound
from ...domain.transitions import LeadEvent, event_for_call, next_status
from ...models import CallLog, CallResult
from .rules import check_text

log = logging.getLogger(__name__)


async def log_call(
    session: AsyncSession,
    *,
    user_id: int,
    lead_id: int,
    result: CallResult,
    duration: int = 0,
    notes: str | None = None,
    now: datetime | None = None,
) -> CallLog:
    """
    Record a call and apply its effects on the lead:
      - attempts += 1 and last_contact_at = now
      - status moves per the transition table
      - an unowned lead is claimed by the caller (conditional update, so the
        first agent to log a call keeps it)
      - in recess mode, a no-answer call schedules the follow-up for the
        recess return date
    """
    leads = LeadRepository(session)
    lead = await leads.require(lead_id)

    found = await check_text(session, notes)
    if found:
        raise ProhibitedTermFound(found)

    event = event_for_call(result)
    new_status = next_status(lead.status, event)

    now = now or datetime.utcnow()
    row = CallLog(
        lead_id=lead.id,
        user_id=user_id,
        duration=max(0, int(duration or 0)),
        result=result,
        notes=notes,
        created_at=now,
    )
    session.add(row)

    lead.attempts = (lead.attempts or 0) + 1
    lead.last_contact_at = now
    lead.status = new_status

    if event == LeadEvent.CALL_NO_ANSWER:
        recess = await SettingsRepository(session).load_recess_config()
        if recess.enabled and recess.return_date is not None:
            lead.next_follow_up_at = recess.return_date

    await session.flush()

    if lead.assigned_to_id is None:
        claimed = await leads.claim_if_unassigned(lead.id, user_id)
        await session.refresh(lead, ["assigned_to_id"])
        if not claimed:
            log.info(
                "lead %s was claimed by user %s before user %s logged a call",
                lead.id,
                lead.assigned_to_id,
                user_id,
            )

    return row


async def list_calls(session: AsyncSession, lead_id: int) -> list[CallLog]:
    stmt = (
        select(CallLog)
        .where(CallLog.lead_id == lead_id)
        .order_by(desc(CallLog.created_at), desc(CallLog.id))
    )
    return list((await session.execute(stmt)).scalars().all())
