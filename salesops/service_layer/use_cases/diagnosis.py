# salesops/service_layer/use_cases/diagnosis.py
from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.leads import LeadRepository
from ...domain.diagnosis import diagnose
from ...domain.transitions import LeadEvent, next_status
from ...models import Diagnosis


async def submit_diagnosis(
    session: AsyncSession,
    *,
    user_id: int,
    lead_id: int,
    has_site: bool = False,
    has_google: bool = False,
    has_whatsapp: bool = False,
    has_domain: bool = False,
    has_logo: bool = False,
    objective: str | None = None,
    urgency: int = 1,
    notes: str | None = None,
) -> Diagnosis:
    lead = await LeadRepository(session).require(lead_id)
    new_status = next_status(lead.status, LeadEvent.DIAGNOSIS_SUBMITTED)

    result = diagnose(
        has_site=has_site,
        has_google=has_google,
        has_domain=has_domain,
        has_whatsapp=has_whatsapp,
    )

    row = Diagnosis(
        lead_id=lead.id,
        user_id=user_id,
        has_site=has_site,
        has_google=has_google,
        has_whatsapp=has_whatsapp,
        has_domain=has_domain,
        has_logo=has_logo,
        objective=objective,
        urgency=urgency,
        notes=notes,
        maturity_score=result.maturity_score,
        recommended_package=result.package,
        whatsapp_message=result.whatsapp_message,
    )
    session.add(row)
    lead.status = new_status
    await session.flush()
    return row


async def list_diagnoses(session: AsyncSession, lead_id: int) -> list[Diagnosis]:
    stmt = (
        select(Diagnosis)
        .where(Diagnosis.lead_id == lead_id)
        .order_by(desc(Diagnosis.created_at), desc(Diagnosis.id))
    )
    return list((await session.execute(stmt)).scalars().all())
