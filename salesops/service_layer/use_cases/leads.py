# salesops/service_layer/use_cases/leads.py
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.leads import LeadRepository
from ...domain.parsing import normalize_cnpj, normalize_phone
from ...domain.transitions import manual_transition
from ...models import Lead, LeadStatus, LossReason

# Fields a lead edit may touch. attempts/assignment are owned by call logging.
EDITABLE_FIELDS = {
    "company_name",
    "phone_raw",
    "cnpj",
    "segment",
    "city",
    "state",
    "opening_date",
    "priority_score",
    "next_follow_up_at",
    "origin_list",
    "notes",
    "optout_reason",
}


async def create_lead(
    session: AsyncSession,
    *,
    company_name: str,
    phone_raw: str,
    cnpj: str | None = None,
    segment: str | None = None,
    city: str | None = None,
    state: str | None = None,
    opening_date: datetime | None = None,
    priority_score: int = 0,
    origin_list: str | None = None,
    notes: str | None = None,
    status: LeadStatus = LeadStatus.NOVO,
    possible_duplicate: bool = False,
    duplicate_of_id: int | None = None,
) -> Lead:
    lead = Lead(
        company_name=company_name.strip(),
        phone_raw=phone_raw,
        phone_norm=normalize_phone(phone_raw) or None,
        cnpj=normalize_cnpj(cnpj) or None,
        segment=segment,
        city=city,
        state=state,
        opening_date=opening_date,
        priority_score=priority_score or 0,
        origin_list=origin_list,
        notes=notes,
        status=status,
        attempts=0,
        possible_duplicate=possible_duplicate,
        duplicate_of_id=duplicate_of_id,
    )
    session.add(lead)
    await session.flush()
    return lead


async def list_leads(
    session: AsyncSession,
    *,
    status: LeadStatus | None = None,
    search: str | None = None,
    possible_duplicate: bool | None = None,
    limit: int = 500,
) -> list[Lead]:
    stmt = select(Lead)
    if status is not None:
        stmt = stmt.where(Lead.status == status)
    if possible_duplicate is not None:
        stmt = stmt.where(Lead.possible_duplicate == possible_duplicate)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Lead.company_name.ilike(like),
                Lead.phone_raw.ilike(like),
                Lead.city.ilike(like),
            )
        )
    stmt = stmt.order_by(desc(Lead.priority_score), Lead.id.asc()).limit(limit)
    return list((await session.execute(stmt)).scalars().all())


async def get_lead(session: AsyncSession, lead_id: int) -> Lead:
    return await LeadRepository(session).require(lead_id)


async def update_lead(session: AsyncSession, lead_id: int, changes: dict[str, Any]) -> Lead:
    """
    Partial update from the lead editor. Status changes follow the manual
    transition rules (closed leads stay closed, PERDIDO needs a loss reason).
    """
    lead = await LeadRepository(session).require(lead_id)

    loss_reason = changes.get("loss_reason")
    if loss_reason is not None:
        loss_reason = LossReason(loss_reason)

    if changes.get("status") is not None:
        target = LeadStatus(changes["status"])
        lead.status = manual_transition(lead.status, target, loss_reason=loss_reason or lead.loss_reason)

    if loss_reason is not None:
        lead.loss_reason = loss_reason

    for key, value in changes.items():
        if key not in EDITABLE_FIELDS:
            continue
        setattr(lead, key, value)
        if key == "phone_raw":
            lead.phone_norm = normalize_phone(value) or None
        elif key == "cnpj":
            lead.cnpj = normalize_cnpj(value) or None

    await session.flush()
    return lead


async def delete_lead(session: AsyncSession, lead_id: int) -> None:
    """Deletes the lead with its call logs, diagnoses, deals and proposals."""
    repo = LeadRepository(session)
    await repo.require(lead_id)
    await repo.delete_cascade(lead_id)
