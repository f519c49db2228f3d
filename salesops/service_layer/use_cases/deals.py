# salesops/service_layer/use_cases/deals.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.leads import LeadRepository
from ...domain.errors import LossReasonRequired
from ...domain.transitions import LeadEvent, can_apply, next_status
from ...models import Deal, DealStatus, DealUpdate, DealUpdateType, Lead, LossReason, Package

log = logging.getLogger(__name__)


class DealNotFound(LookupError):
    def __init__(self, deal_id: int) -> None:
        super().__init__(f"Deal {deal_id} not found")
        self.deal_id = deal_id


def _lead_event(status: DealStatus) -> LeadEvent:
    if status == DealStatus.FECHADO:
        return LeadEvent.DEAL_WON
    if status == DealStatus.PERDIDO:
        return LeadEvent.DEAL_LOST
    return LeadEvent.DEAL_OPENED


def _lead_loss_reason(reason: str | None) -> LossReason | None:
    """Deals store free text; leads keep the closed list (unknown -> OUTRO)."""
    if not reason:
        return None
    try:
        return LossReason(reason)
    except ValueError:
        return LossReason.OUTRO


async def get_deal(session: AsyncSession, deal_id: int) -> Deal:
    deal = (await session.execute(select(Deal).where(Deal.id == deal_id))).scalars().first()
    if deal is None:
        raise DealNotFound(deal_id)
    return deal


async def create_deal(
    session: AsyncSession,
    *,
    user_id: int,
    lead_id: int,
    package_sold: Package,
    value: int,
    promised_deadline: int | None = None,
    status: DealStatus = DealStatus.EM_NEGOCIACAO,
    loss_reason: str | None = None,
) -> Deal:
    lead = await LeadRepository(session).require(lead_id)

    event = _lead_event(status)
    lead_reason = _lead_loss_reason(loss_reason)
    new_status = next_status(lead.status, event, loss_reason=lead_reason)

    deal = Deal(
        lead_id=lead.id,
        user_id=user_id,
        package_sold=package_sold,
        value=int(value),
        promised_deadline=promised_deadline,
        status=status,
        loss_reason=loss_reason,
    )
    session.add(deal)

    lead.status = new_status
    if event == LeadEvent.DEAL_LOST:
        lead.loss_reason = lead_reason

    await session.flush()
    return deal


async def update_deal(
    session: AsyncSession,
    deal_id: int,
    *,
    user_id: int,
    status: DealStatus | None = None,
    value: int | None = None,
    loss_reason: str | None = None,
) -> Deal:
    """
    A status change is written to the deal timeline; closing a deal
    (FECHADO / PERDIDO) closes its lead too, unless the lead is already
    closed, in which case only the deal moves.
    """
    deal = await get_deal(session, deal_id)

    if status is not None and status != deal.status:
        lead = await LeadRepository(session).get(deal.lead_id)
        lead_reason = _lead_loss_reason(loss_reason or deal.loss_reason)
        if status == DealStatus.PERDIDO and lead_reason is None:
            raise LossReasonRequired("A loss reason is required to mark a deal as PERDIDO")

        if lead is not None and status in (DealStatus.FECHADO, DealStatus.PERDIDO):
            event = _lead_event(status)
            if can_apply(lead.status, event):
                lead.status = next_status(lead.status, event, loss_reason=lead_reason)
                if event == LeadEvent.DEAL_LOST:
                    lead.loss_reason = lead_reason
            else:
                # e.g. an auto-accepted proposal already sold the lead
                log.info("deal %s closed as %s; lead %s stays %s", deal.id, status.value, lead.id, lead.status.value)

        session.add(
            DealUpdate(
                deal_id=deal.id,
                user_id=user_id,
                type=DealUpdateType.STATUS_CHANGE,
                old_status=deal.status.value,
                new_status=status.value,
            )
        )
        log.info("deal %s: %s -> %s", deal.id, deal.status.value, status.value)
        deal.status = status

    if value is not None:
        deal.value = int(value)
    if loss_reason is not None:
        deal.loss_reason = loss_reason

    await session.flush()
    return deal


async def add_deal_note(
    session: AsyncSession,
    deal_id: int,
    *,
    user_id: int,
    note: str | None,
    update_type: DealUpdateType = DealUpdateType.NOTE,
) -> DealUpdate:
    deal = await get_deal(session, deal_id)
    row = DealUpdate(deal_id=deal.id, user_id=user_id, type=update_type, note=note)
    session.add(row)
    await session.flush()
    return row


async def list_deal_updates(session: AsyncSession, deal_id: int) -> list[DealUpdate]:
    stmt = (
        select(DealUpdate)
        .where(DealUpdate.deal_id == deal_id)
        .order_by(desc(DealUpdate.created_at), desc(DealUpdate.id))
    )
    return list((await session.execute(stmt)).scalars().all())


async def list_deals(session: AsyncSession) -> list[dict[str, Any]]:
    """Deals with the company name/phone of their lead (outer join: leads may be gone)."""
    stmt = (
        select(Deal, Lead.company_name, Lead.phone_raw)
        .outerjoin(Lead, Lead.id == Deal.lead_id)
        .order_by(desc(Deal.created_at), desc(Deal.id))
    )
    rows = (await session.execute(stmt)).all()
    return [
        {"deal": deal, "lead_company_name": company_name, "lead_phone": phone}
        for deal, company_name, phone in rows
    ]
