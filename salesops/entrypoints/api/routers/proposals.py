# salesops/entrypoints/api/routers/proposals.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key
from ....db import get_session
from ....models import User
from ....schemas import ProposalCreate, ProposalOut, PublicProposalOut
from ....service_layer.use_cases import proposals as proposals_uc

router = APIRouter(tags=["proposals"])


@router.get("/proposals", response_model=list[ProposalOut], dependencies=[Depends(require_api_key)])
async def list_proposals(
    lead_id: int | None = Query(None),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[ProposalOut]:
    return [ProposalOut.model_validate(p) for p in await proposals_uc.list_proposals(session, lead_id)]


@router.post("/proposals", response_model=ProposalOut, status_code=201, dependencies=[Depends(require_api_key)])
async def create_proposal(
    payload: ProposalCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> ProposalOut:
    p = await proposals_uc.create_proposal(session, lead_id=payload.lead_id, plan=payload.plan, value=payload.value)
    await session.commit()
    return ProposalOut.model_validate(p)


@router.post("/proposals/{proposal_id}/send", response_model=ProposalOut, dependencies=[Depends(require_api_key)])
async def send_proposal(
    proposal_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> ProposalOut:
    try:
        p = await proposals_uc.send_proposal(session, proposal_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    await session.commit()
    return ProposalOut.model_validate(p)


# Public link sent to the customer: no API key, no user.
@router.get("/proposals/public/{token}", response_model=PublicProposalOut)
async def public_proposal(
    token: str,
    session: AsyncSession = Depends(get_session),
) -> PublicProposalOut:
    p = await proposals_uc.get_by_token(session, token)
    if p is None:
        raise HTTPException(status_code=404, detail="Proposal not found")
    return PublicProposalOut.model_validate(p)
