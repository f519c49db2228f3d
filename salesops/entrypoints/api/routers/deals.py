# salesops/entrypoints/api/routers/deals.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key
from ....db import get_session
from ....models import User
from ....schemas import DealCreate, DealOut, DealPatch, DealUpdateCreate, DealUpdateOut, DealWithLeadOut
from ....service_layer.use_cases import deals as deals_uc

router = APIRouter(tags=["deals"], dependencies=[Depends(require_api_key)])


@router.get("/deals", response_model=list[DealWithLeadOut])
async def list_deals(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[DealWithLeadOut]:
    out: list[DealWithLeadOut] = []
    for row in await deals_uc.list_deals(session):
        base = DealOut.model_validate(row["deal"]).model_dump()
        out.append(
            DealWithLeadOut(
                **base,
                lead_company_name=row["lead_company_name"],
                lead_phone=row["lead_phone"],
            )
        )
    return out


@router.post("/deals", response_model=DealOut, status_code=201)
async def create_deal(
    payload: DealCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> DealOut:
    deal = await deals_uc.create_deal(session, user_id=user.id, **payload.model_dump())
    await session.commit()
    return DealOut.model_validate(deal)


@router.patch("/deals/{deal_id}", response_model=DealOut)
async def update_deal(
    deal_id: int,
    payload: DealPatch,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> DealOut:
    deal = await deals_uc.update_deal(session, deal_id, user_id=user.id, **payload.model_dump())
    await session.commit()
    return DealOut.model_validate(deal)


@router.get("/deals/{deal_id}/updates", response_model=list[DealUpdateOut])
async def deal_timeline(
    deal_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[DealUpdateOut]:
    return [DealUpdateOut.model_validate(u) for u in await deals_uc.list_deal_updates(session, deal_id)]


@router.post("/deals/{deal_id}/updates", response_model=DealUpdateOut, status_code=201)
async def add_deal_update(
    deal_id: int,
    payload: DealUpdateCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> DealUpdateOut:
    row = await deals_uc.add_deal_note(
        session, deal_id, user_id=user.id, note=payload.note, update_type=payload.type
    )
    await session.commit()
    return DealUpdateOut.model_validate(row)
