# salesops/entrypoints/api/routers/leads.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key
from ....db import get_session
from ....domain.errors import InvalidTransition
from ....models import LeadStatus, User
from ....schemas import CallOut, ImportResult, LeadCreate, LeadOut, LeadUpdate, ResolveDuplicate
from ....service_layer.use_cases import calls as calls_uc
from ....service_layer.use_cases import duplicates as duplicates_uc
from ....service_layer.use_cases import leads as leads_uc
from ....service_layer.use_cases.lead_import import import_leads
from ....service_layer.use_cases.next_lead import get_next_lead

router = APIRouter(tags=["leads"], dependencies=[Depends(require_api_key)])


@router.get("/leads", response_model=list[LeadOut])
async def list_leads(
    status: LeadStatus | None = Query(None),
    search: str | None = Query(None),
    possible_duplicate: bool | None = Query(None),
    limit: int = Query(500, ge=1, le=5000),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[LeadOut]:
    rows = await leads_uc.list_leads(
        session,
        status=status,
        search=search,
        possible_duplicate=possible_duplicate,
        limit=limit,
    )
    return [LeadOut.model_validate(r) for r in rows]


@router.post("/leads", response_model=LeadOut, status_code=201)
async def create_lead(
    payload: LeadCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> LeadOut:
    lead = await leads_uc.create_lead(session, **payload.model_dump())
    await session.commit()
    return LeadOut.model_validate(lead)


# Fixed paths are declared before /leads/{lead_id}.
@router.get("/leads/next", response_model=LeadOut | None)
async def next_lead(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> LeadOut | None:
    lead = await get_next_lead(session, user.id)
    return LeadOut.model_validate(lead) if lead is not None else None


@router.post("/leads/import", response_model=ImportResult)
async def import_rows(
    rows: list[dict[str, Any]] = Body(...),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> ImportResult:
    res = await import_leads(session, rows)
    await session.commit()
    return ImportResult(**res)


@router.get("/leads/duplicates", response_model=list[LeadOut])
async def list_duplicates(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[LeadOut]:
    rows = await duplicates_uc.list_possible_duplicates(session)
    return [LeadOut.model_validate(r) for r in rows]


@router.get("/leads/{lead_id}", response_model=LeadOut)
async def get_lead(
    lead_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> LeadOut:
    return LeadOut.model_validate(await leads_uc.get_lead(session, lead_id))


@router.patch("/leads/{lead_id}", response_model=LeadOut)
async def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> LeadOut:
    lead = await leads_uc.update_lead(session, lead_id, payload.model_dump(exclude_unset=True))
    await session.commit()
    return LeadOut.model_validate(lead)


@router.delete("/leads/{lead_id}", status_code=204)
async def delete_lead(
    lead_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> Response:
    await leads_uc.delete_lead(session, lead_id)
    await session.commit()
    return Response(status_code=204)


@router.post("/leads/{lead_id}/resolve-duplicate", response_model=LeadOut | None)
async def resolve_duplicate(
    lead_id: int,
    payload: ResolveDuplicate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> LeadOut | None:
    try:
        lead = await duplicates_uc.resolve_duplicate(
            session, lead_id, payload.action, merge_with_id=payload.merge_with_id
        )
    except InvalidTransition:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await session.commit()
    return LeadOut.model_validate(lead) if lead is not None else None


@router.get("/leads/{lead_id}/calls", response_model=list[CallOut])
async def list_calls(
    lead_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[CallOut]:
    rows = await calls_uc.list_calls(session, lead_id)
    return [CallOut.model_validate(r) for r in rows]
