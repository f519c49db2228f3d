# salesops/entrypoints/api/routers/lead_generator.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key
from ....adapters.ingestion.base import CompanySearchFilters, LeadSourceUnavailable
from ....config import settings
from ....db import get_session
from ....models import BatchStatus, User, UserRole
from ....schemas import LeadBatchOut, LeadGenPreview, LeadGenRun
from ....service_layer.use_cases import lead_generator as leadgen

router = APIRouter(tags=["lead-generator"], dependencies=[Depends(require_api_key)])


def _split_csv(s: str | None) -> list[str] | None:
    if not s:
        return None
    return [x.strip() for x in s.split(",") if x.strip()] or None


@router.get("/lead-generator/preview", response_model=LeadGenPreview)
async def preview(
    cnaes: str | None = Query(None, description="Comma-separated CNAE codes"),
    city: str | None = Query(None),
    state: str | None = Query(None),
    days_back: int | None = Query(None, ge=1),
    segment: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> LeadGenPreview:
    filters = CompanySearchFilters(
        cnaes=_split_csv(cnaes),
        city=city,
        state=state,
        days_back=days_back,
        limit=settings.LEADGEN_PREVIEW_LIMIT,
    )
    try:
        res = await leadgen.preview(session, filters, segment=segment)
    except LeadSourceUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))
    return LeadGenPreview(**res)


@router.post("/lead-generator/run", response_model=LeadBatchOut)
async def run(
    payload: LeadGenRun,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> LeadBatchOut:
    filters = CompanySearchFilters(
        cnaes=payload.cnaes or None,
        city=payload.city,
        state=payload.state,
        days_back=payload.days_back,
        limit=settings.LEADGEN_RUN_LIMIT,
    )
    batch = await leadgen.run_batch(session, user_id=user.id, filters=filters, segment=payload.segment)
    await session.commit()

    if batch.status == BatchStatus.ERRO:
        raise HTTPException(status_code=502, detail=batch.error_message or "Lead source failed")
    return LeadBatchOut.model_validate(batch)


@router.get("/lead-batches", response_model=list[LeadBatchOut])
async def list_batches(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[LeadBatchOut]:
    # HEAD sees every batch, SDRs only their own
    owner = None if user.role == UserRole.HEAD else user.id
    return [LeadBatchOut.model_validate(b) for b in await leadgen.list_batches(session, owner)]


@router.get("/lead-batches/{batch_id}", response_model=LeadBatchOut)
async def get_batch(
    batch_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> LeadBatchOut:
    batch = await leadgen.get_batch(session, batch_id)
    if batch is None:
        raise HTTPException(status_code=404, detail="Batch not found")
    return LeadBatchOut.model_validate(batch)
