# salesops/entrypoints/api/routers/diagnosis.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key
from ....db import get_session
from ....models import User
from ....schemas import DiagnosisCreate, DiagnosisOut
from ....service_layer.use_cases.diagnosis import list_diagnoses, submit_diagnosis

router = APIRouter(tags=["diagnosis"], dependencies=[Depends(require_api_key)])


@router.post("/diagnosis", response_model=DiagnosisOut, status_code=201)
async def create_diagnosis(
    payload: DiagnosisCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> DiagnosisOut:
    row = await submit_diagnosis(session, user_id=user.id, **payload.model_dump())
    await session.commit()
    return DiagnosisOut.model_validate(row)


@router.get("/leads/{lead_id}/diagnosis", response_model=list[DiagnosisOut])
async def lead_diagnoses(
    lead_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[DiagnosisOut]:
    return [DiagnosisOut.model_validate(d) for d in await list_diagnoses(session, lead_id)]
