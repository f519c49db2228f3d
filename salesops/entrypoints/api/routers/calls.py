# salesops/entrypoints/api/routers/calls.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key
from ....db import get_session
from ....models import User
from ....schemas import CallCreate, CallOut
from ....service_layer.use_cases.calls import log_call

router = APIRouter(tags=["calls"], dependencies=[Depends(require_api_key)])


@router.post("/calls", response_model=CallOut, status_code=201)
async def create_call(
    payload: CallCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> CallOut:
    row = await log_call(
        session,
        user_id=user.id,
        lead_id=payload.lead_id,
        result=payload.result,
        duration=payload.duration,
        notes=payload.notes,
    )
    await session.commit()
    return CallOut.model_validate(row)
