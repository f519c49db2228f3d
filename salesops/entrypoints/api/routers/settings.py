# salesops/entrypoints/api/routers/settings.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key, require_head
from ....adapters.repos.settings import SettingsRepository
from ....db import get_session
from ....models import User
from ....schemas import SettingOut, SettingUpdate

router = APIRouter(tags=["settings"], dependencies=[Depends(require_api_key)])


@router.get("/settings", response_model=list[SettingOut])
async def list_settings(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[SettingOut]:
    return [SettingOut.model_validate(s) for s in await SettingsRepository(session).list()]


@router.get("/settings/{key}", response_model=SettingOut | None)
async def get_setting(
    key: str,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> SettingOut | None:
    row = await SettingsRepository(session).get(key)
    return SettingOut.model_validate(row) if row is not None else None


@router.put("/settings/{key}", response_model=SettingOut)
async def put_setting(
    key: str,
    payload: SettingUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_head),
) -> SettingOut:
    row = await SettingsRepository(session).set(
        key, payload.value, description=payload.description, updated_by=user.id
    )
    await session.commit()
    return SettingOut.model_validate(row)
