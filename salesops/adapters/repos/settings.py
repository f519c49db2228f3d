# salesops/adapters/repos/settings.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.parsing import parse_date
from ...domain.types import RecessConfig
from ...models import Setting

RECESS_MODE_KEY = "MODO_RECESSO"
RECESS_RETURN_DATE_KEY = "DATA_RETORNO_RECESSO"


class SettingsRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, key: str) -> Setting | None:
        return (await self.session.execute(select(Setting).where(Setting.key == key))).scalars().first()

    async def list(self) -> list[Setting]:
        return list((await self.session.execute(select(Setting).order_by(Setting.key.asc()))).scalars().all())

    async def set(
        self,
        key: str,
        value: str,
        *,
        description: str | None = None,
        updated_by: int | None = None,
    ) -> Setting:
        row = await self.get(key)
        if row is None:
            row = Setting(key=key, value=value, description=description, updated_by=updated_by)
            self.session.add(row)
        else:
            row.value = value
            if description is not None:
                row.description = description
            row.updated_by = updated_by
            row.updated_at = datetime.utcnow()
        await self.session.flush()
        return row

    async def load_recess_config(self) -> RecessConfig:
        mode = await self.get(RECESS_MODE_KEY)
        enabled = bool(mode and mode.value.strip().lower() == "true")

        return_date = None
        if enabled:
            ret = await self.get(RECESS_RETURN_DATE_KEY)
            return_date = parse_date(ret.value) if ret else None

        return RecessConfig(enabled=enabled, return_date=return_date)
