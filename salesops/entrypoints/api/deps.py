# salesops/entrypoints/api/deps.py
from __future__ import annotations

from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...db import get_session
from ...models import User, UserRole


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.API_KEY:
        if not x_api_key or x_api_key != settings.API_KEY:
            raise HTTPException(status_code=401, detail="Invalid API key")


async def current_user(
    x_user_id: int | None = Header(default=None, alias="X-User-Id"),
    session: AsyncSession = Depends(get_session),
) -> User:
    """The acting agent. Identity comes from the gateway in front of the API."""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Missing X-User-Id")
    user = (await session.execute(select(User).where(User.id == x_user_id))).scalars().first()
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


async def require_head(user: User = Depends(current_user)) -> User:
    if user.role != UserRole.HEAD:
        raise HTTPException(status_code=403, detail="HEAD role required")
    return user
