# salesops/entrypoints/api/routers/stats.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key
from ....db import get_session
from ....models import User
from ....schemas import LossStatOut, OverallStatsOut, RankingOut, StatsOut
from ....service_layer.use_cases import stats as stats_uc

router = APIRouter(tags=["stats"], dependencies=[Depends(require_api_key)])


@router.get("/stats", response_model=OverallStatsOut)
async def overall(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> OverallStatsOut:
    return OverallStatsOut(**await stats_uc.overall(session))


@router.get("/stats/me", response_model=StatsOut)
async def mine(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> StatsOut:
    return StatsOut(**await stats_uc.for_user(session, user.id))


@router.get("/stats/losses", response_model=list[LossStatOut])
async def losses(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[LossStatOut]:
    return [LossStatOut(**r) for r in await stats_uc.losses(session)]


@router.get("/stats/rankings", response_model=list[RankingOut])
async def rankings(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[RankingOut]:
    return [RankingOut(**r) for r in await stats_uc.rankings(session)]
