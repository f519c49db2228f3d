# salesops/service_layer/use_cases/stats.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import CallLog, Deal, DealStatus, Lead, LeadStatus, User, UserRole

UNKNOWN_LOSS_REASON = "NAO_INFORMADO"


@dataclass(frozen=True)
class Totals:
    leads: int
    calls: int
    sales: int
    revenue: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


async def _count(session: AsyncSession, stmt) -> int:
    return int((await session.execute(stmt)).scalar() or 0)


async def _totals(session: AsyncSession, user_id: int | None = None) -> Totals:
    leads_q = select(func.count()).select_from(Lead)
    calls_q = select(func.count()).select_from(CallLog)
    sales_q = select(func.count()).select_from(Deal).where(Deal.status == DealStatus.FECHADO)
    revenue_q = select(func.coalesce(func.sum(Deal.value), 0)).where(Deal.status == DealStatus.FECHADO)

    if user_id is not None:
        leads_q = leads_q.where(Lead.assigned_to_id == user_id)
        calls_q = calls_q.where(CallLog.user_id == user_id)
        sales_q = sales_q.where(Deal.user_id == user_id)
        revenue_q = revenue_q.where(Deal.user_id == user_id)

    return Totals(
        leads=await _count(session, leads_q),
        calls=await _count(session, calls_q),
        sales=await _count(session, sales_q),
        revenue=await _count(session, revenue_q),
    )


async def overall(session: AsyncSession) -> dict[str, Any]:
    t = await _totals(session)
    out = t.as_dict()
    out["conversion_rate"] = (t.sales / t.leads) * 100 if t.leads > 0 else 0
    return out


async def for_user(session: AsyncSession, user_id: int) -> dict[str, Any]:
    return (await _totals(session, user_id)).as_dict()


async def losses(session: AsyncSession) -> list[dict[str, Any]]:
    """Lost leads grouped by (loss reason, segment)."""
    stmt = (
        select(Lead.loss_reason, Lead.segment, func.count())
        .where(Lead.status == LeadStatus.PERDIDO)
        .group_by(Lead.loss_reason, Lead.segment)
    )
    rows = (await session.execute(stmt)).all()
    return [
        {
            "reason": reason.value if reason is not None else UNKNOWN_LOSS_REASON,
            "segment": segment,
            "count": int(n),
        }
        for reason, segment, n in rows
    ]


async def rankings(session: AsyncSession) -> list[dict[str, Any]]:
    """SDR leaderboard: most sales first, revenue breaks ties."""
    sdrs = (await session.execute(select(User).where(User.role == UserRole.SDR))).scalars().all()

    out: list[dict[str, Any]] = []
    for sdr in sdrs:
        t = await _totals(session, sdr.id)
        out.append(
            {
                "user_id": sdr.id,
                "user_name": sdr.name,
                **t.as_dict(),
                "conversion_rate": round((t.sales / t.calls) * 100) if t.calls > 0 else 0,
            }
        )

    out.sort(key=lambda r: (-r["sales"], -r["revenue"]))
    return out
