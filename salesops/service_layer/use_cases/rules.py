# salesops/service_layer/use_cases/rules.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.policies import find_prohibited_term
from ...models import Rule, RuleType


async def list_rules(session: AsyncSession, rule_type: RuleType | None = None) -> list[Rule]:
    stmt = select(Rule)
    if rule_type is not None:
        stmt = stmt.where(Rule.type == rule_type)
    stmt = stmt.order_by(Rule.type.asc(), Rule.term.asc())
    return list((await session.execute(stmt)).scalars().all())


async def get_rule(session: AsyncSession, rule_id: int) -> Rule | None:
    return (await session.execute(select(Rule).where(Rule.id == rule_id))).scalars().first()


async def create_rule(
    session: AsyncSession,
    *,
    rule_type: RuleType,
    term: str,
    message: str | None = None,
    is_active: bool = True,
) -> Rule:
    term = term.strip()
    if not term:
        raise ValueError("Rule term must not be empty")
    rule = Rule(type=rule_type, term=term, message=message, is_active=is_active)
    session.add(rule)
    await session.flush()
    return rule


async def set_rule_active(session: AsyncSession, rule_id: int, is_active: bool) -> Rule | None:
    rule = await get_rule(session, rule_id)
    if rule is None:
        return None
    rule.is_active = bool(is_active)
    rule.updated_at = datetime.utcnow()
    await session.flush()
    return rule


async def delete_rule(session: AsyncSession, rule_id: int) -> bool:
    rule = await get_rule(session, rule_id)
    if rule is None:
        return False
    await session.delete(rule)
    await session.flush()
    return True


async def active_prohibited_terms(session: AsyncSession) -> list[str]:
    rows = (
        await session.execute(
            select(Rule.term)
            .where(Rule.type == RuleType.PROIBIDA)
            .where(Rule.is_active == True)  # noqa: E712
        )
    ).scalars().all()
    return [t.lower() for t in rows]


async def check_text(session: AsyncSession, text: str | None) -> str | None:
    return find_prohibited_term(text, await active_prohibited_terms(session))
