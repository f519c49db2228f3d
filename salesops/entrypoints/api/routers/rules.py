# salesops/entrypoints/api/routers/rules.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key, require_head
from ....db import get_session
from ....models import RuleType, User
from ....schemas import CheckText, CheckTextResult, RuleCreate, RuleOut
from ....service_layer.use_cases import rules as rules_uc

router = APIRouter(tags=["rules"], dependencies=[Depends(require_api_key)])


@router.get("/rules", response_model=list[RuleOut])
async def list_rules(
    type: RuleType | None = Query(None),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> list[RuleOut]:
    return [RuleOut.model_validate(r) for r in await rules_uc.list_rules(session, type)]


@router.post("/rules", response_model=RuleOut, status_code=201)
async def create_rule(
    payload: RuleCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_head),
) -> RuleOut:
    try:
        rule = await rules_uc.create_rule(
            session,
            rule_type=payload.type,
            term=payload.term,
            message=payload.message,
            is_active=payload.is_active,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await session.commit()
    return RuleOut.model_validate(rule)


@router.delete("/rules/{rule_id}", status_code=204)
async def delete_rule(
    rule_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_head),
) -> Response:
    if not await rules_uc.delete_rule(session, rule_id):
        raise HTTPException(status_code=404, detail="Rule not found")
    await session.commit()
    return Response(status_code=204)


@router.post("/check-prohibited", response_model=CheckTextResult)
async def check_prohibited(
    payload: CheckText,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(current_user),
) -> CheckTextResult:
    term = await rules_uc.check_text(session, payload.text)
    return CheckTextResult(has_prohibited=term is not None, term=term)
