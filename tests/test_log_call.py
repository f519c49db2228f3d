from datetime import datetime

import pytest
from sqlalchemy import func, select

from salesops.adapters.repos.settings import RECESS_MODE_KEY, RECESS_RETURN_DATE_KEY, SettingsRepository
from salesops.domain.errors import InvalidTransition, LeadNotFound, ProhibitedTermFound
from salesops.models import CallLog, CallResult, LeadStatus, RuleType
from salesops.service_layer.use_cases.calls import list_calls, log_call
from salesops.service_layer.use_cases.leads import create_lead
from salesops.service_layer.use_cases.rules import create_rule


@pytest.mark.asyncio
async def test_first_call_claims_and_advances_lead(async_session_maker, users):
    sdr1, sdr2 = users["sdr1"], users["sdr2"]
    async with async_session_maker() as session:
        lead = await create_lead(session, company_name="Padaria Central", phone_raw="(11) 98888-0000")
        await session.commit()

        now = datetime(2026, 10, 18, 13, 0)
        await log_call(session, user_id=sdr1.id, lead_id=lead.id, result=CallResult.SEM_RESPOSTA, now=now)
        await session.commit()

        assert lead.attempts == 1
        assert lead.status == LeadStatus.TENTATIVA
        assert lead.assigned_to_id == sdr1.id
        assert lead.last_contact_at == now
        assert lead.next_follow_up_at is None

        # second agent does not take the lead over
        await log_call(session, user_id=sdr2.id, lead_id=lead.id, result=CallResult.CONTATO_REALIZADO)
        await session.commit()

        assert lead.attempts == 2
        assert lead.status == LeadStatus.CONTATO_REALIZADO
        assert lead.assigned_to_id == sdr1.id
        assert len(await list_calls(session, lead.id)) == 2


@pytest.mark.asyncio
async def test_no_answer_in_recess_schedules_follow_up(async_session_maker, users):
    async with async_session_maker() as session:
        settings_repo = SettingsRepository(session)
        await settings_repo.set(RECESS_MODE_KEY, "true")
        await settings_repo.set(RECESS_RETURN_DATE_KEY, "2027-01-10")
        lead = await create_lead(session, company_name="Oficina", phone_raw="11977770000")
        await session.commit()

        await log_call(session, user_id=users["sdr1"].id, lead_id=lead.id, result=CallResult.CAIXA_POSTAL)
        await session.commit()

        assert lead.next_follow_up_at == datetime(2027, 1, 10)


@pytest.mark.asyncio
async def test_prohibited_notes_are_rejected_before_any_write(async_session_maker, users):
    async with async_session_maker() as session:
        await create_rule(session, rule_type=RuleType.PROIBIDA, term="garantido")
        lead = await create_lead(session, company_name="Loja", phone_raw="11966660000")
        await session.commit()

        with pytest.raises(ProhibitedTermFound) as exc:
            await log_call(
                session,
                user_id=users["sdr1"].id,
                lead_id=lead.id,
                result=CallResult.CONTATO_REALIZADO,
                notes="Retorno GARANTIDO em 30 dias",
            )
        assert exc.value.term == "garantido"
        await session.rollback()

        n = (await session.execute(select(func.count()).select_from(CallLog))).scalar_one()
        assert n == 0


@pytest.mark.asyncio
async def test_call_on_closed_lead_is_rejected(async_session_maker, users):
    async with async_session_maker() as session:
        lead = await create_lead(session, company_name="Loja", phone_raw="11966660000", status=LeadStatus.OPTOUT)
        await session.commit()

        with pytest.raises(InvalidTransition):
            await log_call(session, user_id=users["sdr1"].id, lead_id=lead.id, result=CallResult.SEM_RESPOSTA)


@pytest.mark.asyncio
async def test_call_on_missing_lead(async_session_maker, users):
    async with async_session_maker() as session:
        with pytest.raises(LeadNotFound):
            await log_call(session, user_id=users["sdr1"].id, lead_id=999, result=CallResult.SEM_RESPOSTA)
