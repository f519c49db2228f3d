import pytest
from sqlalchemy import func, select

from salesops.models import CallLog, CallResult, Lead, LeadStatus
from salesops.service_layer.use_cases.calls import log_call
from salesops.service_layer.use_cases.duplicates import list_possible_duplicates, resolve_duplicate
from salesops.service_layer.use_cases.lead_import import import_leads
from salesops.service_layer.use_cases.leads import create_lead


@pytest.mark.asyncio
async def test_import_accepts_both_column_languages_and_flags_duplicates(async_session_maker):
    rows = [
        {"companyName": "Padaria Pão Quente", "phone": "(11) 98888-1001", "city": "São Paulo", "state": "SP"},
        {"razao_social": "Oficina Dois Irmãos", "telefone": "(11) 98888-1002", "cidade": "Campinas", "estado": "SP"},
        {"companyName": "Sem Telefone"},
        # same phone as the first row of this upload
        {"companyName": "Padaria Pao Quente Filial", "phone": "11988881001"},
    ]
    async with async_session_maker() as session:
        res = await import_leads(session, rows)
        await session.commit()

        assert res == {"imported": 3, "duplicates": 1, "errors": 1}

        leads = (await session.execute(select(Lead).order_by(Lead.id))).scalars().all()
        assert [l.company_name for l in leads] == [
            "Padaria Pão Quente",
            "Oficina Dois Irmãos",
            "Padaria Pao Quente Filial",
        ]
        assert leads[1].city == "Campinas"
        flagged = leads[2]
        assert flagged.possible_duplicate is True
        assert flagged.status == LeadStatus.POSSIVEL_DUPLICADO
        assert flagged.duplicate_of_id == leads[0].id


@pytest.mark.asyncio
async def test_import_matches_leads_already_on_file(async_session_maker):
    async with async_session_maker() as session:
        original = await create_lead(
            session, company_name="Clínica Sorriso", phone_raw="21977772001", city="Rio de Janeiro", state="RJ"
        )
        await session.commit()

        res = await import_leads(
            session,
            [{"companyName": "Clinica Sorriso LTDA", "phone": "21900000000", "city": "rio de janeiro", "state": "rj"}],
        )
        await session.commit()

        assert res["duplicates"] == 1
        dups = await list_possible_duplicates(session)
        assert [d.duplicate_of_id for d in dups] == [original.id]


@pytest.mark.asyncio
async def test_keep_clears_flag_and_returns_lead_to_queue(async_session_maker):
    async with async_session_maker() as session:
        await import_leads(session, [{"companyName": "A Loja", "phone": "11911110000"}])
        await import_leads(session, [{"companyName": "B Loja", "phone": "11911110000"}])
        await session.commit()

        (dup,) = await list_possible_duplicates(session)
        lead = await resolve_duplicate(session, dup.id, "keep")
        await session.commit()

        assert lead.status == LeadStatus.NOVO
        assert lead.possible_duplicate is False
        assert lead.duplicate_of_id is None
        assert await list_possible_duplicates(session) == []


@pytest.mark.asyncio
async def test_merge_links_to_target(async_session_maker):
    async with async_session_maker() as session:
        target = await create_lead(session, company_name="Matriz", phone_raw="11922220000")
        await import_leads(session, [{"companyName": "Filial", "phone": "11922220000"}])
        await session.commit()
        (dup,) = await list_possible_duplicates(session)

        with pytest.raises(ValueError):
            await resolve_duplicate(session, dup.id, "merge")
        with pytest.raises(ValueError):
            await resolve_duplicate(session, dup.id, "merge", merge_with_id=dup.id)
        with pytest.raises(ValueError):
            await resolve_duplicate(session, dup.id, "archive")

        lead = await resolve_duplicate(session, dup.id, "merge", merge_with_id=target.id)
        await session.commit()

        assert lead.duplicate_of_id == target.id
        assert lead.possible_duplicate is False
        # merged leads stay out of the calling queue
        assert lead.status == LeadStatus.POSSIVEL_DUPLICADO


@pytest.mark.asyncio
async def test_delete_removes_lead_and_its_calls(async_session_maker, users):
    async with async_session_maker() as session:
        lead = await create_lead(session, company_name="Apagar", phone_raw="11933330000")
        await session.commit()
        await log_call(session, user_id=users["sdr1"].id, lead_id=lead.id, result=CallResult.SEM_RESPOSTA)
        await session.commit()

        assert await resolve_duplicate(session, lead.id, "delete") is None
        await session.commit()

        assert (await session.execute(select(func.count()).select_from(Lead))).scalar_one() == 0
        assert (await session.execute(select(func.count()).select_from(CallLog))).scalar_one() == 0
