# salesops/service_layer/demo_seed.py
from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.repos.settings import RECESS_MODE_KEY, RECESS_RETURN_DATE_KEY, SettingsRepository
from ..domain.parsing import normalize_phone
from ..models import Lead, LeadStatus, Rule, RuleType, User, UserRole

DEMO_USERS = [
    ("head", "Head Comercial", UserRole.HEAD),
    ("sdr1", "SDR Um", UserRole.SDR),
    ("sdr2", "SDR Dois", UserRole.SDR),
]

DEMO_LEADS = [
    # company_name, phone, city, state, segment, priority
    ("Padaria Pão Quente Ltda", "(11) 98888-1001", "São Paulo", "SP", "padaria", 5),
    ("Oficina Mecânica Dois Irmãos", "(11) 98888-1002", "São Paulo", "SP", "oficina", 3),
    ("Clínica Sorriso ME", "(21) 97777-2001", "Rio de Janeiro", "RJ", "odontologia", 8),
    ("Pet Shop Amigo Fiel", "(31) 96666-3001", "Belo Horizonte", "MG", "pet", 1),
]

DEMO_PROHIBITED = ["garantido", "100% de retorno"]


async def seed_demo(session: AsyncSession) -> dict[str, Any]:
    """
    Idempotent demo seed:
    - users (one HEAD, two SDRs), matched by username
    - recess settings (off)
    - a few prohibited terms
    - sample leads, matched by normalized phone
    """
    users = 0
    for username, name, role in DEMO_USERS:
        row = (await session.execute(select(User).where(User.username == username))).scalars().first()
        if row is None:
            session.add(User(username=username, name=name, role=role))
            users += 1
        else:
            row.name = name
            row.role = role
    await session.flush()

    settings_repo = SettingsRepository(session)
    if await settings_repo.get(RECESS_MODE_KEY) is None:
        await settings_repo.set(RECESS_MODE_KEY, "false", description="Modo recesso (true/false)")
    if await settings_repo.get(RECESS_RETURN_DATE_KEY) is None:
        await settings_repo.set(RECESS_RETURN_DATE_KEY, "", description="Data de retorno do recesso (ISO)")

    rules = 0
    for term in DEMO_PROHIBITED:
        exists = (
            await session.execute(select(Rule).where(Rule.type == RuleType.PROIBIDA).where(Rule.term == term))
        ).scalars().first()
        if exists is None:
            session.add(Rule(type=RuleType.PROIBIDA, term=term, is_active=True))
            rules += 1

    leads = 0
    for company, phone, city, state, segment, priority in DEMO_LEADS:
        norm = normalize_phone(phone)
        exists = (await session.execute(select(Lead).where(Lead.phone_norm == norm))).scalars().first()
        if exists is not None:
            continue
        session.add(
            Lead(
                company_name=company,
                phone_raw=phone,
                phone_norm=norm,
                city=city,
                state=state,
                segment=segment,
                priority_score=priority,
                status=LeadStatus.NOVO,
                attempts=0,
                origin_list="demo",
            )
        )
        leads += 1

    await session.flush()
    return {"users": users, "rules": rules, "leads": leads}
