# salesops/service_layer/use_cases/lead_generator.py
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

import httpx
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.ingestion.base import CompanySearchFilters, CompanySource, LeadSourceUnavailable
from ...adapters.ingestion.company_registry import CompanyRegistryClient
from ...adapters.ingestion.stub_json import StubJsonCompanySource
from ...adapters.repos.leads import LeadRepository
from ...config import settings
from ...domain.dedup import find_duplicate
from ...domain.parsing import normalize_companies
from ...domain.transitions import LeadEvent, next_status
from ...domain.types import LeadSummary
from ...models import BatchStatus, LeadBatch, LeadStatus
from .leads import create_lead

log = logging.getLogger(__name__)


def build_company_source() -> CompanySource:
    """
    Source builder that will NOT brick local dev.

    - registry -> Casa dos Dados / CNPJ.ws client
    - stub_json -> JSON fixture
    - unknown sources -> stub_json in dev/local/test, error in prod-like
    """
    src = (settings.LEADGEN_SOURCE or "").strip()

    if src == "registry":
        return CompanyRegistryClient.from_settings()
    if src == "stub_json":
        return StubJsonCompanySource.from_settings()

    if settings.ENV.lower() in ("dev", "local", "test"):
        return StubJsonCompanySource.from_settings()

    raise ValueError(f"Unknown LEADGEN_SOURCE={src!r}. Use 'registry' or 'stub_json'.")


def _candidate_out(c, *, is_duplicate: bool) -> dict[str, Any]:
    return {
        "company_name": c.company_name,
        "phone_raw": c.phone_raw,
        "phone_norm": c.phone_norm,
        "cnpj": c.cnpj,
        "segment": c.segment,
        "city": c.city,
        "state": c.state,
        "opening_date": c.opening_date.isoformat() if c.opening_date else None,
        "is_duplicate": is_duplicate,
    }


async def preview(
    session: AsyncSession,
    filters: CompanySearchFilters,
    *,
    segment: str | None = None,
    source: CompanySource | None = None,
) -> dict[str, Any]:
    """First page of matching companies, each marked as duplicate or new. Writes nothing."""
    source = source or build_company_source()

    result = await source.search_companies(filters)
    candidates = normalize_companies(result.data, segment)
    existing = await LeadRepository(session).fetch_all_lead_summaries()

    return {
        "total_found": result.count,
        "preview": [
            _candidate_out(c, is_duplicate=find_duplicate(c.summary(), existing) is not None)
            for c in candidates
        ],
        "is_api_configured": source.is_configured(),
    }


async def run_batch(
    session: AsyncSession,
    *,
    user_id: int,
    filters: CompanySearchFilters,
    segment: str | None = None,
    source: CompanySource | None = None,
) -> LeadBatch:
    """
    Imports every matching company as a lead and records the outcome on a
    LeadBatch. A registry failure does not raise: the batch is returned with
    status ERRO and the error message.
    """
    source = source or build_company_source()

    batch = LeadBatch(
        user_id=user_id,
        status=BatchStatus.PROCESSANDO,
        filters_json=json.dumps({**filters.as_dict(), "segment": segment}),
    )
    session.add(batch)
    await session.flush()

    try:
        result = await source.search_companies(filters)
    except (LeadSourceUnavailable, httpx.HTTPError, ValueError) as e:
        log.warning("lead batch %s failed: %s", batch.id, e)
        batch.status = BatchStatus.ERRO
        batch.error_message = str(e)
        batch.completed_at = datetime.utcnow()
        await session.flush()
        return batch

    candidates = normalize_companies(result.data, segment)
    existing: list[LeadSummary] = await LeadRepository(session).fetch_all_lead_summaries()

    imported = 0
    duplicates = 0
    errors = 0
    origin = f"Batch #{batch.id}"

    for c in candidates:
        if not c.company_name or not c.phone_raw:
            errors += 1
            continue

        match = find_duplicate(c.summary(), existing)
        status = LeadStatus.NOVO
        if match is not None:
            status = next_status(status, LeadEvent.FLAGGED_DUPLICATE)
            duplicates += 1

        lead = await create_lead(
            session,
            company_name=c.company_name,
            phone_raw=c.phone_raw,
            cnpj=c.cnpj,
            segment=c.segment,
            city=c.city,
            state=c.state,
            opening_date=c.opening_date,
            origin_list=origin,
            status=status,
            possible_duplicate=match is not None,
            duplicate_of_id=match.lead_id if match is not None else None,
        )
        imported += 1
        existing.append(
            LeadSummary(
                company_name=lead.company_name,
                phone_norm=lead.phone_norm,
                cnpj=lead.cnpj,
                city=lead.city,
                state=lead.state,
                lead_id=lead.id,
            )
        )

    batch.status = BatchStatus.CONCLUIDO
    batch.total_found = result.count
    batch.total_imported = imported
    batch.total_duplicates = duplicates
    batch.total_errors = errors
    batch.completed_at = datetime.utcnow()
    await session.flush()

    log.info(
        "lead batch %s done: found=%s imported=%s duplicates=%s errors=%s",
        batch.id,
        result.count,
        imported,
        duplicates,
        errors,
    )
    return batch


async def list_batches(session: AsyncSession, user_id: int | None = None) -> list[LeadBatch]:
    stmt = select(LeadBatch)
    if user_id is not None:
        stmt = stmt.where(LeadBatch.user_id == user_id)
    stmt = stmt.order_by(desc(LeadBatch.created_at), desc(LeadBatch.id))
    return list((await session.execute(stmt)).scalars().all())


async def get_batch(session: AsyncSession, batch_id: int) -> LeadBatch | None:
    return (await session.execute(select(LeadBatch).where(LeadBatch.id == batch_id))).scalars().first()
