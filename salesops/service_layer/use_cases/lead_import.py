# salesops/service_layer/use_cases/lead_import.py
from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.leads import LeadRepository
from ...domain.dedup import find_duplicate
from ...domain.parsing import get_first, normalize_cnpj, normalize_phone
from ...domain.transitions import LeadEvent, next_status
from ...domain.types import LeadSummary
from ...models import LeadStatus
from .leads import create_lead

log = logging.getLogger(__name__)


def _clean(x: Any) -> str | None:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def parse_import_row(raw: dict[str, Any]) -> dict[str, Any] | None:
    """
    Maps an uploaded row (English or Portuguese column names) to lead fields.
    Returns None when the row has no phone or no company name.
    """
    phone_raw = _clean(get_first(raw, "phone", "telefone", "telefone_raw"))
    company_name = _clean(get_first(raw, "companyName", "company_name", "razao_social"))
    if not phone_raw or not company_name:
        return None

    return {
        "company_name": company_name,
        "phone_raw": phone_raw,
        "city": _clean(get_first(raw, "city", "cidade")),
        "state": _clean(get_first(raw, "state", "estado")),
        "segment": _clean(get_first(raw, "segment", "segmento")),
        "cnpj": _clean(raw.get("cnpj")),
    }


async def import_leads(
    session: AsyncSession,
    rows: Iterable[dict[str, Any]],
    *,
    origin_list: str | None = None,
) -> dict[str, int]:
    """
    Creates one lead per valid row. Rows that look like a lead already on
    file (or like an earlier row of the same upload) are still created, but
    flagged POSSIVEL_DUPLICADO and linked to the lead they matched.
    """
    existing: list[LeadSummary] = await LeadRepository(session).fetch_all_lead_summaries()

    imported = 0
    duplicates = 0
    errors = 0

    for raw in rows:
        fields = parse_import_row(raw) if isinstance(raw, dict) else None
        if fields is None:
            errors += 1
            continue

        candidate = LeadSummary(
            company_name=fields["company_name"],
            phone_norm=normalize_phone(fields["phone_raw"]) or None,
            cnpj=normalize_cnpj(fields["cnpj"]) or None,
            city=fields["city"],
            state=fields["state"],
        )
        match = find_duplicate(candidate, existing)

        status = LeadStatus.NOVO
        if match is not None:
            status = next_status(status, LeadEvent.FLAGGED_DUPLICATE)

        lead = await create_lead(
            session,
            **fields,
            origin_list=origin_list,
            status=status,
            possible_duplicate=match is not None,
            duplicate_of_id=match.lead_id if match is not None else None,
        )

        imported += 1
        if match is not None:
            duplicates += 1

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

    log.info("lead import: imported=%s duplicates=%s errors=%s", imported, duplicates, errors)
    return {"imported": imported, "duplicates": duplicates, "errors": errors}
