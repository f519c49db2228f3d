# scripts/smoke_lead_generator.py
import asyncio
import os

from salesops.adapters.ingestion.base import CompanySearchFilters
from salesops.db import async_session
from salesops.service_layer.use_cases.lead_generator import preview


async def main():
    filters = CompanySearchFilters(
        cnaes=[c for c in os.environ.get("CNAES", "").split(",") if c] or None,
        city=os.environ.get("CITY") or None,
        state=os.environ.get("STATE", "SP"),
        days_back=int(os.environ.get("DAYS_BACK", "30")),
        limit=10,
    )
    async with async_session() as session:
        res = await preview(session, filters, segment=os.environ.get("SEGMENT"))

    print(f"found={res['total_found']} api_configured={res['is_api_configured']}")
    for c in res["preview"]:
        print(c["cnpj"], c["company_name"], c["phone_norm"], c["city"], c["state"], "DUP" if c["is_duplicate"] else "")


if __name__ == "__main__":
    asyncio.run(main())
