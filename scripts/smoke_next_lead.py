# scripts/smoke_next_lead.py
import asyncio
import os

from salesops.db import async_session
from salesops.service_layer.use_cases.next_lead import get_next_lead


async def main():
    agent_id = int(os.environ.get("AGENT_ID", "2"))
    async with async_session() as session:
        lead = await get_next_lead(session, agent_id)
        if lead is None:
            print("queue empty")
            return
        print(lead.id, lead.company_name, lead.phone_raw, lead.status.value, lead.attempts, lead.priority_score)


if __name__ == "__main__":
    asyncio.run(main())
