# salesops/domain/selection.py
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping

from ..models import LeadStatus
from .types import LeadSnapshot, RecessConfig

MAX_ATTEMPTS = 3

# How many ranked candidates after the top one recess mode may look at.
RECESS_LOOKAHEAD = 10

EXCLUDED_STATUSES: frozenset[LeadStatus] = frozenset(
    {
        LeadStatus.VENDIDO,
        LeadStatus.PERDIDO,
        LeadStatus.OPTOUT,
        LeadStatus.NUMERO_INVALIDO,
        LeadStatus.POSSIVEL_DUPLICADO,
    }
)


def is_eligible(lead: LeadSnapshot, agent_id: int | None) -> bool:
    if lead.status in EXCLUDED_STATUSES:
        return False
    if (lead.attempts or 0) >= MAX_ATTEMPTS:
        return False
    if lead.possible_duplicate:
        return False
    # unowned leads are open to anyone; owned leads only to their owner
    return lead.assigned_to_id is None or lead.assigned_to_id == agent_id


def rank_key(lead: LeadSnapshot) -> tuple[int, int, int, datetime]:
    """
    attempts asc, priority desc, last contact asc (never contacted first).
    """
    never = lead.last_contact_at is None
    return (
        lead.attempts or 0,
        -(lead.priority_score or 0),
        0 if never else 1,
        lead.last_contact_at or datetime.min,
    )


def rank_leads(leads: Iterable[LeadSnapshot], agent_id: int | None) -> list[LeadSnapshot]:
    return sorted((l for l in leads if is_eligible(l, agent_id)), key=rank_key)


def select_next_lead(
    leads: Iterable[LeadSnapshot],
    *,
    agent_id: int | None,
    recess: RecessConfig,
    calls_today: Mapping[int, int],
) -> LeadSnapshot | None:
    """
    Pick the single best lead for `agent_id` to call next, or None.

    With recess mode on, a lead already called today is skipped: the next
    RECESS_LOOKAHEAD ranked candidates are scanned for one with no call
    today, and if none qualifies nothing is returned.
    """
    ranked = rank_leads(leads, agent_id)
    if not ranked:
        return None

    top = ranked[0]
    if not recess.enabled or calls_today.get(top.id, 0) < 1:
        return top

    for lead in ranked[1 : 1 + RECESS_LOOKAHEAD]:
        if calls_today.get(lead.id, 0) < 1:
            return lead
    return None
