# salesops/domain/dedup.py
from __future__ import annotations

from typing import Iterable

from .similarity import name_similarity
from .types import LeadSummary

NAME_SIMILARITY_THRESHOLD = 0.7


def _same_location(candidate: LeadSummary, existing: LeadSummary) -> bool:
    if not (candidate.city and candidate.state and existing.city and existing.state):
        return False
    # city compares lowercased, state uppercased
    return (
        candidate.city.lower() == existing.city.lower()
        and candidate.state.upper() == existing.state.upper()
    )


def matches(candidate: LeadSummary, existing: LeadSummary) -> bool:
    if candidate.phone_norm and existing.phone_norm and candidate.phone_norm == existing.phone_norm:
        return True

    if candidate.cnpj and existing.cnpj and candidate.cnpj == existing.cnpj:
        return True

    if _same_location(candidate, existing):
        return name_similarity(candidate.company_name, existing.company_name) > NAME_SIMILARITY_THRESHOLD

    return False


def find_duplicate(candidate: LeadSummary, existing: Iterable[LeadSummary]) -> LeadSummary | None:
    """
    First lead on file that plausibly is the same company as `candidate`.

    Rules, in order: exact phone, exact tax id, then same city/state with a
    company-name similarity above the threshold. Empty values never match.
    """
    for row in existing:
        if matches(candidate, row):
            return row
    return None


def is_duplicate(candidate: LeadSummary, existing: Iterable[LeadSummary]) -> bool:
    return find_duplicate(candidate, existing) is not None
