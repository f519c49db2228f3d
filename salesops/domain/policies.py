# salesops/domain/policies.py
from __future__ import annotations

from typing import Iterable

from .similarity import normalize_text


def find_prohibited_term(text: str | None, prohibited_terms: Iterable[str]) -> str | None:
    """
    Returns the first prohibited term contained in `text`, or None.
    Both sides are compared after accent/punctuation/suffix normalization.
    """
    if not text:
        return None
    haystack = normalize_text(text)
    for term in prohibited_terms:
        needle = normalize_text(term)
        if needle and needle in haystack:
            return term
    return None
