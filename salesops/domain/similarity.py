# salesops/domain/similarity.py
from __future__ import annotations

import re
import unicodedata

# Legal-entity suffixes that say nothing about which company it is.
COMPANY_SUFFIXES: tuple[str, ...] = (
    "ltda",
    "me",
    "epp",
    "sa",
    "s/a",
    "eireli",
    "ss",
    "sociedade",
    "empresarial",
)

# Shorter list used for free text (call notes, prohibited-term checks).
TEXT_SUFFIXES: tuple[str, ...] = ("ltda", "me", "epp", "sa", "s/a", "eireli", "ss")

_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)
_SPACES = re.compile(r"\s+")
_MIN_TOKEN_LEN = 3


def _suffix_pattern(suffixes: tuple[str, ...]) -> re.Pattern[str]:
    alts = "|".join(re.escape(s) for s in suffixes)
    return re.compile(rf"\b(?:{alts})\b", re.IGNORECASE)


_COMPANY_SUFFIX_RE = _suffix_pattern(COMPANY_SUFFIXES)
_TEXT_SUFFIX_RE = _suffix_pattern(TEXT_SUFFIXES)


def strip_accents(s: str) -> str:
    decomposed = unicodedata.normalize("NFD", s)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _normalize(s: str, suffix_re: re.Pattern[str]) -> str:
    s = strip_accents((s or "").lower())
    s = _NON_WORD.sub("", s)
    s = _SPACES.sub(" ", s)
    s = suffix_re.sub("", s)
    return _SPACES.sub(" ", s).strip()


def normalize_company_name(name: str) -> str:
    """
    "Padaria São José LTDA." -> "padaria sao jose"
    """
    return _normalize(name, _COMPANY_SUFFIX_RE)


def normalize_text(text: str) -> str:
    return _normalize(text, _TEXT_SUFFIX_RE)


def _tokens(normalized: str) -> set[str]:
    return {t for t in normalized.split() if len(t) >= _MIN_TOKEN_LEN}


def name_similarity(a: str, b: str) -> float:
    """
    Jaccard index over the significant tokens of two company names.

    Identical normalized names score 1.0 even when they have no token long
    enough to count; otherwise an empty token set on either side scores 0.0.
    """
    s1 = normalize_company_name(a)
    s2 = normalize_company_name(b)
    if s1 == s2:
        return 1.0

    t1 = _tokens(s1)
    t2 = _tokens(s2)
    if not t1 or not t2:
        return 0.0

    return len(t1 & t2) / len(t1 | t2)
