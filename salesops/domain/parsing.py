# salesops/domain/parsing.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable

from .types import CompanyCandidate

_NON_DIGIT = re.compile(r"\D")

MIN_PHONE_DIGITS = 10


def to_int(x: Any) -> int | None:
    if x is None or x == "":
        return None
    try:
        return int(float(x))
    except (TypeError, ValueError):
        return None


def get_first(payload: dict[str, Any], *keys: str) -> Any:
    """Return first non-empty key from payload."""
    for k in keys:
        v = payload.get(k)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def get_nested(payload: dict[str, Any], path: str) -> Any:
    """Tiny dot-path getter: 'endereco.municipio' or 'estado.sigla'."""
    cur: Any = payload
    for part in path.split("."):
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
        if cur is None:
            return None
    return cur


def normalize_phone(phone: str | None) -> str:
    """'(11) 99999-8888' -> '11999998888'"""
    if not phone:
        return ""
    return _NON_DIGIT.sub("", str(phone))


def normalize_cnpj(cnpj: str | None) -> str:
    return normalize_phone(cnpj)


def parse_date(x: Any) -> datetime | None:
    if x is None or x == "":
        return None
    if isinstance(x, datetime):
        return x
    try:
        return datetime.fromisoformat(str(x).strip().replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None


def company_to_candidate(company: dict[str, Any], segment: str | None = None) -> CompanyCandidate | None:
    """
    Registry record -> lead fields. None when the record has no usable phone.

    Trade name wins over legal name; the first available phone is used.
    """
    phone = get_first(company, "telefone", "telefone_1", "telefone_2")
    if not phone:
        return None

    phone_raw = str(phone).strip()
    phone_norm = normalize_phone(phone_raw)
    if len(phone_norm) < MIN_PHONE_DIGITS:
        return None

    name = get_first(company, "nome_fantasia", "razao_social")
    if not name:
        return None

    city = get_first(company, "municipio")
    state = get_first(company, "uf")

    return CompanyCandidate(
        company_name=str(name).strip(),
        phone_raw=phone_raw,
        phone_norm=phone_norm,
        cnpj=normalize_cnpj(company.get("cnpj")),
        segment=segment or None,
        city=str(city).strip() if city else None,
        state=str(state).strip() if state else None,
        opening_date=parse_date(company.get("data_abertura")),
    )


def normalize_companies(companies: Iterable[dict[str, Any]], segment: str | None = None) -> list[CompanyCandidate]:
    out: list[CompanyCandidate] = []
    for c in companies:
        cand = company_to_candidate(c, segment)
        if cand is not None:
            out.append(cand)
    return out
