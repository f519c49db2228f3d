# salesops/domain/diagnosis.py
from __future__ import annotations

from dataclasses import dataclass

from ..models import Package

_POINTS = {
    "has_site": 3,
    "has_google": 3,
    "has_domain": 2,
    "has_whatsapp": 2,
}

BUSINESS_FROM = 4
TECHPRO_FROM = 8


@dataclass(frozen=True)
class DiagnosisResult:
    maturity_score: int
    package: Package
    whatsapp_message: str


def maturity_score(*, has_site: bool, has_google: bool, has_domain: bool, has_whatsapp: bool) -> int:
    flags = {
        "has_site": has_site,
        "has_google": has_google,
        "has_domain": has_domain,
        "has_whatsapp": has_whatsapp,
    }
    return sum(pts for key, pts in _POINTS.items() if flags[key])


def recommend_package(score: int) -> Package:
    if score >= TECHPRO_FROM:
        return Package.TECHPRO
    if score >= BUSINESS_FROM:
        return Package.BUSINESS
    return Package.STARTER


def diagnose(*, has_site: bool, has_google: bool, has_domain: bool, has_whatsapp: bool) -> DiagnosisResult:
    score = maturity_score(
        has_site=has_site,
        has_google=has_google,
        has_domain=has_domain,
        has_whatsapp=has_whatsapp,
    )
    pkg = recommend_package(score)
    return DiagnosisResult(
        maturity_score=score,
        package=pkg,
        whatsapp_message=f"Olá, analisei sua empresa e recomendo o plano {pkg.value}.",
    )
