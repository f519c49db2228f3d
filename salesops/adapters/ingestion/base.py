# salesops/adapters/ingestion/base.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


class LeadSourceUnavailable(RuntimeError):
    """No company registry could be reached (or none is configured)."""


@dataclass(frozen=True)
class CompanySearchFilters:
    cnaes: list[str] | None = None
    city: str | None = None
    state: str | None = None
    days_back: int | None = None
    limit: int = 50
    page: int = 1

    def as_dict(self) -> dict[str, Any]:
        return {
            "cnaes": self.cnaes,
            "city": self.city,
            "state": self.state,
            "days_back": self.days_back,
            "limit": self.limit,
        }


@dataclass
class CompanySearchResult:
    # raw-ish registry records: cnpj, razao_social, nome_fantasia, telefone,
    # telefone_1, telefone_2, municipio, uf, cnae_principal, data_abertura
    data: list[dict[str, Any]] = field(default_factory=list)
    count: int = 0
    page: int = 1
    pages: int = 1


class CompanySource(Protocol):
    def is_configured(self) -> bool: ...

    async def search_companies(self, filters: CompanySearchFilters) -> CompanySearchResult:
        raise NotImplementedError
