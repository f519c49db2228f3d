# salesops/adapters/ingestion/stub_json.py
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ...config import settings
from .base import CompanySearchFilters, CompanySearchResult


def _as_list_of_dicts(payload: Any) -> list[dict[str, Any]]:
    """
    Accept either:
      - list[dict]
      - {"data": list[dict]} (registry-like shape)
    """
    if isinstance(payload, list):
        return [x for x in payload if isinstance(x, dict)]
    if isinstance(payload, dict):
        v = payload.get("data")
        if isinstance(v, list):
            return [x for x in v if isinstance(x, dict)]
    return []


@dataclass
class StubJsonCompanySource:
    """
    Offline company source for development/testing.

    Reads registry-shaped records (cnpj, razao_social, nome_fantasia,
    telefone, municipio, uf, data_abertura) from a JSON fixture.
    """

    fixture_path: Path

    @classmethod
    def from_settings(cls) -> "StubJsonCompanySource":
        return cls(fixture_path=Path(settings.LEADGEN_STUB_PATH))

    def is_configured(self) -> bool:
        return self.fixture_path.exists()

    async def search_companies(self, filters: CompanySearchFilters) -> CompanySearchResult:
        if not self.fixture_path.exists():
            # Dev-friendly: missing fixture means "no companies"
            return CompanySearchResult()

        items = _as_list_of_dicts(json.loads(self.fixture_path.read_text(encoding="utf-8")))

        if filters.city:
            city_l = filters.city.strip().lower()
            items = [it for it in items if str(it.get("municipio") or "").strip().lower() == city_l]
        if filters.state:
            uf = filters.state.strip().upper()
            items = [it for it in items if str(it.get("uf") or "").strip().upper() == uf]

        return CompanySearchResult(data=items[: filters.limit], count=len(items))
