# salesops/adapters/ingestion/company_registry.py
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

import httpx

from ...config import settings
from ...domain.parsing import get_first, get_nested, normalize_cnpj, parse_date
from ..clients.http_resilience import resilient_request
from .base import CompanySearchFilters, CompanySearchResult, LeadSourceUnavailable

log = logging.getLogger(__name__)


def _fmt_phone(ddd: Any, number: Any) -> str | None:
    if not ddd or not number:
        return None
    return f"({ddd}) {number}"


def _json_object(resp: httpx.Response) -> dict[str, Any]:
    """Body of a registry answer; anything but a JSON object is a bad response."""
    payload = resp.json()
    if not isinstance(payload, dict):
        raise ValueError(f"unexpected registry payload from {resp.request.url.host}: {type(payload).__name__}")
    return payload


def _has_phone(c: dict[str, Any]) -> bool:
    return bool(c.get("telefone") or c.get("telefone_1") or c.get("telefone_2"))


@dataclass
class CompanyRegistryClient:
    """
    Company search over two registries:
      - Casa dos Dados (keyed; search + per-CNPJ detail lookup)
      - CNPJ.ws public API (no key, heavily rate limited) as fallback

    Returns records in the Casa dos Dados field naming either way.
    """

    api_key: str | None
    base_url: str
    public_base_url: str
    transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_settings(cls) -> "CompanyRegistryClient":
        return cls(
            api_key=settings.CASA_API_KEY or None,
            base_url=settings.CASA_BASE_URL.rstrip("/"),
            public_base_url=settings.CNPJ_WS_BASE_URL.rstrip("/"),
        )

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search_companies(self, filters: CompanySearchFilters) -> CompanySearchResult:
        if self.is_configured():
            try:
                return await self._search_casa_dados(filters)
            except (httpx.HTTPError, ValueError) as e:
                log.error("Casa dos Dados search failed: %s", e)

        try:
            return await self._search_cnpj_ws(filters)
        except (httpx.HTTPError, ValueError) as e:
            log.error("CNPJ.ws search failed: %s", e)

        raise LeadSourceUnavailable(
            "API_NOT_CONFIGURED: set CASA_API_KEY to search real companies, "
            "or retry later (the public CNPJ.ws API allows ~3 requests/min)."
        )

    # -------------------------
    # Casa dos Dados
    # -------------------------

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise LeadSourceUnavailable("CASA_API_KEY is not set")
        return {"api-key": self.api_key, "Content-Type": "application/json"}

    def _search_body(self, filters: CompanySearchFilters) -> dict[str, Any]:
        body: dict[str, Any] = {
            "situacao_cadastral": ["ATIVA"],
            "matriz_filial": "MATRIZ",
            "com_contato_telefonico": True,
            "somente_mei": False,
            "excluir_mei": False,
            "page": filters.page,
        }
        if filters.cnaes:
            body["codigo_atividade_principal"] = filters.cnaes
        if filters.city:
            body["municipio"] = [filters.city.lower()]
        if filters.state:
            body["uf"] = [filters.state.lower()]
        if filters.days_back:
            today = date.today()
            body["data_abertura"] = {
                "inicio": (today - timedelta(days=filters.days_back)).isoformat(),
                "fim": today.isoformat(),
            }
        return body

    async def _search_casa_dados(self, filters: CompanySearchFilters) -> CompanySearchResult:
        resp = await resilient_request(
            "POST",
            f"{self.base_url}/v5/cnpj/pesquisa",
            headers=self._headers(),
            json=self._search_body(filters),
            transport=self.transport,
        )
        payload = _json_object(resp)
        items = payload.get("cnpjs") or get_nested(payload, "data.cnpjs") or []
        items = items[: filters.limit]

        companies = await asyncio.gather(*(self._enrich(item) for item in items))
        total = int(payload.get("total") or len(items))

        return CompanySearchResult(
            data=[c for c in companies if _has_phone(c)],
            count=total,
            page=filters.page,
            pages=max(1, math.ceil(total / 20)),
        )

    async def _enrich(self, item: Any) -> dict[str, Any]:
        cnpj = item if isinstance(item, str) else (item.get("cnpj") or "")
        try:
            return await self._cnpj_details(str(cnpj))
        except (httpx.HTTPError, ValueError) as e:
            log.info("detail lookup failed for %s, using search row: %s", cnpj, e)

        src: dict[str, Any] = {} if isinstance(item, str) else item
        return {
            "cnpj": cnpj,
            "razao_social": src.get("razao_social"),
            "nome_fantasia": src.get("nome_fantasia"),
            "telefone": get_first(src, "telefone", "telefone_1", "telefone_2"),
            "telefone_1": src.get("telefone_1"),
            "telefone_2": src.get("telefone_2"),
            "municipio": get_nested(src, "endereco.municipio") or src.get("municipio"),
            "uf": get_nested(src, "endereco.uf") or src.get("uf"),
            "cnae_principal": get_nested(src, "atividade_principal.descricao") or src.get("cnae_principal"),
            "data_abertura": src.get("data_abertura"),
        }

    async def _cnpj_details(self, cnpj: str) -> dict[str, Any]:
        resp = await resilient_request(
            "GET",
            f"{self.base_url}/v4/cnpj/{normalize_cnpj(cnpj)}",
            headers=self._headers(),
            transport=self.transport,
        )
        c = _json_object(resp)
        phones = c.get("contato_telefonico") or []
        tel1 = _fmt_phone(phones[0].get("ddd"), phones[0].get("numero")) if len(phones) > 0 else None
        tel2 = _fmt_phone(phones[1].get("ddd"), phones[1].get("numero")) if len(phones) > 1 else None
        return {
            "cnpj": c.get("cnpj"),
            "razao_social": c.get("razao_social"),
            "nome_fantasia": c.get("nome_fantasia"),
            "telefone": tel1 or tel2,
            "telefone_1": tel1,
            "telefone_2": tel2,
            "municipio": get_nested(c, "endereco.municipio"),
            "uf": get_nested(c, "endereco.uf"),
            "cnae_principal": get_nested(c, "atividade_principal.descricao"),
            "data_abertura": c.get("data_abertura"),
        }

    # -------------------------
    # CNPJ.ws (public)
    # -------------------------

    async def _search_cnpj_ws(self, filters: CompanySearchFilters) -> CompanySearchResult:
        params: dict[str, Any] = {
            "situacao_cadastral": "ATIVA",
            "somente_matriz": "true",
            "com_contato_telefonico": "true",
            "ordem": "DATA_ABERTURA",
            "pagina": str(filters.page),
        }
        if filters.state:
            params["uf"] = filters.state
        if filters.city:
            params["municipio"] = filters.city
        if filters.cnaes:
            params["cnaes"] = filters.cnaes[0]

        resp = await resilient_request(
            "GET",
            f"{self.public_base_url}/cnpj",
            headers={"Accept": "application/json"},
            params=params,
            transport=self.transport,
        )
        payload = _json_object(resp)

        cutoff = None
        if filters.days_back:
            cutoff = date.today() - timedelta(days=filters.days_back)

        rows: list[dict[str, Any]] = []
        for e in payload.get("estabelecimentos") or []:
            tel1 = _fmt_phone(e.get("ddd_telefone_1"), e.get("telefone_1"))
            tel2 = _fmt_phone(e.get("ddd_telefone_2"), e.get("telefone_2"))
            if not tel1 and not tel2:
                continue
            opened = parse_date(e.get("data_inicio_atividade"))
            if cutoff and opened and opened.date() < cutoff:
                continue
            rows.append(
                {
                    "cnpj": e.get("cnpj"),
                    "razao_social": e.get("razao_social"),
                    "nome_fantasia": e.get("nome_fantasia"),
                    "telefone": tel1 or tel2,
                    "telefone_1": tel1,
                    "telefone_2": tel2,
                    "municipio": get_nested(e, "cidade.nome"),
                    "uf": get_nested(e, "estado.sigla"),
                    "cnae_principal": get_nested(e, "atividade_principal.id"),
                    "data_abertura": e.get("data_inicio_atividade"),
                }
            )

        return CompanySearchResult(
            data=rows[: filters.limit],
            count=int(payload.get("total") or len(rows)),
            page=filters.page,
            pages=int(payload.get("total_pages") or 1),
        )
