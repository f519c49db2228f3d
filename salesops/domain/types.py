# salesops/domain/types.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..models import LeadStatus


@dataclass(frozen=True)
class LeadSummary:
    """
    The slice of a lead the duplicate classifier looks at.
    Used both for leads on file and for freshly observed candidates.
    """
    company_name: str
    phone_norm: str | None = None
    cnpj: str | None = None
    city: str | None = None
    state: str | None = None
    lead_id: int | None = None


@dataclass(frozen=True)
class LeadSnapshot:
    """Read-only view of a lead row, as consumed by the next-lead selector."""
    id: int
    status: LeadStatus
    attempts: int = 0
    priority_score: int = 0
    possible_duplicate: bool = False
    assigned_to_id: int | None = None
    last_contact_at: datetime | None = None


@dataclass(frozen=True)
class RecessConfig:
    enabled: bool = False
    return_date: datetime | None = None


@dataclass(frozen=True)
class CompanyCandidate:
    """A company record from the registry, normalized into lead fields."""
    company_name: str
    phone_raw: str
    phone_norm: str
    cnpj: str
    segment: str | None = None
    city: str | None = None
    state: str | None = None
    opening_date: datetime | None = None

    def summary(self) -> LeadSummary:
        return LeadSummary(
            company_name=self.company_name,
            phone_norm=self.phone_norm,
            cnpj=self.cnpj,
            city=self.city,
            state=self.state,
        )
