from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Literal

from .models import (
    BatchStatus,
    CallResult,
    DealStatus,
    DealUpdateType,
    LeadStatus,
    LossReason,
    Package,
    ProposalPlan,
    ProposalStatus,
    RuleType,
)


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# -----------------------------
# Leads
# -----------------------------
class LeadCreate(BaseModel):
    company_name: str = Field(..., min_length=1)
    phone_raw: str = Field(..., min_length=1)
    cnpj: str | None = None
    segment: str | None = None
    city: str | None = None
    state: str | None = Field(default=None, max_length=2)
    opening_date: datetime | None = None
    priority_score: int = 0
    origin_list: str | None = None
    notes: str | None = None


class LeadUpdate(BaseModel):
    company_name: str | None = None
    phone_raw: str | None = None
    cnpj: str | None = None
    segment: str | None = None
    city: str | None = None
    state: str | None = Field(default=None, max_length=2)
    opening_date: datetime | None = None
    priority_score: int | None = None
    next_follow_up_at: datetime | None = None
    origin_list: str | None = None
    notes: str | None = None
    optout_reason: str | None = None
    status: LeadStatus | None = None
    loss_reason: LossReason | None = None


class LeadOut(ORMModel):
    id: int
    company_name: str
    phone_raw: str
    phone_norm: str | None = None
    cnpj: str | None = None

    segment: str | None = None
    city: str | None = None
    state: str | None = None
    opening_date: datetime | None = None

    status: LeadStatus
    priority_score: int = 0
    attempts: int = 0

    last_contact_at: datetime | None = None
    next_follow_up_at: datetime | None = None

    origin_list: str | None = None
    notes: str | None = None
    optout_reason: str | None = None
    loss_reason: LossReason | None = None

    possible_duplicate: bool = False
    duplicate_of_id: int | None = None
    assigned_to_id: int | None = None

    created_at: datetime


class ResolveDuplicate(BaseModel):
    action: Literal["keep", "ignore", "merge", "delete"]
    merge_with_id: int | None = None


class ImportResult(BaseModel):
    imported: int = Field(..., ge=0)
    duplicates: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)


# -----------------------------
# Calls
# -----------------------------
class CallCreate(BaseModel):
    lead_id: int
    result: CallResult
    duration: int = Field(0, ge=0)
    notes: str | None = None


class CallOut(ORMModel):
    id: int
    lead_id: int
    user_id: int
    duration: int
    result: CallResult
    notes: str | None = None
    created_at: datetime


# -----------------------------
# Diagnosis
# -----------------------------
class DiagnosisCreate(BaseModel):
    lead_id: int
    has_site: bool = False
    has_google: bool = False
    has_whatsapp: bool = False
    has_domain: bool = False
    has_logo: bool = False
    objective: str | None = None
    urgency: int = Field(1, ge=1, le=5)
    notes: str | None = None


class DiagnosisOut(ORMModel):
    id: int
    lead_id: int
    user_id: int
    has_site: bool
    has_google: bool
    has_whatsapp: bool
    has_domain: bool
    has_logo: bool
    objective: str | None = None
    urgency: int
    notes: str | None = None
    maturity_score: int
    recommended_package: Package | None = None
    whatsapp_message: str | None = None
    created_at: datetime


# -----------------------------
# Deals
# -----------------------------
class DealCreate(BaseModel):
    lead_id: int
    package_sold: Package
    value: int = Field(..., ge=0)
    promised_deadline: int | None = None
    status: DealStatus = DealStatus.EM_NEGOCIACAO
    loss_reason: str | None = None


class DealPatch(BaseModel):
    status: DealStatus | None = None
    value: int | None = Field(default=None, ge=0)
    loss_reason: str | None = None


class DealOut(ORMModel):
    id: int
    lead_id: int
    user_id: int
    package_sold: Package
    value: int
    promised_deadline: int | None = None
    status: DealStatus
    loss_reason: str | None = None
    created_at: datetime


class DealWithLeadOut(DealOut):
    lead_company_name: str | None = None
    lead_phone: str | None = None


class DealUpdateCreate(BaseModel):
    type: DealUpdateType = DealUpdateType.NOTE
    note: str | None = None


class DealUpdateOut(ORMModel):
    id: int
    deal_id: int
    user_id: int
    type: DealUpdateType
    old_status: str | None = None
    new_status: str | None = None
    note: str | None = None
    created_at: datetime


# -----------------------------
# Settings / rules
# -----------------------------
class SettingOut(ORMModel):
    key: str
    value: str
    description: str | None = None
    updated_at: datetime
    updated_by: int | None = None


class SettingUpdate(BaseModel):
    value: str
    description: str | None = None


class RuleCreate(BaseModel):
    type: RuleType
    term: str = Field(..., min_length=1)
    message: str | None = None
    is_active: bool = True


class RuleOut(ORMModel):
    id: int
    type: RuleType
    term: str
    message: str | None = None
    is_active: bool
    created_at: datetime


class CheckText(BaseModel):
    text: str | None = None


class CheckTextResult(BaseModel):
    has_prohibited: bool
    term: str | None = None


# -----------------------------
# Lead generator
# -----------------------------
class LeadGenRun(BaseModel):
    cnaes: list[str] | None = None
    city: str | None = None
    state: str | None = None
    days_back: int | None = Field(default=None, ge=1)
    segment: str | None = None


class CandidateOut(BaseModel):
    company_name: str
    phone_raw: str
    phone_norm: str
    cnpj: str
    segment: str | None = None
    city: str | None = None
    state: str | None = None
    opening_date: str | None = None
    is_duplicate: bool


class LeadGenPreview(BaseModel):
    total_found: int
    preview: list[CandidateOut]
    is_api_configured: bool


class LeadBatchOut(ORMModel):
    id: int
    user_id: int
    status: BatchStatus
    filters_json: str
    total_found: int
    total_imported: int
    total_duplicates: int
    total_errors: int
    error_message: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


# -----------------------------
# Proposals
# -----------------------------
class ProposalCreate(BaseModel):
    lead_id: int
    plan: ProposalPlan
    value: int = Field(0, ge=0)


class ProposalOut(ORMModel):
    id: int
    lead_id: int
    plan: ProposalPlan
    status: ProposalStatus
    value: int
    public_token: str
    sent_at: datetime | None = None
    created_at: datetime


class PublicProposalOut(ORMModel):
    plan: ProposalPlan
    status: ProposalStatus
    value: int
    sent_at: datetime | None = None


# -----------------------------
# Stats / jobs
# -----------------------------
class StatsOut(BaseModel):
    leads: int
    calls: int
    sales: int
    revenue: int


class OverallStatsOut(StatsOut):
    conversion_rate: float


class LossStatOut(BaseModel):
    reason: str
    segment: str | None = None
    count: int


class RankingOut(StatsOut):
    user_id: int
    user_name: str
    conversion_rate: int


class JobResult(BaseModel):
    job_run_id: int
    accepted: int = Field(..., ge=0)
