# salesops/models.py
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# -----------------------------
# Core enums
# -----------------------------
class UserRole(str, enum.Enum):
    SDR = "SDR"
    HEAD = "HEAD"


class LeadStatus(str, enum.Enum):
    NOVO = "NOVO"
    TENTATIVA = "TENTATIVA"
    CONTATO_REALIZADO = "CONTATO_REALIZADO"
    DIAGNOSTICO_AGENDADO = "DIAGNOSTICO_AGENDADO"
    PROPOSTA_ENVIADA = "PROPOSTA_ENVIADA"
    VENDIDO = "VENDIDO"
    PERDIDO = "PERDIDO"
    OPTOUT = "OPTOUT"
    NUMERO_INVALIDO = "NUMERO_INVALIDO"
    POSSIVEL_DUPLICADO = "POSSIVEL_DUPLICADO"


class LossReason(str, enum.Enum):
    SEM_ORCAMENTO = "SEM_ORCAMENTO"
    JA_TEM_FORNECEDOR = "JA_TEM_FORNECEDOR"
    SEM_INTERESSE = "SEM_INTERESSE"
    NAO_E_PRIORIDADE = "NAO_E_PRIORIDADE"
    CONTATO_INVALIDO = "CONTATO_INVALIDO"
    OUTRO = "OUTRO"


class CallResult(str, enum.Enum):
    SEM_RESPOSTA = "SEM_RESPOSTA"
    CAIXA_POSTAL = "CAIXA_POSTAL"
    NUMERO_INVALIDO = "NUMERO_INVALIDO"
    NAO_E_RESPONSAVEL = "NAO_E_RESPONSAVEL"
    CONTATO_REALIZADO = "CONTATO_REALIZADO"
    AGENDOU_DIAGNOSTICO = "AGENDOU_DIAGNOSTICO"
    PEDIU_PROPOSTA = "PEDIU_PROPOSTA"
    OPTOUT = "OPTOUT"


class Package(str, enum.Enum):
    STARTER = "STARTER"
    BUSINESS = "BUSINESS"
    TECHPRO = "TECHPRO"


class DealStatus(str, enum.Enum):
    EM_NEGOCIACAO = "EM_NEGOCIACAO"
    PROPOSTA_ENVIADA = "PROPOSTA_ENVIADA"
    FECHADO = "FECHADO"
    PERDIDO = "PERDIDO"


class DealUpdateType(str, enum.Enum):
    STATUS_CHANGE = "STATUS_CHANGE"
    NOTE = "NOTE"
    FOLLOWUP = "FOLLOWUP"


class RuleType(str, enum.Enum):
    PROIBIDA = "PROIBIDA"
    PERMITIDA = "PERMITIDA"


class BatchStatus(str, enum.Enum):
    PENDENTE = "PENDENTE"
    PROCESSANDO = "PROCESSANDO"
    CONCLUIDO = "CONCLUIDO"
    ERRO = "ERRO"


class ProposalPlan(str, enum.Enum):
    STARTER = "STARTER"
    BUSINESS = "BUSINESS"
    PRO = "PRO"


class ProposalStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"


class JobRunStatus(str, enum.Enum):
    running = "running"
    success = "success"
    failed = "failed"


# -----------------------------
# Models
# -----------------------------
class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username", name="uq_user_username"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(80))
    name: Mapped[str] = mapped_column(String(120))
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), default=UserRole.SDR)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    company_name: Mapped[str] = mapped_column(String(255))
    phone_raw: Mapped[str] = mapped_column(String(40))
    phone_norm: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    cnpj: Mapped[str | None] = mapped_column(String(20), nullable=True)

    segment: Mapped[str | None] = mapped_column(String(80), nullable=True, index=True)
    city: Mapped[str | None] = mapped_column(String(80), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    opening_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    status: Mapped[LeadStatus] = mapped_column(Enum(LeadStatus), default=LeadStatus.NOVO, index=True)
    priority_score: Mapped[int] = mapped_column(Integer, default=0, index=True)
    attempts: Mapped[int] = mapped_column(Integer, default=0)

    last_contact_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    next_follow_up_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    origin_list: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    optout_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    loss_reason: Mapped[LossReason | None] = mapped_column(Enum(LossReason), nullable=True)

    possible_duplicate: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    # weak reference: no FK, the other lead may be deleted independently
    duplicate_of_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assigned_to_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class CallLog(Base):
    __tablename__ = "call_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lead_id: Mapped[int] = mapped_column(Integer, index=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)

    duration: Mapped[int] = mapped_column(Integer, default=0)
    result: Mapped[CallResult] = mapped_column(Enum(CallResult))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class Diagnosis(Base):
    __tablename__ = "diagnosis"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lead_id: Mapped[int] = mapped_column(Integer, index=True)
    user_id: Mapped[int] = mapped_column(Integer)

    has_site: Mapped[bool] = mapped_column(Boolean, default=False)
    has_google: Mapped[bool] = mapped_column(Boolean, default=False)
    has_whatsapp: Mapped[bool] = mapped_column(Boolean, default=False)
    has_domain: Mapped[bool] = mapped_column(Boolean, default=False)
    has_logo: Mapped[bool] = mapped_column(Boolean, default=False)

    objective: Mapped[str | None] = mapped_column(Text, nullable=True)
    urgency: Mapped[int] = mapped_column(Integer, default=1)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    maturity_score: Mapped[int] = mapped_column(Integer, default=0)
    recommended_package: Mapped[Package | None] = mapped_column(Enum(Package), nullable=True)
    whatsapp_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Deal(Base):
    __tablename__ = "deals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lead_id: Mapped[int] = mapped_column(Integer, index=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)

    package_sold: Mapped[Package] = mapped_column(Enum(Package))
    value: Mapped[int] = mapped_column(Integer)
    promised_deadline: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[DealStatus] = mapped_column(Enum(DealStatus), default=DealStatus.EM_NEGOCIACAO, index=True)
    loss_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class DealUpdate(Base):
    """Deal timeline entry."""
    __tablename__ = "deal_updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    deal_id: Mapped[int] = mapped_column(Integer, index=True)
    user_id: Mapped[int] = mapped_column(Integer)

    type: Mapped[DealUpdateType] = mapped_column(Enum(DealUpdateType))
    old_status: Mapped[str | None] = mapped_column(String(40), nullable=True)
    new_status: Mapped[str | None] = mapped_column(String(40), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Setting(Base):
    """
    Process-wide named configuration (key/value).
    Known keys: MODO_RECESSO, DATA_RETORNO_RECESSO.
    """
    __tablename__ = "settings"
    __table_args__ = (UniqueConstraint("key", name="uq_setting_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(80))
    value: Mapped[str] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Rule(Base):
    __tablename__ = "rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[RuleType] = mapped_column(Enum(RuleType), index=True)
    term: Mapped[str] = mapped_column(String(255))
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class LeadBatch(Base):
    __tablename__ = "lead_batches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)

    status: Mapped[BatchStatus] = mapped_column(Enum(BatchStatus), default=BatchStatus.PENDENTE)
    # {"segment": ..., "cnaes": [...], "city": ..., "state": ..., "daysBack": ...}
    filters_json: Mapped[str] = mapped_column(Text, default="{}")

    total_found: Mapped[int] = mapped_column(Integer, default=0)
    total_imported: Mapped[int] = mapped_column(Integer, default=0)
    total_duplicates: Mapped[int] = mapped_column(Integer, default=0)
    total_errors: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class Proposal(Base):
    __tablename__ = "proposals"
    __table_args__ = (UniqueConstraint("public_token", name="uq_proposal_token"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lead_id: Mapped[int] = mapped_column(Integer, index=True)

    plan: Mapped[ProposalPlan] = mapped_column(Enum(ProposalPlan))
    status: Mapped[ProposalStatus] = mapped_column(Enum(ProposalStatus), default=ProposalStatus.DRAFT, index=True)
    value: Mapped[int] = mapped_column(Integer, default=0)
    public_token: Mapped[str] = mapped_column(String(64))

    sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class JobRun(Base):
    """
    Tracks background job executions (proposal auto-accept, etc.)
    """
    __tablename__ = "job_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_name: Mapped[str] = mapped_column(String(80), index=True)

    status: Mapped[JobRunStatus] = mapped_column(Enum(JobRunStatus), default=JobRunStatus.running, index=True)

    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # store error stack or message
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    meta_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary_json: Mapped[str | None] = mapped_column(Text, nullable=True)
