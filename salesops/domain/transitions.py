# salesops/domain/transitions.py
"""
Lead status workflow.

Every status change a lead can go through is listed in TRANSITIONS as
(current status, event) -> next status. Pairs missing from the table are
illegal. Funnel statuses only move forward: an event that points at an
earlier funnel stage leaves the lead where it is.
"""
from __future__ import annotations

import enum

from ..models import CallResult, LeadStatus, LossReason
from .errors import InvalidTransition, LossReasonRequired


class LeadEvent(str, enum.Enum):
    CALL_NO_ANSWER = "CALL_NO_ANSWER"
    CALL_CONTACT_MADE = "CALL_CONTACT_MADE"
    CALL_DIAGNOSIS_BOOKED = "CALL_DIAGNOSIS_BOOKED"
    CALL_PROPOSAL_REQUESTED = "CALL_PROPOSAL_REQUESTED"
    CALL_OPTOUT = "CALL_OPTOUT"
    CALL_INVALID_NUMBER = "CALL_INVALID_NUMBER"
    DIAGNOSIS_SUBMITTED = "DIAGNOSIS_SUBMITTED"
    DEAL_OPENED = "DEAL_OPENED"
    DEAL_WON = "DEAL_WON"
    DEAL_LOST = "DEAL_LOST"
    MARKED_LOST = "MARKED_LOST"
    FLAGGED_DUPLICATE = "FLAGGED_DUPLICATE"
    DUPLICATE_KEPT = "DUPLICATE_KEPT"
    DUPLICATE_MERGED = "DUPLICATE_MERGED"


FUNNEL: tuple[LeadStatus, ...] = (
    LeadStatus.NOVO,
    LeadStatus.TENTATIVA,
    LeadStatus.CONTATO_REALIZADO,
    LeadStatus.DIAGNOSTICO_AGENDADO,
    LeadStatus.PROPOSTA_ENVIADA,
)

TERMINAL: frozenset[LeadStatus] = frozenset(
    {LeadStatus.VENDIDO, LeadStatus.PERDIDO, LeadStatus.OPTOUT, LeadStatus.NUMERO_INVALIDO}
)

CALL_RESULT_EVENTS: dict[CallResult, LeadEvent] = {
    CallResult.SEM_RESPOSTA: LeadEvent.CALL_NO_ANSWER,
    CallResult.CAIXA_POSTAL: LeadEvent.CALL_NO_ANSWER,
    CallResult.NAO_E_RESPONSAVEL: LeadEvent.CALL_NO_ANSWER,
    CallResult.CONTATO_REALIZADO: LeadEvent.CALL_CONTACT_MADE,
    CallResult.AGENDOU_DIAGNOSTICO: LeadEvent.CALL_DIAGNOSIS_BOOKED,
    CallResult.PEDIU_PROPOSTA: LeadEvent.CALL_PROPOSAL_REQUESTED,
    CallResult.OPTOUT: LeadEvent.CALL_OPTOUT,
    CallResult.NUMERO_INVALIDO: LeadEvent.CALL_INVALID_NUMBER,
}

# funnel event -> funnel stage it advances to (None = no status change)
_FUNNEL_TARGETS: dict[LeadEvent, LeadStatus | None] = {
    LeadEvent.CALL_NO_ANSWER: LeadStatus.TENTATIVA,
    LeadEvent.CALL_CONTACT_MADE: LeadStatus.CONTATO_REALIZADO,
    LeadEvent.CALL_DIAGNOSIS_BOOKED: LeadStatus.DIAGNOSTICO_AGENDADO,
    LeadEvent.CALL_PROPOSAL_REQUESTED: None,
    LeadEvent.DIAGNOSIS_SUBMITTED: LeadStatus.DIAGNOSTICO_AGENDADO,
    LeadEvent.DEAL_OPENED: LeadStatus.PROPOSTA_ENVIADA,
}

# events that end the workflow from any open status
_CLOSING: dict[LeadEvent, LeadStatus] = {
    LeadEvent.CALL_OPTOUT: LeadStatus.OPTOUT,
    LeadEvent.CALL_INVALID_NUMBER: LeadStatus.NUMERO_INVALIDO,
    LeadEvent.DEAL_WON: LeadStatus.VENDIDO,
    LeadEvent.DEAL_LOST: LeadStatus.PERDIDO,
    LeadEvent.MARKED_LOST: LeadStatus.PERDIDO,
}

_NEEDS_LOSS_REASON: frozenset[LeadEvent] = frozenset({LeadEvent.DEAL_LOST, LeadEvent.MARKED_LOST})


def _build_table() -> dict[tuple[LeadStatus, LeadEvent], LeadStatus]:
    table: dict[tuple[LeadStatus, LeadEvent], LeadStatus] = {}

    for current in FUNNEL:
        stage = FUNNEL.index(current)
        for event, target in _FUNNEL_TARGETS.items():
            if target is None or FUNNEL.index(target) <= stage:
                table[(current, event)] = current
            else:
                table[(current, event)] = target

        for event, target in _CLOSING.items():
            table[(current, event)] = target

        table[(current, LeadEvent.DUPLICATE_KEPT)] = current
        table[(current, LeadEvent.DUPLICATE_MERGED)] = LeadStatus.POSSIVEL_DUPLICADO

    table[(LeadStatus.NOVO, LeadEvent.FLAGGED_DUPLICATE)] = LeadStatus.POSSIVEL_DUPLICADO

    table[(LeadStatus.POSSIVEL_DUPLICADO, LeadEvent.DUPLICATE_KEPT)] = LeadStatus.NOVO
    table[(LeadStatus.POSSIVEL_DUPLICADO, LeadEvent.DUPLICATE_MERGED)] = LeadStatus.POSSIVEL_DUPLICADO
    table[(LeadStatus.POSSIVEL_DUPLICADO, LeadEvent.FLAGGED_DUPLICATE)] = LeadStatus.POSSIVEL_DUPLICADO

    return table


TRANSITIONS: dict[tuple[LeadStatus, LeadEvent], LeadStatus] = _build_table()


def next_status(
    current: LeadStatus,
    event: LeadEvent,
    *,
    loss_reason: LossReason | str | None = None,
) -> LeadStatus:
    target = TRANSITIONS.get((current, event))
    if target is None:
        raise InvalidTransition(f"{event.value} is not allowed while lead is {current.value}")
    if event in _NEEDS_LOSS_REASON and not loss_reason:
        raise LossReasonRequired("A loss reason is required to mark a lead as PERDIDO")
    return target


def can_apply(current: LeadStatus, event: LeadEvent) -> bool:
    return (current, event) in TRANSITIONS


def event_for_call(result: CallResult) -> LeadEvent:
    return CALL_RESULT_EVENTS[result]


def manual_transition(
    current: LeadStatus,
    target: LeadStatus,
    *,
    loss_reason: LossReason | str | None = None,
) -> LeadStatus:
    """
    Status picked by hand in the lead editor.

    Open leads may be set to any status; closed leads stay closed.
    PERDIDO needs a loss reason.
    """
    if target == current:
        return current
    if current in TERMINAL:
        raise InvalidTransition(f"Lead is {current.value}; closed leads cannot change status")
    if target == LeadStatus.PERDIDO and not loss_reason:
        raise LossReasonRequired("A loss reason is required to mark a lead as PERDIDO")
    return target
