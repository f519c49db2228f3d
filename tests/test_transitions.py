import pytest

from salesops.domain.errors import InvalidTransition, LossReasonRequired
from salesops.domain.transitions import (
    TERMINAL,
    TRANSITIONS,
    LeadEvent,
    can_apply,
    event_for_call,
    manual_transition,
    next_status,
)
from salesops.models import CallResult, LeadStatus, LossReason


def test_call_results_move_lead_forward():
    assert next_status(LeadStatus.NOVO, event_for_call(CallResult.SEM_RESPOSTA)) == LeadStatus.TENTATIVA
    assert next_status(LeadStatus.NOVO, event_for_call(CallResult.CAIXA_POSTAL)) == LeadStatus.TENTATIVA
    assert next_status(LeadStatus.TENTATIVA, event_for_call(CallResult.CONTATO_REALIZADO)) == LeadStatus.CONTATO_REALIZADO
    assert (
        next_status(LeadStatus.CONTATO_REALIZADO, event_for_call(CallResult.AGENDOU_DIAGNOSTICO))
        == LeadStatus.DIAGNOSTICO_AGENDADO
    )
    assert next_status(LeadStatus.TENTATIVA, event_for_call(CallResult.OPTOUT)) == LeadStatus.OPTOUT
    assert next_status(LeadStatus.NOVO, event_for_call(CallResult.NUMERO_INVALIDO)) == LeadStatus.NUMERO_INVALIDO


def test_funnel_never_moves_back():
    assert next_status(LeadStatus.CONTATO_REALIZADO, LeadEvent.CALL_NO_ANSWER) == LeadStatus.CONTATO_REALIZADO
    assert next_status(LeadStatus.PROPOSTA_ENVIADA, LeadEvent.DIAGNOSIS_SUBMITTED) == LeadStatus.PROPOSTA_ENVIADA


def test_proposal_request_keeps_status():
    assert next_status(LeadStatus.TENTATIVA, event_for_call(CallResult.PEDIU_PROPOSTA)) == LeadStatus.TENTATIVA


def test_terminal_statuses_have_no_exits():
    for (current, _event) in TRANSITIONS:
        assert current not in TERMINAL
    with pytest.raises(InvalidTransition):
        next_status(LeadStatus.VENDIDO, LeadEvent.CALL_CONTACT_MADE)


def test_lost_requires_reason():
    with pytest.raises(LossReasonRequired):
        next_status(LeadStatus.PROPOSTA_ENVIADA, LeadEvent.DEAL_LOST)
    assert (
        next_status(LeadStatus.PROPOSTA_ENVIADA, LeadEvent.DEAL_LOST, loss_reason=LossReason.SEM_ORCAMENTO)
        == LeadStatus.PERDIDO
    )


def test_duplicate_flag_round_trip():
    flagged = next_status(LeadStatus.NOVO, LeadEvent.FLAGGED_DUPLICATE)
    assert flagged == LeadStatus.POSSIVEL_DUPLICADO
    assert next_status(flagged, LeadEvent.DUPLICATE_KEPT) == LeadStatus.NOVO
    assert next_status(flagged, LeadEvent.DUPLICATE_MERGED) == LeadStatus.POSSIVEL_DUPLICADO


def test_only_new_leads_get_flagged():
    assert not can_apply(LeadStatus.TENTATIVA, LeadEvent.FLAGGED_DUPLICATE)
    assert not can_apply(LeadStatus.POSSIVEL_DUPLICADO, LeadEvent.CALL_NO_ANSWER)


def test_manual_transition_rules():
    assert manual_transition(LeadStatus.NOVO, LeadStatus.DIAGNOSTICO_AGENDADO) == LeadStatus.DIAGNOSTICO_AGENDADO
    assert manual_transition(LeadStatus.VENDIDO, LeadStatus.VENDIDO) == LeadStatus.VENDIDO

    with pytest.raises(InvalidTransition):
        manual_transition(LeadStatus.VENDIDO, LeadStatus.NOVO)
    with pytest.raises(LossReasonRequired):
        manual_transition(LeadStatus.NOVO, LeadStatus.PERDIDO)
    assert manual_transition(LeadStatus.NOVO, LeadStatus.PERDIDO, loss_reason="OUTRO") == LeadStatus.PERDIDO
