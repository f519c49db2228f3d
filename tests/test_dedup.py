import pytest

from salesops.domain.dedup import find_duplicate, is_duplicate, matches
from salesops.domain.similarity import name_similarity
from salesops.domain.types import LeadSummary


def _lead(name, phone=None, cnpj=None, city=None, state=None, lead_id=None):
    return LeadSummary(company_name=name, phone_norm=phone, cnpj=cnpj, city=city, state=state, lead_id=lead_id)


def test_same_phone_is_duplicate_whatever_the_name():
    existing = [_lead("Padaria Central", phone="11999998888", lead_id=1)]
    cand = _lead("Oficina Mecanica", phone="11999998888")
    assert find_duplicate(cand, existing).lead_id == 1


def test_same_cnpj_is_duplicate():
    existing = [_lead("Padaria Central", cnpj="12345678000190", lead_id=7)]
    assert is_duplicate(_lead("Outra Empresa", cnpj="12345678000190"), existing)


def test_empty_identifiers_never_match():
    existing = [_lead("Padaria Central", phone=None, cnpj=None, lead_id=1)]
    assert not is_duplicate(_lead("Mercado Azul", phone=None, cnpj=None), existing)
    assert not matches(_lead("A", phone="", cnpj=""), _lead("B", phone="", cnpj=""))


def test_similar_name_same_location_is_duplicate():
    existing = [_lead("Padaria Pão Quente Norte", city="São Paulo", state="SP", lead_id=3)]
    # 3 shared tokens of 4 -> 0.75
    cand = _lead("Padaria Pao Quente", city="são paulo", state="sp")
    assert find_duplicate(cand, existing).lead_id == 3


def test_two_thirds_similarity_is_not_enough():
    existing = [_lead("Padaria Central Norte", city="Campinas", state="SP", lead_id=3)]
    cand = _lead("Padaria Central", city="Campinas", state="SP")
    assert not is_duplicate(cand, existing)


def test_short_words_drop_and_location_case_is_ignored():
    existing = [_lead("Acai da Praia", city="santos", state="SP", lead_id=4)]
    cand = _lead("Acai Praia Comercio", city="Santos", state="sp")
    # {acai, praia} vs {acai, praia, comercio}: 2/3, below the threshold
    assert name_similarity(cand.company_name, existing[0].company_name) == pytest.approx(2 / 3)
    assert not is_duplicate(cand, existing)

    # same location is still recognised: a closer name matches
    assert find_duplicate(_lead("Acai da Praia LTDA", city="Santos", state="sp"), existing).lead_id == 4


def test_same_name_in_other_city_is_not_duplicate():
    existing = [_lead("Padaria Central", city="Campinas", state="SP", lead_id=3)]
    assert not is_duplicate(_lead("Padaria Central", city="Santos", state="SP"), existing)


def test_missing_location_disables_name_rule():
    existing = [_lead("Padaria Central", city="Campinas", state="SP", lead_id=3)]
    assert not is_duplicate(_lead("Padaria Central", city="Campinas", state=None), existing)


def test_first_match_wins():
    existing = [
        _lead("Mercado Azul", phone="11911112222", lead_id=1),
        _lead("Mercado Azul", phone="11911112222", lead_id=2),
    ]
    assert find_duplicate(_lead("x", phone="11911112222"), existing).lead_id == 1


def test_no_existing_leads():
    assert find_duplicate(_lead("Padaria", phone="11911112222"), []) is None
