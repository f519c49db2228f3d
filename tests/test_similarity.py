import pytest

from salesops.domain.similarity import name_similarity, normalize_company_name, normalize_text


def test_company_name_normalization_strips_accents_punctuation_and_suffixes():
    assert normalize_company_name("Padaria São José LTDA.") == "padaria sao jose"
    assert normalize_company_name("Clínica Sorriso - ME") == "clinica sorriso"
    assert normalize_company_name("Auto Peças S/A") == "auto pecas"
    assert normalize_company_name("Grupo Empresarial Alfa EIRELI") == "grupo alfa"


def test_text_normalization_keeps_company_words():
    # "empresarial"/"sociedade" only drop out of company names
    assert normalize_text("Sociedade Empresarial Ltda") == "sociedade empresarial"


def test_identical_after_normalization_scores_one():
    assert name_similarity("Padaria São José LTDA", "padaria sao jose") == 1.0
    # no token long enough to count, still identical
    assert name_similarity("AB", "ab") == 1.0


def test_short_tokens_only_scores_zero():
    assert name_similarity("AB Ltda", "CD ME") == 0.0
    assert name_similarity("", "Padaria") == 0.0


def test_similarity_is_symmetric_jaccard():
    a = "Auto Center Roda Viva"
    b = "Roda Viva Pneus"
    assert name_similarity(a, b) == pytest.approx(2 / 5)
    assert name_similarity(b, a) == name_similarity(a, b)


def test_similarity_range():
    for a, b in [
        ("Padaria Central", "Mercado Central"),
        ("Oficina Dois Irmãos", "Oficina Tres Irmaos"),
        ("x", "y"),
    ]:
        assert 0.0 <= name_similarity(a, b) <= 1.0
