from datetime import datetime

from salesops.domain.parsing import company_to_candidate, normalize_companies, normalize_phone


def test_phone_digits_only():
    assert normalize_phone("(11) 99999-8888") == "11999998888"
    assert normalize_phone(None) == ""


def test_trade_name_preferred_then_legal_name():
    c = company_to_candidate(
        {
            "cnpj": "12.345.678/0001-90",
            "razao_social": "PADARIA BOM DIA LTDA",
            "nome_fantasia": "Padaria Bom Dia",
            "telefone": "(11) 3333-1000",
            "municipio": "São Paulo",
            "uf": "SP",
            "data_abertura": "2026-09-20",
        },
        segment="padaria",
    )
    assert c.company_name == "Padaria Bom Dia"
    assert c.phone_norm == "1133331000"
    assert c.cnpj == "12345678000190"
    assert c.segment == "padaria"
    assert c.opening_date == datetime(2026, 9, 20)

    c2 = company_to_candidate({"razao_social": "AUTO CENTER ME", "nome_fantasia": "", "telefone_1": "11944442000"})
    assert c2.company_name == "AUTO CENTER ME"


def test_records_without_a_usable_phone_are_dropped():
    rows = [
        {"razao_social": "Sem Telefone", "telefone": ""},
        {"razao_social": "Curto", "telefone": "3333-1000"},
        {"razao_social": "Ok", "telefone": "(21) 95555-3000"},
    ]
    out = normalize_companies(rows)
    assert [c.company_name for c in out] == ["Ok"]
