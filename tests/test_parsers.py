from decimal import Decimal

import pytest

from caixa.adapters.parsers import (
    formata_telefone, normaliza_telefone, parse_ano_mes, parse_data, parse_pagamentos, parse_peso_kg,
    parse_valor,
)
from caixa.domain.errors import ValidationError


@pytest.mark.parametrize(
    "txt,esperado",
    [
        ("R$ 1.234,56", Decimal("1234.56")),
        ("12,5", Decimal("12.5")),
        ("1,234.56", Decimal("1234.56")),
        ("15.90", Decimal("15.90")),
        ("1.234.567", Decimal("1234567")),
        (7, Decimal("7")),
        ("", None),
        (None, None),
    ],
)
def test_parse_valor(txt, esperado):
    assert parse_valor(txt) == esperado


def test_parse_valor_invalido():
    with pytest.raises(ValidationError):
        parse_valor("abc")


@pytest.mark.parametrize(
    "txt,esperado",
    [("350g", Decimal("0.35")), ("0,350 kg", Decimal("0.350")), ("0.5", Decimal("0.5")), ("", None)],
)
def test_parse_peso_kg(txt, esperado):
    assert parse_peso_kg(txt) == esperado


@pytest.mark.parametrize(
    "txt,esperado",
    [
        ("(11) 98765-4321", "11987654321"),
        ("+55 11 98765-4321", "11987654321"),
        ("11987654321", "11987654321"),
    ],
)
def test_normaliza_telefone(txt, esperado):
    assert normaliza_telefone(txt) == esperado


@pytest.mark.parametrize("txt", ["", "1234", "(11) 8765-4321", None])
def test_telefone_invalido(txt):
    with pytest.raises(ValidationError):
        normaliza_telefone(txt)


def test_formata_telefone():
    assert formata_telefone("11987654321") == "(11) 98765-4321"


def test_datas():
    assert parse_data("15/03/2024") == "2024-03-15"
    assert parse_data("2024-03-15T10:00:00") == "2024-03-15"
    assert parse_data(None) is None
    assert parse_ano_mes("2024-3") == "2024-03"
    assert parse_ano_mes("03/2024") == "2024-03"
    with pytest.raises(ValidationError):
        parse_ano_mes("2024-13")
    with pytest.raises(ValidationError):
        parse_data("31/02/2024")


def test_parse_pagamentos():
    assert parse_pagamentos(None) is None
    assert parse_pagamentos([]) is None
    assert parse_pagamentos([{"forma": "pix", "valor": "20,00"}, {"forma": "money", "valor": 10}]) == [
        ("pix", Decimal("20.00")), ("money", Decimal("10")),
    ]
    with pytest.raises(ValidationError):
        parse_pagamentos([{"forma": "pix"}])
