from decimal import Decimal

import pytest

from caixa.domain.dinheiro import (
    arredonda, formata_preco, media, percentual, soma, to_money,
)


def test_to_money_converte_float_pelo_texto():
    assert to_money(0.1) == Decimal("0.1")
    assert to_money("15.90") == Decimal("15.90")
    assert to_money(None) == Decimal("0")


def test_to_money_rejeita_bool_e_texto_invalido():
    with pytest.raises(TypeError):
        to_money(True)
    with pytest.raises(ValueError):
        to_money("abc")


@pytest.mark.parametrize(
    "valor,esperado",
    [
        ("0.125", "0.13"),
        (2.675, "2.68"),
        ("-0.125", "-0.13"),
        ("10", "10.00"),
    ],
)
def test_arredonda_metade_para_cima(valor, esperado):
    assert arredonda(valor) == Decimal(esperado)


def test_soma_sem_erro_de_float():
    assert soma([0.1, 0.2, "0.3"]) == Decimal("0.60")


def test_media_e_percentual_com_zero():
    assert media(Decimal("100"), 0) == Decimal("0.00")
    assert media(Decimal("100"), 3) == Decimal("33.33")
    assert percentual(1, 0) == Decimal("0.00")
    assert percentual(1, 3) == Decimal("33.33")


@pytest.mark.parametrize(
    "valor,txt",
    [
        (Decimal("1234.56"), "R$ 1.234,56"),
        ("5", "R$ 5,00"),
        (Decimal("-5"), "-R$ 5,00"),
        (0, "R$ 0,00"),
    ],
)
def test_formata_preco(valor, txt):
    assert formata_preco(valor) == txt
