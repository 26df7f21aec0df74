from decimal import Decimal

import pytest

from caixa.domain.entrega import (
    divide_conta, divide_pagamento, resolve, subtotal_pedido, troco_das_partes, valida_troco,
)
from caixa.domain.errors import ValidationError
from caixa.domain.models import Bairro, FormaPagamento

BAIRROS = [
    Bairro("Centro", "5.00", 30),
    Bairro("Jardim América", "8.50", 45),
    Bairro("Vila Fechada", "3.00", 20, ativo=False),
]


def test_resolve_bairro_cadastrado_ignora_acento_e_caixa():
    t = resolve(BAIRROS, "  jardim   américa ")
    assert t.taxa == Decimal("8.50")
    assert t.eta_minutos == 45
    assert t.encontrado
    assert t.nome == "Jardim América"


def test_bairro_desconhecido_taxa_zero_e_tempo_padrao():
    t = resolve(BAIRROS, "Bairro Novo")
    assert (t.taxa, t.eta_minutos, t.encontrado) == (Decimal("0.00"), 50, False)
    assert subtotal_pedido(Decimal("42.00"), t.taxa) == Decimal("42.00")


def test_bairro_inativo_conta_como_desconhecido():
    assert not resolve(BAIRROS, "Vila Fechada").encontrado


def test_bairro_desconhecido_bloqueado():
    with pytest.raises(ValidationError):
        resolve(BAIRROS, "Bairro Novo", bloquear_desconhecido=True)


def test_subtotal_pedido_soma_taxa():
    assert subtotal_pedido("53.70", resolve(BAIRROS, "Centro").taxa) == Decimal("58.70")


def test_valida_troco():
    assert valida_troco(FormaPagamento.DINHEIRO, "50", "42.50") == Decimal("7.50")
    assert valida_troco("money", None, "42.50") == Decimal("0.00")
    with pytest.raises(ValidationError):
        valida_troco(FormaPagamento.PIX, "50", "42.50")
    with pytest.raises(ValidationError):
        valida_troco(FormaPagamento.DINHEIRO, "40", "42.50")


def test_divide_conta_distribui_centavos():
    partes = divide_conta(Decimal("100.00"), 3)
    assert partes == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(partes) == Decimal("100.00")
    with pytest.raises(ValidationError):
        divide_conta(10, 0)


def test_divide_pagamento():
    assert divide_pagamento("pix", "50") == [(FormaPagamento.PIX, Decimal("50.00"))]
    partes = divide_pagamento("misto", "50.00", [("money", "30"), ("card", "20.00")])
    assert partes == [(FormaPagamento.DINHEIRO, Decimal("30.00")), (FormaPagamento.CARTAO, Decimal("20.00"))]
    assert troco_das_partes(partes, "50.00") == Decimal("20.00")
    assert troco_das_partes(partes, None) == Decimal("0.00")

    with pytest.raises(ValidationError):
        divide_pagamento("misto", "50.00", [("pix", "49.99")])
    with pytest.raises(ValidationError):
        troco_das_partes(divide_pagamento("misto", "50", [("pix", "25"), ("card", "25")]), "60")
