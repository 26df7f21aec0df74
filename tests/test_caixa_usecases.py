from decimal import Decimal

import pytest

from caixa.domain.errors import RegisterAlreadyOpenError, RegisterNotOpenError, ValidationError
from caixa.domain.models import ItemCarrinho, ItemVenda, Produto, Sessao
from caixa.usecases.bairros import cadastrar_bairro
from caixa.usecases.caixa import (
    abrir_caixa,
    caixa_atual,
    fechar_caixa,
    lancar,
    resumo_caixa_atual,
    resumo_do_caixa,
)
from caixa.usecases.pedidos import DadosPedido, finalizar_pedido
from caixa.usecases.relatorios import relatorio_diario, resumo_do_dia
from caixa.usecases.vendas_pdv import registrar_venda_pdv

SESSAO = Sessao(loja_id=1, operador="ana")


def _venda(db_path, valor, forma="dinheiro"):
    return registrar_venda_pdv(
        [ItemVenda("A1", "Açaí", 1, preco_unitario=valor)], forma, SESSAO, db_path=db_path
    )


def _dia_de_movimento(db_path):
    """Abertura 50, três vendas PDV em dinheiro, um delivery no cartão e uma despesa."""
    cadastrar_bairro("Centro", "5.00", 30, db_path=db_path)
    caixa_id = abrir_caixa("50.00", SESSAO, db_path=db_path)["caixa_id"]
    for v in ("20.00", "15.00", "10.00"):
        _venda(db_path, v)
    finalizar_pedido(DadosPedido(
        cliente_nome="Maria",
        cliente_telefone="11987654321",
        bairro="Centro",
        itens=[ItemCarrinho(Produto("acai", "Açaí 700ml", "35.00"), 1)],
        forma_pagamento="card",
    ), SESSAO, db_path=db_path)
    lancar("expense", "5.00", "Compra de gelo", "dinheiro", SESSAO, db_path=db_path)
    return caixa_id


def test_abrir_caixa(db_path):
    res = abrir_caixa("100.00", SESSAO, db_path=db_path)
    assert res["valor_abertura"] == Decimal("100.00")
    atual = caixa_atual(SESSAO, db_path=db_path)
    assert atual.id == res["caixa_id"]
    assert atual.operador == "ana"
    with pytest.raises(RegisterAlreadyOpenError):
        abrir_caixa("10.00", SESSAO, db_path=db_path)


def test_abertura_invalida(db_path):
    with pytest.raises(ValidationError):
        abrir_caixa("0", SESSAO, db_path=db_path)


def test_lancar_sem_caixa(db_path):
    with pytest.raises(RegisterNotOpenError):
        lancar("income", "10.00", "Suprimento", sessao=SESSAO, db_path=db_path)
    with pytest.raises(RegisterNotOpenError):
        fechar_caixa("10.00", SESSAO, db_path=db_path)


def test_saldo_esperado_so_dinheiro(db_path):
    abrir_caixa("100.00", SESSAO, db_path=db_path)
    lancar("income", "50.00", "Suprimento", "dinheiro", SESSAO, db_path=db_path)
    lancar("income", "30.00", "Ajuste", "cartao", SESSAO, db_path=db_path)
    lancar("expense", "20.00", "Sangria", "dinheiro", SESSAO, db_path=db_path)
    r = resumo_caixa_atual(SESSAO, db_path=db_path)
    assert r.saldo_esperado == Decimal("130.00")
    assert r.outras_entradas == Decimal("80.00")
    assert r.total_vendas == Decimal("0.00")

    fechado = fechar_caixa("130.00", SESSAO, db_path=db_path)
    assert fechado.diferenca == Decimal("0.00")
    assert caixa_atual(SESSAO, db_path=db_path) is None


def test_fechamento_com_falta(db_path):
    abrir_caixa("100.00", SESSAO, db_path=db_path)
    lancar("income", "50.00", "Suprimento", "dinheiro", SESSAO, db_path=db_path)
    lancar("expense", "20.00", "Sangria", "dinheiro", SESSAO, db_path=db_path)
    r = fechar_caixa("125.00", SESSAO, db_path=db_path)
    assert r.saldo_esperado == Decimal("130.00")
    assert r.diferenca == Decimal("-5.00")


def test_dia_completo(db_path):
    caixa_id = _dia_de_movimento(db_path)

    r = resumo_caixa_atual(SESSAO, db_path=db_path)
    assert r.vendas_por_canal == {"pdv": Decimal("45.00"), "delivery": Decimal("40.00"), "mesa": Decimal("0.00")}
    assert r.saldo_esperado == Decimal("90.00")

    fechado = fechar_caixa("90.00", SESSAO, db_path=db_path)
    assert fechado.diferenca == Decimal("0.00")

    dia = resumo_do_dia(sessao=SESSAO, db_path=db_path)
    assert dia.vendas.total_vendas == Decimal("85.00")
    assert dia.vendas.quantidade_vendas == 4
    assert dia.saldo_esperado == Decimal("90.00")
    assert dia.diferenca == Decimal("0.00")

    # recalcular não altera nada
    assert resumo_do_dia(sessao=SESSAO, db_path=db_path) == dia
    assert resumo_do_caixa(caixa_id, db_path=db_path).diferenca == Decimal("0.00")


def test_relatorio_diario(db_path):
    _dia_de_movimento(db_path)
    columns, rows, msg = relatorio_diario(sessao=SESSAO, db_path=db_path)
    assert columns == ["Canal", "Vendas", "Total", "Ticket Médio", "% Vendas"]
    por_canal = {r[0]: r[1:] for r in rows}
    assert por_canal["PDV"] == [3, Decimal("45.00"), Decimal("15.00"), Decimal("75.00")]
    assert por_canal["Delivery"] == [1, Decimal("40.00"), Decimal("40.00"), Decimal("25.00")]
    assert por_canal["Mesa"][0] == 0
    assert por_canal["Total"] == [4, Decimal("85.00"), Decimal("21.25"), Decimal("100.00")]
    assert "Esperado: R$ 90,00" in msg
