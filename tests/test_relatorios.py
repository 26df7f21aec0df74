from datetime import date
from decimal import Decimal

import pytest

from caixa.domain.errors import RegisterNotOpenError, ValidationError
from caixa.domain.models import ItemCarrinho, ItemVenda, Produto, Sessao
from caixa.usecases.bairros import cadastrar_bairro
from caixa.usecases.caixa import abrir_caixa, fechar_caixa
from caixa.usecases.fluxo_caixa import registrar_movimento
from caixa.usecases.pedidos import DadosPedido, atualizar_status_pedido, finalizar_pedido
from caixa.usecases.relatorios import (
    relatorio_caixa,
    relatorio_diario,
    relatorio_entregas,
    relatorio_mensal,
    resumo_do_mes,
)
from caixa.usecases.vendas_pdv import registrar_venda_pdv

SESSAO = Sessao(1, "caio")


def _pedido(db_path, bairro, preco, telefone="11987654321"):
    return finalizar_pedido(DadosPedido(
        cliente_nome="Cliente",
        cliente_telefone=telefone,
        bairro=bairro,
        itens=[ItemCarrinho(Produto("acai", "Açaí", preco), 1)],
        forma_pagamento="pix",
    ), SESSAO, db_path=db_path)


def test_relatorio_diario_sem_movimento(db_path):
    columns, rows, msg = relatorio_diario("2024-03-15", SESSAO, db_path=db_path)
    assert rows[-1] == ["Total", 0, Decimal("0.00"), Decimal("0.00"), Decimal("0.00")]
    assert msg == "Nenhuma venda ou caixa em 2024-03-15."


def test_relatorio_entregas(db_path):
    cadastrar_bairro("Centro", "5.00", 30, db_path=db_path)
    cadastrar_bairro("Jardim América", "8.00", 45, db_path=db_path)
    _pedido(db_path, "Centro", "20.00")
    _pedido(db_path, "centro", "30.00")
    cancelado = _pedido(db_path, "Jardim América", "50.00")["pedido_id"]
    atualizar_status_pedido(cancelado, "cancelled", db_path=db_path)

    columns, rows, msg = relatorio_entregas(sessao=SESSAO, db_path=db_path)
    assert columns == ["Bairro", "Pedidos", "Faturamento"]
    # grafia diferente cai no mesmo bairro cadastrado
    assert rows == [["Centro", 2, Decimal("60.00")]]
    assert "Pedidos: 3" in msg
    assert "cancelled=1" in msg
    assert "Faturamento: R$ 60,00" in msg


def test_relatorio_mensal(db_path):
    hoje = date.today()
    abrir_caixa("50.00", SESSAO, db_path=db_path)
    registrar_venda_pdv([ItemVenda("C", "Copo", 1, preco_unitario="20.00")], "pix", SESSAO, db_path=db_path)
    registrar_movimento("despesa", "45.00", hoje.isoformat(), "Conta de luz", SESSAO, db_path=db_path)
    registrar_movimento("gasto_fixo", "10.00", "2001-01-10", "Outro mês", SESSAO, db_path=db_path)

    ano_mes = hoje.strftime("%Y-%m")
    r = resumo_do_mes(ano_mes, SESSAO, saldo_inicial="100.00", db_path=db_path)
    assert r.vendas.total_vendas == Decimal("20.00")
    assert r.fluxo.despesas == Decimal("45.00")
    assert r.fluxo.gastos_fixos == Decimal("0.00")
    assert r.fluxo.saldo_do_periodo == Decimal("-25.00")
    assert r.fluxo.saldo_total == Decimal("75.00")

    columns, rows, msg = relatorio_mensal(ano_mes, SESSAO, "100.00", db_path=db_path)
    assert columns == ["Dia", "PDV", "Delivery", "Mesa", "Total", "Vendas"]
    assert rows[0][0] == hoje.isoformat()
    assert rows[-1] == ["Total", Decimal("20.00"), Decimal("0.00"), Decimal("0.00"), Decimal("20.00"), 1]
    assert "Saldo total: R$ 75,00" in msg


def test_relatorio_caixa(db_path):
    with pytest.raises(RegisterNotOpenError):
        relatorio_caixa(sessao=SESSAO, db_path=db_path)

    caixa_id = abrir_caixa("50.00", SESSAO, db_path=db_path)["caixa_id"]
    registrar_venda_pdv([ItemVenda("C", "Copo", 1, preco_unitario="20.00")], "dinheiro", SESSAO, db_path=db_path)
    _, rows, msg = relatorio_caixa(sessao=SESSAO, db_path=db_path)
    itens = dict((r[0], r[1]) for r in rows)
    assert itens["Saldo esperado"] == Decimal("70.00")
    assert "Diferença" not in itens
    assert msg.startswith(f"Caixa #{caixa_id} aberto")

    fechar_caixa("68.00", SESSAO, db_path=db_path)
    _, rows, msg = relatorio_caixa(caixa_id, SESSAO, db_path=db_path)
    itens = dict((r[0], r[1]) for r in rows)
    assert itens["Diferença"] == Decimal("-2.00")
    assert itens["Vendas PDV (1)"] == Decimal("20.00")
    assert msg == f"Caixa #{caixa_id} fechado | 1 lançamentos"


@pytest.mark.parametrize(
    "tipo,valor,data",
    [("bonus", "10", "2024-03-01"), ("despesa", "0", "2024-03-01"), ("despesa", "10", None)],
)
def test_movimento_invalido(db_path, tipo, valor, data):
    with pytest.raises(ValidationError):
        registrar_movimento(tipo, valor, data, sessao=SESSAO, db_path=db_path)
