from decimal import Decimal

from caixa.domain.consolidacao import (
    fluxo_caixa, resumo_diario, resumo_entregas, resumo_mensal, resumo_vendas,
)
from caixa.domain.models import CaixaRegistro, Lancamento, MovimentoFluxo, PedidoEntrega, Venda
from caixa.domain.reconciliacao import resumo_caixa


def _vendas_do_cenario():
    return [
        Venda("pdv", "20.00", "dinheiro", "2024-03-15T09:00:00"),
        Venda("pdv", "15.00", "dinheiro", "2024-03-15T10:00:00"),
        Venda("pdv", "10.00", "dinheiro", "2024-03-15T11:00:00"),
        Venda("delivery", "40.00", "cartao", "2024-03-15T12:00:00"),
    ]


def _caixa_do_cenario():
    caixa = CaixaRegistro(1, "50.00", aberto_em="2024-03-15T08:00:00")
    lancs = [
        Lancamento("income", "20.00", "pdv", "dinheiro", caixa_id=1),
        Lancamento("income", "15.00", "pdv", "dinheiro", caixa_id=1),
        Lancamento("income", "10.00", "pdv", "dinheiro", caixa_id=1),
        Lancamento("income", "40.00", "delivery", "cartao", caixa_id=1),
        Lancamento("expense", "5.00", "manual", "dinheiro", caixa_id=1),
    ]
    return resumo_caixa(caixa, lancs)


def test_cenario_do_dia():
    r = resumo_diario("2024-03-15", 1, _vendas_do_cenario(), [_caixa_do_cenario()])
    assert r.vendas.total_vendas == Decimal("85.00")
    assert r.vendas.quantidade_vendas == 4
    assert r.vendas.canais["pdv"].total == Decimal("45.00")
    assert r.vendas.canais["pdv"].ticket_medio == Decimal("15.00")
    assert r.vendas.canais["delivery"].percentual == Decimal("25.00")
    assert r.vendas.canais["mesa"].quantidade == 0
    assert r.vendas.por_forma_pagamento == {"dinheiro": Decimal("45.00"), "cartao": Decimal("40.00")}
    assert r.saldo_esperado == Decimal("90.00")
    # caixa aberto: real = esperado, sem diferença
    assert r.saldo_real == Decimal("90.00")
    assert r.diferenca == Decimal("0.00")


def test_consolidacao_e_idempotente():
    vendas = _vendas_do_cenario()
    caixas = [_caixa_do_cenario()]
    a = resumo_diario("2024-03-15", 1, vendas, caixas)
    b = resumo_diario("2024-03-15", 1, vendas, caixas)
    assert a == b


def test_diferenca_so_de_caixas_fechados():
    fechado = resumo_caixa(
        CaixaRegistro(2, "100", valor_fechamento="95", fechado_em="2024-03-15T22:00:00"), []
    )
    r = resumo_diario("2024-03-15", 1, [], [_caixa_do_cenario(), fechado])
    assert r.quantidade_caixas == 2
    assert r.saldo_esperado == Decimal("190.00")
    assert r.saldo_real == Decimal("185.00")
    assert r.diferenca == Decimal("-5.00")


def test_resumo_vendas_vazio():
    r = resumo_vendas([])
    assert r.total_vendas == Decimal("0.00")
    assert r.ticket_medio == Decimal("0.00")
    assert all(c.percentual == Decimal("0.00") for c in r.canais.values())


def test_fluxo_caixa():
    movs = [
        MovimentoFluxo("receita", "100", "2024-03-01"),
        MovimentoFluxo("despesa", "30", "2024-03-05"),
        MovimentoFluxo("gasto_fixo", "1200", "2024-03-10"),
        MovimentoFluxo("transferencia_entrada", "500", "2024-03-11"),
        MovimentoFluxo("transferencia_saida", "50", "2024-03-20"),
    ]
    f = fluxo_caixa(movs, entradas_sistema="2000", saldo_inicial="300")
    assert f.saldo_do_periodo == Decimal("1320.00")
    assert f.saldo_total == Decimal("1620.00")
    assert f.total_movimentacoes == 5
    assert (f.primeira_movimentacao, f.ultima_movimentacao) == ("2024-03-01", "2024-03-20")


def test_resumo_mensal_quebra_por_dia():
    vendas = _vendas_do_cenario() + [Venda("mesa", "60.00", "pix", "2024-03-16T20:00:00")]
    r = resumo_mensal("2024-03", 1, vendas, [MovimentoFluxo("despesa", "45", "2024-03-16")])
    assert [d.data for d in r.dias] == ["2024-03-15", "2024-03-16"]
    assert r.dias[1].vendas.canais["mesa"].total == Decimal("60.00")
    assert r.vendas.total_vendas == Decimal("145.00")
    assert r.fluxo.entradas_sistema == Decimal("145.00")
    assert r.fluxo.saldo_do_periodo == Decimal("100.00")


def test_resumo_entregas_exclui_cancelados_do_faturamento():
    pedidos = [
        PedidoEntrega("45.00", "5.00", "delivered", "pix", "Centro"),
        PedidoEntrega("30.00", "5.00", "pending", "money", "Centro"),
        PedidoEntrega("60.00", "8.50", "cancelled", "card", "Jardim"),
        PedidoEntrega("20.00", "0", "preparing", "card", None),
    ]
    r = resumo_entregas("2024-03-15", pedidos)
    assert r.total_pedidos == 4
    assert r.por_status["cancelled"] == 1
    assert r.faturamento == Decimal("95.00")
    assert r.total_taxas == Decimal("10.00")
    assert r.ticket_medio == Decimal("31.67")
    assert r.por_forma_pagamento == {"pix": Decimal("45.00"), "dinheiro": Decimal("30.00"), "cartao": Decimal("20.00")}
    assert [b["bairro"] for b in r.bairros] == ["Centro", "Não informado"]
    assert r.bairros[0]["faturamento"] == Decimal("75.00")
