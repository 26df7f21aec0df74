"""
Consolidação diária e mensal para relatórios.

As funções dobram listas de vendas, resumos de caixa e movimentos de fluxo
em um único registro de totais. São dobras puras: rodar duas vezes sobre os
mesmos dados dá o mesmo resultado. Vendas canceladas (delivery/PDV) e
vendas de mesa ainda abertas devem ser excluídas na consulta de origem
(ver ``vw_vendas``), não aqui.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from caixa.domain.dinheiro import ZERO, Numero, arredonda, media, percentual, soma
from caixa.domain.models import (
    Canal,
    MovimentoFluxo,
    PedidoEntrega,
    StatusPedido,
    TipoFluxo,
    Venda,
)
from caixa.domain.reconciliacao import ResumoCaixa

CANAIS_VENDA = [Canal.PDV.value, Canal.DELIVERY.value, Canal.MESA.value]


@dataclass
class ResumoCanal:
    canal: str
    quantidade: int = 0
    total: Decimal = ZERO
    ticket_medio: Decimal = ZERO
    percentual: Decimal = ZERO


@dataclass
class ResumoVendas:
    canais: Dict[str, ResumoCanal]
    total_vendas: Decimal
    quantidade_vendas: int
    ticket_medio: Decimal
    por_forma_pagamento: Dict[str, Decimal]


@dataclass
class ResumoDiario:
    data: str
    loja_id: int
    vendas: ResumoVendas
    quantidade_caixas: int = 0
    valor_abertura: Decimal = ZERO
    outras_entradas: Decimal = ZERO
    total_saidas: Decimal = ZERO
    saldo_esperado: Decimal = ZERO
    saldo_real: Decimal = ZERO
    diferenca: Decimal = ZERO


@dataclass
class FluxoCaixa:
    saldo_inicial: Decimal
    receitas: Decimal
    despesas: Decimal
    gastos_fixos: Decimal
    transferencias_entrada: Decimal
    transferencias_saida: Decimal
    entradas_sistema: Decimal
    saldo_do_periodo: Decimal
    saldo_total: Decimal
    total_movimentacoes: int
    primeira_movimentacao: Optional[str] = None
    ultima_movimentacao: Optional[str] = None


@dataclass
class ResumoMensal:
    ano_mes: str
    loja_id: int
    vendas: ResumoVendas
    fluxo: FluxoCaixa
    dias: List[ResumoDiario] = field(default_factory=list)


@dataclass
class ResumoEntregas:
    data: str
    total_pedidos: int
    faturamento: Decimal
    ticket_medio: Decimal
    total_taxas: Decimal
    por_status: Dict[str, int]
    por_forma_pagamento: Dict[str, Decimal]
    bairros: List[Dict[str, object]]


def resumo_vendas(vendas: Iterable[Venda]) -> ResumoVendas:
    """Totais, quantidades, ticket médio e participação (%) por canal."""
    qtd: Dict[str, int] = {c: 0 for c in CANAIS_VENDA}
    tot: Dict[str, Decimal] = {c: ZERO for c in CANAIS_VENDA}
    formas: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for v in vendas:
        c = v.canal.value
        qtd[c] = qtd.get(c, 0) + 1
        tot[c] = tot.get(c, ZERO) + v.total
        if v.forma_pagamento is not None:
            formas[v.forma_pagamento.value] += v.total

    n = sum(qtd.values())
    total = soma(tot.values())
    canais = {
        c: ResumoCanal(
            canal=c,
            quantidade=qtd[c],
            total=arredonda(tot[c]),
            ticket_medio=media(tot[c], qtd[c]),
            percentual=percentual(qtd[c], n),
        )
        for c in qtd
    }
    return ResumoVendas(
        canais=canais,
        total_vendas=total,
        quantidade_vendas=n,
        ticket_medio=media(total, n),
        por_forma_pagamento={k: arredonda(v) for k, v in formas.items()},
    )


def resumo_diario(
    data: str,
    loja_id: int,
    vendas: Iterable[Venda],
    resumos_caixa: Iterable[ResumoCaixa] = (),
) -> ResumoDiario:
    """Resumo do dia: vendas dos três canais e agregados dos caixas do dia.

    A diferença soma apenas caixas já fechados; caixas abertos contribuem
    com o saldo esperado como saldo real.
    """
    out = ResumoDiario(data=data, loja_id=loja_id, vendas=resumo_vendas(vendas))
    abertura = outras = saidas = esperado = real = dif = ZERO
    for r in resumos_caixa:
        out.quantidade_caixas += 1
        abertura += r.valor_abertura
        outras += r.outras_entradas
        saidas += r.total_saidas
        esperado += r.saldo_esperado
        if r.diferenca is not None and r.valor_fechamento is not None:
            real += r.valor_fechamento
            dif += r.diferenca
        else:
            real += r.saldo_esperado
    out.valor_abertura = arredonda(abertura)
    out.outras_entradas = arredonda(outras)
    out.total_saidas = arredonda(saidas)
    out.saldo_esperado = arredonda(esperado)
    out.saldo_real = arredonda(real)
    out.diferenca = arredonda(dif)
    return out


def fluxo_caixa(
    movimentos: Iterable[MovimentoFluxo],
    entradas_sistema: Numero = 0,
    saldo_inicial: Numero = 0,
) -> FluxoCaixa:
    por_tipo: Dict[TipoFluxo, Decimal] = {t: ZERO for t in TipoFluxo}
    datas: List[str] = []
    for m in movimentos:
        por_tipo[m.tipo] += m.valor
        if m.data:
            datas.append(m.data)
    sistema = arredonda(entradas_sistema)
    entradas = (
        por_tipo[TipoFluxo.RECEITA]
        + por_tipo[TipoFluxo.TRANSFERENCIA_ENTRADA]
        + sistema
    )
    saidas = (
        por_tipo[TipoFluxo.DESPESA]
        + por_tipo[TipoFluxo.GASTO_FIXO]
        + por_tipo[TipoFluxo.TRANSFERENCIA_SAIDA]
    )
    periodo = arredonda(entradas - saidas)
    inicial = arredonda(saldo_inicial)
    return FluxoCaixa(
        saldo_inicial=inicial,
        receitas=arredonda(por_tipo[TipoFluxo.RECEITA]),
        despesas=arredonda(por_tipo[TipoFluxo.DESPESA]),
        gastos_fixos=arredonda(por_tipo[TipoFluxo.GASTO_FIXO]),
        transferencias_entrada=arredonda(por_tipo[TipoFluxo.TRANSFERENCIA_ENTRADA]),
        transferencias_saida=arredonda(por_tipo[TipoFluxo.TRANSFERENCIA_SAIDA]),
        entradas_sistema=sistema,
        saldo_do_periodo=periodo,
        saldo_total=arredonda(inicial + periodo),
        total_movimentacoes=len(datas),
        primeira_movimentacao=min(datas) if datas else None,
        ultima_movimentacao=max(datas) if datas else None,
    )


def resumo_mensal(
    ano_mes: str,
    loja_id: int,
    vendas: Iterable[Venda],
    movimentos: Iterable[MovimentoFluxo] = (),
    saldo_inicial: Numero = 0,
) -> ResumoMensal:
    """Resumo do mês: vendas por canal, quebra por dia e fluxo de caixa."""
    vendas = list(vendas)
    por_dia: Dict[str, List[Venda]] = defaultdict(list)
    for v in vendas:
        if v.data:
            por_dia[str(v.data)[:10]].append(v)
    geral = resumo_vendas(vendas)
    dias = [resumo_diario(d, loja_id, por_dia[d]) for d in sorted(por_dia)]
    return ResumoMensal(
        ano_mes=ano_mes,
        loja_id=loja_id,
        vendas=geral,
        fluxo=fluxo_caixa(movimentos, geral.total_vendas, saldo_inicial),
        dias=dias,
    )


def resumo_entregas(data: str, pedidos: Iterable[PedidoEntrega], top_bairros: int = 10) -> ResumoEntregas:
    """Relatório de delivery do dia.

    Contagem por status inclui cancelados; faturamento, taxas, formas de
    pagamento e bairros consideram apenas pedidos não cancelados.
    """
    por_status: Dict[str, int] = {s.value: 0 for s in StatusPedido}
    formas: Dict[str, Decimal] = {}
    bairros: Dict[str, Dict[str, object]] = {}
    faturamento = taxas = ZERO
    validos = 0
    total = 0
    for p in pedidos:
        total += 1
        por_status[p.status.value] += 1
        if p.status is StatusPedido.CANCELLED:
            continue
        validos += 1
        faturamento += p.total
        taxas += p.taxa_entrega
        f = p.forma_pagamento.value
        formas[f] = formas.get(f, ZERO) + p.total
        nome = p.bairro or "Não informado"
        b = bairros.setdefault(nome, {"bairro": nome, "pedidos": 0, "faturamento": ZERO})
        b["pedidos"] += 1
        b["faturamento"] += p.total

    ranking = sorted(bairros.values(), key=lambda b: (-b["faturamento"], b["bairro"]))
    for b in ranking:
        b["faturamento"] = arredonda(b["faturamento"])
    return ResumoEntregas(
        data=data,
        total_pedidos=total,
        faturamento=arredonda(faturamento),
        ticket_medio=media(faturamento, validos),
        total_taxas=arredonda(taxas),
        por_status=por_status,
        por_forma_pagamento={k: arredonda(v) for k, v in formas.items()},
        bairros=ranking[:top_bairros],
    )
