# caixa/usecases/relatorios.py
"""
Relatórios gerenciais:
- diário (vendas por canal + caixas do dia)
- mensal (vendas por dia + fluxo de caixa)
- entregas (pedidos de delivery do dia, por status e bairro)
- caixa (conferência de um caixa, aberto ou fechado)

Cada relatório devolve ``(colunas, linhas, mensagem)`` para exibição em tabela.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from caixa.config import DB_PATH, DEFAULTS
from caixa.adapters.parsers import parse_ano_mes, parse_data
from caixa.domain.consolidacao import (
    CANAIS_VENDA,
    ResumoDiario,
    ResumoMensal,
    resumo_diario,
    resumo_entregas,
    resumo_mensal,
)
from caixa.domain.dinheiro import formata_preco
from caixa.domain.errors import RegisterNotOpenError
from caixa.domain.models import MovimentoFluxo, PedidoEntrega, Sessao, Venda
from caixa.infra.db import connect
from caixa.infra.migrations import apply_migrations
from caixa.infra.views import create_views
from caixa.infra.repositories import CaixaRepo, FluxoCaixaRepo, PedidoRepo, VendasRepo
from caixa.infra.logger import log_database_operation, log_system_event, system_logger
from caixa.usecases.caixa import caixa_atual, resumo_do_caixa

Relatorio = Tuple[List[str], List[list], Optional[str]]

_NOMES_CANAL = {"pdv": "PDV", "delivery": "Delivery", "mesa": "Mesa"}


# ----------------------
# util
# ----------------------

def _today_iso() -> str:
    return date.today().isoformat()


def _sessao(sessao: Optional[Sessao]) -> Sessao:
    return sessao or Sessao(loja_id=DEFAULTS.loja_padrao)


def _prepara(db_path: str) -> None:
    apply_migrations(db_path)
    create_views(db_path)
    log_database_operation("views", "CREATE", 0)


def _limites_mes(ano_mes: str) -> Tuple[str, str]:
    ano, mes = (int(x) for x in ano_mes.split("-"))
    ultimo = calendar.monthrange(ano, mes)[1]
    return f"{ano_mes}-01", f"{ano_mes}-{ultimo:02d}"


# ----------------------
# consolidação (objetos)
# ----------------------

def resumo_do_dia(data: Optional[str] = None, sessao: Optional[Sessao] = None,
                  db_path: str = DB_PATH) -> ResumoDiario:
    sessao = _sessao(sessao)
    dia = parse_data(data) or _today_iso()
    with connect(db_path) as conn:
        vendas = [Venda.from_row(r) for r in VendasRepo(db_path).por_periodo(sessao.loja_id, dia, dia, conn=conn)]
        caixas = CaixaRepo(db_path).por_data(sessao.loja_id, dia, conn=conn)
        resumos = [resumo_do_caixa(c["id"], db_path, conn=conn) for c in caixas]
    log_database_operation("vw_vendas", "SELECT", len(vendas), data=dia)
    return resumo_diario(dia, sessao.loja_id, vendas, resumos)


def resumo_do_mes(ano_mes: str, sessao: Optional[Sessao] = None, saldo_inicial=0,
                  db_path: str = DB_PATH) -> ResumoMensal:
    sessao = _sessao(sessao)
    ano_mes = parse_ano_mes(ano_mes)
    inicio, fim = _limites_mes(ano_mes)
    with connect(db_path) as conn:
        vendas = [Venda.from_row(r) for r in VendasRepo(db_path).por_periodo(sessao.loja_id, inicio, fim, conn=conn)]
        movs = [MovimentoFluxo.from_row(r) for r in FluxoCaixaRepo(db_path).por_mes(sessao.loja_id, ano_mes, conn=conn)]
    log_database_operation("vw_vendas", "SELECT", len(vendas), ano_mes=ano_mes)
    return resumo_mensal(ano_mes, sessao.loja_id, vendas, movs, saldo_inicial)


# ----------------------
# 1) Diário
# ----------------------

def relatorio_diario(data: Optional[str] = None, sessao: Optional[Sessao] = None,
                     db_path: str = DB_PATH) -> Relatorio:
    log_system_event("relatorio_diario_start", {"data": data})
    try:
        _prepara(db_path)
        r = resumo_do_dia(data, sessao, db_path)

        columns = ["Canal", "Vendas", "Total", "Ticket Médio", "% Vendas"]
        rows = [
            [_NOMES_CANAL[c], r.vendas.canais[c].quantidade, r.vendas.canais[c].total,
             r.vendas.canais[c].ticket_medio, r.vendas.canais[c].percentual]
            for c in CANAIS_VENDA
        ]
        participacao = Decimal("100.00") if r.vendas.quantidade_vendas else Decimal("0.00")
        rows.append(["Total", r.vendas.quantidade_vendas, r.vendas.total_vendas, r.vendas.ticket_medio, participacao])

        if not r.vendas.quantidade_vendas and not r.quantidade_caixas:
            msg = f"Nenhuma venda ou caixa em {r.data}."
        else:
            msg = (
                f"{r.data} | Caixas: {r.quantidade_caixas} | Abertura: {formata_preco(r.valor_abertura)} | "
                f"Saídas: {formata_preco(r.total_saidas)} | Esperado: {formata_preco(r.saldo_esperado)} | "
                f"Real: {formata_preco(r.saldo_real)} | Diferença: {formata_preco(r.diferenca)}"
            )
        system_logger.info(f"REPORT_DIARIO: {r.data} - {r.vendas.quantidade_vendas} vendas")
        return columns, rows, msg
    except Exception as e:
        log_system_event("relatorio_diario_error", {"data": data, "error": str(e)}, level="error")
        raise


# ----------------------
# 2) Mensal
# ----------------------

def relatorio_mensal(ano_mes: str, sessao: Optional[Sessao] = None, saldo_inicial=0,
                     db_path: str = DB_PATH) -> Relatorio:
    log_system_event("relatorio_mensal_start", {"ano_mes": ano_mes})
    try:
        _prepara(db_path)
        r = resumo_do_mes(ano_mes, sessao, saldo_inicial, db_path)

        columns = ["Dia", "PDV", "Delivery", "Mesa", "Total", "Vendas"]
        rows = [
            [d.data] + [d.vendas.canais[c].total for c in CANAIS_VENDA]
            + [d.vendas.total_vendas, d.vendas.quantidade_vendas]
            for d in r.dias
        ]
        rows.append(
            ["Total"] + [r.vendas.canais[c].total for c in CANAIS_VENDA]
            + [r.vendas.total_vendas, r.vendas.quantidade_vendas]
        )
        f = r.fluxo
        msg = (
            f"{r.ano_mes} | Vendas: {formata_preco(f.entradas_sistema)} | Receitas: {formata_preco(f.receitas)} | "
            f"Despesas: {formata_preco(f.despesas)} | Gastos fixos: {formata_preco(f.gastos_fixos)} | "
            f"Transf. (+/-): {formata_preco(f.transferencias_entrada)} / {formata_preco(f.transferencias_saida)} | "
            f"Saldo do período: {formata_preco(f.saldo_do_periodo)} | Saldo total: {formata_preco(f.saldo_total)}"
        )
        if not r.dias:
            msg = f"Nenhuma venda em {r.ano_mes}. " + msg
        return columns, rows, msg
    except Exception as e:
        log_system_event("relatorio_mensal_error", {"ano_mes": ano_mes, "error": str(e)}, level="error")
        raise


# ----------------------
# 3) Entregas
# ----------------------

def relatorio_entregas(data: Optional[str] = None, sessao: Optional[Sessao] = None, top_bairros: int = 10,
                       db_path: str = DB_PATH) -> Relatorio:
    sessao = _sessao(sessao)
    dia = parse_data(data) or _today_iso()
    log_system_event("relatorio_entregas_start", {"data": dia})
    try:
        _prepara(db_path)
        pedidos = [PedidoEntrega.from_row(p) for p in PedidoRepo(db_path).por_data(sessao.loja_id, dia)]
        r = resumo_entregas(dia, pedidos, top_bairros)

        columns = ["Bairro", "Pedidos", "Faturamento"]
        rows = [[b["bairro"], b["pedidos"], b["faturamento"]] for b in r.bairros]
        if not r.total_pedidos:
            msg = f"Nenhum pedido de delivery em {dia}."
        else:
            status = ", ".join(f"{k}={v}" for k, v in r.por_status.items() if v)
            msg = (
                f"{dia} | Pedidos: {r.total_pedidos} ({status}) | Faturamento: {formata_preco(r.faturamento)} | "
                f"Ticket médio: {formata_preco(r.ticket_medio)} | Taxas: {formata_preco(r.total_taxas)}"
            )
        return columns, rows, msg
    except Exception as e:
        log_system_event("relatorio_entregas_error", {"data": dia, "error": str(e)}, level="error")
        raise


# ----------------------
# 4) Caixa
# ----------------------

def relatorio_caixa(caixa_id: Optional[int] = None, sessao: Optional[Sessao] = None,
                    db_path: str = DB_PATH) -> Relatorio:
    """Conferência de um caixa. Sem ``caixa_id`` usa o caixa aberto da loja."""
    _prepara(db_path)
    if caixa_id is None:
        atual = caixa_atual(sessao, db_path)
        if atual is None:
            raise RegisterNotOpenError("Nenhum caixa aberto")
        caixa_id = atual.id
    r = resumo_do_caixa(caixa_id, db_path)

    columns = ["Item", "Valor"]
    rows: List[list] = [["Abertura", r.valor_abertura]]
    rows += [[f"Vendas {_NOMES_CANAL[c]} ({r.por_canal_quantidade.get(c, 0)})", r.vendas_por_canal[c]]
             for c in CANAIS_VENDA]
    rows.append(["Outras entradas", r.outras_entradas])
    rows.append(["Total de entradas", r.total_entradas])
    rows.append(["Total de saídas", r.total_saidas])
    rows += [[f"Entradas em {forma}", v] for forma, v in sorted(r.entradas_por_forma.items())]
    rows.append(["Entradas em dinheiro", r.entradas_dinheiro])
    rows.append(["Saídas em dinheiro", r.saidas_dinheiro])
    rows.append(["Saldo esperado", r.saldo_esperado])
    if r.valor_fechamento is not None:
        rows.append(["Valor de fechamento", r.valor_fechamento])
        rows.append(["Diferença", r.diferenca])
        msg = f"Caixa #{caixa_id} fechado"
    else:
        msg = f"Caixa #{caixa_id} aberto"
    return columns, rows, f"{msg} | {r.quantidade_lancamentos} lançamentos"
