"""
UC: Abertura, lançamentos, fechamento e conferência do caixa.

Cada loja tem no máximo um caixa aberto; a sessão (loja/operador) é
passada explicitamente em cada chamada.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

from caixa.config import DB_PATH, DEFAULTS
from caixa.domain.errors import RegisterNotOpenError
from caixa.domain.models import CaixaRegistro, Canal, FormaPagamento, Lancamento, Sessao, TipoLancamento
from caixa.domain.reconciliacao import (
    ResumoCaixa,
    diferenca_fechamento,
    resumo_caixa,
    valida_abertura,
    valida_fechamento,
    valida_lancamento,
)
from caixa.infra.db import connect, using
from caixa.infra.repositories import CaixaRepo, LancamentoRepo, agora
from caixa.infra.logger import log_caixa, log_database_operation, log_transaction


def _sessao(sessao: Optional[Sessao]) -> Sessao:
    return sessao or Sessao(loja_id=DEFAULTS.loja_padrao)


def caixa_atual(sessao: Optional[Sessao] = None, db_path: str = DB_PATH, conn=None) -> Optional[CaixaRegistro]:
    row = CaixaRepo(db_path).atual(_sessao(sessao).loja_id, conn=conn)
    return CaixaRegistro.from_row(row) if row else None


def abrir_caixa(valor_abertura, sessao: Optional[Sessao] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    sessao = _sessao(sessao)
    try:
        with connect(db_path) as conn:
            valor = valida_abertura(valor_abertura, caixa_atual(sessao, db_path, conn=conn))
            aberto_em = agora()
            caixa_id = CaixaRepo(db_path).abrir(sessao.loja_id, valor, sessao.operador, aberto_em, conn=conn)
        log_caixa("abertura", caixa_id, valor, loja_id=sessao.loja_id, operador=sessao.operador)
        log_database_operation("caixa_registro", "INSERT", 1, caixa_id=caixa_id)
        return {"caixa_id": caixa_id, "loja_id": sessao.loja_id, "valor_abertura": valor, "aberto_em": aberto_em}
    except Exception as e:
        log_transaction("abrir_caixa", {"loja_id": sessao.loja_id, "valor": str(valor_abertura)}, error=str(e))
        raise


def lancar(
    tipo,
    valor,
    descricao: str = "",
    forma_pagamento=FormaPagamento.DINHEIRO,
    sessao: Optional[Sessao] = None,
    canal=Canal.MANUAL,
    db_path: str = DB_PATH,
    conn=None,
) -> Dict[str, Any]:
    """Lançamento avulso (suprimento, sangria, despesa) no caixa aberto.

    Com ``conn`` o lançamento entra na transação do chamador (usado pelas vendas).
    """
    sessao = _sessao(sessao)
    tipo = TipoLancamento(tipo)
    forma = FormaPagamento.parse(forma_pagamento)
    try:
        with using(db_path, conn) as c:
            caixa = caixa_atual(sessao, db_path, conn=c)
            v = valida_lancamento(caixa, valor)
            lanc_id = LancamentoRepo(db_path).insert(caixa.id, tipo, v, Canal(canal), forma, descricao, conn=c)
        log_caixa("lancamento", caixa.id, v, tipo=tipo.value, canal=Canal(canal).value, forma=forma.value)
        return {"lancamento_id": lanc_id, "caixa_id": caixa.id, "tipo": tipo.value, "valor": v}
    except Exception as e:
        log_transaction("lancar", {"loja_id": sessao.loja_id, "tipo": tipo.value, "valor": str(valor)}, error=str(e))
        raise


def _lancamentos(caixa_id: int, db_path: str, conn=None):
    return [Lancamento.from_row(r) for r in LancamentoRepo(db_path).por_caixa(caixa_id, conn=conn)]


def resumo_caixa_atual(sessao: Optional[Sessao] = None, db_path: str = DB_PATH) -> ResumoCaixa:
    with connect(db_path) as conn:
        caixa = caixa_atual(sessao, db_path, conn=conn)
        if caixa is None:
            raise RegisterNotOpenError("Nenhum caixa aberto")
        return resumo_caixa(caixa, _lancamentos(caixa.id, db_path, conn))


def resumo_do_caixa(caixa_id: int, db_path: str = DB_PATH, conn=None) -> ResumoCaixa:
    row = CaixaRepo(db_path).get(caixa_id, conn=conn)
    return resumo_caixa(CaixaRegistro.from_row(row), _lancamentos(caixa_id, db_path, conn))


def fechar_caixa(valor_fechamento, sessao: Optional[Sessao] = None, db_path: str = DB_PATH) -> ResumoCaixa:
    """Fecha o caixa aberto e devolve o resumo com a diferença apurada."""
    sessao = _sessao(sessao)
    try:
        with connect(db_path) as conn:
            caixa = caixa_atual(sessao, db_path, conn=conn)
            valor = valida_fechamento(caixa, valor_fechamento)
            parcial = resumo_caixa(caixa, _lancamentos(caixa.id, db_path, conn))
            diferenca = diferenca_fechamento(valor, parcial.saldo_esperado)
            fechado_em = agora()
            CaixaRepo(db_path).fechar(caixa.id, valor, diferenca, fechado_em, conn=conn)
            fechado = replace(caixa, valor_fechamento=valor, fechado_em=fechado_em)
            resumo = resumo_caixa(fechado, _lancamentos(caixa.id, db_path, conn))
        log_caixa(
            "fechamento", caixa.id, valor,
            saldo_esperado=str(resumo.saldo_esperado), diferenca=str(resumo.diferenca),
        )
        return resumo
    except Exception as e:
        log_transaction("fechar_caixa", {"loja_id": sessao.loja_id, "valor": str(valor_fechamento)}, error=str(e))
        raise
