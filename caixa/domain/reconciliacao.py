"""
Conciliação do caixa.

O saldo esperado na gaveta considera apenas lançamentos em dinheiro:

    saldo_esperado = abertura + Σ entradas em dinheiro − Σ saídas em dinheiro

Vendas em cartão, PIX ou voucher entram nos totais de faturamento, mas não
no saldo físico. A atribuição de canal vem do campo ``canal`` gravado no
lançamento.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Optional

from caixa.domain.dinheiro import ZERO, Numero, arredonda, to_money
from caixa.domain.errors import RegisterAlreadyOpenError, RegisterNotOpenError, ValidationError
from caixa.domain.models import CaixaRegistro, Canal, Lancamento, TipoLancamento


@dataclass
class ResumoCaixa:
    valor_abertura: Decimal
    total_vendas: Decimal
    vendas_por_canal: Dict[str, Decimal]
    outras_entradas: Decimal
    total_entradas: Decimal
    total_saidas: Decimal
    entradas_por_forma: Dict[str, Decimal]
    saidas_por_forma: Dict[str, Decimal]
    entradas_dinheiro: Decimal
    saidas_dinheiro: Decimal
    saldo_esperado: Decimal
    valor_fechamento: Optional[Decimal] = None
    diferenca: Optional[Decimal] = None
    quantidade_lancamentos: int = 0
    por_canal_quantidade: Dict[str, int] = field(default_factory=dict)


def resumo_caixa(caixa: CaixaRegistro, lancamentos: Iterable[Lancamento]) -> ResumoCaixa:
    vendas_por_canal: Dict[str, Decimal] = {c.value: ZERO for c in Canal if c.e_venda}
    qtd_por_canal: Dict[str, int] = {c.value: 0 for c in Canal if c.e_venda}
    entradas_forma: Dict[str, Decimal] = {}
    saidas_forma: Dict[str, Decimal] = {}
    outras = total_in = total_out = cash_in = cash_out = ZERO
    n = 0
    # pagamento misto gera um lançamento por forma para a mesma venda
    vendas_vistas = set()

    for lanc in lancamentos:
        if caixa.id is not None and lanc.caixa_id is not None and lanc.caixa_id != caixa.id:
            continue
        n += 1
        forma = lanc.forma_pagamento.value
        if lanc.tipo is TipoLancamento.INCOME:
            total_in += lanc.valor
            entradas_forma[forma] = entradas_forma.get(forma, ZERO) + lanc.valor
            if lanc.canal.e_venda:
                vendas_por_canal[lanc.canal.value] += lanc.valor
                chave = (lanc.canal.value, lanc.descricao or id(lanc))
                if chave not in vendas_vistas:
                    vendas_vistas.add(chave)
                    qtd_por_canal[lanc.canal.value] += 1
            else:
                outras += lanc.valor
            if lanc.forma_pagamento.em_especie:
                cash_in += lanc.valor
        else:
            total_out += lanc.valor
            saidas_forma[forma] = saidas_forma.get(forma, ZERO) + lanc.valor
            if lanc.forma_pagamento.em_especie:
                cash_out += lanc.valor

    esperado = arredonda(caixa.valor_abertura + cash_in - cash_out)
    diferenca = None
    if not caixa.aberto and caixa.valor_fechamento is not None:
        diferenca = arredonda(caixa.valor_fechamento - esperado)

    return ResumoCaixa(
        valor_abertura=arredonda(caixa.valor_abertura),
        total_vendas=arredonda(sum(vendas_por_canal.values(), ZERO)),
        vendas_por_canal={k: arredonda(v) for k, v in vendas_por_canal.items()},
        outras_entradas=arredonda(outras),
        total_entradas=arredonda(total_in),
        total_saidas=arredonda(total_out),
        entradas_por_forma={k: arredonda(v) for k, v in entradas_forma.items()},
        saidas_por_forma={k: arredonda(v) for k, v in saidas_forma.items()},
        entradas_dinheiro=arredonda(cash_in),
        saidas_dinheiro=arredonda(cash_out),
        saldo_esperado=esperado,
        valor_fechamento=caixa.valor_fechamento,
        diferenca=diferenca,
        quantidade_lancamentos=n,
        por_canal_quantidade=qtd_por_canal,
    )


def diferenca_fechamento(valor_fechamento: Numero, saldo_esperado: Numero) -> Decimal:
    return arredonda(to_money(valor_fechamento) - to_money(saldo_esperado))


# -------------------------
# Pré-condições
# -------------------------

def valida_abertura(valor_abertura: Numero, caixa_aberto: Optional[CaixaRegistro]) -> Decimal:
    v = arredonda(valor_abertura)
    if v <= 0:
        raise ValidationError("Valor de abertura deve ser maior que zero")
    if caixa_aberto is not None and caixa_aberto.aberto:
        raise RegisterAlreadyOpenError(
            f"Já existe um caixa aberto (#{caixa_aberto.id}) para a loja {caixa_aberto.loja_id}"
        )
    return v


def _exige_aberto(caixa: Optional[CaixaRegistro]) -> CaixaRegistro:
    if caixa is None:
        raise RegisterNotOpenError("Nenhum caixa aberto")
    if not caixa.aberto:
        raise RegisterNotOpenError(f"Caixa #{caixa.id} já foi fechado")
    return caixa


def valida_lancamento(caixa: Optional[CaixaRegistro], valor: Numero) -> Decimal:
    _exige_aberto(caixa)
    v = arredonda(valor)
    if v <= 0:
        raise ValidationError("Valor do lançamento deve ser maior que zero")
    return v


def valida_fechamento(caixa: Optional[CaixaRegistro], valor_fechamento: Numero) -> Decimal:
    _exige_aberto(caixa)
    v = arredonda(valor_fechamento)
    if v <= 0:
        raise ValidationError("Valor de fechamento deve ser maior que zero")
    return v
