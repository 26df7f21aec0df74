"""
Acúmulo e resgate de cashback.

Sequência por pedido:
1) cliente identificado pelo telefone;
2) resgate opcional, validado contra o saldo e contra o total do pedido;
3) total a pagar = subtotal + taxa de entrega − cashback, nunca negativo;
4) transações: resgate (se houver) e compra, com o cashback ganho calculado
   sobre o valor efetivamente pago.

As funções aqui são puras; a gravação atômica é feita pelo caso de uso.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from caixa.config import DEFAULTS
from caixa.domain.dinheiro import ZERO, Numero, arredonda, to_money
from caixa.domain.errors import (
    ExceedsOrderTotalError,
    InsufficientBalanceError,
    ValidationError,
)
from caixa.domain.models import TipoTransacao, TransacaoCashback


def valida_resgate(valor: Numero, saldo_disponivel: Numero, total_pedido: Numero) -> Decimal:
    """Exige ``0 < valor <= min(saldo_disponivel, total_pedido)``."""
    v = arredonda(valor)
    if v <= 0:
        raise ValidationError("Valor de cashback deve ser maior que zero")
    saldo = arredonda(saldo_disponivel)
    total = arredonda(total_pedido)
    if v > saldo:
        raise InsufficientBalanceError(v, saldo)
    if v > total:
        raise ExceedsOrderTotalError(v, total)
    return v


def total_a_pagar(subtotal: Numero, taxa_entrega: Numero, cashback_aplicado: Numero = 0) -> Decimal:
    total = to_money(subtotal) + to_money(taxa_entrega) - to_money(cashback_aplicado)
    return arredonda(max(total, Decimal("0")))


def calcula_cashback(total_pago: Numero, taxa: Numero = DEFAULTS.taxa_cashback) -> Decimal:
    pago = to_money(total_pago)
    if pago <= 0:
        return ZERO
    return arredonda(pago * to_money(taxa))


@dataclass
class PlanoCashback:
    subtotal: Decimal
    taxa_entrega: Decimal
    cashback_aplicado: Decimal
    total: Decimal
    cashback_ganho: Decimal
    transacoes: List[TransacaoCashback] = field(default_factory=list)


def planeja_cashback(
    subtotal: Numero,
    taxa_entrega: Numero,
    saldo_disponivel: Numero = 0,
    cashback_solicitado: Optional[Numero] = None,
    taxa: Numero = DEFAULTS.taxa_cashback,
    cliente_id: Optional[int] = None,
) -> PlanoCashback:
    """Calcula o que será cobrado e quais transações de cashback devem ser gravadas."""
    sub = arredonda(subtotal)
    fee = arredonda(taxa_entrega)
    aplicado = ZERO
    if cashback_solicitado is not None and to_money(cashback_solicitado) != 0:
        aplicado = valida_resgate(cashback_solicitado, saldo_disponivel, sub + fee)
    total = total_a_pagar(sub, fee, aplicado)
    ganho = calcula_cashback(total, taxa)

    transacoes: List[TransacaoCashback] = []
    if aplicado > 0:
        transacoes.append(TransacaoCashback(TipoTransacao.RESGATE, aplicado, cliente_id))
    if ganho > 0:
        transacoes.append(TransacaoCashback(TipoTransacao.COMPRA, ganho, cliente_id))
    return PlanoCashback(sub, fee, aplicado, total, ganho, transacoes)


def aplica_transacoes(saldo: Numero, transacoes: Iterable[TransacaoCashback]) -> Decimal:
    """Novo saldo após as transações. Resgates acima do saldo são rejeitados."""
    atual = arredonda(saldo)
    for t in transacoes:
        if t.tipo is TipoTransacao.RESGATE:
            if t.valor > atual:
                raise InsufficientBalanceError(t.valor, atual)
            atual -= t.valor
        else:
            atual += t.valor
    return arredonda(atual)
