"""
Máquina de status dos pedidos de delivery e das vendas de mesa.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from caixa.domain.errors import InvalidTransitionError
from caixa.domain.models import StatusPedido, StatusVendaMesa

_P = StatusPedido

TRANSICOES_PEDIDO: Dict[StatusPedido, FrozenSet[StatusPedido]] = {
    _P.PENDING: frozenset({_P.CONFIRMED, _P.CANCELLED}),
    _P.CONFIRMED: frozenset({_P.PREPARING, _P.CANCELLED}),
    _P.PREPARING: frozenset({_P.OUT_FOR_DELIVERY, _P.READY_FOR_PICKUP, _P.CANCELLED}),
    _P.OUT_FOR_DELIVERY: frozenset({_P.DELIVERED, _P.CANCELLED}),
    _P.READY_FOR_PICKUP: frozenset({_P.DELIVERED, _P.CANCELLED}),
    _P.DELIVERED: frozenset(),
    _P.CANCELLED: frozenset(),
}

TRANSICOES_MESA: Dict[StatusVendaMesa, FrozenSet[StatusVendaMesa]] = {
    StatusVendaMesa.ABERTA: frozenset({StatusVendaMesa.FECHADA, StatusVendaMesa.CANCELADA}),
    StatusVendaMesa.FECHADA: frozenset(),
    StatusVendaMesa.CANCELADA: frozenset(),
}


def terminal(status: StatusPedido) -> bool:
    return not TRANSICOES_PEDIDO[StatusPedido(status)]


def transiciona(atual, novo) -> StatusPedido:
    """Valida e devolve o novo status do pedido."""
    a, n = StatusPedido(atual), StatusPedido(novo)
    if n not in TRANSICOES_PEDIDO[a]:
        raise InvalidTransitionError(f"Pedido não pode ir de {a.value!r} para {n.value!r}")
    return n


def transiciona_mesa(atual, novo) -> StatusVendaMesa:
    a, n = StatusVendaMesa(atual), StatusVendaMesa(novo)
    if n not in TRANSICOES_MESA[a]:
        raise InvalidTransitionError(f"Venda de mesa não pode ir de {a.value!r} para {n.value!r}")
    return n
