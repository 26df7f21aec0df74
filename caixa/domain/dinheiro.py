"""
Utilidades monetárias.

Todos os valores em reais são representados como ``Decimal`` e arredondados
para duas casas com ``ROUND_HALF_UP`` (metade para longe do zero). As
funções são puras e aceitam ``int``, ``str``, ``float`` ou ``Decimal``;
floats são convertidos via ``str`` para não herdar a representação binária.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Union

Numero = Union[int, float, str, Decimal]

CENTAVO = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(valor: Optional[Numero]) -> Decimal:
    """Converte ``valor`` para ``Decimal`` (sem arredondar). ``None`` vira zero."""
    if valor is None:
        return Decimal("0")
    if isinstance(valor, Decimal):
        return valor
    if isinstance(valor, bool):
        raise TypeError("bool não é um valor monetário")
    if isinstance(valor, float):
        return Decimal(str(valor))
    try:
        return Decimal(str(valor).strip())
    except InvalidOperation as e:
        raise ValueError(f"valor monetário inválido: {valor!r}") from e


def arredonda(valor: Optional[Numero]) -> Decimal:
    """Arredonda para centavos."""
    return to_money(valor).quantize(CENTAVO, rounding=ROUND_HALF_UP)


def soma(valores: Iterable[Optional[Numero]]) -> Decimal:
    total = Decimal("0")
    for v in valores:
        total += to_money(v)
    return arredonda(total)


def media(total: Numero, n: int) -> Decimal:
    """Ticket médio: ``total / n`` ou zero quando não há transações."""
    if not n:
        return ZERO
    return arredonda(to_money(total) / Decimal(n))


def percentual(parte: Numero, todo: Numero) -> Decimal:
    """``parte / todo`` em pontos percentuais (duas casas); zero se ``todo`` for zero."""
    t = to_money(todo)
    if t == 0:
        return ZERO
    return arredonda(to_money(parte) * Decimal(100) / t)


def formata_preco(valor: Optional[Numero]) -> str:
    """Formata no padrão pt-BR: ``R$ 1.234,56``."""
    v = arredonda(valor)
    sinal = "-" if v < 0 else ""
    txt = f"{abs(v):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sinal}R$ {txt}"
