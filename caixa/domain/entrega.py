"""
Taxa de entrega, troco, divisão de conta e do pagamento misto.

``resolve`` mapeia o nome do bairro para taxa e tempo estimado. Bairro
ausente da tabela devolve taxa zero e o tempo padrão, a menos que a
política ``bloquear_desconhecido`` esteja ligada.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Tuple

from caixa.config import DEFAULTS
from caixa.domain.dinheiro import ZERO, Numero, arredonda, soma, to_money
from caixa.domain.errors import ValidationError
from caixa.domain.models import Bairro, FormaPagamento

_ACENTOS = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))


def _chave(nome: Optional[str]) -> str:
    s = str(nome or "").strip().lower()
    s = "".join(_ACENTOS.get(ch, ch) for ch in s)
    return re.sub(r"\s+", " ", s)


@dataclass(frozen=True)
class TaxaEntrega:
    taxa: Decimal
    eta_minutos: int
    encontrado: bool
    nome: str = ""


def resolve(
    bairros: Iterable[Bairro],
    nome: Optional[str],
    bloquear_desconhecido: bool = DEFAULTS.bloquear_bairro_desconhecido,
    eta_padrao: int = DEFAULTS.eta_padrao_minutos,
) -> TaxaEntrega:
    alvo = _chave(nome)
    for b in bairros:
        if b.ativo and _chave(b.nome) == alvo:
            return TaxaEntrega(arredonda(b.taxa_entrega), int(b.tempo_entrega), True, b.nome)
    if bloquear_desconhecido:
        raise ValidationError(f"Bairro não atendido: {nome!r}")
    return TaxaEntrega(ZERO, int(eta_padrao), False, re.sub(r"\s+", " ", str(nome or "").strip()))


def subtotal_pedido(subtotal_carrinho: Numero, taxa: Numero) -> Decimal:
    return arredonda(to_money(subtotal_carrinho) + to_money(taxa))


def valida_troco(forma: FormaPagamento, troco_para: Optional[Numero], total: Numero) -> Decimal:
    """Retorna o troco devido. Troco só existe para pagamento em dinheiro."""
    if troco_para is None:
        return ZERO
    valor = to_money(troco_para)
    if FormaPagamento.parse(forma) is not FormaPagamento.DINHEIRO:
        raise ValidationError("Troco só pode ser informado para pagamento em dinheiro")
    t = arredonda(total)
    if valor < t:
        raise ValidationError(f"Troco para {valor} é menor que o total {t}")
    return arredonda(valor - t)


def divide_conta(total: Numero, partes: int) -> List[Decimal]:
    """Divide ``total`` em ``partes`` iguais; os centavos que sobram vão para as primeiras."""
    if partes < 1:
        raise ValidationError("Número de partes deve ser pelo menos 1")
    centavos = int(arredonda(total) * 100)
    base, resto = divmod(centavos, partes)
    return [
        (Decimal(base + (1 if i < resto else 0)) / Decimal(100)).quantize(Decimal("0.01"))
        for i in range(partes)
    ]


ParteAPagar = Tuple[FormaPagamento, Decimal]


def divide_pagamento(forma: Any, total: Numero,
                     partes: Optional[Iterable[Tuple[Any, Numero]]] = None) -> List[ParteAPagar]:
    """Partes ``(forma, valor)`` que quitam ``total``.

    Só o pagamento ``misto`` tem mais de uma parte; cada parte usa uma
    forma simples e a soma das partes precisa bater com o total.
    """
    forma = FormaPagamento.parse(forma)
    t = arredonda(total)
    partes = list(partes or [])
    if forma is not FormaPagamento.MISTO:
        if partes:
            raise ValidationError("Divisão do pagamento só vale para a forma misto")
        return [(forma, t)]
    if not partes:
        raise ValidationError("Pagamento misto exige o valor pago em cada forma")

    resultado: List[ParteAPagar] = []
    for f, v in partes:
        f = FormaPagamento.parse(f)
        if f is FormaPagamento.MISTO:
            raise ValidationError("Parte de pagamento misto não pode ser misto")
        valor = arredonda(v)
        if valor <= 0:
            raise ValidationError(f"Valor pago em {f.value} deve ser maior que zero")
        resultado.append((f, valor))
    pago = soma(v for _, v in resultado)
    if pago != t:
        raise ValidationError(f"Soma das partes ({pago}) difere do total ({t})")
    return resultado


def parte_em_dinheiro(partes: Iterable[ParteAPagar]) -> Decimal:
    return soma(v for f, v in partes if f.em_especie)


def troco_das_partes(partes: List[ParteAPagar], troco_para: Optional[Numero]) -> Decimal:
    """Troco calculado sobre a parte em dinheiro do pagamento."""
    if troco_para is None:
        return ZERO
    if not any(f.em_especie for f, _ in partes):
        raise ValidationError("Troco só pode ser informado para pagamento em dinheiro")
    return valida_troco(FormaPagamento.DINHEIRO, troco_para, parte_em_dinheiro(partes))


def partes_json(partes: Iterable[ParteAPagar]) -> List[dict]:
    return [{"forma": f.value, "valor": str(v)} for f, v in partes]
