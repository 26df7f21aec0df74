"""
Precificação do carrinho e dos itens de balcão/mesa.

Regras:
- O preço do tamanho, quando escolhido, substitui o preço do produto.
- Complementos sempre somam sobre o preço base que estiver valendo.
- ``total_item = round(preco_unitario × quantidade, 2)``.
- Quantidade reduzida a zero remove o item do carrinho.

Todas as funções, exceto a classe ``Carrinho``, são puras.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, List, Optional

from caixa.domain.dinheiro import ZERO, Numero, arredonda, soma, to_money
from caixa.domain.errors import InvalidPriceError, ValidationError
from caixa.domain.models import ItemCarrinho, ItemVenda


def _checa_preco(valor: Decimal, origem: str) -> Decimal:
    if valor < 0:
        raise InvalidPriceError(f"Preço negativo em {origem}: {valor}")
    return valor


def preco_unitario(item: ItemCarrinho) -> Decimal:
    """Preço base (tamanho ou produto) mais a soma dos complementos."""
    if item.tamanho is not None:
        base = _checa_preco(item.tamanho.preco, f"tamanho {item.tamanho.nome!r}")
    else:
        base = _checa_preco(item.produto.preco, f"produto {item.produto.nome!r}")
    adicionais = Decimal("0")
    for c in item.complementos:
        adicionais += _checa_preco(c.preco, f"complemento {c.nome!r}")
    return arredonda(base + adicionais)


def total_item(item: ItemCarrinho) -> Decimal:
    if item.quantidade is None or int(item.quantidade) < 1:
        raise ValidationError(f"Quantidade inválida para {item.produto.nome!r}: {item.quantidade}")
    return arredonda(preco_unitario(item) * int(item.quantidade))


def subtotal_carrinho(itens: Iterable[ItemCarrinho]) -> Decimal:
    return soma(total_item(i) for i in itens)


def calcula_desconto(subtotal: Numero, tipo: str = "nenhum", valor: Numero = 0) -> Decimal:
    """Valor do desconto sobre ``subtotal``.

    ``tipo``: ``percentual`` (0 a 100), ``valor`` (limitado ao subtotal)
    ou ``nenhum``.
    """
    sub = to_money(subtotal)
    v = to_money(valor)
    tipo = (tipo or "nenhum").strip().lower()
    if tipo in ("nenhum", "none") or v == 0:
        return ZERO
    if v < 0:
        raise ValidationError("Desconto não pode ser negativo")
    if tipo in ("percentual", "percentage"):
        if v > 100:
            raise ValidationError("Desconto percentual acima de 100%")
        return arredonda(sub * v / Decimal(100))
    if tipo in ("valor", "amount"):
        return arredonda(min(v, sub))
    raise ValidationError(f"Tipo de desconto desconhecido: {tipo!r}")


def subtotal_item_venda(item: ItemVenda) -> Decimal:
    """Subtotal de um item do PDV/mesa.

    Item pesável: ``peso_kg × 1000 × preco_por_grama``.
    Item unitário: ``quantidade × preco_unitario``.
    O desconto do item é abatido e o resultado nunca fica negativo.
    """
    if item.pesavel:
        if item.peso_kg <= 0:
            raise ValidationError(f"Peso inválido para {item.nome!r}")
        if item.preco_por_grama is None:
            raise ValidationError(f"Produto pesável sem preço por grama: {item.nome!r}")
        preco = _checa_preco(item.preco_por_grama, f"produto {item.nome!r}")
        bruto = item.peso_kg * Decimal(1000) * preco
    else:
        if item.quantidade is None or int(item.quantidade) < 1:
            raise ValidationError(f"Quantidade inválida para {item.nome!r}: {item.quantidade}")
        if item.preco_unitario is None:
            raise ValidationError(f"Produto sem preço unitário: {item.nome!r}")
        preco = _checa_preco(item.preco_unitario, f"produto {item.nome!r}")
        bruto = preco * int(item.quantidade)
    if item.desconto < 0:
        raise ValidationError("Desconto não pode ser negativo")
    return arredonda(max(ZERO, bruto - item.desconto))


@dataclass
class ResumoCarrinho:
    subtotal: Decimal
    taxa_entrega: Decimal
    total: Decimal
    quantidade_itens: int
    total_quantidade: int


class Carrinho:
    """Carrinho do delivery. Mantém a ordem de inserção dos itens."""

    def __init__(self, itens: Optional[Iterable[ItemCarrinho]] = None):
        self.itens: List[ItemCarrinho] = []
        for item in itens or []:
            self.adicionar(item)

    def adicionar(self, item: ItemCarrinho, substituir_id: Optional[str] = None) -> ItemCarrinho:
        """Adiciona ao final ou, com ``substituir_id``, troca o item na mesma posição."""
        total_item(item)  # valida preço e quantidade antes de aceitar
        if substituir_id is not None:
            for pos, atual in enumerate(self.itens):
                if atual.id == substituir_id:
                    self.itens[pos] = item
                    return item
        self.itens.append(item)
        return item

    def remover(self, item_id: str) -> None:
        self.itens = [i for i in self.itens if i.id != item_id]

    def atualizar_quantidade(self, item_id: str, quantidade: int) -> None:
        if quantidade <= 0:
            self.remover(item_id)
            return
        self.itens = [
            replace(i, quantidade=quantidade) if i.id == item_id else i
            for i in self.itens
        ]

    def atualizar_item(self, item_id: str, **alteracoes) -> None:
        novos = []
        for i in self.itens:
            if i.id == item_id:
                i = replace(i, **alteracoes)
                total_item(i)
            novos.append(i)
        self.itens = novos

    def buscar(self, item_id: str) -> Optional[ItemCarrinho]:
        return next((i for i in self.itens if i.id == item_id), None)

    def limpar(self) -> None:
        self.itens = []

    def vazio(self) -> bool:
        return not self.itens

    def quantidade_itens(self) -> int:
        return len(self.itens)

    def total_quantidade(self) -> int:
        return sum(int(i.quantidade) for i in self.itens)

    def subtotal(self) -> Decimal:
        return subtotal_carrinho(self.itens)

    def resumo(self, taxa_entrega: Numero = 0) -> ResumoCarrinho:
        sub = self.subtotal()
        taxa = arredonda(taxa_entrega)
        return ResumoCarrinho(
            subtotal=sub,
            taxa_entrega=taxa,
            total=arredonda(sub + taxa),
            quantidade_itens=self.quantidade_itens(),
            total_quantidade=self.total_quantidade(),
        )
