"""
Modelos (dataclasses) do domínio.

Observação importante:
- Os repositórios trabalham com dicionários; as dataclasses são a entrada
  das funções de cálculo. Os construtores ``from_row`` fazem a ponte entre
  uma linha do banco e o modelo.
- Valores monetários são sempre ``Decimal``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from caixa.domain.dinheiro import to_money


class FormaPagamento(str, Enum):
    DINHEIRO = "dinheiro"
    PIX = "pix"
    CARTAO = "cartao"
    CARTAO_CREDITO = "cartao_credito"
    CARTAO_DEBITO = "cartao_debito"
    VOUCHER = "voucher"
    MISTO = "misto"

    @classmethod
    def parse(cls, valor: Any) -> "FormaPagamento":
        """Aceita os nomes usados no delivery (money/card/...) e no PDV (dinheiro/...)."""
        if isinstance(valor, cls):
            return valor
        s = str(valor or "").strip().lower()
        s = _ALIASES_PAGAMENTO.get(s, s)
        try:
            return cls(s)
        except ValueError:
            raise ValueError(f"forma de pagamento desconhecida: {valor!r}") from None

    @property
    def em_especie(self) -> bool:
        return self is FormaPagamento.DINHEIRO


_ALIASES_PAGAMENTO = {
    "money": "dinheiro",
    "cash": "dinheiro",
    "card": "cartao",
    "credit_card": "cartao_credito",
    "debit_card": "cartao_debito",
    "credito": "cartao_credito",
    "debito": "cartao_debito",
}


class Canal(str, Enum):
    """Origem da movimentação."""
    PDV = "pdv"
    DELIVERY = "delivery"
    MESA = "mesa"
    MANUAL = "manual"

    @property
    def e_venda(self) -> bool:
        return self is not Canal.MANUAL


class TipoLancamento(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class StatusPedido(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    READY_FOR_PICKUP = "ready_for_pickup"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class StatusVendaMesa(str, Enum):
    ABERTA = "aberta"
    FECHADA = "fechada"
    CANCELADA = "cancelada"


class TipoTransacao(str, Enum):
    COMPRA = "purchase"
    RESGATE = "redemption"


@dataclass
class Sessao:
    """Contexto explícito de quem opera: loja e operador."""
    loja_id: int = 1
    operador: Optional[str] = None


# -------------------------
# Carrinho (delivery)
# -------------------------

@dataclass
class Produto:
    id: str
    nome: str
    preco: Decimal

    def __post_init__(self):
        self.preco = to_money(self.preco)


@dataclass
class Tamanho:
    id: str
    nome: str
    preco: Decimal

    def __post_init__(self):
        self.preco = to_money(self.preco)


@dataclass
class Complemento:
    nome: str
    preco: Decimal = Decimal("0")

    def __post_init__(self):
        self.preco = to_money(self.preco)


@dataclass
class ItemCarrinho:
    produto: Produto
    quantidade: int = 1
    tamanho: Optional[Tamanho] = None
    complementos: List[Complemento] = field(default_factory=list)
    observacoes: Optional[str] = None
    id: Optional[str] = None

    def __post_init__(self):
        if self.id is None:
            tam = self.tamanho.id if self.tamanho else "default"
            self.id = f"{self.produto.id}-{tam}-{uuid.uuid4().hex[:8]}"


# -------------------------
# Itens de balcão / mesa
# -------------------------

@dataclass
class ItemVenda:
    """Item vendido no PDV ou na mesa (por unidade ou por peso)."""
    codigo: str
    nome: str
    quantidade: int = 1
    peso_kg: Optional[Decimal] = None
    preco_unitario: Optional[Decimal] = None
    preco_por_grama: Optional[Decimal] = None
    desconto: Decimal = Decimal("0")
    observacoes: Optional[str] = None

    def __post_init__(self):
        if self.peso_kg is not None:
            self.peso_kg = to_money(self.peso_kg)
        if self.preco_unitario is not None:
            self.preco_unitario = to_money(self.preco_unitario)
        if self.preco_por_grama is not None:
            self.preco_por_grama = to_money(self.preco_por_grama)
        self.desconto = to_money(self.desconto)

    @property
    def pesavel(self) -> bool:
        return self.peso_kg is not None


# -------------------------
# Entrega / clientes
# -------------------------

@dataclass
class Bairro:
    nome: str
    taxa_entrega: Decimal
    tempo_entrega: int
    ativo: bool = True

    def __post_init__(self):
        self.taxa_entrega = to_money(self.taxa_entrega)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Bairro":
        return cls(
            nome=row["nome"],
            taxa_entrega=row["taxa_entrega"],
            tempo_entrega=int(row["tempo_entrega"]),
            ativo=bool(row.get("ativo", 1)),
        )


@dataclass
class Cliente:
    id: int
    nome: str
    telefone: str


@dataclass
class TransacaoCashback:
    tipo: TipoTransacao
    valor: Decimal
    cliente_id: Optional[int] = None
    pedido_id: Optional[int] = None

    def __post_init__(self):
        self.tipo = TipoTransacao(self.tipo)
        self.valor = to_money(self.valor)


# -------------------------
# Caixa
# -------------------------

@dataclass
class CaixaRegistro:
    id: Optional[int]
    valor_abertura: Decimal
    aberto_em: Optional[str] = None
    valor_fechamento: Optional[Decimal] = None
    fechado_em: Optional[str] = None
    loja_id: int = 1
    operador: Optional[str] = None

    def __post_init__(self):
        self.valor_abertura = to_money(self.valor_abertura)
        if self.valor_fechamento is not None:
            self.valor_fechamento = to_money(self.valor_fechamento)

    @property
    def aberto(self) -> bool:
        return self.fechado_em is None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CaixaRegistro":
        return cls(
            id=row.get("id"),
            valor_abertura=row["valor_abertura"],
            aberto_em=row.get("aberto_em"),
            valor_fechamento=row.get("valor_fechamento"),
            fechado_em=row.get("fechado_em"),
            loja_id=int(row.get("loja_id") or 1),
            operador=row.get("operador"),
        )


@dataclass
class Lancamento:
    tipo: TipoLancamento
    valor: Decimal
    canal: Canal
    forma_pagamento: FormaPagamento = FormaPagamento.DINHEIRO
    descricao: str = ""
    caixa_id: Optional[int] = None
    id: Optional[int] = None
    criado_em: Optional[str] = None

    def __post_init__(self):
        self.tipo = TipoLancamento(self.tipo)
        self.canal = Canal(self.canal)
        self.forma_pagamento = FormaPagamento.parse(self.forma_pagamento)
        self.valor = to_money(self.valor)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Lancamento":
        return cls(
            tipo=row["tipo"],
            valor=row["valor"],
            canal=row.get("canal") or Canal.MANUAL,
            forma_pagamento=row.get("forma_pagamento") or FormaPagamento.DINHEIRO,
            descricao=row.get("descricao") or "",
            caixa_id=row.get("caixa_id"),
            id=row.get("id"),
            criado_em=row.get("criado_em"),
        )


@dataclass
class Venda:
    """Venda de qualquer canal, já filtrada (sem canceladas ou abertas)."""
    canal: Canal
    total: Decimal
    forma_pagamento: Optional[FormaPagamento] = None
    data: Optional[str] = None
    id: Optional[int] = None
    loja_id: int = 1

    def __post_init__(self):
        self.canal = Canal(self.canal)
        self.total = to_money(self.total)
        if self.forma_pagamento is not None:
            self.forma_pagamento = FormaPagamento.parse(self.forma_pagamento)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Venda":
        return cls(
            canal=row["canal"],
            total=row["total"],
            forma_pagamento=row.get("forma_pagamento"),
            data=row.get("data"),
            id=row.get("id"),
            loja_id=int(row.get("loja_id") or 1),
        )


@dataclass
class PedidoEntrega:
    """Visão de um pedido de delivery para relatórios."""
    total: Decimal
    taxa_entrega: Decimal
    status: StatusPedido
    forma_pagamento: FormaPagamento
    bairro: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        self.total = to_money(self.total)
        self.taxa_entrega = to_money(self.taxa_entrega)
        self.status = StatusPedido(self.status)
        self.forma_pagamento = FormaPagamento.parse(self.forma_pagamento)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PedidoEntrega":
        return cls(
            total=row["total"],
            taxa_entrega=row.get("taxa_entrega") or 0,
            status=row["status"],
            forma_pagamento=row["forma_pagamento"],
            bairro=row.get("bairro"),
            id=row.get("id"),
        )


# -------------------------
# Fluxo de caixa mensal
# -------------------------

class TipoFluxo(str, Enum):
    RECEITA = "receita"
    DESPESA = "despesa"
    GASTO_FIXO = "gasto_fixo"
    TRANSFERENCIA_ENTRADA = "transferencia_entrada"
    TRANSFERENCIA_SAIDA = "transferencia_saida"


@dataclass
class MovimentoFluxo:
    tipo: TipoFluxo
    valor: Decimal
    data: str
    descricao: str = ""
    id: Optional[int] = None

    def __post_init__(self):
        self.tipo = TipoFluxo(self.tipo)
        self.valor = to_money(self.valor)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MovimentoFluxo":
        return cls(
            tipo=row["tipo"],
            valor=row["valor"],
            data=str(row["data"])[:10],
            descricao=row.get("descricao") or "",
            id=row.get("id"),
        )
