"""
Exceções do domínio de caixa.

Todas derivam de ``CaixaError`` para que a camada de adaptadores (CLI)
possa tratá-las de forma uniforme. Os nomes seguem a taxonomia de erros
usada pela aplicação de atendimento.
"""

from __future__ import annotations


class CaixaError(Exception):
    """Erro base do sistema."""


class ValidationError(CaixaError):
    """Valores inválidos, campos obrigatórios ausentes, telefone malformado."""


class InvalidPriceError(ValidationError):
    """Preço negativo em produto, tamanho ou complemento."""


class InsufficientBalanceError(CaixaError):
    """Resgate de cashback maior que o saldo disponível."""

    def __init__(self, solicitado, disponivel):
        self.solicitado = solicitado
        self.disponivel = disponivel
        super().__init__(
            f"Saldo de cashback insuficiente: solicitado {solicitado}, disponível {disponivel}"
        )


class ExceedsOrderTotalError(CaixaError):
    """Resgate de cashback maior que o total do pedido."""

    def __init__(self, solicitado, total):
        self.solicitado = solicitado
        self.total = total
        super().__init__(
            f"Cashback solicitado ({solicitado}) excede o total do pedido ({total})"
        )


class RegisterAlreadyOpenError(CaixaError):
    """Já existe um caixa aberto para a loja."""


class RegisterNotOpenError(CaixaError):
    """Nenhum caixa aberto (ou o caixa informado já foi fechado)."""


class InvalidTransitionError(CaixaError):
    """Mudança de status não permitida."""


class NotFoundError(CaixaError):
    """Registro não encontrado."""


class PersistenceError(CaixaError):
    """Falha genérica do banco de dados. A operação não foi concluída."""


class ConcurrencyError(PersistenceError):
    """O registro foi alterado por outra operação entre a leitura e a escrita."""
