"""
Configurações globais e valores padrão do sistema de caixa.
"""

import os
from dataclasses import dataclass
from decimal import Decimal


# Caminho padrão do banco de dados SQLite
DB_PATH = os.getenv("CAIXA_DB", os.path.join(os.getcwd(), "caixa.db"))


@dataclass
class DefaultConfig:
    """Valores padrão para parâmetros do sistema."""
    taxa_cashback: Decimal = Decimal("0.05")  # 5% sobre o valor pago
    eta_padrao_minutos: int = 50  # Tempo de entrega para bairro não cadastrado
    bloquear_bairro_desconhecido: bool = False
    loja_padrao: int = 1


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
