"""
Sistema de logging para as operações do caixa.

Este módulo configura e fornece loggers para registrar as operações
críticas do sistema: pedidos, movimentações de caixa, cashback e
operações no banco de dados.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = os.getenv("CAIXA_ENABLE_LOGGING", "0").lower() in {"1", "true", "sim", "yes"}
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = False

def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)

# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    O arquivo só é criado na primeira mensagem (``delay=True``).

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    # Cria o diretório de logs se não existir
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Configura o logger
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Remove todos os handlers existentes (incluindo root e console)
    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    # Handler para arquivo
    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)

    # Formatação
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    file_handler.setFormatter(formatter)

    # Adiciona apenas o handler de arquivo
    logger.addHandler(file_handler)

    return logger

# Diretório base para logs (na pasta do módulo, ou CAIXA_LOGS_DIR)
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = Path(os.getenv("CAIXA_LOGS_DIR", str(BASE_DIR / "logs")))

LOG_FILES = {
    "transactions": LOGS_DIR / "transactions.log",
    "pedidos": LOGS_DIR / "pedidos.log",
    "caixa": LOGS_DIR / "caixa.log",
    "cashback": LOGS_DIR / "cashback.log",
    "database": LOGS_DIR / "database.log",
    "system": LOGS_DIR / "system.log",
}

# Loggers específicos para cada operação
transaction_logger = setup_logger('caixa.transactions', str(LOG_FILES["transactions"]))
pedido_logger = setup_logger('caixa.pedidos', str(LOG_FILES["pedidos"]))
caixa_logger = setup_logger('caixa.caixa', str(LOG_FILES["caixa"]))
cashback_logger = setup_logger('caixa.cashback', str(LOG_FILES["cashback"]))
database_logger = setup_logger('caixa.database', str(LOG_FILES["database"]))
system_logger = setup_logger('caixa.system', str(LOG_FILES["system"]))


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra uma transação completa no log.

    Args:
        operation: Tipo de operação (pedido, abertura_caixa, etc.)
        data: Dados da transação
        result: Resultado da operação (opcional)
        error: Mensagem de erro (opcional)
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")

def log_pedido(action: str, pedido_id: Any, total: Any = None, **kwargs) -> None:
    """Log específico para pedidos de delivery."""
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {"action": action, "pedido_id": pedido_id, "total": str(total) if total is not None else None, **kwargs}
    pedido_logger.info(f"PEDIDO_{action.upper()}: {log_data}")

def log_caixa(action: str, caixa_id: Any, valor: Any = None, **kwargs) -> None:
    """Log específico para abertura, lançamentos e fechamento de caixa."""
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {"action": action, "caixa_id": caixa_id, "valor": str(valor) if valor is not None else None, **kwargs}
    caixa_logger.info(f"CAIXA_{action.upper()}: {log_data}")

def log_cashback(action: str, cliente_id: Any, valor: Any = None, **kwargs) -> None:
    """Log específico para acúmulo e resgate de cashback."""
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {"action": action, "cliente_id": cliente_id, "valor": str(valor) if valor is not None else None, **kwargs}
    cashback_logger.info(f"CASHBACK_{action.upper()}: {log_data}")

def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação SQL (INSERT, UPDATE, DELETE, SELECT)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    database_logger.info(f"DB_{operation}: {log_data}")

def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {
        "event": event,
        "details": details or {}
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")

def log_alerta_operador(event: str, details: Dict[str, Any] = None) -> None:
    """
    Aviso que exige conferência manual (ex.: pedido que falhou depois de
    validar resgate de cashback). Sempre gravado, independente de ENABLE_LOGGING.
    """
    system_logger.warning(f"OPERATOR_ALERT: {event} - {details or {}}")

def get_log_summary(log_type: str = "transactions", lines: int = 100) -> Optional[str]:
    """
    Obtém um resumo dos logs recentes.

    Args:
        log_type: Tipo de log (transactions, pedidos, caixa, cashback, database, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string
    """
    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    with open(log_file, 'r', encoding='utf-8') as f:
        all_lines = f.readlines()
    recent_lines = all_lines[-lines:] if len(all_lines) > lines else all_lines
    return ''.join(recent_lines)
