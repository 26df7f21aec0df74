import logging

from caixa.infra import logger as caixa_logger


def _flush():
    for name in ("caixa.system", "caixa.transactions"):
        for h in logging.getLogger(name).handlers:
            h.flush()


def test_alerta_operador_sempre_grava():
    caixa_logger.log_alerta_operador("pedido_nao_gravado", {"cliente_telefone": "11987654321"})
    _flush()
    conteudo = caixa_logger.get_log_summary("system", 20)
    assert "OPERATOR_ALERT: pedido_nao_gravado" in conteudo
    assert "11987654321" in conteudo


def test_log_transaction_respeita_flag(monkeypatch):
    monkeypatch.setattr(caixa_logger, "ENABLE_LOGGING", True)
    caixa_logger.log_transaction("abrir_caixa", {"loja_id": 1}, error="Já existe um caixa aberto")
    _flush()
    assert "TRANSACTION_FAILED: abrir_caixa" in caixa_logger.get_log_summary("transactions", 5)


def test_log_desligado_nao_cria_arquivo(monkeypatch, tmp_path):
    monkeypatch.setattr(caixa_logger, "ENABLE_LOGGING", False)
    monkeypatch.setitem(caixa_logger.LOG_FILES, "cashback", tmp_path / "cashback.log")
    caixa_logger.log_cashback("acumulo", 1, "2.50")
    assert caixa_logger.get_log_summary("cashback") == "Log cashback não encontrado."


def test_log_summary_tipo_desconhecido():
    assert caixa_logger.get_log_summary("inexistente") == "Log inexistente não encontrado."
