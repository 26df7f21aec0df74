"""
UC: Cadastro e importação dos bairros atendidos pelo delivery.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from caixa.config import DB_PATH
from caixa.adapters.loader import load_bairros
from caixa.domain.dinheiro import Numero, arredonda
from caixa.domain.entrega import TaxaEntrega, resolve
from caixa.domain.errors import ValidationError
from caixa.domain.models import Bairro
from caixa.infra.repositories import BairroRepo
from caixa.infra.logger import (
    log_database_operation, log_system_event, log_transaction
)
from caixa.usecases.parametros import config_efetiva


def cadastrar_bairro(nome: str, taxa_entrega: Numero, tempo_entrega: Optional[int] = None,
                     ativo: bool = True, db_path: str = DB_PATH) -> Dict[str, Any]:
    nome = (nome or "").strip()
    if not nome:
        raise ValidationError("Nome do bairro é obrigatório")
    taxa = arredonda(taxa_entrega)
    if taxa < 0:
        raise ValidationError("Taxa de entrega não pode ser negativa")
    tempo = tempo_entrega if tempo_entrega is not None else config_efetiva(db_path).eta_padrao_minutos
    if tempo <= 0:
        raise ValidationError("Tempo de entrega deve ser maior que zero")
    row = {"nome": nome, "taxa_entrega": taxa, "tempo_entrega": tempo, "ativo": int(ativo)}
    BairroRepo(db_path).upsert([row])
    log_database_operation("bairro", "UPSERT", 1, nome=nome)
    return row


def listar_bairros(apenas_ativos: bool = False, db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    return BairroRepo(db_path).get_all(apenas_ativos=apenas_ativos)


def consultar_taxa(nome: str, db_path: str = DB_PATH) -> TaxaEntrega:
    cfg = config_efetiva(db_path)
    bairros = [Bairro.from_row(r) for r in BairroRepo(db_path).get_all()]
    return resolve(bairros, nome, cfg.bloquear_bairro_desconhecido, cfg.eta_padrao_minutos)


def importar_bairros(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Lê um XLSX/CSV de bairros e faz upsert de todas as linhas."""
    log_system_event("importar_bairros_start", {"file_path": path})
    try:
        rows = load_bairros(path, eta_padrao=config_efetiva(db_path).eta_padrao_minutos)
        n = BairroRepo(db_path).upsert(rows)
        log_database_operation("bairro", "UPSERT_MANY", n, file_path=path)
        result = {"arquivo": path, "linhas_importadas": n}
        log_transaction("importar_bairros", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_bairros", {"file": path}, error=str(e))
        log_system_event("importar_bairros_error", {"file_path": path, "error": str(e)}, level="error")
        raise
