"""
UC: Movimentos administrativos do fluxo de caixa mensal (aluguel, contas,
aportes e retiradas), que não passam pela gaveta.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from caixa.config import DB_PATH, DEFAULTS
from caixa.adapters.loader import load_movimentos_fluxo
from caixa.adapters.parsers import parse_data
from caixa.domain.dinheiro import Numero, arredonda
from caixa.domain.errors import ValidationError
from caixa.domain.models import Sessao, TipoFluxo
from caixa.infra.db import connect
from caixa.infra.repositories import FluxoCaixaRepo
from caixa.infra.logger import log_database_operation, log_transaction


def registrar_movimento(tipo, valor: Numero, data: str, descricao: str = "",
                        sessao: Optional[Sessao] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    sessao = sessao or Sessao(loja_id=DEFAULTS.loja_padrao)
    try:
        tipo = TipoFluxo(tipo)
    except ValueError:
        raise ValidationError(f"Tipo de movimento desconhecido: {tipo!r}") from None
    v = arredonda(valor)
    if v <= 0:
        raise ValidationError("Valor do movimento deve ser maior que zero")
    dia = parse_data(data)
    if dia is None:
        raise ValidationError("Data do movimento é obrigatória")
    mov_id = FluxoCaixaRepo(db_path).insert(sessao.loja_id, dia, tipo, v, descricao)
    log_database_operation("fluxo_caixa", "INSERT", 1, tipo=tipo.value, valor=str(v))
    return {"id": mov_id, "data": dia, "tipo": tipo.value, "valor": v, "descricao": descricao}


def importar_movimentos(path: str, sessao: Optional[Sessao] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    sessao = sessao or Sessao(loja_id=DEFAULTS.loja_padrao)
    try:
        rows: List[Dict[str, Any]] = load_movimentos_fluxo(path)
        repo = FluxoCaixaRepo(db_path)
        with connect(db_path) as conn:
            for r in rows:
                repo.insert(sessao.loja_id, r["data"], r["tipo"], arredonda(r["valor"]), r["descricao"], conn=conn)
        log_database_operation("fluxo_caixa", "INSERT_MANY", len(rows), file_path=path)
        result = {"arquivo": path, "linhas_importadas": len(rows)}
        log_transaction("importar_movimentos", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_movimentos", {"file": path}, error=str(e))
        raise
