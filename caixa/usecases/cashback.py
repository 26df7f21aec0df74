"""
UC: Consulta de saldo e extrato de cashback pelo telefone do cliente e
busca de clientes pelo nome.
"""
from __future__ import annotations

from typing import Any, Dict, List

from caixa.config import DB_PATH
from caixa.adapters.parsers import normaliza_telefone
from caixa.domain.dinheiro import arredonda
from caixa.domain.errors import NotFoundError, ValidationError
from caixa.infra.db import connect
from caixa.infra.repositories import ClienteRepo, SaldoRepo, TransacaoCashbackRepo


def _cliente(telefone: str, db_path: str, conn) -> Dict[str, Any]:
    tel = normaliza_telefone(telefone)
    cliente = ClienteRepo(db_path).get_by_telefone(tel, conn=conn)
    if cliente is None:
        raise NotFoundError(f"Nenhum cliente com telefone {tel}")
    return cliente


def consultar_cashback(telefone: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    with connect(db_path) as conn:
        cliente = _cliente(telefone, db_path, conn)
        saldo = SaldoRepo(db_path).get(cliente["id"], conn=conn)
    return {
        "cliente_id": cliente["id"],
        "nome": cliente["nome"],
        "telefone": cliente["telefone"],
        "saldo": arredonda(saldo["saldo"]),
    }


def extrato(telefone: str, db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """Transações do cliente, da mais recente para a mais antiga."""
    with connect(db_path) as conn:
        cliente = _cliente(telefone, db_path, conn)
        rows = TransacaoCashbackRepo(db_path).extrato(cliente["id"], conn=conn)
    for r in rows:
        r["valor"] = arredonda(r["valor"])
    return rows


def buscar_clientes(termo: str, db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """Clientes cujo nome contém ``termo``, com o saldo atual."""
    termo = (termo or "").strip()
    if len(termo) < 2:
        raise ValidationError("Informe ao menos 2 letras do nome")
    with connect(db_path) as conn:
        saldos = SaldoRepo(db_path)
        return [
            {
                "cliente_id": c["id"],
                "nome": c["nome"],
                "telefone": c["telefone"],
                "saldo": arredonda(saldos.get(c["id"], conn=conn)["saldo"]),
            }
            for c in ClienteRepo(db_path).buscar_por_nome(termo, conn=conn)
        ]
