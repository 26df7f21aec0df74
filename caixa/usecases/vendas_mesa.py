"""
UC: Vendas de mesa (comanda).

Fluxo: abrir → adicionar/remover itens, aplicar desconto → fechar (gera
lançamento no caixa) ou cancelar. Só vendas fechadas entram nos relatórios.

O desconto fica gravado como regra (tipo e valor): um desconto percentual
continua valendo a mesma porcentagem quando itens entram ou saem.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from caixa.config import DB_PATH, DEFAULTS
from caixa.domain.carrinho import calcula_desconto
from caixa.domain.dinheiro import Numero, arredonda, soma, to_money
from caixa.domain.entrega import divide_conta, partes_json
from caixa.domain.errors import InvalidTransitionError, NotFoundError, ValidationError
from caixa.domain.models import Canal, FormaPagamento, ItemVenda, Sessao, StatusVendaMesa
from caixa.domain.pedidos import transiciona_mesa
from caixa.domain.reconciliacao import valida_lancamento
from caixa.infra.db import connect
from caixa.infra.repositories import MesaRepo, VendaMesaRepo
from caixa.infra.logger import log_caixa, log_system_event, log_transaction
from caixa.usecases.caixa import caixa_atual
from caixa.usecases.vendas_pdv import calcula_pagamento, item_row, lanca_partes


def _sessao(sessao: Optional[Sessao]) -> Sessao:
    return sessao or Sessao(loja_id=DEFAULTS.loja_padrao)


def cadastrar_mesa(numero: int, nome: Optional[str] = None, capacidade: int = 4,
                   sessao: Optional[Sessao] = None, db_path: str = DB_PATH) -> int:
    return MesaRepo(db_path).upsert(_sessao(sessao).loja_id, numero, nome, capacidade)


def listar_mesas(sessao: Optional[Sessao] = None, db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    return MesaRepo(db_path).get_all(_sessao(sessao).loja_id)


def abrir_venda_mesa(numero: int, sessao: Optional[Sessao] = None, cliente_nome: Optional[str] = None,
                     pessoas: int = 1, db_path: str = DB_PATH) -> Dict[str, Any]:
    sessao = _sessao(sessao)
    if pessoas < 1:
        raise ValidationError("Número de pessoas deve ser pelo menos 1")
    with connect(db_path) as conn:
        mesas = MesaRepo(db_path)
        mesa = mesas.get_by_numero(sessao.loja_id, numero, conn=conn)
        if mesa["venda_atual_id"] is not None:
            raise ValidationError(f"Mesa {numero} já está ocupada (venda #{mesa['venda_atual_id']})")
        venda_id = VendaMesaRepo(db_path).abrir(
            sessao.loja_id, mesa["id"], sessao.operador, cliente_nome, pessoas, conn=conn
        )
        mesas.atualiza_status(mesa["id"], "ocupada", venda_id, conn=conn)
    log_system_event("venda_mesa_aberta", {"mesa": numero, "venda_id": venda_id, "loja_id": sessao.loja_id})
    return {"venda_id": venda_id, "mesa": numero, "status": StatusVendaMesa.ABERTA.value}


def _venda_aberta(venda_id: int, db_path: str, conn) -> Dict[str, Any]:
    venda = VendaMesaRepo(db_path).get(venda_id, conn=conn)
    if venda["status"] != StatusVendaMesa.ABERTA.value:
        raise InvalidTransitionError(f"Venda de mesa #{venda_id} está {venda['status']}")
    return venda


def _recalcula(venda_id: int, db_path: str, conn) -> Dict[str, Decimal]:
    """Subtotal = soma dos itens; a regra de desconto gravada é reaplicada sobre ele."""
    repo = VendaMesaRepo(db_path)
    venda = repo.get(venda_id, conn=conn)
    subtotal = soma(i["subtotal"] for i in venda["itens"])
    desconto = calcula_desconto(subtotal, venda["desconto_tipo"], venda["desconto_valor"])
    total = arredonda(subtotal - desconto)
    repo.atualiza_totais(venda_id, subtotal, desconto, total, conn=conn)
    return {"subtotal": subtotal, "desconto": desconto, "total": total}


def adicionar_item_mesa(venda_id: int, item: ItemVenda, db_path: str = DB_PATH) -> Dict[str, Any]:
    with connect(db_path) as conn:
        _venda_aberta(venda_id, db_path, conn)
        row = item_row(item)
        item_id = VendaMesaRepo(db_path).add_item(venda_id, row, conn=conn)
        totais = _recalcula(venda_id, db_path, conn)
    return {"venda_id": venda_id, "item_id": item_id, "item_subtotal": row["subtotal"], **totais}


def remover_item_mesa(venda_id: int, item_id: int, db_path: str = DB_PATH) -> Dict[str, Any]:
    with connect(db_path) as conn:
        _venda_aberta(venda_id, db_path, conn)
        if not VendaMesaRepo(db_path).remove_item(venda_id, item_id, conn=conn):
            raise NotFoundError(f"Item #{item_id} não pertence à venda #{venda_id}")
        totais = _recalcula(venda_id, db_path, conn)
    return {"venda_id": venda_id, **totais}


def aplicar_desconto_mesa(venda_id: int, tipo: str, valor: Numero, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Grava a regra de desconto; ``valor`` limitado ao subtotal, ``percentual`` recalculado."""
    tipo = (tipo or "nenhum").strip().lower()
    with connect(db_path) as conn:
        _venda_aberta(venda_id, db_path, conn)
        atual = _recalcula(venda_id, db_path, conn)
        calcula_desconto(atual["subtotal"], tipo, valor)
        VendaMesaRepo(db_path).grava_desconto(venda_id, tipo, to_money(valor), conn=conn)
        totais = _recalcula(venda_id, db_path, conn)
    return {"venda_id": venda_id, **totais}


def dividir_conta_mesa(venda_id: int, partes: int, db_path: str = DB_PATH) -> List[Decimal]:
    venda = VendaMesaRepo(db_path).get(venda_id)
    return divide_conta(venda["total"], partes)


def fechar_venda_mesa(venda_id: int, forma_pagamento, sessao: Optional[Sessao] = None,
                      valor_recebido: Optional[Numero] = None,
                      pagamentos: Optional[Iterable[Tuple[Any, Numero]]] = None,
                      db_path: str = DB_PATH) -> Dict[str, Any]:
    """Fecha a comanda, registra a entrada no caixa e libera a mesa."""
    sessao = _sessao(sessao)
    forma = FormaPagamento.parse(forma_pagamento)
    try:
        with connect(db_path) as conn:
            venda = _venda_aberta(venda_id, db_path, conn)
            status = transiciona_mesa(venda["status"], StatusVendaMesa.FECHADA)
            totais = _recalcula(venda_id, db_path, conn)
            if totais["total"] <= 0:
                raise ValidationError(f"Venda #{venda_id} sem valor a cobrar")
            caixa = caixa_atual(sessao, db_path, conn=conn)
            valida_lancamento(caixa, totais["total"])
            _, troco, partes = calcula_pagamento(forma, totais["total"], valor_recebido, pagamentos)
            VendaMesaRepo(db_path).finaliza(
                venda_id, status, forma, troco,
                pagamentos=partes_json(partes) if len(partes) > 1 else None, conn=conn,
            )
            lanca_partes(partes, f"Mesa - venda #{venda_id}", sessao, Canal.MESA, db_path, conn)
            MesaRepo(db_path).atualiza_status(venda["mesa_id"], "livre", None, conn=conn)
        log_caixa("venda_mesa", caixa.id, totais["total"], venda_id=venda_id, forma=forma.value)
        result = {"venda_id": venda_id, "status": status.value, "troco": troco,
                  "pagamentos": partes_json(partes), **totais}
        log_transaction("fechar_venda_mesa", {"venda_id": venda_id}, result=result)
        return result
    except Exception as e:
        log_transaction("fechar_venda_mesa", {"venda_id": venda_id}, error=str(e))
        raise


def cancelar_venda_mesa(venda_id: int, db_path: str = DB_PATH) -> Dict[str, Any]:
    try:
        with connect(db_path) as conn:
            repo = VendaMesaRepo(db_path)
            venda = repo.get(venda_id, conn=conn)
            status = transiciona_mesa(venda["status"], StatusVendaMesa.CANCELADA)
            repo.finaliza(venda_id, status, conn=conn)
            MesaRepo(db_path).atualiza_status(venda["mesa_id"], "livre", None, conn=conn)
        log_system_event("venda_mesa_cancelada", {"venda_id": venda_id})
        return {"venda_id": venda_id, "status": status.value}
    except Exception as e:
        log_transaction("cancelar_venda_mesa", {"venda_id": venda_id}, error=str(e))
        raise
