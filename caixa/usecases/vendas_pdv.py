"""
UC: Venda de balcão (PDV).

A venda e os lançamentos de entrada no caixa são gravados juntos; não há
venda de PDV sem caixa aberto. Pagamento misto gera um lançamento por
forma, e só a parte em dinheiro conta no saldo da gaveta.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from caixa.config import DB_PATH, DEFAULTS
from caixa.domain.carrinho import calcula_desconto, subtotal_item_venda
from caixa.domain.dinheiro import ZERO, Numero, arredonda, percentual, soma
from caixa.domain.entrega import ParteAPagar, divide_pagamento, partes_json, troco_das_partes
from caixa.domain.errors import InvalidTransitionError, ValidationError
from caixa.domain.models import Canal, FormaPagamento, ItemVenda, Sessao, TipoLancamento
from caixa.domain.reconciliacao import valida_lancamento
from caixa.infra.db import connect
from caixa.infra.repositories import VendaPdvRepo
from caixa.infra.logger import log_caixa, log_database_operation, log_transaction
from caixa.usecases.caixa import caixa_atual, lancar


def item_row(item: ItemVenda) -> Dict[str, Any]:
    return {
        "codigo": item.codigo,
        "nome": item.nome,
        "quantidade": int(item.quantidade or 1),
        "peso_kg": item.peso_kg,
        "preco_unitario": item.preco_unitario,
        "preco_por_grama": item.preco_por_grama,
        "desconto": item.desconto,
        "subtotal": subtotal_item_venda(item),
        "observacoes": item.observacoes,
    }


def calcula_pagamento(forma: FormaPagamento, total, valor_recebido: Optional[Numero],
                      partes: Optional[Iterable[Tuple[Any, Numero]]] = None):
    """(valor_recebido, troco, partes).

    ``valor_recebido`` é o dinheiro entregue pelo cliente e só gera troco
    sobre a parte em dinheiro; sem parte em dinheiro o recebido é o total.
    """
    partes = divide_pagamento(forma, total, partes)
    if valor_recebido is None or not any(f.em_especie for f, _ in partes):
        return arredonda(total), ZERO, partes
    troco = troco_das_partes(partes, valor_recebido)
    return arredonda(arredonda(total) + troco), troco, partes


def lanca_partes(partes: List[ParteAPagar], descricao: str, sessao: Sessao, canal: Canal,
                 db_path: str, conn) -> List[Dict[str, Any]]:
    """Um lançamento de entrada por forma de pagamento."""
    return [
        lancar(TipoLancamento.INCOME, valor, descricao, forma,
               sessao=sessao, canal=canal, db_path=db_path, conn=conn)
        for forma, valor in partes
    ]


def registrar_venda_pdv(
    itens: Iterable[ItemVenda],
    forma_pagamento,
    sessao: Optional[Sessao] = None,
    desconto_tipo: str = "nenhum",
    desconto_valor: Numero = 0,
    valor_recebido: Optional[Numero] = None,
    cliente_nome: Optional[str] = None,
    pagamentos: Optional[Iterable[Tuple[Any, Numero]]] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    sessao = sessao or Sessao(loja_id=DEFAULTS.loja_padrao)
    forma = FormaPagamento.parse(forma_pagamento)
    try:
        rows = [item_row(i) for i in itens]
        if not rows:
            raise ValidationError("Venda sem itens")
        subtotal = soma(r["subtotal"] for r in rows)
        desconto = calcula_desconto(subtotal, desconto_tipo, desconto_valor)
        total = arredonda(subtotal - desconto)
        if total <= 0:
            raise ValidationError("Total da venda deve ser maior que zero")
        recebido, troco, partes = calcula_pagamento(forma, total, valor_recebido, pagamentos)

        with connect(db_path) as conn:
            caixa = caixa_atual(sessao, db_path, conn=conn)
            valida_lancamento(caixa, total)
            venda_id = VendaPdvRepo(db_path).insert({
                "loja_id": sessao.loja_id,
                "caixa_id": caixa.id,
                "operador": sessao.operador,
                "cliente_nome": cliente_nome,
                "subtotal": subtotal,
                "desconto": desconto,
                "desconto_percentual": percentual(desconto, subtotal),
                "total": total,
                "forma_pagamento": forma,
                "pagamentos": partes_json(partes) if len(partes) > 1 else None,
                "valor_recebido": recebido,
                "troco": troco,
            }, rows, conn=conn)
            lanca_partes(partes, f"Venda PDV #{venda_id}", sessao, Canal.PDV, db_path, conn)
        log_database_operation("venda_pdv", "INSERT", 1 + len(rows), venda_id=venda_id)
        result = {
            "venda_id": venda_id,
            "caixa_id": caixa.id,
            "subtotal": subtotal,
            "desconto": desconto,
            "total": total,
            "forma_pagamento": forma.value,
            "pagamentos": partes_json(partes),
            "valor_recebido": recebido,
            "troco": troco,
        }
        log_transaction("registrar_venda_pdv", {"loja_id": sessao.loja_id, "itens": len(rows)}, result=result)
        return result
    except Exception as e:
        log_transaction("registrar_venda_pdv", {"loja_id": sessao.loja_id}, error=str(e))
        raise


def cancelar_venda_pdv(venda_id: int, motivo: Optional[str] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Marca a venda como cancelada. O lançamento no caixa permanece."""
    try:
        with connect(db_path) as conn:
            repo = VendaPdvRepo(db_path)
            venda = repo.get(venda_id, conn=conn)
            if venda["cancelada"] or not repo.cancelar(venda_id, motivo, conn=conn):
                raise InvalidTransitionError(f"Venda #{venda_id} já está cancelada")
        log_caixa("cancelamento_pdv", venda["caixa_id"], venda["total"], venda_id=venda_id, motivo=motivo)
        return {"venda_id": venda_id, "cancelada": True, "motivo": motivo}
    except Exception as e:
        log_transaction("cancelar_venda_pdv", {"venda_id": venda_id}, error=str(e))
        raise
