"""
UC: Finalizar pedido de delivery e atualizar seu status.

Obs.:
- Tudo o que ``finalizar_pedido`` grava (cliente, pedido, itens, transações
  de cashback, saldo e lançamento no caixa) acontece em uma única transação.
  Qualquer falha desfaz tudo.
- O saldo é lido e gravado dentro da mesma transação, com compare-and-swap
  pela coluna ``versao``.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from caixa.config import DB_PATH, DEFAULTS
from caixa.adapters.parsers import normaliza_telefone, parse_pagamentos, parse_valor
from caixa.domain.carrinho import Carrinho, preco_unitario, total_item
from caixa.domain.cashback import aplica_transacoes, planeja_cashback
from caixa.domain.entrega import divide_pagamento, partes_json, resolve, troco_das_partes
from caixa.domain.errors import PersistenceError, ValidationError
from caixa.domain.models import (
    Bairro,
    Canal,
    Complemento,
    FormaPagamento,
    ItemCarrinho,
    Produto,
    Sessao,
    StatusPedido,
    Tamanho,
    TipoLancamento,
)
from caixa.domain.pedidos import transiciona
from caixa.infra.db import connect
from caixa.infra.repositories import (
    BairroRepo,
    CaixaRepo,
    ClienteRepo,
    LancamentoRepo,
    PedidoRepo,
    SaldoRepo,
    TransacaoCashbackRepo,
)
from caixa.infra.logger import (
    log_alerta_operador,
    log_cashback,
    log_database_operation,
    log_pedido,
    log_system_event,
    log_transaction,
)
from caixa.usecases.parametros import config_efetiva


@dataclass
class DadosPedido:
    """Checkout do delivery como chega do formulário."""
    cliente_nome: str
    cliente_telefone: str
    bairro: str
    itens: List[ItemCarrinho]
    forma_pagamento: FormaPagamento
    endereco: str = ""
    complemento: Optional[str] = None
    troco_para: Optional[Decimal] = None
    cashback_solicitado: Optional[Decimal] = None
    # só para forma misto: [(forma, valor), ...] somando o total
    pagamentos: Optional[List[Tuple[str, Decimal]]] = None

    def __post_init__(self):
        self.forma_pagamento = FormaPagamento.parse(self.forma_pagamento)


def pedido_from_dict(d: Dict[str, Any]) -> DadosPedido:
    """Monta ``DadosPedido`` a partir de um JSON de checkout."""
    itens = []
    for it in d.get("itens") or []:
        prod = it.get("produto") or {}
        tam = it.get("tamanho")
        itens.append(ItemCarrinho(
            produto=Produto(
                id=str(prod.get("id") or it.get("produto_id") or ""),
                nome=prod.get("nome") or it.get("nome") or "",
                preco=parse_valor(prod.get("preco", it.get("preco"))) or Decimal("0"),
            ),
            quantidade=int(it.get("quantidade", 1)),
            tamanho=Tamanho(str(tam.get("id", tam.get("nome"))), tam.get("nome", ""), parse_valor(tam.get("preco")))
            if tam else None,
            complementos=[
                Complemento(c.get("nome", ""), parse_valor(c.get("preco")) or Decimal("0"))
                for c in it.get("complementos") or []
            ],
            observacoes=it.get("observacoes"),
        ))
    cliente = d.get("cliente") or {}
    return DadosPedido(
        cliente_nome=cliente.get("nome") or d.get("cliente_nome") or "",
        cliente_telefone=cliente.get("telefone") or d.get("cliente_telefone") or "",
        bairro=d.get("bairro") or "",
        itens=itens,
        forma_pagamento=d.get("forma_pagamento") or "",
        endereco=d.get("endereco") or "",
        complemento=d.get("complemento"),
        troco_para=parse_valor(d.get("troco_para")),
        cashback_solicitado=parse_valor(d.get("cashback")),
        pagamentos=parse_pagamentos(d.get("pagamentos")),
    )


def _item_row(item: ItemCarrinho) -> Dict[str, Any]:
    return {
        "produto_id": item.produto.id,
        "produto_nome": item.produto.nome,
        "tamanho": item.tamanho.nome if item.tamanho else None,
        "complementos": [{"nome": c.nome, "preco": str(c.preco)} for c in item.complementos],
        "quantidade": int(item.quantidade),
        "preco_unitario": preco_unitario(item),
        "total": total_item(item),
        "observacoes": item.observacoes,
    }


def finalizar_pedido(dados: DadosPedido, sessao: Optional[Sessao] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Grava o pedido e retorna os valores calculados."""
    sessao = sessao or Sessao(loja_id=DEFAULTS.loja_padrao)
    log_system_event("finalizar_pedido_start", {"loja_id": sessao.loja_id, "bairro": dados.bairro})

    try:
        nome = (dados.cliente_nome or "").strip()
        if not nome:
            raise ValidationError("Nome do cliente é obrigatório")
        telefone = normaliza_telefone(dados.cliente_telefone)
        carrinho = Carrinho(dados.itens)
        if carrinho.vazio():
            raise ValidationError("Carrinho vazio")

        cfg = config_efetiva(db_path)
        with connect(db_path) as conn:
            bairros = [Bairro.from_row(r) for r in BairroRepo(db_path).get_all(conn=conn)]
            entrega = resolve(
                bairros, dados.bairro,
                bloquear_desconhecido=cfg.bloquear_bairro_desconhecido,
                eta_padrao=cfg.eta_padrao_minutos,
            )

            clientes = ClienteRepo(db_path)
            cliente = clientes.get_by_telefone(telefone, conn=conn)
            if cliente is None:
                cliente_id = clientes.insert(nome, telefone, conn=conn)
                log_database_operation("cliente", "INSERT", 1, telefone=telefone)
            else:
                cliente_id = cliente["id"]

            saldos = SaldoRepo(db_path)
            saldo = saldos.get(cliente_id, conn=conn)
            plano = planeja_cashback(
                carrinho.subtotal(), entrega.taxa,
                saldo_disponivel=saldo["saldo"],
                cashback_solicitado=dados.cashback_solicitado,
                taxa=cfg.taxa_cashback,
                cliente_id=cliente_id,
            )
            partes = divide_pagamento(dados.forma_pagamento, plano.total, dados.pagamentos)
            troco = troco_das_partes(partes, dados.troco_para)

            pedidos = PedidoRepo(db_path)
            pedido_id = pedidos.insert({
                "loja_id": sessao.loja_id,
                "cliente_id": cliente_id,
                "cliente_nome": nome,
                "cliente_telefone": telefone,
                "endereco": dados.endereco,
                "complemento": dados.complemento,
                "bairro": entrega.nome,
                "subtotal": plano.subtotal,
                "taxa_entrega": plano.taxa_entrega,
                "cashback_aplicado": plano.cashback_aplicado,
                "total": plano.total,
                "cashback_ganho": plano.cashback_ganho,
                "forma_pagamento": dados.forma_pagamento,
                "pagamentos": partes_json(partes) if len(partes) > 1 else None,
                "troco_para": dados.troco_para,
                "troco": troco,
                "eta_minutos": entrega.eta_minutos,
                "status": StatusPedido.PENDING,
            }, conn=conn)
            pedidos.insert_itens(pedido_id, [_item_row(i) for i in carrinho.itens], conn=conn)
            log_database_operation("pedido", "INSERT", 1 + len(carrinho.itens), pedido_id=pedido_id)

            novo_saldo = aplica_transacoes(saldo["saldo"], plano.transacoes)
            if plano.transacoes:
                txs = TransacaoCashbackRepo(db_path)
                for t in plano.transacoes:
                    txs.insert(cliente_id, t.tipo, t.valor, pedido_id, conn=conn)
                saldos.atualiza(cliente_id, novo_saldo, saldo["versao"], conn=conn)

            caixa = CaixaRepo(db_path).atual(sessao.loja_id, conn=conn)
            lancamento_ids: List[int] = []
            if caixa is not None and plano.total > 0:
                lancamentos = LancamentoRepo(db_path)
                for forma, valor in partes:
                    lancamento_ids.append(lancamentos.insert(
                        caixa["id"], TipoLancamento.INCOME, valor, Canal.DELIVERY,
                        forma, f"Pedido #{pedido_id}", conn=conn,
                    ))

        result = {
            "pedido_id": pedido_id,
            "cliente_id": cliente_id,
            "subtotal": plano.subtotal,
            "taxa_entrega": plano.taxa_entrega,
            "cashback_aplicado": plano.cashback_aplicado,
            "total": plano.total,
            "cashback_ganho": plano.cashback_ganho,
            "troco": troco,
            "eta_minutos": entrega.eta_minutos,
            "bairro_atendido": entrega.encontrado,
            "saldo_cashback": novo_saldo,
            "pagamentos": partes_json(partes),
            "lancamento_id": lancamento_ids[0] if lancamento_ids else None,
            "lancamento_ids": lancamento_ids,
        }
        log_pedido("finalizado", pedido_id, plano.total, loja_id=sessao.loja_id, cliente_id=cliente_id)
        if plano.cashback_aplicado:
            log_cashback("resgate", cliente_id, plano.cashback_aplicado, pedido_id=pedido_id)
        if plano.cashback_ganho:
            log_cashback("acumulo", cliente_id, plano.cashback_ganho, pedido_id=pedido_id)
        log_transaction("finalizar_pedido", {"telefone": telefone, "bairro": dados.bairro}, result=result)
        return result

    except PersistenceError as e:
        log_transaction("finalizar_pedido", {"bairro": dados.bairro}, error=str(e))
        log_alerta_operador("pedido_nao_gravado", {
            "cliente_telefone": dados.cliente_telefone,
            "cashback_solicitado": str(dados.cashback_solicitado),
            "erro": str(e),
            "acao": "conferir pedido e saldo de cashback manualmente",
        })
        raise
    except Exception as e:
        log_transaction("finalizar_pedido", {"bairro": dados.bairro}, error=str(e))
        log_system_event("finalizar_pedido_error", {"error": str(e)}, level="error")
        raise


def atualizar_status_pedido(pedido_id: int, novo_status, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Aplica uma transição válida da máquina de status."""
    try:
        try:
            novo_status = StatusPedido(novo_status)
        except ValueError:
            raise ValidationError(f"Status desconhecido: {novo_status!r}") from None
        with connect(db_path) as conn:
            repo = PedidoRepo(db_path)
            pedido = repo.get(pedido_id, conn=conn)
            status = transiciona(pedido["status"], novo_status)
            repo.atualiza_status(pedido_id, status, conn=conn)
        log_pedido("status", pedido_id, de=pedido["status"], para=status.value)
        return {"pedido_id": pedido_id, "status_anterior": pedido["status"], "status": status.value}
    except Exception as e:
        log_transaction("atualizar_status_pedido", {"pedido_id": pedido_id, "status": str(novo_status)}, error=str(e))
        raise


def obter_pedido(pedido_id: int, db_path: str = DB_PATH) -> Dict[str, Any]:
    return PedidoRepo(db_path).get(pedido_id)
