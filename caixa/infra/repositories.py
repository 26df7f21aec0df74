"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- ParamsRepo
- BairroRepo
- ClienteRepo
- SaldoRepo
- TransacaoCashbackRepo
- PedidoRepo
- CaixaRepo
- LancamentoRepo
- VendaPdvRepo
- MesaRepo
- VendaMesaRepo
- VendasRepo (leitura de vw_vendas)
- FluxoCaixaRepo

Todos os métodos aceitam ``conn`` opcional: quando informado, a operação
participa da transação do chamador; caso contrário abre a própria conexão.
Valores monetários entram como ``Decimal`` e saem como TEXT.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .db import using
from caixa.domain.errors import (
    ConcurrencyError,
    NotFoundError,
    RegisterAlreadyOpenError,
    RegisterNotOpenError,
)


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return row
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def _fetch_all(cur) -> List[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def _fetch_one(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    if row is None:
        return None
    cols = [d[0] for d in cur.description]
    return dict(zip(cols, row))


def agora() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _enum_value(v: Any) -> Any:
    return getattr(v, "value", v)


def _pagamentos(partes: Any) -> Optional[str]:
    """Partes do pagamento misto em JSON; vazio vira NULL."""
    return json.dumps(partes, ensure_ascii=False) if partes else None


# -------------------------
# Params
# -------------------------

class ParamsRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def set_many(self, items: Iterable[Tuple[str, str]], conn=None) -> None:
        with using(self.db_path, conn) as c:
            c.executemany(
                """
                INSERT INTO params (chave, valor)
                VALUES (?, ?)
                ON CONFLICT(chave) DO UPDATE SET valor=excluded.valor
                """,
                list(items),
            )

    def get(self, key: str, default: Optional[str] = None, conn=None) -> Optional[str]:
        with using(self.db_path, conn) as c:
            row = c.execute("SELECT valor FROM params WHERE chave = ?", (key,)).fetchone()
            return row[0] if row else default

    def get_float(self, key: str, default: float) -> float:
        v = self.get(key, None)
        if v is None:
            return default
        try:
            return float(v)
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        v = self.get(key, None)
        if v is None:
            return default
        return str(v).strip().lower() in {"1", "true", "t", "sim", "s", "yes", "y"}


# -------------------------
# Bairros
# -------------------------

class BairroRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]], conn=None) -> int:
        rows = [_as_dict(r) for r in rows]
        with using(self.db_path, conn) as c:
            for r in rows:
                c.execute(
                    """
                    INSERT INTO bairro (nome, taxa_entrega, tempo_entrega, ativo)
                    VALUES (:nome, :taxa_entrega, :tempo_entrega, :ativo)
                    ON CONFLICT(nome) DO UPDATE SET
                        taxa_entrega=excluded.taxa_entrega,
                        tempo_entrega=excluded.tempo_entrega,
                        ativo=excluded.ativo
                    """,
                    {
                        "nome": r["nome"],
                        "taxa_entrega": r.get("taxa_entrega"),
                        "tempo_entrega": int(r.get("tempo_entrega") or 50),
                        "ativo": int(bool(r.get("ativo", 1))),
                    },
                )
        return len(rows)

    def get_all(self, apenas_ativos: bool = False, conn=None) -> List[Dict[str, Any]]:
        sql = "SELECT nome, taxa_entrega, tempo_entrega, ativo FROM bairro"
        if apenas_ativos:
            sql += " WHERE ativo = 1"
        sql += " ORDER BY nome"
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(sql))


# -------------------------
# Clientes e cashback
# -------------------------

class ClienteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def get_by_telefone(self, telefone: str, conn=None) -> Optional[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_one(c.execute(
                "SELECT id, nome, telefone, criado_em FROM cliente WHERE telefone = ?", (telefone,)
            ))

    def get(self, cliente_id: int, conn=None) -> Optional[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_one(c.execute(
                "SELECT id, nome, telefone, criado_em FROM cliente WHERE id = ?", (cliente_id,)
            ))

    def buscar_por_nome(self, termo: str, conn=None) -> List[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                "SELECT id, nome, telefone, criado_em FROM cliente WHERE nome LIKE ? ORDER BY nome",
                (f"%{termo}%",),
            ))

    def insert(self, nome: str, telefone: str, conn=None) -> int:
        with using(self.db_path, conn) as c:
            cur = c.execute(
                "INSERT INTO cliente (nome, telefone, criado_em) VALUES (?, ?, ?)",
                (nome, telefone, agora()),
            )
            cliente_id = cur.lastrowid
            c.execute(
                "INSERT INTO saldo_cliente (cliente_id, saldo, versao, atualizado_em) VALUES (?, '0.00', 0, ?)",
                (cliente_id, agora()),
            )
            return cliente_id


class SaldoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def get(self, cliente_id: int, conn=None) -> Dict[str, Any]:
        """Saldo e versão atuais; cliente sem linha de saldo tem saldo zero e versão 0."""
        with using(self.db_path, conn) as c:
            row = _fetch_one(c.execute(
                "SELECT cliente_id, saldo, versao, atualizado_em FROM saldo_cliente WHERE cliente_id = ?",
                (cliente_id,),
            ))
            if row is None:
                c.execute(
                    "INSERT INTO saldo_cliente (cliente_id, saldo, versao, atualizado_em) VALUES (?, '0.00', 0, ?)",
                    (cliente_id, agora()),
                )
                row = {"cliente_id": cliente_id, "saldo": "0.00", "versao": 0, "atualizado_em": None}
            return row

    def atualiza(self, cliente_id: int, novo_saldo, versao_esperada: int, conn=None) -> int:
        """Compare-and-swap pelo campo ``versao``. Retorna a nova versão."""
        with using(self.db_path, conn) as c:
            cur = c.execute(
                """
                UPDATE saldo_cliente
                SET saldo = ?, versao = versao + 1, atualizado_em = ?
                WHERE cliente_id = ? AND versao = ?
                """,
                (novo_saldo, agora(), cliente_id, versao_esperada),
            )
            if cur.rowcount != 1:
                raise ConcurrencyError(
                    f"Saldo do cliente {cliente_id} foi alterado por outra operação"
                )
            return versao_esperada + 1


class TransacaoCashbackRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, cliente_id: int, tipo, valor, pedido_id: Optional[int] = None,
               criado_em: Optional[str] = None, conn=None) -> int:
        with using(self.db_path, conn) as c:
            cur = c.execute(
                """
                INSERT INTO transacao_cashback (cliente_id, pedido_id, tipo, valor, criado_em)
                VALUES (?, ?, ?, ?, ?)
                """,
                (cliente_id, pedido_id, _enum_value(tipo), valor, criado_em or agora()),
            )
            return cur.lastrowid

    def extrato(self, cliente_id: int, conn=None) -> List[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                """
                SELECT id, pedido_id, tipo, valor, criado_em
                FROM vw_extrato_cashback
                WHERE cliente_id = ?
                ORDER BY criado_em DESC, id DESC
                """,
                (cliente_id,),
            ))


# -------------------------
# Pedidos de delivery
# -------------------------

class PedidoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, row: Dict[str, Any], conn=None) -> int:
        row = dict(_as_dict(row))
        row.setdefault("criado_em", agora())
        row.setdefault("atualizado_em", row["criado_em"])
        row["forma_pagamento"] = _enum_value(row["forma_pagamento"])
        row["status"] = _enum_value(row.get("status") or "pending")
        row["pagamentos"] = _pagamentos(row.get("pagamentos"))
        with using(self.db_path, conn) as c:
            cur = c.execute(
                """
                INSERT INTO pedido
                    (loja_id, cliente_id, cliente_nome, cliente_telefone, endereco, complemento,
                     bairro, subtotal, taxa_entrega, cashback_aplicado, total, cashback_ganho,
                     forma_pagamento, pagamentos, troco_para, troco, eta_minutos, status, criado_em, atualizado_em)
                VALUES
                    (:loja_id, :cliente_id, :cliente_nome, :cliente_telefone, :endereco, :complemento,
                     :bairro, :subtotal, :taxa_entrega, :cashback_aplicado, :total, :cashback_ganho,
                     :forma_pagamento, :pagamentos, :troco_para, :troco, :eta_minutos, :status, :criado_em, :atualizado_em)
                """,
                row,
            )
            return cur.lastrowid

    def insert_itens(self, pedido_id: int, itens: Iterable[Dict[str, Any]], conn=None) -> None:
        rows = []
        for i in itens:
            r = dict(_as_dict(i))
            r["pedido_id"] = pedido_id
            r["complementos"] = json.dumps(r.get("complementos") or [], ensure_ascii=False)
            rows.append(r)
        if not rows:
            return
        with using(self.db_path, conn) as c:
            c.executemany(
                """
                INSERT INTO pedido_item
                    (pedido_id, produto_id, produto_nome, tamanho, complementos,
                     quantidade, preco_unitario, total, observacoes)
                VALUES
                    (:pedido_id, :produto_id, :produto_nome, :tamanho, :complementos,
                     :quantidade, :preco_unitario, :total, :observacoes)
                """,
                rows,
            )

    def get(self, pedido_id: int, conn=None) -> Dict[str, Any]:
        with using(self.db_path, conn) as c:
            row = _fetch_one(c.execute("SELECT * FROM pedido WHERE id = ?", (pedido_id,)))
            if row is None:
                raise NotFoundError(f"Pedido #{pedido_id} não encontrado")
            itens = _fetch_all(c.execute(
                "SELECT * FROM pedido_item WHERE pedido_id = ? ORDER BY id", (pedido_id,)
            ))
            for i in itens:
                i["complementos"] = json.loads(i["complementos"] or "[]")
            row["itens"] = itens
            return row

    def atualiza_status(self, pedido_id: int, status, conn=None) -> None:
        with using(self.db_path, conn) as c:
            c.execute(
                "UPDATE pedido SET status = ?, atualizado_em = ? WHERE id = ?",
                (_enum_value(status), agora(), pedido_id),
            )

    def por_data(self, loja_id: int, data: str, conn=None) -> List[Dict[str, Any]]:
        """Todos os pedidos do dia, inclusive cancelados."""
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                """
                SELECT id, total, taxa_entrega, status, forma_pagamento, bairro, criado_em
                FROM pedido
                WHERE loja_id = ? AND substr(criado_em, 1, 10) = ?
                ORDER BY criado_em
                """,
                (loja_id, data),
            ))


# -------------------------
# Caixa
# -------------------------

class CaixaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def abrir(self, loja_id: int, valor_abertura, operador: Optional[str] = None,
              aberto_em: Optional[str] = None, conn=None) -> int:
        with using(self.db_path, conn) as c:
            try:
                cur = c.execute(
                    """
                    INSERT INTO caixa_registro (loja_id, operador, valor_abertura, aberto_em)
                    VALUES (?, ?, ?, ?)
                    """,
                    (loja_id, operador, valor_abertura, aberto_em or agora()),
                )
            except sqlite3.IntegrityError as e:
                raise RegisterAlreadyOpenError(f"Já existe um caixa aberto para a loja {loja_id}") from e
            return cur.lastrowid

    def atual(self, loja_id: int, conn=None) -> Optional[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_one(c.execute(
                """
                SELECT * FROM caixa_registro
                WHERE loja_id = ? AND fechado_em IS NULL
                ORDER BY aberto_em DESC, id DESC
                LIMIT 1
                """,
                (loja_id,),
            ))

    def get(self, caixa_id: int, conn=None) -> Dict[str, Any]:
        with using(self.db_path, conn) as c:
            row = _fetch_one(c.execute("SELECT * FROM caixa_registro WHERE id = ?", (caixa_id,)))
            if row is None:
                raise NotFoundError(f"Caixa #{caixa_id} não encontrado")
            return row

    def fechar(self, caixa_id: int, valor_fechamento, diferenca,
               fechado_em: Optional[str] = None, conn=None) -> None:
        with using(self.db_path, conn) as c:
            cur = c.execute(
                """
                UPDATE caixa_registro
                SET valor_fechamento = ?, diferenca = ?, fechado_em = ?
                WHERE id = ? AND fechado_em IS NULL
                """,
                (valor_fechamento, diferenca, fechado_em or agora(), caixa_id),
            )
            if cur.rowcount != 1:
                raise RegisterNotOpenError(f"Caixa #{caixa_id} não está aberto")

    def por_data(self, loja_id: int, data: str, conn=None) -> List[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                """
                SELECT * FROM caixa_registro
                WHERE loja_id = ? AND substr(aberto_em, 1, 10) = ?
                ORDER BY aberto_em
                """,
                (loja_id, data),
            ))


class LancamentoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, caixa_id: int, tipo, valor, canal, forma_pagamento="dinheiro",
               descricao: str = "", criado_em: Optional[str] = None, conn=None) -> int:
        """Insere o lançamento somente se o caixa ainda estiver aberto."""
        with using(self.db_path, conn) as c:
            cur = c.execute(
                """
                INSERT INTO lancamento_caixa
                    (caixa_id, tipo, valor, descricao, forma_pagamento, canal, criado_em)
                SELECT ?, ?, ?, ?, ?, ?, ?
                WHERE EXISTS (
                    SELECT 1 FROM caixa_registro WHERE id = ? AND fechado_em IS NULL
                )
                """,
                (
                    caixa_id, _enum_value(tipo), valor, descricao,
                    _enum_value(forma_pagamento), _enum_value(canal),
                    criado_em or agora(), caixa_id,
                ),
            )
            if cur.rowcount != 1:
                raise RegisterNotOpenError(f"Caixa #{caixa_id} não está aberto")
            return cur.lastrowid

    def por_caixa(self, caixa_id: int, conn=None) -> List[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                """
                SELECT id, caixa_id, tipo, valor, descricao, forma_pagamento, canal, criado_em
                FROM lancamento_caixa
                WHERE caixa_id = ?
                ORDER BY criado_em, id
                """,
                (caixa_id,),
            ))


# -------------------------
# Vendas PDV
# -------------------------

_ITEM_VENDA_COLS = "codigo, nome, quantidade, peso_kg, preco_unitario, preco_por_grama, desconto, subtotal"


class VendaPdvRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, row: Dict[str, Any], itens: Iterable[Dict[str, Any]], conn=None) -> int:
        row = dict(_as_dict(row))
        row.setdefault("criado_em", agora())
        row["forma_pagamento"] = _enum_value(row["forma_pagamento"])
        row["pagamentos"] = _pagamentos(row.get("pagamentos"))
        with using(self.db_path, conn) as c:
            cur = c.execute(
                """
                INSERT INTO venda_pdv
                    (loja_id, caixa_id, operador, cliente_nome, subtotal, desconto,
                     desconto_percentual, total, forma_pagamento, pagamentos, valor_recebido, troco, criado_em)
                VALUES
                    (:loja_id, :caixa_id, :operador, :cliente_nome, :subtotal, :desconto,
                     :desconto_percentual, :total, :forma_pagamento, :pagamentos, :valor_recebido, :troco, :criado_em)
                """,
                row,
            )
            venda_id = cur.lastrowid
            c.executemany(
                f"""
                INSERT INTO venda_pdv_item (venda_id, {_ITEM_VENDA_COLS})
                VALUES (:venda_id, :codigo, :nome, :quantidade, :peso_kg, :preco_unitario,
                        :preco_por_grama, :desconto, :subtotal)
                """,
                [dict(_as_dict(i), venda_id=venda_id) for i in itens],
            )
            return venda_id

    def get(self, venda_id: int, conn=None) -> Dict[str, Any]:
        with using(self.db_path, conn) as c:
            row = _fetch_one(c.execute("SELECT * FROM venda_pdv WHERE id = ?", (venda_id,)))
            if row is None:
                raise NotFoundError(f"Venda #{venda_id} não encontrada")
            row["itens"] = _fetch_all(c.execute(
                "SELECT * FROM venda_pdv_item WHERE venda_id = ? ORDER BY id", (venda_id,)
            ))
            return row

    def cancelar(self, venda_id: int, motivo: Optional[str], conn=None) -> bool:
        with using(self.db_path, conn) as c:
            cur = c.execute(
                """
                UPDATE venda_pdv
                SET cancelada = 1, motivo_cancelamento = ?, cancelada_em = ?
                WHERE id = ? AND cancelada = 0
                """,
                (motivo, agora(), venda_id),
            )
            return cur.rowcount == 1


# -------------------------
# Mesas
# -------------------------

class MesaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, loja_id: int, numero: int, nome: Optional[str] = None,
               capacidade: int = 4, conn=None) -> int:
        with using(self.db_path, conn) as c:
            c.execute(
                """
                INSERT INTO mesa (loja_id, numero, nome, capacidade)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(loja_id, numero) DO UPDATE SET
                    nome=excluded.nome,
                    capacidade=excluded.capacidade
                """,
                (loja_id, numero, nome or f"Mesa {numero}", capacidade),
            )
            row = c.execute(
                "SELECT id FROM mesa WHERE loja_id = ? AND numero = ?", (loja_id, numero)
            ).fetchone()
            return row[0]

    def get_all(self, loja_id: int, conn=None) -> List[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                "SELECT * FROM mesa WHERE loja_id = ? AND ativo = 1 ORDER BY numero", (loja_id,)
            ))

    def get_by_numero(self, loja_id: int, numero: int, conn=None) -> Dict[str, Any]:
        with using(self.db_path, conn) as c:
            row = _fetch_one(c.execute(
                "SELECT * FROM mesa WHERE loja_id = ? AND numero = ?", (loja_id, numero)
            ))
            if row is None:
                raise NotFoundError(f"Mesa {numero} não encontrada na loja {loja_id}")
            return row

    def atualiza_status(self, mesa_id: int, status: str, venda_atual_id: Optional[int] = None,
                        conn=None) -> None:
        with using(self.db_path, conn) as c:
            c.execute(
                "UPDATE mesa SET status = ?, venda_atual_id = ? WHERE id = ?",
                (status, venda_atual_id, mesa_id),
            )


class VendaMesaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def abrir(self, loja_id: int, mesa_id: int, operador: Optional[str] = None,
              cliente_nome: Optional[str] = None, pessoas: int = 1, conn=None) -> int:
        with using(self.db_path, conn) as c:
            cur = c.execute(
                """
                INSERT INTO venda_mesa (loja_id, mesa_id, operador, cliente_nome, pessoas, status, aberta_em)
                VALUES (?, ?, ?, ?, ?, 'aberta', ?)
                """,
                (loja_id, mesa_id, operador, cliente_nome or "", pessoas, agora()),
            )
            return cur.lastrowid

    def get(self, venda_id: int, conn=None) -> Dict[str, Any]:
        with using(self.db_path, conn) as c:
            row = _fetch_one(c.execute("SELECT * FROM venda_mesa WHERE id = ?", (venda_id,)))
            if row is None:
                raise NotFoundError(f"Venda de mesa #{venda_id} não encontrada")
            row["itens"] = self.itens(venda_id, conn=c)
            return row

    def itens(self, venda_id: int, conn=None) -> List[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                "SELECT * FROM venda_mesa_item WHERE venda_id = ? ORDER BY id", (venda_id,)
            ))

    def add_item(self, venda_id: int, item: Dict[str, Any], conn=None) -> int:
        r = dict(_as_dict(item), venda_id=venda_id)
        r.setdefault("observacoes", None)
        r["criado_em"] = agora()
        with using(self.db_path, conn) as c:
            cur = c.execute(
                f"""
                INSERT INTO venda_mesa_item (venda_id, {_ITEM_VENDA_COLS}, observacoes, criado_em)
                VALUES (:venda_id, :codigo, :nome, :quantidade, :peso_kg, :preco_unitario,
                        :preco_por_grama, :desconto, :subtotal, :observacoes, :criado_em)
                """,
                r,
            )
            return cur.lastrowid

    def remove_item(self, venda_id: int, item_id: int, conn=None) -> bool:
        with using(self.db_path, conn) as c:
            cur = c.execute(
                "DELETE FROM venda_mesa_item WHERE id = ? AND venda_id = ?", (item_id, venda_id)
            )
            return cur.rowcount == 1

    def atualiza_totais(self, venda_id: int, subtotal, desconto, total, conn=None) -> None:
        with using(self.db_path, conn) as c:
            c.execute(
                "UPDATE venda_mesa SET subtotal = ?, desconto = ?, total = ? WHERE id = ?",
                (subtotal, desconto, total, venda_id),
            )

    def grava_desconto(self, venda_id: int, tipo: str, valor, conn=None) -> None:
        with using(self.db_path, conn) as c:
            c.execute(
                "UPDATE venda_mesa SET desconto_tipo = ?, desconto_valor = ? WHERE id = ?",
                (tipo, valor, venda_id),
            )

    def finaliza(self, venda_id: int, status, forma_pagamento=None, troco=None,
                 fechada_em: Optional[str] = None, pagamentos=None, conn=None) -> None:
        with using(self.db_path, conn) as c:
            c.execute(
                """
                UPDATE venda_mesa
                SET status = ?, forma_pagamento = ?, pagamentos = ?, troco = COALESCE(?, troco),
                    fechada_em = ?
                WHERE id = ?
                """,
                (
                    _enum_value(status), _enum_value(forma_pagamento), _pagamentos(pagamentos),
                    troco, fechada_em or agora(), venda_id,
                ),
            )


# -------------------------
# Vendas unificadas (leitura)
# -------------------------

class VendasRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def por_periodo(self, loja_id: int, inicio: str, fim: str, conn=None) -> List[Dict[str, Any]]:
        """Vendas concluídas entre ``inicio`` e ``fim`` (YYYY-MM-DD, inclusivo)."""
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                """
                SELECT canal, id, loja_id, total, forma_pagamento, data
                FROM vw_vendas
                WHERE loja_id = ? AND substr(data, 1, 10) BETWEEN ? AND ?
                ORDER BY data, canal, id
                """,
                (loja_id, inicio, fim),
            ))


# -------------------------
# Fluxo de caixa
# -------------------------

class FluxoCaixaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, loja_id: int, data: str, tipo, valor, descricao: str = "", conn=None) -> int:
        with using(self.db_path, conn) as c:
            cur = c.execute(
                "INSERT INTO fluxo_caixa (loja_id, data, tipo, valor, descricao) VALUES (?, ?, ?, ?, ?)",
                (loja_id, data, _enum_value(tipo), valor, descricao),
            )
            return cur.lastrowid

    def por_mes(self, loja_id: int, ano_mes: str, conn=None) -> List[Dict[str, Any]]:
        with using(self.db_path, conn) as c:
            return _fetch_all(c.execute(
                """
                SELECT id, data, tipo, valor, descricao
                FROM fluxo_caixa
                WHERE loja_id = ? AND substr(data, 1, 7) = ?
                ORDER BY data, id
                """,
                (loja_id, ano_mes),
            ))
