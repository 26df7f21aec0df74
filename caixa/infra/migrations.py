"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base
V2: canal explícito nos lançamentos de caixa, versão do saldo de cashback
    (controle otimista) e no máximo um caixa aberto por loja
V3: partes do pagamento misto (JSON) nas vendas e regra de desconto da mesa
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Parâmetros K/V
    """
    CREATE TABLE IF NOT EXISTS params (
        chave TEXT PRIMARY KEY,
        valor TEXT
    );
    """,
    # Bairros atendidos pelo delivery
    """
    CREATE TABLE IF NOT EXISTS bairro (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL UNIQUE,
        taxa_entrega TEXT NOT NULL DEFAULT '0.00',
        tempo_entrega INTEGER NOT NULL DEFAULT 50,
        ativo INTEGER NOT NULL DEFAULT 1
    );
    """,
    # Clientes (telefone normalizado é a chave de deduplicação)
    """
    CREATE TABLE IF NOT EXISTS cliente (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL,
        telefone TEXT NOT NULL UNIQUE,
        criado_em TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS saldo_cliente (
        cliente_id INTEGER PRIMARY KEY,
        saldo TEXT NOT NULL DEFAULT '0.00',
        atualizado_em TEXT,
        FOREIGN KEY (cliente_id) REFERENCES cliente(id) ON DELETE CASCADE
    );
    """,
    # Pedidos de delivery
    """
    CREATE TABLE IF NOT EXISTS pedido (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        loja_id INTEGER NOT NULL DEFAULT 1,
        cliente_id INTEGER,
        cliente_nome TEXT,
        cliente_telefone TEXT,
        endereco TEXT,
        complemento TEXT,
        bairro TEXT,
        subtotal TEXT NOT NULL,
        taxa_entrega TEXT NOT NULL DEFAULT '0.00',
        cashback_aplicado TEXT NOT NULL DEFAULT '0.00',
        total TEXT NOT NULL,
        cashback_ganho TEXT NOT NULL DEFAULT '0.00',
        forma_pagamento TEXT NOT NULL,
        troco_para TEXT,
        troco TEXT,
        eta_minutos INTEGER,
        status TEXT NOT NULL DEFAULT 'pending',
        criado_em TEXT,
        atualizado_em TEXT,
        FOREIGN KEY (cliente_id) REFERENCES cliente(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS pedido_item (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        pedido_id INTEGER NOT NULL,
        produto_id TEXT,
        produto_nome TEXT,
        tamanho TEXT,
        complementos TEXT, -- JSON
        quantidade INTEGER NOT NULL,
        preco_unitario TEXT NOT NULL,
        total TEXT NOT NULL,
        observacoes TEXT,
        FOREIGN KEY (pedido_id) REFERENCES pedido(id) ON DELETE CASCADE
    );
    """,
    # Movimentações de cashback
    """
    CREATE TABLE IF NOT EXISTS transacao_cashback (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        cliente_id INTEGER NOT NULL,
        pedido_id INTEGER,
        tipo TEXT NOT NULL, -- 'purchase' | 'redemption'
        valor TEXT NOT NULL,
        criado_em TEXT,
        FOREIGN KEY (cliente_id) REFERENCES cliente(id),
        FOREIGN KEY (pedido_id) REFERENCES pedido(id)
    );
    """,
    # Caixa (sessão entre abertura e fechamento)
    """
    CREATE TABLE IF NOT EXISTS caixa_registro (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        loja_id INTEGER NOT NULL DEFAULT 1,
        operador TEXT,
        valor_abertura TEXT NOT NULL,
        valor_fechamento TEXT,
        diferenca TEXT,
        aberto_em TEXT,
        fechado_em TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS lancamento_caixa (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        caixa_id INTEGER NOT NULL,
        tipo TEXT NOT NULL, -- 'income' | 'expense'
        valor TEXT NOT NULL,
        descricao TEXT,
        forma_pagamento TEXT NOT NULL DEFAULT 'dinheiro',
        criado_em TEXT,
        FOREIGN KEY (caixa_id) REFERENCES caixa_registro(id)
    );
    """,
    # Vendas de balcão (PDV)
    """
    CREATE TABLE IF NOT EXISTS venda_pdv (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        loja_id INTEGER NOT NULL DEFAULT 1,
        caixa_id INTEGER,
        operador TEXT,
        cliente_nome TEXT,
        subtotal TEXT NOT NULL,
        desconto TEXT NOT NULL DEFAULT '0.00',
        desconto_percentual TEXT NOT NULL DEFAULT '0',
        total TEXT NOT NULL,
        forma_pagamento TEXT NOT NULL,
        valor_recebido TEXT,
        troco TEXT NOT NULL DEFAULT '0.00',
        cancelada INTEGER NOT NULL DEFAULT 0,
        motivo_cancelamento TEXT,
        cancelada_em TEXT,
        criado_em TEXT,
        FOREIGN KEY (caixa_id) REFERENCES caixa_registro(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS venda_pdv_item (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        venda_id INTEGER NOT NULL,
        codigo TEXT,
        nome TEXT,
        quantidade INTEGER,
        peso_kg TEXT,
        preco_unitario TEXT,
        preco_por_grama TEXT,
        desconto TEXT NOT NULL DEFAULT '0.00',
        subtotal TEXT NOT NULL,
        FOREIGN KEY (venda_id) REFERENCES venda_pdv(id) ON DELETE CASCADE
    );
    """,
    # Mesas e vendas de mesa
    """
    CREATE TABLE IF NOT EXISTS mesa (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        loja_id INTEGER NOT NULL DEFAULT 1,
        numero INTEGER NOT NULL,
        nome TEXT,
        capacidade INTEGER DEFAULT 4,
        status TEXT NOT NULL DEFAULT 'livre', -- livre | ocupada | aguardando_conta | limpeza
        venda_atual_id INTEGER,
        ativo INTEGER NOT NULL DEFAULT 1,
        UNIQUE (loja_id, numero)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS venda_mesa (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        loja_id INTEGER NOT NULL DEFAULT 1,
        mesa_id INTEGER NOT NULL,
        operador TEXT,
        cliente_nome TEXT,
        pessoas INTEGER NOT NULL DEFAULT 1,
        subtotal TEXT NOT NULL DEFAULT '0.00',
        desconto TEXT NOT NULL DEFAULT '0.00',
        total TEXT NOT NULL DEFAULT '0.00',
        forma_pagamento TEXT,
        troco TEXT NOT NULL DEFAULT '0.00',
        status TEXT NOT NULL DEFAULT 'aberta', -- aberta | fechada | cancelada
        aberta_em TEXT,
        fechada_em TEXT,
        FOREIGN KEY (mesa_id) REFERENCES mesa(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS venda_mesa_item (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        venda_id INTEGER NOT NULL,
        codigo TEXT,
        nome TEXT,
        quantidade INTEGER,
        peso_kg TEXT,
        preco_unitario TEXT,
        preco_por_grama TEXT,
        desconto TEXT NOT NULL DEFAULT '0.00',
        subtotal TEXT NOT NULL,
        observacoes TEXT,
        criado_em TEXT,
        FOREIGN KEY (venda_id) REFERENCES venda_mesa(id) ON DELETE CASCADE
    );
    """,
    # Fluxo de caixa mensal (lançamentos administrativos)
    """
    CREATE TABLE IF NOT EXISTS fluxo_caixa (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        loja_id INTEGER NOT NULL DEFAULT 1,
        data TEXT NOT NULL,
        tipo TEXT NOT NULL, -- receita | despesa | gasto_fixo | transferencia_entrada | transferencia_saida
        valor TEXT NOT NULL,
        descricao TEXT
    );
    """,
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Adiciona coluna se não existir."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] é o nome da coluna
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    # canal gravado na criação do lançamento (pdv | delivery | mesa | manual)
    _ensure_column(conn, "lancamento_caixa", "canal", "canal TEXT NOT NULL DEFAULT 'manual'")
    # versão para compare-and-swap do saldo
    _ensure_column(conn, "saldo_cliente", "versao", "versao INTEGER NOT NULL DEFAULT 0")
    conn.execute(
        """
        CREATE UNIQUE INDEX IF NOT EXISTS ux_caixa_aberto_por_loja
        ON caixa_registro(loja_id) WHERE fechado_em IS NULL;
        """
    )


def _apply_v3(conn) -> None:
    # [{"forma": "dinheiro", "valor": "30.00"}, ...]; NULL quando o pagamento é simples
    for table in ("pedido", "venda_pdv", "venda_mesa"):
        _ensure_column(conn, table, "pagamentos", "pagamentos TEXT")
    # desconto da mesa guardado como regra e reaplicado quando os itens mudam
    _ensure_column(conn, "venda_mesa", "desconto_tipo", "desconto_tipo TEXT NOT NULL DEFAULT 'nenhum'")
    _ensure_column(conn, "venda_mesa", "desconto_valor", "desconto_valor TEXT NOT NULL DEFAULT '0'")
    # descontos anteriores viram regra de valor fixo
    conn.execute(
        """
        UPDATE venda_mesa SET desconto_tipo = 'valor', desconto_valor = desconto
        WHERE desconto_tipo = 'nenhum' AND CAST(desconto AS REAL) > 0
        """
    )


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2

        if ver < 3:
            _apply_v3(conn)
            conn.execute("PRAGMA user_version = 3;")
            ver = 3
