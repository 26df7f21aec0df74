"""
Criação de views auxiliares para consultas frequentes.

Views criadas:
- vw_vendas:          todas as vendas concluídas, com o canal como discriminante
                      (PDV não cancelada, delivery não cancelado, mesa fechada).
- vw_extrato_cashback: transações de cashback com nome e telefone do cliente.

Obs.:
- As views assumem que as migrações V1→V2 já foram aplicadas.
- A exclusão de canceladas/abertas acontece aqui, antes de qualquer
  agregação, para que recarregar um relatório nunca some duas vezes.
- Um conjunto de índices úteis também é criado, caso não existam.
"""

from __future__ import annotations

from .db import connect


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        # -----------------------
        # Views (drop + create)
        # -----------------------
        c.executescript(
            """
            ---------------------------
            -- Vendas unificadas
            ---------------------------
            DROP VIEW IF EXISTS vw_vendas;
            CREATE VIEW vw_vendas AS
            SELECT 'pdv' AS canal, id, loja_id, total, forma_pagamento, criado_em AS data
            FROM venda_pdv
            WHERE cancelada = 0
            UNION ALL
            SELECT 'delivery' AS canal, id, loja_id, total, forma_pagamento, criado_em AS data
            FROM pedido
            WHERE status <> 'cancelled'
            UNION ALL
            SELECT 'mesa' AS canal, id, loja_id, total, forma_pagamento, fechada_em AS data
            FROM venda_mesa
            WHERE status = 'fechada';

            ---------------------------
            -- Extrato de cashback
            ---------------------------
            DROP VIEW IF EXISTS vw_extrato_cashback;
            CREATE VIEW vw_extrato_cashback AS
            SELECT
                t.id,
                t.cliente_id,
                c.nome     AS cliente_nome,
                c.telefone AS cliente_telefone,
                t.pedido_id,
                t.tipo,
                t.valor,
                t.criado_em
            FROM transacao_cashback t
            JOIN cliente c ON c.id = t.cliente_id;
            """
        )

        # --------------------------------
        # Índices úteis (IF NOT EXISTS)
        # --------------------------------
        c.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_pedido_data        ON pedido(loja_id, criado_em);
            CREATE INDEX IF NOT EXISTS idx_venda_pdv_data     ON venda_pdv(loja_id, criado_em);
            CREATE INDEX IF NOT EXISTS idx_venda_mesa_data    ON venda_mesa(loja_id, fechada_em);
            CREATE INDEX IF NOT EXISTS idx_lancamento_caixa   ON lancamento_caixa(caixa_id);
            CREATE INDEX IF NOT EXISTS idx_caixa_aberto_em    ON caixa_registro(loja_id, aberto_em);
            CREATE INDEX IF NOT EXISTS idx_transacao_cliente  ON transacao_cashback(cliente_id);
            CREATE INDEX IF NOT EXISTS idx_fluxo_data         ON fluxo_caixa(loja_id, data);
            """
        )
