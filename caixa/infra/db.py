"""
Utilidades de conexão SQLite.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional

from caixa.domain.errors import PersistenceError

# Valores monetários são gravados como TEXT ("12.50") para não passar por float.
sqlite3.register_adapter(Decimal, str)


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Context manager para abrir conexão SQLite com:
    - foreign_keys ON
    - row_factory = sqlite3.Row
    - commit ao sair (rollback em caso de exceção)

    Tudo o que for executado dentro do bloco forma uma única transação.
    Erros do sqlite3 são convertidos em ``PersistenceError``.
    """
    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as e:
        raise PersistenceError(f"Não foi possível abrir o banco {db_path}: {e}") from e
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise PersistenceError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def using(db_path: str, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
    """Reaproveita ``conn`` (transação do chamador) ou abre uma conexão própria."""
    if conn is not None:
        yield conn
        return
    with connect(db_path) as c:
        yield c
