"""
Loaders de planilhas (XLSX ou CSV) para cadastros em lote.

Essas funções:
- leem a planilha usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- retornam listas de dicionários com as chaves esperadas pela camada infra.

Planilhas suportadas:
- bairros atendidos (nome, taxa de entrega, tempo de entrega, ativo);
- movimentos do fluxo de caixa mensal (data, tipo, valor, descrição).
"""

from __future__ import annotations

import re
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from caixa.adapters.parsers import parse_data, parse_valor
from caixa.domain.errors import ValidationError
from caixa.domain.models import TipoFluxo


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key):
    """Lê um valor da linha tratando NA do pandas como None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    return val


def _to_bool01(val: Any, default: int = 1) -> int:
    if val is None:
        return default
    s = str(val).strip().lower()
    if s in {"1", "true", "t", "sim", "s", "y", "yes"}:
        return 1
    if s in {"0", "false", "f", "nao", "não", "n", "no"}:
        return 0
    try:
        return 1 if int(float(s)) else 0
    except ValueError:
        return default


def _read(path: str) -> pd.DataFrame:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    if p.suffix.lower() == ".csv":
        # CSV exportado do Excel em pt-BR costuma vir com ';'
        df = pd.read_csv(p, sep=None, engine="python", dtype=str)
    else:
        df = pd.read_excel(p, dtype=str)
    return df


def _normalize_columns(df: pd.DataFrame, aliases: Dict[str, str]) -> pd.DataFrame:
    ren = {}
    for col in df.columns:
        key = aliases.get(_slug(col))
        if key and key not in ren.values():
            ren[col] = key
    return df.rename(columns=ren)


# ---------------------------
# Bairros
# ---------------------------

_ALIASES_BAIRRO = {
    "bairro": "nome",
    "nome": "nome",
    "nome do bairro": "nome",
    "neighborhood": "nome",

    "taxa": "taxa_entrega",
    "taxa entrega": "taxa_entrega",
    "taxa de entrega": "taxa_entrega",
    "valor": "taxa_entrega",
    "frete": "taxa_entrega",
    "delivery fee": "taxa_entrega",

    "tempo": "tempo_entrega",
    "tempo entrega": "tempo_entrega",
    "tempo de entrega": "tempo_entrega",
    "tempo min": "tempo_entrega",
    "eta": "tempo_entrega",
    "minutos": "tempo_entrega",

    "ativo": "ativo",
    "atende": "ativo",
    "active": "ativo",
}


def load_bairros(path: str, eta_padrao: int = 50) -> List[Dict[str, Any]]:
    """Lê a planilha de bairros e devolve linhas prontas para ``BairroRepo.upsert``.

    Linhas sem nome são ignoradas. Taxa ausente vira zero; taxa negativa é erro.
    """
    df = _normalize_columns(_read(path), _ALIASES_BAIRRO)
    if "nome" not in df.columns:
        raise ValidationError(f"Planilha {path} sem coluna de bairro")

    rows: List[Dict[str, Any]] = []
    for i, row in df.iterrows():
        nome = _safe_get(row, "nome")
        if nome is None or not str(nome).strip():
            continue
        taxa = parse_valor(_safe_get(row, "taxa_entrega")) or Decimal("0")
        if taxa < 0:
            raise ValidationError(f"Linha {i + 2}: taxa negativa para {nome!r}")
        tempo = _safe_get(row, "tempo_entrega")
        rows.append({
            "nome": str(nome).strip(),
            "taxa_entrega": taxa,
            "tempo_entrega": int(float(tempo)) if tempo is not None else eta_padrao,
            "ativo": _to_bool01(_safe_get(row, "ativo")),
        })
    return rows


# ---------------------------
# Fluxo de caixa
# ---------------------------

_ALIASES_FLUXO = {
    "data": "data",
    "dia": "data",
    "tipo": "tipo",
    "categoria": "tipo",
    "valor": "valor",
    "descricao": "descricao",
    "historico": "descricao",
    "obs": "descricao",
}

_TIPOS_FLUXO = {
    "receita": TipoFluxo.RECEITA,
    "entrada": TipoFluxo.RECEITA,
    "despesa": TipoFluxo.DESPESA,
    "saida": TipoFluxo.DESPESA,
    "gasto fixo": TipoFluxo.GASTO_FIXO,
    "fixo": TipoFluxo.GASTO_FIXO,
    "transferencia entrada": TipoFluxo.TRANSFERENCIA_ENTRADA,
    "transferencia saida": TipoFluxo.TRANSFERENCIA_SAIDA,
}


def _tipo_fluxo(val: Optional[str]) -> TipoFluxo:
    chave = _slug(val or "")
    if chave in _TIPOS_FLUXO:
        return _TIPOS_FLUXO[chave]
    raise ValidationError(f"Tipo de movimento desconhecido: {val!r}")


def load_movimentos_fluxo(path: str) -> List[Dict[str, Any]]:
    """Lê movimentos administrativos (aluguel, retiradas, aportes...)."""
    df = _normalize_columns(_read(path), _ALIASES_FLUXO)
    faltando = {"data", "tipo", "valor"} - set(df.columns)
    if faltando:
        raise ValidationError(f"Planilha {path} sem colunas: {', '.join(sorted(faltando))}")

    rows: List[Dict[str, Any]] = []
    for i, row in df.iterrows():
        valor = parse_valor(_safe_get(row, "valor"))
        if valor is None:
            continue
        data = parse_data(_safe_get(row, "data"))
        if data is None:
            raise ValidationError(f"Linha {i + 2}: data ausente")
        rows.append({
            "data": data,
            "tipo": _tipo_fluxo(_safe_get(row, "tipo")),
            "valor": abs(valor),
            "descricao": str(_safe_get(row, "descricao") or "").strip(),
        })
    return rows
