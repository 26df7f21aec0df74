"""
Utilidades de parsing para valores digitados no balcão ou lidos de planilhas.

Este módulo interpreta strings de valores monetários no formato brasileiro
("R$ 1.234,56"), pesos ("0,350 kg") e telefones, devolvendo tipos
normalizados para os casos de uso.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Tuple

from caixa.domain.errors import ValidationError

_NUM_RE = re.compile(r"[-+]?\d[\d.,]*")


def parse_valor(txt: Any) -> Optional[Decimal]:
    """Interpreta um valor monetário em reais.

    Aceita vírgula ou ponto como separador decimal. Quando os dois aparecem,
    o último é o decimal e o outro é separador de milhar.

    Exemplos:
        "R$ 1.234,56" → Decimal("1234.56")
        "12,5"        → Decimal("12.5")
        "1,234.56"    → Decimal("1234.56")
        "15.90"       → Decimal("15.90")

    Returns:
        ``Decimal`` ou None se o texto estiver vazio.
    """
    if txt is None:
        return None
    if isinstance(txt, Decimal):
        return txt
    if isinstance(txt, (int, float)) and not isinstance(txt, bool):
        return Decimal(str(txt))
    s = str(txt).strip()
    if not s:
        return None
    m = _NUM_RE.search(s.replace(" ", ""))
    if not m:
        raise ValidationError(f"Valor inválido: {txt!r}")
    num = m.group(0)
    if "," in num and "." in num:
        if num.rfind(",") > num.rfind("."):
            num = num.replace(".", "").replace(",", ".")
        else:
            num = num.replace(",", "")
    elif "," in num:
        num = num.replace(",", ".")
    elif num.count(".") > 1:
        # "1.234.567" só pode ser separador de milhar
        num = num.replace(".", "")
    try:
        return Decimal(num)
    except InvalidOperation:
        raise ValidationError(f"Valor inválido: {txt!r}") from None


def parse_pagamentos(lista: Any) -> Optional[List[Tuple[str, Decimal]]]:
    """Partes do pagamento misto: ``[{"forma": "pix", "valor": "20,00"}, ...]``."""
    if not lista:
        return None
    partes = []
    for p in lista:
        valor = parse_valor((p or {}).get("valor"))
        if valor is None:
            raise ValidationError(f"Parte de pagamento sem valor: {p!r}")
        partes.append((str(p.get("forma") or ""), valor))
    return partes


def parse_peso_kg(txt: Any) -> Optional[Decimal]:
    """Peso em kg. "350 g" vira 0.350; "0,35 kg" e "0,35" ficam como estão."""
    if txt is None or str(txt).strip() == "":
        return None
    s = str(txt).strip().lower()
    gramas = s.endswith("g") and not s.endswith("kg")
    v = parse_valor(s)
    if v is None:
        return None
    return v / Decimal(1000) if gramas else v


def normaliza_telefone(txt: Any) -> str:
    """Mantém apenas dígitos e remove o DDI 55.

    O resultado deve ter 11 dígitos (DDD + celular); qualquer outra coisa
    é rejeitada.
    """
    digitos = re.sub(r"\D", "", str(txt or ""))
    if len(digitos) == 13 and digitos.startswith("55"):
        digitos = digitos[2:]
    if len(digitos) != 11:
        raise ValidationError(f"Telefone inválido: {txt!r} (esperado DDD + 9 dígitos)")
    return digitos


def formata_telefone(digitos: str) -> str:
    """(11) 98765-4321"""
    d = re.sub(r"\D", "", digitos or "")
    if len(d) != 11:
        return digitos
    return f"({d[:2]}) {d[2:7]}-{d[7:]}"


def parse_data(txt: Any) -> Optional[str]:
    """Converte DD/MM/AAAA ou YYYY-MM-DD para ISO (YYYY-MM-DD)."""
    if txt is None:
        return None
    if isinstance(txt, (date, datetime)):
        return txt.strftime("%Y-%m-%d")
    s = str(txt).strip()
    if not s:
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d/%m/%y"):
        try:
            return datetime.strptime(s[:10], fmt).date().isoformat()
        except ValueError:
            continue
    raise ValidationError(f"Data inválida: {txt!r}")


def parse_ano_mes(txt: str) -> str:
    """Valida "YYYY-MM" (aceita também "MM/AAAA")."""
    s = str(txt or "").strip()
    m = re.fullmatch(r"(\d{4})-(\d{1,2})", s) or None
    if m:
        ano, mes = int(m.group(1)), int(m.group(2))
    else:
        m = re.fullmatch(r"(\d{1,2})/(\d{4})", s)
        if not m:
            raise ValidationError(f"Mês inválido: {txt!r} (use YYYY-MM)")
        mes, ano = int(m.group(1)), int(m.group(2))
    if not 1 <= mes <= 12:
        raise ValidationError(f"Mês inválido: {txt!r}")
    return f"{ano:04d}-{mes:02d}"
