"""
Parâmetros efetivos: valores gravados na tabela ``params`` com fallback
para ``DEFAULTS``.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Dict

from caixa.config import DB_PATH, DEFAULTS, DefaultConfig
from caixa.infra.repositories import ParamsRepo

PARAM_KEYS = ("taxa_cashback", "eta_padrao_minutos", "bloquear_bairro_desconhecido")


def config_efetiva(db_path: str = DB_PATH) -> DefaultConfig:
    repo = ParamsRepo(db_path)
    taxa = repo.get("taxa_cashback")
    try:
        taxa_cashback = Decimal(taxa) if taxa is not None else DEFAULTS.taxa_cashback
    except InvalidOperation:
        taxa_cashback = DEFAULTS.taxa_cashback
    return DefaultConfig(
        taxa_cashback=taxa_cashback,
        eta_padrao_minutos=int(repo.get_float("eta_padrao_minutos", DEFAULTS.eta_padrao_minutos)),
        bloquear_bairro_desconhecido=repo.get_bool(
            "bloquear_bairro_desconhecido", DEFAULTS.bloquear_bairro_desconhecido
        ),
        loja_padrao=DEFAULTS.loja_padrao,
    )


def params_atuais(db_path: str = DB_PATH) -> Dict[str, str]:
    cfg = config_efetiva(db_path)
    return {k: str(getattr(cfg, k)) for k in PARAM_KEYS}
