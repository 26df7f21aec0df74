from decimal import Decimal

import pandas as pd
import pytest

from caixa.adapters.loader import _normalize_columns, _ALIASES_BAIRRO, load_bairros, load_movimentos_fluxo
from caixa.domain.errors import ValidationError
from caixa.domain.models import TipoFluxo
from caixa.usecases.bairros import consultar_taxa, importar_bairros, listar_bairros
from caixa.usecases.fluxo_caixa import importar_movimentos
from caixa.infra.repositories import FluxoCaixaRepo


def _csv_bairros(tmp_path):
    p = tmp_path / "bairros.csv"
    p.write_text(
        "Bairro;Taxa de Entrega;Tempo (min);Ativo\n"
        "Centro;5,00;30;sim\n"
        "Jardim América;R$ 8,50;45;sim\n"
        "Zona Rural;15,00;;não\n",
        encoding="utf-8",
    )
    return p


def test_normalize_columns_sinonimos():
    df = pd.DataFrame({"Nome do Bairro": ["Centro"], "Frete": ["5"], "ETA": ["30"]})
    out = _normalize_columns(df, _ALIASES_BAIRRO)
    assert list(out.columns) == ["nome", "taxa_entrega", "tempo_entrega"]


def test_load_bairros_csv(tmp_path):
    rows = load_bairros(str(_csv_bairros(tmp_path)), eta_padrao=50)
    assert [r["nome"] for r in rows] == ["Centro", "Jardim América", "Zona Rural"]
    assert rows[1]["taxa_entrega"] == Decimal("8.50")
    assert rows[2]["tempo_entrega"] == 50
    assert rows[2]["ativo"] == 0


def test_load_bairros_sem_coluna_de_nome(tmp_path):
    p = tmp_path / "ruim.csv"
    p.write_text("Cidade;Taxa\nSP;5\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_bairros(str(p))


def test_load_bairros_arquivo_inexistente(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bairros(str(tmp_path / "nao_existe.xlsx"))


def test_importar_bairros(tmp_path, db_path):
    info = importar_bairros(str(_csv_bairros(tmp_path)), db_path=db_path)
    assert info["linhas_importadas"] == 3
    assert len(listar_bairros(apenas_ativos=True, db_path=db_path)) == 2
    t = consultar_taxa("jardim america", db_path=db_path)
    assert (t.taxa, t.eta_minutos, t.encontrado) == (Decimal("8.50"), 45, True)


def _xlsx_fluxo(tmp_path):
    p = tmp_path / "fluxo.xlsx"
    pd.DataFrame({
        "Data": ["05/03/2024", "2024-03-10", "2024-03-12"],
        "Categoria": ["Gasto fixo", "Despesa", "Transferência entrada"],
        "Valor": ["1.200,00", "-35,50", "500"],
        "Histórico": ["Aluguel", "Gás", "Aporte"],
    }).to_excel(p, index=False)
    return p


def test_load_movimentos_fluxo_xlsx(tmp_path):
    rows = load_movimentos_fluxo(str(_xlsx_fluxo(tmp_path)))
    assert [r["tipo"] for r in rows] == [
        TipoFluxo.GASTO_FIXO, TipoFluxo.DESPESA, TipoFluxo.TRANSFERENCIA_ENTRADA,
    ]
    assert rows[0]["data"] == "2024-03-05"
    assert rows[0]["valor"] == Decimal("1200.00")
    assert rows[1]["valor"] == Decimal("35.50")
    assert rows[2]["descricao"] == "Aporte"


def test_load_movimentos_tipo_desconhecido(tmp_path):
    p = tmp_path / "fluxo.csv"
    p.write_text("data;tipo;valor\n2024-03-01;bonus;10\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_movimentos_fluxo(str(p))


def test_importar_movimentos(tmp_path, db_path):
    info = importar_movimentos(str(_xlsx_fluxo(tmp_path)), db_path=db_path)
    assert info["linhas_importadas"] == 3
    rows = FluxoCaixaRepo(db_path).por_mes(1, "2024-03")
    assert [r["valor"] for r in rows] == ["1200.00", "35.50", "500.00"]
