import json
from decimal import Decimal

import pytest

from caixa.domain.errors import (
    InvalidTransitionError,
    NotFoundError,
    RegisterNotOpenError,
    ValidationError,
)
from caixa.domain.models import ItemVenda, Sessao
from caixa.infra.db import connect
from caixa.infra.repositories import VendaPdvRepo, VendasRepo
from caixa.usecases.caixa import abrir_caixa, resumo_caixa_atual
from caixa.usecases.vendas_mesa import (
    abrir_venda_mesa,
    adicionar_item_mesa,
    aplicar_desconto_mesa,
    cadastrar_mesa,
    cancelar_venda_mesa,
    dividir_conta_mesa,
    fechar_venda_mesa,
    listar_mesas,
    remover_item_mesa,
)
from caixa.usecases.vendas_pdv import cancelar_venda_pdv, registrar_venda_pdv

SESSAO = Sessao(loja_id=1, operador="bia")


def _acai_peso():
    return ItemVenda("P1", "Açaí no peso", peso_kg="0.350", preco_por_grama="0.0599")


def _copo(qtd=1):
    return ItemVenda("C500", "Copo 500ml", qtd, preco_unitario="12.00")


@pytest.fixture
def aberto(db_path):
    abrir_caixa("100.00", SESSAO, db_path=db_path)
    return db_path


# ---------------- PDV ----------------

def test_pdv_sem_caixa(db_path):
    with pytest.raises(RegisterNotOpenError):
        registrar_venda_pdv([_copo()], "dinheiro", SESSAO, db_path=db_path)
    with connect(db_path) as conn:
        assert conn.execute("SELECT COUNT(*) FROM venda_pdv").fetchone()[0] == 0


def test_pdv_item_pesavel_com_desconto_e_troco(aberto):
    res = registrar_venda_pdv(
        [_acai_peso()], "dinheiro", SESSAO,
        desconto_tipo="percentual", desconto_valor=10, valor_recebido="20.00", db_path=aberto,
    )
    assert res["subtotal"] == Decimal("20.97")
    assert res["desconto"] == Decimal("2.10")
    assert res["total"] == Decimal("18.87")
    assert res["troco"] == Decimal("1.13")

    venda = VendaPdvRepo(aberto).get(res["venda_id"])
    assert venda["desconto_percentual"] == "10.01"
    assert venda["itens"][0]["subtotal"] == "20.97"

    r = resumo_caixa_atual(SESSAO, db_path=aberto)
    assert r.vendas_por_canal["pdv"] == Decimal("18.87")
    assert r.saldo_esperado == Decimal("118.87")


def test_pdv_cartao_nao_entra_na_gaveta(aberto):
    registrar_venda_pdv([_copo(2)], "cartao_debito", SESSAO, db_path=aberto)
    r = resumo_caixa_atual(SESSAO, db_path=aberto)
    assert r.vendas_por_canal["pdv"] == Decimal("24.00")
    assert r.saldo_esperado == Decimal("100.00")


def test_pdv_validacoes(aberto):
    with pytest.raises(ValidationError):
        registrar_venda_pdv([], "pix", SESSAO, db_path=aberto)
    with pytest.raises(ValidationError):
        registrar_venda_pdv([_copo()], "pix", SESSAO, desconto_tipo="percentual",
                            desconto_valor=100, db_path=aberto)
    with pytest.raises(ValidationError):
        registrar_venda_pdv([_copo()], "dinheiro", SESSAO, valor_recebido="5.00", db_path=aberto)


def test_pdv_cancelamento(aberto):
    vid = registrar_venda_pdv([_copo()], "pix", SESSAO, db_path=aberto)["venda_id"]
    registrar_venda_pdv([_copo(2)], "pix", SESSAO, db_path=aberto)
    cancelar_venda_pdv(vid, "cliente desistiu", db_path=aberto)

    vendas = VendasRepo(aberto).por_periodo(1, "2000-01-01", "2999-12-31")
    assert [v["total"] for v in vendas] == ["24.00"]
    with pytest.raises(InvalidTransitionError):
        cancelar_venda_pdv(vid, db_path=aberto)
    # o lançamento original permanece no caixa
    assert resumo_caixa_atual(SESSAO, db_path=aberto).vendas_por_canal["pdv"] == Decimal("36.00")


def _combo():
    return ItemVenda("K1", "Combo família", 1, preco_unitario="50.00")


def test_pdv_pagamento_misto_lanca_cada_forma(aberto):
    res = registrar_venda_pdv(
        [_combo()], "misto", SESSAO, valor_recebido="50.00",
        pagamentos=[("dinheiro", "30.00"), ("pix", "20.00")], db_path=aberto,
    )
    assert res["total"] == Decimal("50.00")
    # troco sobre a parte em dinheiro; recebido = 20 no pix + 50 em espécie
    assert res["troco"] == Decimal("20.00")
    assert res["valor_recebido"] == Decimal("70.00")

    r = resumo_caixa_atual(SESSAO, db_path=aberto)
    assert r.vendas_por_canal["pdv"] == Decimal("50.00")
    assert r.entradas_por_forma == {"dinheiro": Decimal("30.00"), "pix": Decimal("20.00")}
    assert r.por_canal_quantidade["pdv"] == 1
    assert r.saldo_esperado == Decimal("130.00")

    venda = VendaPdvRepo(aberto).get(res["venda_id"])
    assert json.loads(venda["pagamentos"]) == [
        {"forma": "dinheiro", "valor": "30.00"},
        {"forma": "pix", "valor": "20.00"},
    ]


@pytest.mark.parametrize("forma, partes", [
    ("misto", None),
    ("misto", [("dinheiro", "30.00"), ("pix", "10.00")]),
    ("misto", [("misto", "50.00")]),
    ("misto", [("dinheiro", "50.00"), ("pix", "0.00")]),
    ("pix", [("pix", "50.00")]),
])
def test_pdv_pagamento_misto_invalido_nao_grava(aberto, forma, partes):
    with pytest.raises(ValidationError):
        registrar_venda_pdv([_combo()], forma, SESSAO, pagamentos=partes, db_path=aberto)
    with connect(aberto) as conn:
        assert conn.execute("SELECT COUNT(*) FROM venda_pdv").fetchone()[0] == 0
        assert conn.execute("SELECT COUNT(*) FROM lancamento_caixa").fetchone()[0] == 0


# ---------------- Mesa ----------------

def test_mesa_fluxo_completo(aberto):
    cadastrar_mesa(5, db_path=aberto)
    venda_id = abrir_venda_mesa(5, SESSAO, "Família Souza", 3, db_path=aberto)["venda_id"]
    with pytest.raises(ValidationError):
        abrir_venda_mesa(5, SESSAO, db_path=aberto)
    assert listar_mesas(SESSAO, db_path=aberto)[0]["status"] == "ocupada"

    adicionar_item_mesa(venda_id, _copo(2), db_path=aberto)
    res = adicionar_item_mesa(venda_id, _acai_peso(), db_path=aberto)
    assert res["subtotal"] == Decimal("44.97")

    res = aplicar_desconto_mesa(venda_id, "valor", "4.97", db_path=aberto)
    assert res["total"] == Decimal("40.00")
    assert dividir_conta_mesa(venda_id, 3, db_path=aberto) == [
        Decimal("13.34"), Decimal("13.33"), Decimal("13.33"),
    ]

    res = fechar_venda_mesa(venda_id, "dinheiro", SESSAO, valor_recebido="50.00", db_path=aberto)
    assert res["status"] == "fechada"
    assert res["troco"] == Decimal("10.00")

    mesa = listar_mesas(SESSAO, db_path=aberto)[0]
    assert mesa["status"] == "livre"
    assert mesa["venda_atual_id"] is None

    r = resumo_caixa_atual(SESSAO, db_path=aberto)
    assert r.vendas_por_canal["mesa"] == Decimal("40.00")
    assert r.saldo_esperado == Decimal("140.00")

    with pytest.raises(InvalidTransitionError):
        adicionar_item_mesa(venda_id, _copo(), db_path=aberto)
    with pytest.raises(InvalidTransitionError):
        cancelar_venda_mesa(venda_id, db_path=aberto)


def test_mesa_remover_item_recalcula(aberto):
    cadastrar_mesa(1, db_path=aberto)
    venda_id = abrir_venda_mesa(1, SESSAO, db_path=aberto)["venda_id"]
    adicionar_item_mesa(venda_id, _copo(), db_path=aberto)
    item_id = adicionar_item_mesa(venda_id, _acai_peso(), db_path=aberto)["item_id"]
    aplicar_desconto_mesa(venda_id, "valor", "15.00", db_path=aberto)

    res = remover_item_mesa(venda_id, item_id, db_path=aberto)
    # desconto limitado ao novo subtotal
    assert res == {"venda_id": venda_id, "subtotal": Decimal("12.00"),
                   "desconto": Decimal("12.00"), "total": Decimal("0.00")}
    with pytest.raises(NotFoundError):
        remover_item_mesa(venda_id, item_id, db_path=aberto)
    with pytest.raises(ValidationError):
        fechar_venda_mesa(venda_id, "pix", SESSAO, db_path=aberto)


def test_mesa_fechar_sem_caixa(db_path):
    cadastrar_mesa(2, db_path=db_path)
    venda_id = abrir_venda_mesa(2, SESSAO, db_path=db_path)["venda_id"]
    adicionar_item_mesa(venda_id, _copo(), db_path=db_path)
    with pytest.raises(RegisterNotOpenError):
        fechar_venda_mesa(venda_id, "pix", SESSAO, db_path=db_path)
    # nada mudou: venda continua aberta e mesa ocupada
    assert listar_mesas(SESSAO, db_path=db_path)[0]["venda_atual_id"] == venda_id


def test_mesa_cancelada_fora_dos_relatorios(aberto):
    cadastrar_mesa(3, db_path=aberto)
    venda_id = abrir_venda_mesa(3, SESSAO, db_path=aberto)["venda_id"]
    adicionar_item_mesa(venda_id, _copo(), db_path=aberto)
    assert cancelar_venda_mesa(venda_id, db_path=aberto)["status"] == "cancelada"
    assert VendasRepo(aberto).por_periodo(1, "2000-01-01", "2999-12-31") == []
    assert listar_mesas(SESSAO, db_path=aberto)[0]["status"] == "livre"


def test_mesa_pagamento_misto(aberto):
    cadastrar_mesa(4, db_path=aberto)
    venda_id = abrir_venda_mesa(4, SESSAO, pessoas=2, db_path=aberto)["venda_id"]
    adicionar_item_mesa(venda_id, _copo(2), db_path=aberto)
    res = fechar_venda_mesa(
        venda_id, "misto", SESSAO,
        pagamentos=[("cartao_debito", "14.00"), ("dinheiro", "10.00")], db_path=aberto,
    )
    assert res["total"] == Decimal("24.00")
    assert res["troco"] == Decimal("0.00")

    r = resumo_caixa_atual(SESSAO, db_path=aberto)
    assert r.vendas_por_canal["mesa"] == Decimal("24.00")
    assert r.saldo_esperado == Decimal("110.00")


def test_mesa_desconto_percentual_acompanha_itens(aberto):
    cadastrar_mesa(6, db_path=aberto)
    venda_id = abrir_venda_mesa(6, SESSAO, db_path=aberto)["venda_id"]
    adicionar_item_mesa(venda_id, _copo(2), db_path=aberto)
    res = aplicar_desconto_mesa(venda_id, "percentual", 10, db_path=aberto)
    assert (res["desconto"], res["total"]) == (Decimal("2.40"), Decimal("21.60"))

    res = adicionar_item_mesa(venda_id, _copo(), db_path=aberto)
    assert res["subtotal"] == Decimal("36.00")
    assert (res["desconto"], res["total"]) == (Decimal("3.60"), Decimal("32.40"))

    with pytest.raises(ValidationError):
        aplicar_desconto_mesa(venda_id, "percentual", 150, db_path=aberto)
    # regra anterior continua valendo
    res = fechar_venda_mesa(venda_id, "pix", SESSAO, db_path=aberto)
    assert res["total"] == Decimal("32.40")
