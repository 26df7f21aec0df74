import pytest

from caixa.domain.errors import InvalidTransitionError
from caixa.domain.models import StatusPedido, StatusVendaMesa
from caixa.domain.pedidos import terminal, transiciona, transiciona_mesa


@pytest.mark.parametrize(
    "atual,novo",
    [
        ("pending", "confirmed"),
        ("confirmed", "preparing"),
        ("preparing", "out_for_delivery"),
        ("preparing", "ready_for_pickup"),
        ("out_for_delivery", "delivered"),
        ("ready_for_pickup", "delivered"),
        ("pending", "cancelled"),
        ("out_for_delivery", "cancelled"),
    ],
)
def test_transicoes_validas(atual, novo):
    assert transiciona(atual, novo) == StatusPedido(novo)


@pytest.mark.parametrize(
    "atual,novo",
    [
        ("pending", "delivered"),
        ("delivered", "cancelled"),
        ("cancelled", "pending"),
        ("confirmed", "confirmed"),
    ],
)
def test_transicoes_invalidas(atual, novo):
    with pytest.raises(InvalidTransitionError):
        transiciona(atual, novo)


def test_terminais():
    assert terminal(StatusPedido.DELIVERED)
    assert terminal("cancelled")
    assert not terminal("preparing")


def test_mesa():
    assert transiciona_mesa("aberta", "fechada") is StatusVendaMesa.FECHADA
    with pytest.raises(InvalidTransitionError):
        transiciona_mesa("fechada", "cancelada")
