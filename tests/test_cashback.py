from decimal import Decimal

import pytest

from caixa.domain.cashback import (
    aplica_transacoes, calcula_cashback, planeja_cashback, total_a_pagar, valida_resgate,
)
from caixa.domain.errors import ExceedsOrderTotalError, InsufficientBalanceError, ValidationError
from caixa.domain.models import TipoTransacao, TransacaoCashback


def test_cashback_calculado_sobre_valor_pago_apos_resgate():
    plano = planeja_cashback("100.00", "5.00", saldo_disponivel="10.00", cashback_solicitado="10.00")
    assert plano.total == Decimal("95.00")
    assert plano.cashback_ganho == Decimal("4.75")
    assert [t.tipo for t in plano.transacoes] == [TipoTransacao.RESGATE, TipoTransacao.COMPRA]
    assert [t.valor for t in plano.transacoes] == [Decimal("10.00"), Decimal("4.75")]


def test_sem_resgate_apenas_compra():
    plano = planeja_cashback("90.00", "5.00", saldo_disponivel="0")
    assert plano.cashback_aplicado == Decimal("0.00")
    assert plano.total == Decimal("95.00")
    assert [t.tipo for t in plano.transacoes] == [TipoTransacao.COMPRA]
    assert calcula_cashback("95.00") == Decimal("4.75")


def test_resgate_acima_do_saldo_rejeitado():
    with pytest.raises(InsufficientBalanceError) as exc:
        valida_resgate("20.00", "15.00", "100.00")
    assert exc.value.disponivel == Decimal("15.00")


def test_resgate_acima_do_total_rejeitado():
    with pytest.raises(ExceedsOrderTotalError):
        valida_resgate("50.00", "80.00", "45.00")


def test_saldo_e_verificado_antes_do_total():
    with pytest.raises(InsufficientBalanceError):
        valida_resgate("50.00", "30.00", "40.00")


def test_resgate_igual_ao_saldo_aceito():
    assert valida_resgate("15.00", "15.00", "40.00") == Decimal("15.00")


@pytest.mark.parametrize("valor", ["0", "-1"])
def test_resgate_nao_positivo(valor):
    with pytest.raises(ValidationError):
        valida_resgate(valor, "10", "10")


def test_total_nunca_negativo():
    assert total_a_pagar("10.00", "0", "25.00") == Decimal("0.00")
    assert calcula_cashback(0) == Decimal("0.00")


def test_resgate_total_zera_cobranca_sem_acumulo():
    plano = planeja_cashback("20.00", "5.00", saldo_disponivel="30.00", cashback_solicitado="25.00")
    assert plano.total == Decimal("0.00")
    assert plano.cashback_ganho == Decimal("0.00")
    assert [t.tipo for t in plano.transacoes] == [TipoTransacao.RESGATE]


def test_aplica_transacoes():
    txs = [TransacaoCashback("redemption", "10.00"), TransacaoCashback("purchase", "4.25")]
    assert aplica_transacoes("20.00", txs) == Decimal("14.25")
    with pytest.raises(InsufficientBalanceError):
        aplica_transacoes("5.00", txs)
