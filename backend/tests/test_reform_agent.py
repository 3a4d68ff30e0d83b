import pytest

from backend.agents.reform_agent import calculate_costs_2027
from backend.models import PricingConfig, ReformSimulationInput


def _inputs(**overrides):
    base = dict(valor_compra=100.0, frete_valor=0.0, comissao_venda=5.0, resultado_desejado=10.0)
    base.update(overrides)
    return ReformSimulationInput(**base)


def test_iva_components_sum_to_total_rate():
    result = calculate_costs_2027(_inputs())

    assert result.cbs_rate == pytest.approx(8.8)
    assert result.ibs_rate == pytest.approx(17.7)
    assert result.total_iva_rate == pytest.approx(result.cbs_rate + result.ibs_rate)
    assert result.total_iva_rate == pytest.approx(26.5)
    assert result.deducoes_sem_margem == pytest.approx(26.5 + 5)


def test_entry_credit_is_partially_recognized():
    result = calculate_costs_2027(_inputs(frete_valor=20))

    assert result.valor_total_nota == 120
    assert result.credito_iva_entrada == 31.8
    assert result.credito_iva_aproveitado == 28.62
    assert result.custo_final == 91.38


def test_monetary_steps_are_rounded_to_cents():
    result = calculate_costs_2027(_inputs())

    assert result.custo_final == 76.15
    assert result.preco_venda_alvo == 130.17
    assert result.preco_equilibrio == 111.17
    assert result.valor_cbs == 11.45
    assert result.valor_ibs == 23.04
    assert result.margem_absoluta == 13.02


def test_rounding_can_be_disabled():
    config = PricingConfig(round_reform_steps=False)
    result = calculate_costs_2027(_inputs(), config)

    assert result.custo_final == pytest.approx(100 - 26.5 * 0.9)
    assert result.preco_venda_alvo == pytest.approx(result.custo_final / 0.585)
    assert result.impostos_totais == pytest.approx(result.preco_venda_alvo * 0.265)
    assert result.valor_cbs + result.valor_ibs == pytest.approx(result.impostos_totais)


def test_ipi_percent_does_not_change_the_projection():
    assert calculate_costs_2027(_inputs(ipi_perc=10)) == calculate_costs_2027(_inputs(ipi_perc=0))


def test_custom_rates_flow_through_config():
    config = PricingConfig(cbs_rate=10, ibs_rate=15, iva_credit_factor=1.0)
    result = calculate_costs_2027(_inputs(), config)

    assert result.total_iva_rate == 25
    assert result.custo_final == 75
    assert result.preco_venda_alvo == pytest.approx(round(75 / 0.6, 2))


def test_stack_at_or_above_hundred_prices_zero():
    result = calculate_costs_2027(_inputs(custos_fixos=60, resultado_desejado=10))

    assert result.total_deducoes_venda_perc == pytest.approx(101.5)
    assert result.preco_venda_alvo == 0
    assert result.preco_equilibrio == pytest.approx(round(76.15 / 0.085, 2))
    assert result.impostos_totais == 0
