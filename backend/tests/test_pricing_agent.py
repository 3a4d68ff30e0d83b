import pytest

from backend.agents.deductions import build_deduction_stack, effective_sale_icms, invert_price
from backend.agents.pricing_agent import calculate_costs
from backend.models import SimulationInput


def _inputs(**overrides):
    base = dict(
        nome_produto="Cimento Portland",
        valor_compra=100.0,
        ipi_frete=0.0,
        mva=32.0,
        icms_interestadual=12.0,
        icms_interno_destino=18.0,
        pis_cofins_rate=9.25,
        pis_cofins_venda=9.25,
        comissao_venda=3.0,
        icms_venda=18.0,
        outros_custos_variaveis=2.0,
        custos_fixos=10.0,
        resultado_desejado=10.0,
        mode="substituido",
    )
    base.update(overrides)
    return SimulationInput(**base)


def test_substituido_st_figures():
    result = calculate_costs(_inputs())

    assert result.valor_total_nota == pytest.approx(100)
    assert result.base_calculo_st == pytest.approx(132)
    assert result.icms_st_bruto == pytest.approx(23.76)
    assert result.credito_icms_entrada == pytest.approx(12)
    assert result.st_a_pagar == pytest.approx(11.76)
    assert result.credito_pis_cofins_valor == pytest.approx(9.25)
    assert result.custo_final == pytest.approx(100 + 11.76 - 9.25)


def test_st_payable_is_clamped_at_zero():
    result = calculate_costs(_inputs(mva=0, icms_interno_destino=4, icms_interestadual=12))

    assert result.icms_st_bruto == pytest.approx(4)
    assert result.st_a_pagar == 0
    assert result.custo_final == pytest.approx(100 - 9.25)


def test_tributado_takes_icms_credit_and_skips_st():
    result = calculate_costs(_inputs(mode="tributado", ipi_frete=10))

    assert result.base_calculo_st == 0
    assert result.icms_st_bruto == 0
    assert result.st_a_pagar == 0
    assert result.valor_total_nota == pytest.approx(110)
    assert result.custo_final == pytest.approx(110 - 12 - 9.25)


def test_reduzido_lowers_sale_icms():
    result = calculate_costs(_inputs(mode="reduzido", icms_venda=18, perc_reducao_base=50))
    assert result.icms_venda_efetivo == pytest.approx(9)
    assert effective_sale_icms("substituido", 18, 50) == 18


def test_excluding_icms_from_pis_cofins_base():
    result = calculate_costs(_inputs(excluir_icms_pis=True))

    assert result.base_pis_cofins == pytest.approx(88)
    assert result.credito_pis_cofins_valor == pytest.approx(88 * 0.0925)


def test_target_price_round_trip():
    result = calculate_costs(_inputs())

    assert result.deducoes_sem_margem == pytest.approx(42.25)
    assert result.total_deducoes_venda_perc == pytest.approx(52.25)
    assert result.preco_venda_alvo * (100 - 52.25) / 100 == pytest.approx(result.custo_final)
    assert result.preco_equilibrio * (100 - 42.25) / 100 == pytest.approx(result.custo_final)
    assert result.margem_absoluta == pytest.approx(result.preco_venda_alvo * 0.10)


def test_total_taxes_include_st_and_sale_taxes():
    result = calculate_costs(_inputs())
    price = result.preco_venda_alvo
    assert result.impostos_totais == pytest.approx(11.76 + price * 0.18 + price * 0.0925)


def test_deduction_stack_at_or_above_hundred_prices_zero():
    result = calculate_costs(_inputs(resultado_desejado=57.75))

    assert result.total_deducoes_venda_perc == pytest.approx(100)
    assert result.preco_venda_alvo == 0
    assert result.margem_absoluta == 0
    assert result.preco_equilibrio > 0

    result = calculate_costs(_inputs(custos_fixos=70))
    assert result.preco_equilibrio == 0
    assert result.preco_venda_alvo == 0


def test_invert_price():
    assert invert_price(80, 20) == pytest.approx(100)
    assert invert_price(80, 0) == pytest.approx(80)
    assert invert_price(80, 100) == 0
    assert invert_price(80, 120) == 0


def test_deduction_stack_sum():
    stack = build_deduction_stack(_inputs(mode="reduzido", perc_reducao_base=50))
    assert stack.icms_venda_efetivo == pytest.approx(9)
    assert stack.sem_margem == pytest.approx(9.25 + 3 + 9 + 2 + 10)
    assert stack.with_margin(10) == pytest.approx(stack.sem_margem + 10)


def test_calculation_is_deterministic():
    inputs = _inputs()
    assert calculate_costs(inputs) == calculate_costs(inputs)


def test_camel_case_payload_is_accepted():
    inputs = SimulationInput.model_validate(
        {"valorCompra": 100, "ipiFrete": 5, "icmsInternoDestino": 18, "ufOrigem": "sp", "mode": "tributado"}
    )
    assert inputs.valor_compra == 100
    assert inputs.ipi_frete == 5
    assert inputs.uf_origem == "SP"
    assert inputs.model_dump(by_alias=True)["custosFixos"] == 0
