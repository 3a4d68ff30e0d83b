"""Pricing agent for the current regime (ICMS-ST, ICMS próprio, PIS/COFINS)."""

from __future__ import annotations

from dataclasses import dataclass

from backend.agents.deductions import build_deduction_stack, invert_price
from backend.models import SimulationInput, SimulationResult


@dataclass(frozen=True)
class _StFigures:
    base_calculo_st: float = 0.0
    icms_st_bruto: float = 0.0
    st_a_pagar: float = 0.0


def _compute_st(inputs: SimulationInput, valor_total_nota: float, credito_icms: float) -> _StFigures:
    if inputs.mode != "substituido":
        return _StFigures()
    base = valor_total_nota * (1 + inputs.mva / 100)
    bruto = base * (inputs.icms_interno_destino / 100)
    return _StFigures(
        base_calculo_st=base,
        icms_st_bruto=bruto,
        st_a_pagar=max(0.0, bruto - credito_icms),
    )


def _pis_cofins_base(inputs: SimulationInput, credito_icms: float) -> float:
    if inputs.excluir_icms_pis:
        return inputs.valor_compra - credito_icms
    return inputs.valor_compra


def calculate_costs(inputs: SimulationInput) -> SimulationResult:
    """Custo final líquido e preços de equilíbrio/alvo para uma simulação.

    Função total: pilhas de dedução >= 100% produzem preço 0 e o ST a pagar
    nunca fica negativo. Nenhum valor é arredondado aqui.
    """
    valor_total_nota = inputs.valor_compra + inputs.ipi_frete
    credito_icms = inputs.valor_compra * (inputs.icms_interestadual / 100)
    st = _compute_st(inputs, valor_total_nota, credito_icms)

    base_pis_cofins = _pis_cofins_base(inputs, credito_icms)
    credito_pis_cofins = base_pis_cofins * (inputs.pis_cofins_rate / 100)

    if inputs.mode == "substituido":
        custo_final = valor_total_nota + st.st_a_pagar - credito_pis_cofins
    else:
        custo_final = valor_total_nota - credito_icms - credito_pis_cofins

    stack = build_deduction_stack(inputs)
    deducoes_sem_margem = stack.sem_margem
    total_deducoes = stack.with_margin(inputs.resultado_desejado)

    preco_venda_alvo = invert_price(custo_final, total_deducoes)
    preco_equilibrio = invert_price(custo_final, deducoes_sem_margem)

    impostos_totais = (
        st.st_a_pagar
        + preco_venda_alvo * (stack.icms_venda_efetivo / 100)
        + preco_venda_alvo * (inputs.pis_cofins_venda / 100)
    )

    return SimulationResult(
        valor_total_nota=valor_total_nota,
        credito_icms_entrada=credito_icms,
        base_calculo_st=st.base_calculo_st,
        icms_st_bruto=st.icms_st_bruto,
        st_a_pagar=st.st_a_pagar,
        base_pis_cofins=base_pis_cofins,
        credito_pis_cofins_valor=credito_pis_cofins,
        custo_final=custo_final,
        icms_venda_efetivo=stack.icms_venda_efetivo,
        deducoes_sem_margem=deducoes_sem_margem,
        total_deducoes_venda_perc=total_deducoes,
        preco_equilibrio=preco_equilibrio,
        preco_venda_alvo=preco_venda_alvo,
        margem_absoluta=preco_venda_alvo * (inputs.resultado_desejado / 100),
        impostos_totais=impostos_totais,
    )
