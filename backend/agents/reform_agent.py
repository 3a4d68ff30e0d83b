"""Reform agent: 2027 projection under the dual VAT (CBS + IBS).

CBS and IBS replace ICMS, PIS/COFINS and IPI. The entry credit is only
partially recognized (``iva_credit_factor``) to model transition friction.
"""

from __future__ import annotations

from typing import Callable

from backend.agents.deductions import invert_price
from backend.models import PricingConfig, ReformSimulationInput, ReformSimulationResult
from backend.utils.formatting import round2


def _rounder(config: PricingConfig) -> Callable[[float], float]:
    if config.round_reform_steps:
        return round2
    return lambda value: value


def calculate_costs_2027(
    inputs: ReformSimulationInput,
    config: PricingConfig | None = None,
) -> ReformSimulationResult:
    config = config or PricingConfig()
    money = _rounder(config)

    cbs_rate = config.cbs_rate
    ibs_rate = config.ibs_rate
    total_iva_rate = config.total_iva_rate

    valor_total_nota = money(inputs.valor_compra + inputs.frete_valor)
    credito_iva_entrada = money(valor_total_nota * (total_iva_rate / 100))
    credito_aproveitado = money(credito_iva_entrada * config.iva_credit_factor)
    custo_final = money(valor_total_nota - credito_aproveitado)

    deducoes_sem_margem = (
        total_iva_rate
        + inputs.comissao_venda
        + inputs.outros_custos_variaveis
        + inputs.custos_fixos
    )
    total_deducoes = deducoes_sem_margem + inputs.resultado_desejado

    preco_venda_alvo = money(invert_price(custo_final, total_deducoes))
    preco_equilibrio = money(invert_price(custo_final, deducoes_sem_margem))

    return ReformSimulationResult(
        valor_total_nota=valor_total_nota,
        cbs_rate=cbs_rate,
        ibs_rate=ibs_rate,
        total_iva_rate=total_iva_rate,
        credito_iva_entrada=credito_iva_entrada,
        credito_iva_aproveitado=credito_aproveitado,
        custo_final=custo_final,
        deducoes_sem_margem=deducoes_sem_margem,
        total_deducoes_venda_perc=total_deducoes,
        preco_equilibrio=preco_equilibrio,
        preco_venda_alvo=preco_venda_alvo,
        margem_absoluta=money(preco_venda_alvo * (inputs.resultado_desejado / 100)),
        impostos_totais=money(preco_venda_alvo * (total_iva_rate / 100)),
        valor_cbs=money(preco_venda_alvo * (cbs_rate / 100)),
        valor_ibs=money(preco_venda_alvo * (ibs_rate / 100)),
    )
