"""Sale-side deduction stack shared by the pricing engines and the price matrix.

Every deduction is a percent of the sale price itself, so the price is found
by inverting the stack (markup divisor) instead of adding it to the cost.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend.models import SimulationInput


def effective_sale_icms(mode: str, icms_venda: float, perc_reducao_base: float) -> float:
    if mode == "reduzido":
        return icms_venda * (1 - perc_reducao_base / 100)
    return icms_venda


def invert_price(custo: float, deducoes_perc: float) -> float:
    """Preço = custo / (1 - deduções); 0 quando as deduções chegam a 100%."""
    if deducoes_perc >= 100:
        return 0.0
    return custo / ((100 - deducoes_perc) / 100)


@dataclass(frozen=True)
class DeductionStack:
    pis_cofins_venda: float
    comissao_venda: float
    icms_venda_efetivo: float
    outros_custos_variaveis: float
    custos_fixos: float

    @property
    def sem_margem(self) -> float:
        return (
            self.pis_cofins_venda
            + self.comissao_venda
            + self.icms_venda_efetivo
            + self.outros_custos_variaveis
            + self.custos_fixos
        )

    def with_margin(self, margem: float) -> float:
        return self.sem_margem + margem


def build_deduction_stack(inputs: SimulationInput) -> DeductionStack:
    return DeductionStack(
        pis_cofins_venda=inputs.pis_cofins_venda,
        comissao_venda=inputs.comissao_venda,
        icms_venda_efetivo=effective_sale_icms(inputs.mode, inputs.icms_venda, inputs.perc_reducao_base),
        outros_custos_variaveis=inputs.outros_custos_variaveis,
        custos_fixos=inputs.custos_fixos,
    )
