"""Overhead agent: fixed/variable cost structure over monthly revenue."""

from __future__ import annotations

from typing import Dict, Iterable

from backend.models import CostItem, OverheadInput, OverheadResult, SimulationInput, VariableCostItem


def _by_category(items: Iterable[CostItem | VariableCostItem], attr: str) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for item in items:
        totals[item.categoria] = totals.get(item.categoria, 0.0) + getattr(item, attr)
    return totals


def calculate_overhead(payload: OverheadInput) -> OverheadResult:
    faturamento = payload.faturamento
    total_fixos = sum(item.valor for item in payload.custos_fixos)
    total_var_perc = sum(item.percentual for item in payload.custos_variaveis)

    total_var_valor = faturamento * total_var_perc / 100
    fixos_perc = (total_fixos / faturamento) * 100 if faturamento > 0 else 0.0

    margem_valor = faturamento - total_var_valor
    margem_perc = (margem_valor / faturamento) * 100 if faturamento > 0 else 0.0
    ponto_equilibrio = total_fixos / (margem_perc / 100) if margem_perc > 0 else 0.0

    return OverheadResult(
        total_fixos=total_fixos,
        total_variaveis_perc=total_var_perc,
        total_variaveis_valor=total_var_valor,
        fixos_perc_faturamento=fixos_perc,
        custo_total_perc=fixos_perc + total_var_perc,
        margem_contribuicao_valor=margem_valor,
        margem_contribuicao_perc=margem_perc,
        lucro_liquido=margem_valor - total_fixos,
        ponto_equilibrio=ponto_equilibrio,
        fixos_por_categoria=_by_category(payload.custos_fixos, "valor"),
        variaveis_por_categoria=_by_category(payload.custos_variaveis, "percentual"),
    )


def apply_overhead(inputs: SimulationInput, overhead: OverheadResult) -> SimulationInput:
    """Feeds the overhead percentages into a simulation's deduction stack."""
    return inputs.model_copy(
        update={
            "custos_fixos": overhead.fixos_perc_faturamento,
            "outros_custos_variaveis": overhead.total_variaveis_perc,
        }
    )
