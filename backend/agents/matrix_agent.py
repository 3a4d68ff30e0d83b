"""Price matrix: target prices at standard margin tiers, four display levels each."""

from __future__ import annotations

from typing import List

from backend.agents.deductions import build_deduction_stack, invert_price
from backend.models import PriceMatrixRow, PricingConfig, SimulationInput


def generate_price_matrix(
    custo_final: float,
    inputs: SimulationInput,
    config: PricingConfig | None = None,
) -> List[PriceMatrixRow]:
    config = config or PricingConfig()
    deducoes_sem_margem = build_deduction_stack(inputs).sem_margem

    rows: List[PriceMatrixRow] = []
    for label, margin in config.matrix_tiers:
        base_price = invert_price(custo_final, deducoes_sem_margem + margin)
        rows.append(
            PriceMatrixRow(
                label=label,
                margin=margin,
                base_price=base_price,
                levels={level: base_price * factor for level, factor in config.matrix_multipliers},
            )
        )
    return rows
