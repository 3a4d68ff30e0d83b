"""Builds the display dataset shared by the HTML, PDF and DOCX exports."""

from __future__ import annotations

from typing import Any, Dict, List

from backend.models import PriceMatrixRow, SimulationInput, SimulationResult
from backend.utils.formatting import format_brl, format_percent

REGIME_LABELS = {
    "substituido": "Substituição tributária",
    "tributado": "Tributado",
    "reduzido": "Base reduzida",
}


def _row(label: str, value: str) -> Dict[str, str]:
    return {"label": label, "value": value}


def build_report_dataset(
    inputs: SimulationInput,
    result: SimulationResult,
    matrix: List[PriceMatrixRow],
    title: str = "Simulação de Preço de Venda",
) -> Dict[str, Any]:
    entrada = [
        _row("Produto", inputs.nome_produto or "-"),
        _row("NCM", inputs.ncm_codigo or "-"),
        _row("Regime", REGIME_LABELS.get(inputs.mode, inputs.mode)),
        _row("Rota", f"{inputs.uf_origem} -> {inputs.uf_destino}"),
        _row("Valor de compra", format_brl(inputs.valor_compra)),
        _row("IPI + frete", format_brl(inputs.ipi_frete)),
        _row("MVA aplicada", format_percent(inputs.mva)),
        _row("ICMS interestadual", format_percent(inputs.icms_interestadual)),
        _row("ICMS interno destino", format_percent(inputs.icms_interno_destino)),
    ]
    resultado = [
        _row("Total da nota", format_brl(result.valor_total_nota)),
        _row("Base de cálculo ST", format_brl(result.base_calculo_st)),
        _row("ICMS-ST bruto", format_brl(result.icms_st_bruto)),
        _row("Crédito ICMS entrada", format_brl(result.credito_icms_entrada)),
        _row("ST a pagar", format_brl(result.st_a_pagar)),
        _row("Crédito PIS/COFINS", format_brl(result.credito_pis_cofins_valor)),
        _row("Custo final", format_brl(result.custo_final)),
        _row("ICMS venda efetivo", format_percent(result.icms_venda_efetivo)),
        _row("Deduções (com margem)", format_percent(result.total_deducoes_venda_perc)),
        _row("Preço de equilíbrio", format_brl(result.preco_equilibrio)),
        _row("Preço de venda alvo", format_brl(result.preco_venda_alvo)),
        _row("Margem absoluta", format_brl(result.margem_absoluta)),
        _row("Impostos totais", format_brl(result.impostos_totais)),
    ]
    levels = [level for level, _ in sorted(matrix[0].levels.items())] if matrix else []
    matriz = [
        {
            "label": row.label,
            "margin": format_percent(row.margin),
            "levels": [format_brl(row.levels[level]) for level in levels],
        }
        for row in matrix
    ]
    return {"title": title, "entrada": entrada, "resultado": resultado, "levels": levels, "matriz": matriz}
