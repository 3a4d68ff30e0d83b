"""Advisor agent: deterministic pricing insights plus optional AI answers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from backend.agents.pricing_agent import calculate_costs
from backend.agents.reform_agent import calculate_costs_2027
from backend.core.logger import log_event
from backend.models import (
    AdvisoryInsight,
    ConsultRequest,
    PricingConfig,
    ReformSimulationInput,
    ScenarioComparison,
    SimulationInput,
    SimulationResult,
)
from backend.rules.reference_data import is_known_state
from backend.services.ai_bridge import AIUnavailableError, ask_advisor
from backend.utils.formatting import format_brl, format_percent, round2


def reform_input_from(inputs: SimulationInput) -> ReformSimulationInput:
    """Same purchase projected to 2027; IPI+freight is carried as freight."""
    return ReformSimulationInput(
        nome_produto=inputs.nome_produto,
        valor_compra=inputs.valor_compra,
        frete_valor=inputs.ipi_frete,
        comissao_venda=inputs.comissao_venda,
        outros_custos_variaveis=inputs.outros_custos_variaveis,
        custos_fixos=inputs.custos_fixos,
        resultado_desejado=inputs.resultado_desejado,
    )


def compare_scenarios(
    inputs: SimulationInput,
    reform_inputs: Optional[ReformSimulationInput] = None,
    config: Optional[PricingConfig] = None,
) -> ScenarioComparison:
    atual = calculate_costs(inputs)
    reforma = calculate_costs_2027(reform_inputs or reform_input_from(inputs), config)
    return ScenarioComparison(
        atual=atual,
        reforma=reforma,
        delta_custo_final=reforma.custo_final - atual.custo_final,
        delta_preco_venda_alvo=reforma.preco_venda_alvo - atual.preco_venda_alvo,
        delta_impostos_totais=reforma.impostos_totais - atual.impostos_totais,
    )


def _kpis(result: SimulationResult) -> Dict[str, float]:
    kpis = {
        "custoFinal": result.custo_final,
        "precoEquilibrio": result.preco_equilibrio,
        "precoVendaAlvo": result.preco_venda_alvo,
        "margemAbsoluta": result.margem_absoluta,
        "impostosTotais": result.impostos_totais,
    }
    if result.preco_venda_alvo > 0:
        kpis["cargaTributariaPerc"] = result.impostos_totais / result.preco_venda_alvo * 100
    return kpis


def _recommendations(inputs: SimulationInput, result: SimulationResult) -> List[str]:
    recommendations: List[str] = []
    if result.total_deducoes_venda_perc >= 100:
        recommendations.append(
            f"Deduções somam {format_percent(result.total_deducoes_venda_perc)} do preço: "
            "não existe preço de venda viável; reduza margem, comissão ou custos."
        )
    if inputs.mode == "substituido" and result.icms_st_bruto < result.credito_icms_entrada:
        recommendations.append(
            "Crédito de ICMS da entrada supera o ICMS-ST bruto; o ST a pagar foi zerado (não há restituição)."
        )
    unknown = [uf for uf in (inputs.uf_origem, inputs.uf_destino) if not is_known_state(uf)]
    if unknown:
        recommendations.append(
            f"UF não reconhecida ({', '.join(unknown)}): alíquota interestadual padrão de 12% aplicada."
        )
    if inputs.resultado_desejado <= 0:
        recommendations.append("Resultado desejado zerado: o preço alvo coincide com o ponto de equilíbrio.")
    if not recommendations:
        recommendations.append("Cenário controlado: preço alvo cobre custos, tributos e margem desejada.")
    return recommendations


def _summaries(inputs: SimulationInput, result: SimulationResult, comparison: ScenarioComparison) -> List[str]:
    produto = inputs.nome_produto or "Produto"
    summaries = [
        f"{produto}: custo final {format_brl(result.custo_final)} no regime {inputs.mode}.",
        f"Preço alvo {format_brl(result.preco_venda_alvo)} (equilíbrio {format_brl(result.preco_equilibrio)}).",
    ]
    delta = round2(comparison.delta_preco_venda_alvo)
    cenario = f"Cenário 2027 (IVA {format_percent(comparison.reforma.total_iva_rate)})"
    if delta == 0:
        summaries.append(f"{cenario} mantém o preço alvo.")
    else:
        direction = "reduz" if delta < 0 else "eleva"
        summaries.append(f"{cenario} {direction} o preço alvo em {format_brl(abs(delta))}.")
    return summaries


def _snapshot(request: ConsultRequest, result: Optional[SimulationResult]) -> Dict[str, Any]:
    snapshot: Dict[str, Any] = {}
    if request.entrada is not None:
        snapshot["entrada"] = request.entrada.model_dump(mode="json", by_alias=True)
    if result is not None:
        snapshot["resultado"] = result.model_dump(mode="json", by_alias=True)
    if request.entrada_2027 is not None:
        snapshot["entrada2027"] = request.entrada_2027.model_dump(mode="json", by_alias=True)
    return snapshot


def build_advice(request: ConsultRequest, config: Optional[PricingConfig] = None) -> AdvisoryInsight:
    summaries: List[str] = []
    recommendations: List[str] = []
    kpis: Dict[str, float] = {}
    result: Optional[SimulationResult] = None

    if request.entrada is not None:
        comparison = compare_scenarios(request.entrada, request.entrada_2027, config)
        result = comparison.atual
        summaries = _summaries(request.entrada, result, comparison)
        recommendations = _recommendations(request.entrada, result)
        kpis = _kpis(result)
        kpis["deltaPrecoVenda2027"] = comparison.delta_preco_venda_alvo
    else:
        summaries.append("Nenhuma simulação informada para análise.")

    answer: Optional[str] = None
    source: Optional[str] = None
    if request.pergunta:
        try:
            answer = ask_advisor(request.pergunta, _snapshot(request, result))
            source = "ai"
        except AIUnavailableError as exc:
            log_event("advisor", "WARN", "Fallback offline", {"error": str(exc)})
            answer = " ".join(summaries + recommendations)
            source = "offline"

    return AdvisoryInsight(
        summaries=summaries,
        kpis=kpis,
        recommendations=recommendations,
        answer=answer,
        answer_source=source,
    )
