"""Pydantic models describing the public contracts of the pricing backend."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from backend.utils.formatting import parse_brl

Regime = Literal["substituido", "tributado", "reduzido"]

DEFAULT_MATRIX_TIERS: Tuple[Tuple[str, float], ...] = (
    ("Estratégico", 8.0),
    ("Curva A", 10.0),
    ("Curva B", 11.0),
    ("Curva C", 12.0),
    ("Serviço/Espec.", 15.0),
)
DEFAULT_MATRIX_MULTIPLIERS: Tuple[Tuple[str, float], ...] = (
    ("A", 0.95),
    ("B", 1.0),
    ("C", 1.111),
    ("D", 1.1765),
)


class _ValueObject(BaseModel):
    """Base imutável: aceita snake_case e camelCase, serializa em camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def _upper_uf(value: Any) -> str:
    return str(value or "").strip().upper()


class SimulationInput(_ValueObject):
    """Entrada da simulação no regime atual (ICMS/PIS/COFINS).

    Todas as alíquotas são percentuais (0-100) do valor que modificam.
    """

    nome_produto: str = ""
    valor_compra: float = 0.0
    ipi_frete: float = 0.0
    mva: float = 0.0
    mva_original: float = 0.0
    icms_interestadual: float = 0.0
    icms_interno_destino: float = 0.0
    pis_cofins_rate: float = 0.0
    excluir_icms_pis: bool = False
    pis_cofins_venda: float = 0.0
    comissao_venda: float = 0.0
    icms_venda: float = 0.0
    outros_custos_variaveis: float = 0.0
    custos_fixos: float = 0.0
    resultado_desejado: float = 0.0
    mode: Regime = "substituido"
    perc_reducao_base: float = 0.0
    uf_origem: str = "SP"
    uf_destino: str = "SP"
    ncm_codigo: str = ""

    @field_validator("uf_origem", "uf_destino", mode="before")
    @classmethod
    def _normalise_uf(cls, value: Any) -> str:
        return _upper_uf(value)


class SimulationResult(_ValueObject):
    valor_total_nota: float
    credito_icms_entrada: float
    base_calculo_st: float
    icms_st_bruto: float
    st_a_pagar: float
    base_pis_cofins: float
    credito_pis_cofins_valor: float
    custo_final: float
    icms_venda_efetivo: float
    deducoes_sem_margem: float
    total_deducoes_venda_perc: float
    preco_equilibrio: float
    preco_venda_alvo: float
    margem_absoluta: float
    impostos_totais: float


class ReformSimulationInput(_ValueObject):
    """Entrada do cenário 2027 (IVA dual CBS + IBS).

    ``ipi_perc`` acompanha o payload por paridade com a nota de compra; no
    modelo da reforma o IPI é absorvido pelo IVA e não entra no cálculo.
    """

    nome_produto: str = ""
    valor_compra: float = 0.0
    frete_valor: float = 0.0
    ipi_perc: float = 0.0
    comissao_venda: float = 0.0
    outros_custos_variaveis: float = 0.0
    custos_fixos: float = 0.0
    resultado_desejado: float = 0.0


class ReformSimulationResult(_ValueObject):
    valor_total_nota: float
    cbs_rate: float
    ibs_rate: float
    total_iva_rate: float
    credito_iva_entrada: float
    credito_iva_aproveitado: float
    custo_final: float
    deducoes_sem_margem: float
    total_deducoes_venda_perc: float
    preco_equilibrio: float
    preco_venda_alvo: float
    margem_absoluta: float
    impostos_totais: float
    valor_cbs: float
    valor_ibs: float


class PriceMatrixRow(_ValueObject):
    label: str
    margin: float
    base_price: float
    levels: Dict[str, float]


class PricingConfig(_ValueObject):
    """Parâmetros explícitos do motor; nada no núcleo lê configuração global."""

    cbs_rate: float = 8.8
    ibs_rate: float = 17.7
    iva_credit_factor: float = 0.9
    round_reform_steps: bool = True
    matrix_tiers: Tuple[Tuple[str, float], ...] = DEFAULT_MATRIX_TIERS
    matrix_multipliers: Tuple[Tuple[str, float], ...] = DEFAULT_MATRIX_MULTIPLIERS

    @property
    def total_iva_rate(self) -> float:
        return self.cbs_rate + self.ibs_rate

    @classmethod
    def from_settings(cls, settings: Any) -> "PricingConfig":
        return cls(
            cbs_rate=settings.CBS_RATE,
            ibs_rate=settings.IBS_RATE,
            iva_credit_factor=settings.IVA_CREDIT_FACTOR,
            round_reform_steps=settings.ROUND_REFORM_STEPS,
        )


class NCMEntry(_ValueObject):
    codigo: str
    descricao: str
    mva_original: float
    cest: Optional[str] = None


class UFEntry(_ValueObject):
    sigla: str
    nome: str
    icms: float


class InterstateRateResult(_ValueObject):
    uf_origem: str
    uf_destino: str
    aliquota: float
    recognized: bool


class AdjustedMvaResult(_ValueObject):
    mva_original: float
    icms_interestadual: float
    icms_interno_destino: float
    mva_ajustada: float


class InvoiceUpload(BaseModel):
    """Arquivo da nota (imagem ou PDF) codificado em base64."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    filename: str
    content_type: Optional[str] = Field(default=None, alias="contentType")
    byte_stream: str = Field(alias="byteStream")
    encoding: Optional[str] = "base64"

    @field_validator("encoding")
    @classmethod
    def _normalise_encoding(cls, value: Optional[str]) -> str:
        return (value or "base64").lower()

    @field_validator("byte_stream")
    @classmethod
    def _ensure_stream(cls, value: str) -> str:
        if not value:
            raise ValueError("byteStream must not be empty")
        return value

    def decode(self) -> bytes:
        import base64
        import binascii

        if self.encoding not in {"base64", "b64"}:
            raise ValueError("Unsupported encoding; expected base64")
        try:
            return base64.b64decode(self.byte_stream, validate=True)
        except binascii.Error as exc:
            raise ValueError("Invalid base64 payload") from exc


class InvoiceExtraction(_ValueObject):
    """Campos lidos da nota; ``None`` quando a IA não encontrou o valor."""

    valor_compra: Optional[float] = None
    ipi_frete: Optional[float] = None
    icms_interestadual: Optional[float] = None
    mva: Optional[float] = None

    @field_validator("valor_compra", "ipi_frete", "icms_interestadual", "mva", mode="before")
    @classmethod
    def _parse_brazilian_number(cls, value: Any) -> Any:
        # "1.234,56" ou "R$ 1.234,56"; texto sem dígitos segue para a validação e falha
        if isinstance(value, str):
            if not value.strip():
                return None
            if any(ch.isdigit() for ch in value):
                return parse_brl(value)
        return value

    def as_patch(self) -> Dict[str, float]:
        return self.model_dump(exclude_none=True)

    def apply_to(self, inputs: SimulationInput) -> SimulationInput:
        return inputs.model_copy(update=self.as_patch())


class CostItem(_ValueObject):
    descricao: str
    valor: float = 0.0
    categoria: str = "OUTROS"


class VariableCostItem(_ValueObject):
    descricao: str
    percentual: float = 0.0
    categoria: str = "OUTROS CUSTOS VARIÁVEIS"


class OverheadInput(_ValueObject):
    faturamento: float = 0.0
    custos_fixos: List[CostItem] = Field(default_factory=list)
    custos_variaveis: List[VariableCostItem] = Field(default_factory=list)


class OverheadResult(_ValueObject):
    total_fixos: float
    total_variaveis_perc: float
    total_variaveis_valor: float
    fixos_perc_faturamento: float
    custo_total_perc: float
    margem_contribuicao_valor: float
    margem_contribuicao_perc: float
    lucro_liquido: float
    ponto_equilibrio: float
    fixos_por_categoria: Dict[str, float] = Field(default_factory=dict)
    variaveis_por_categoria: Dict[str, float] = Field(default_factory=dict)


class ScenarioComparison(_ValueObject):
    atual: SimulationResult
    reforma: ReformSimulationResult
    delta_custo_final: float
    delta_preco_venda_alvo: float
    delta_impostos_totais: float


class ConsultRequest(_ValueObject):
    pergunta: Optional[str] = None
    entrada: Optional[SimulationInput] = None
    entrada_2027: Optional[ReformSimulationInput] = None


class AdvisoryInsight(_ValueObject):
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    summaries: List[str] = Field(default_factory=list)
    kpis: Dict[str, float] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)
    answer: Optional[str] = None
    answer_source: Optional[Literal["ai", "offline"]] = None


class SimulationBundle(_ValueObject):
    """Resultado completo devolvido ao cliente: cálculo + matriz de preços."""

    entrada: SimulationInput
    resultado: SimulationResult
    matriz: List[PriceMatrixRow] = Field(default_factory=list)


class OverheadSimulationRequest(_ValueObject):
    """Simulação cujos custos fixos e variáveis vêm da estrutura de overhead."""

    entrada: SimulationInput
    overhead: OverheadInput


class ReportRequest(_ValueObject):
    entrada: SimulationInput
    titulo: str = "Simulação de Preço de Venda"


__all__ = [
    "Regime",
    "SimulationInput",
    "SimulationResult",
    "ReformSimulationInput",
    "ReformSimulationResult",
    "PriceMatrixRow",
    "PricingConfig",
    "NCMEntry",
    "UFEntry",
    "InterstateRateResult",
    "AdjustedMvaResult",
    "InvoiceUpload",
    "InvoiceExtraction",
    "CostItem",
    "VariableCostItem",
    "OverheadInput",
    "OverheadResult",
    "ScenarioComparison",
    "ConsultRequest",
    "AdvisoryInsight",
    "SimulationBundle",
    "OverheadSimulationRequest",
    "ReportRequest",
]
