"""Interstate ICMS rate resolution and adjusted MVA ("MVA ajustada")."""

from __future__ import annotations

import math

from backend.core.logger import log_event
from backend.models import SimulationInput
from backend.rules.reference_data import (
    NORTH_NORTHEAST_CENTER_WEST,
    SOUTH_SOUTHEAST,
    find_ncm,
    internal_icms_rate,
    is_known_state,
)

RATE_SOUTH_TO_NORTH = 7.0
RATE_DEFAULT = 12.0
DEFAULT_INTERNAL_RATE = 18.0


class UnknownStateError(ValueError):
    """Raised by strict resolution when a UF code is not in the reference tables."""

    def __init__(self, codes: list[str]) -> None:
        self.codes = codes
        super().__init__(f"UF desconhecida: {', '.join(codes)}")


def _norm(code: str) -> str:
    return (code or "").strip().upper()


def get_interstate_rate(origem: str, destino: str, *, strict: bool = False) -> float:
    origem_sigla = _norm(origem)
    destino_sigla = _norm(destino)
    if origem_sigla == destino_sigla:
        return 0.0

    unknown = [code for code in (origem_sigla, destino_sigla) if not is_known_state(code)]
    if unknown:
        if strict:
            raise UnknownStateError(unknown)
        log_event(
            "rate-resolver",
            "WARN",
            "UF não reconhecida; aplicando alíquota padrão",
            {"origem": origem_sigla, "destino": destino_sigla, "aliquota": RATE_DEFAULT},
        )

    if origem_sigla in SOUTH_SOUTHEAST and destino_sigla in NORTH_NORTHEAST_CENTER_WEST:
        return RATE_SOUTH_TO_NORTH
    return RATE_DEFAULT


def calculate_adjusted_mva(mva_original: float, icms_interestadual: float, icms_interno_destino: float) -> float:
    """MVA ajustada = ((1 + MVA) * (1 - ALQ inter) / (1 - ALQ intra)) - 1, em percentual.

    Operação interna (alíquota interestadual zero) devolve a MVA original, assim
    como uma alíquota interna de destino de 100% ou mais, que anularia o divisor.
    """
    if icms_interestadual == 0 or icms_interno_destino >= 100:
        return mva_original

    mva = mva_original / 100
    inter = icms_interestadual / 100
    intra = icms_interno_destino / 100
    return (((1 + mva) * (1 - inter)) / (1 - intra) - 1) * 100


def resolve_fiscal_rates(inputs: SimulationInput, ncm_codigo: str | None = None) -> SimulationInput:
    """Fills interstate/destination ICMS and the adjusted MVA from the UFs and NCM.

    The adjusted MVA is truncated to two decimals. An unknown destination UF
    falls back to an 18% internal rate.
    """
    update: dict = {}
    entry = find_ncm(ncm_codigo or inputs.ncm_codigo)
    mva_original = inputs.mva_original
    if entry is not None:
        mva_original = entry.mva_original
        update.update(ncm_codigo=entry.codigo, mva_original=entry.mva_original)
        if not inputs.nome_produto:
            update["nome_produto"] = entry.descricao

    inter = get_interstate_rate(inputs.uf_origem, inputs.uf_destino)
    intra = internal_icms_rate(inputs.uf_destino)
    if intra is None:
        intra = DEFAULT_INTERNAL_RATE
    adjusted = calculate_adjusted_mva(mva_original, inter, intra)
    update.update(
        icms_interestadual=inter,
        icms_interno_destino=intra,
        mva=math.floor(adjusted * 100) / 100,
    )
    return inputs.model_copy(update=update)
