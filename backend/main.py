import io
import mimetypes
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from backend.agents.advisor_agent import build_advice, compare_scenarios
from backend.agents.matrix_agent import generate_price_matrix
from backend.agents.overhead_agent import apply_overhead, calculate_overhead
from backend.agents.pricing_agent import calculate_costs
from backend.agents.reform_agent import calculate_costs_2027
from backend.core.logger import log_event
from backend.core.settings import settings
from backend.models import (
    AdjustedMvaResult,
    AdvisoryInsight,
    ConsultRequest,
    InterstateRateResult,
    InvoiceExtraction,
    InvoiceUpload,
    NCMEntry,
    OverheadInput,
    OverheadResult,
    OverheadSimulationRequest,
    PriceMatrixRow,
    PricingConfig,
    ReformSimulationInput,
    ReformSimulationResult,
    ReportRequest,
    ScenarioComparison,
    SimulationBundle,
    SimulationInput,
    UFEntry,
)
from backend.rules.rate_resolver import (
    UnknownStateError,
    calculate_adjusted_mva,
    get_interstate_rate,
    resolve_fiscal_rates,
)
from backend.rules.reference_data import DATA_VERSION, UF_LIST, find_ncm, is_known_state, search_ncm
from backend.services.ai_bridge import AIUnavailableError, ExtractionError, extract_invoice_fields
from backend.services.export_docx import build_docx
from backend.services.export_html import build_html
from backend.services.export_pdf import build_pdf
from backend.services.report import build_report_dataset

app = FastAPI(title="ICMS-ST Pricing Backend", version="1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

PRICING_CONFIG = PricingConfig.from_settings(settings)

EXPORTERS = {
    "html": (build_html, "text/html"),
    "pdf": (build_pdf, "application/pdf"),
    "docx": (build_docx, "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
}


@app.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "reference_version": DATA_VERSION,
        "ai_enabled": settings.ai_enabled,
        "version": app.version,
    }


@app.get("/reference/ncm", response_model=List[NCMEntry])
async def list_ncm(q: str = "", limit: int = Query(default=0, ge=0)) -> List[NCMEntry]:
    return list(search_ncm(q, limit or None))


@app.get("/reference/ncm/{codigo}", response_model=NCMEntry)
async def get_ncm(codigo: str) -> NCMEntry:
    entry = find_ncm(codigo)
    if entry is None:
        raise HTTPException(404, f"NCM {codigo} não encontrado.")
    return entry


@app.get("/reference/ufs", response_model=List[UFEntry])
async def list_ufs() -> List[UFEntry]:
    return list(UF_LIST)


@app.get("/rates/interstate", response_model=InterstateRateResult)
async def interstate_rate(origem: str, destino: str, strict: bool = False) -> InterstateRateResult:
    try:
        aliquota = get_interstate_rate(origem, destino, strict=strict)
    except UnknownStateError as exc:
        raise HTTPException(400, str(exc)) from exc
    return InterstateRateResult(
        uf_origem=origem.strip().upper(),
        uf_destino=destino.strip().upper(),
        aliquota=aliquota,
        recognized=is_known_state(origem) and is_known_state(destino),
    )


@app.get("/rates/adjusted-mva", response_model=AdjustedMvaResult)
async def adjusted_mva(mva_original: float, icms_interestadual: float, icms_interno_destino: float) -> AdjustedMvaResult:
    return AdjustedMvaResult(
        mva_original=mva_original,
        icms_interestadual=icms_interestadual,
        icms_interno_destino=icms_interno_destino,
        mva_ajustada=calculate_adjusted_mva(mva_original, icms_interestadual, icms_interno_destino),
    )


@app.post("/resolve", response_model=SimulationInput)
async def resolve_rates(inputs: SimulationInput) -> SimulationInput:
    return resolve_fiscal_rates(inputs)


@app.post("/simulate", response_model=SimulationBundle)
async def simulate(inputs: SimulationInput, resolve: bool = False) -> SimulationBundle:
    if resolve:
        inputs = resolve_fiscal_rates(inputs)
    result = calculate_costs(inputs)
    matrix = generate_price_matrix(result.custo_final, inputs, PRICING_CONFIG)
    log_event("pricing", "DEBUG", "Simulação calculada", {"mode": inputs.mode, "custo_final": result.custo_final})
    return SimulationBundle(entrada=inputs, resultado=result, matriz=matrix)


@app.post("/simulate/2027", response_model=ReformSimulationResult)
async def simulate_2027(inputs: ReformSimulationInput) -> ReformSimulationResult:
    return calculate_costs_2027(inputs, PRICING_CONFIG)


@app.post("/price-matrix", response_model=List[PriceMatrixRow])
async def price_matrix(inputs: SimulationInput, custo_final: float | None = None) -> List[PriceMatrixRow]:
    if custo_final is None:
        custo_final = calculate_costs(inputs).custo_final
    return generate_price_matrix(custo_final, inputs, PRICING_CONFIG)


@app.post("/overhead", response_model=OverheadResult)
async def overhead(payload: OverheadInput) -> OverheadResult:
    return calculate_overhead(payload)


@app.post("/overhead/apply", response_model=SimulationBundle)
async def simulate_with_overhead(payload: OverheadSimulationRequest) -> SimulationBundle:
    inputs = apply_overhead(payload.entrada, calculate_overhead(payload.overhead))
    result = calculate_costs(inputs)
    matrix = generate_price_matrix(result.custo_final, inputs, PRICING_CONFIG)
    return SimulationBundle(entrada=inputs, resultado=result, matriz=matrix)


@app.post("/compare", response_model=ScenarioComparison)
async def compare(inputs: SimulationInput) -> ScenarioComparison:
    return compare_scenarios(inputs, config=PRICING_CONFIG)


@app.post("/extract", response_model=InvoiceExtraction)
def extract(payload: InvoiceUpload) -> InvoiceExtraction:
    try:
        content = payload.decode()
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc

    if len(content) > settings.max_upload_bytes:
        raise HTTPException(413, f"Arquivo excede limite de {settings.MAX_UPLOAD_MB} MB")
    mime = payload.content_type or mimetypes.guess_type(payload.filename)[0] or ""
    if not any(mime.startswith(prefix) for prefix in settings.ALLOWED_MIME_PREFIXES):
        raise HTTPException(400, f"MIME type não autorizado para {payload.filename}.")

    log_event("extract", "INFO", f"Lendo nota: {payload.filename}", {"mime": mime, "bytes": len(content)})
    try:
        return extract_invoice_fields(content, mime)
    except AIUnavailableError as exc:
        raise HTTPException(503, str(exc)) from exc
    except ExtractionError as exc:
        raise HTTPException(422, str(exc)) from exc


@app.post("/consult", response_model=AdvisoryInsight)
def consult(payload: ConsultRequest) -> AdvisoryInsight:
    return build_advice(payload, PRICING_CONFIG)


@app.post("/export/{fmt}")
async def export_report(fmt: str, payload: ReportRequest):
    if fmt not in EXPORTERS:
        raise HTTPException(404, f"Formato de exportação não suportado: {fmt}")
    builder, media_type = EXPORTERS[fmt]
    result = calculate_costs(payload.entrada)
    matrix = generate_price_matrix(result.custo_final, payload.entrada, PRICING_CONFIG)
    dataset = build_report_dataset(payload.entrada, result, matrix, payload.titulo)
    content, filename = builder(dataset)
    if isinstance(content, str):
        content = content.encode("utf-8")
    return StreamingResponse(io.BytesIO(content), media_type=media_type,
                             headers={"Content-Disposition": f"attachment; filename={filename}"})
