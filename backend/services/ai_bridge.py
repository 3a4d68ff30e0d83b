"""Bridge to generative AI (Gemini/ChatGPT) for invoice reading and tax Q&A."""

from __future__ import annotations

import base64
import json
import re
from typing import Any, Dict, List

import httpx
from pydantic import ValidationError

from backend.core.logger import log_event
from backend.core.settings import settings
from backend.models import InvoiceExtraction

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"

EXTRACTION_PROMPT = """
Analise esta nota fiscal brasileira (NF-e, NFC-e, DANFE) e extraia os valores abaixo.
Responda somente com um objeto JSON com as chaves:
- valorCompra: valor total dos produtos
- ipiFrete: soma de IPI + frete, se houver; senão 0
- icmsInterestadual: alíquota de ICMS da origem (normalmente 4, 7 ou 12)
- mva: MVA/IVA ajustada ou original, se informada; senão null
Use null para valores não encontrados. Apenas números, sem símbolos de moeda.
"""

ADVISOR_PROMPT = (
    "Você é um consultor tributário brasileiro especializado em ICMS-ST e precificação. "
    "Responda de forma objetiva em português, considerando a simulação em JSON abaixo. "
    "Os números são aproximações determinísticas e não substituem parecer fiscal."
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


class AIUnavailableError(RuntimeError):
    """No AI credential configured, offline mode on, or the provider failed."""


class ExtractionError(ValueError):
    """The provider answered but the payload could not be read as invoice fields."""


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:  # pragma: no cover - external dependency
    response = httpx.post(url, json=payload, headers=headers, timeout=settings.AI_TIMEOUT_SECONDS)
    response.raise_for_status()
    return response.json()


def _gemini_text(parts: List[Dict[str, Any]], *, json_output: bool = False) -> str:
    payload: Dict[str, Any] = {"contents": [{"parts": parts}]}
    if json_output:
        payload["generationConfig"] = {"responseMimeType": "application/json", "temperature": 0}
    data = _post(
        GEMINI_URL.format(model=settings.GEMINI_MODEL),
        payload,
        {"x-goog-api-key": settings.GEMINI_API_KEY},
    )
    return data["candidates"][0]["content"]["parts"][0]["text"]


def _openai_text(messages: List[Dict[str, Any]]) -> str:
    payload = {"model": settings.OPENAI_MODEL, "temperature": 0.2, "messages": messages}
    data = _post(OPENAI_URL, payload, {"Authorization": f"Bearer {settings.OPENAI_API_KEY}"})
    return data["choices"][0]["message"]["content"]


def _parse_json_object(text: str) -> Dict[str, Any]:
    cleaned = _FENCE_RE.sub("", (text or "").strip())
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExtractionError("Resposta da IA não é JSON válido") from exc
    if not isinstance(parsed, dict):
        raise ExtractionError("Resposta da IA deve ser um objeto JSON")
    return parsed


def extract_invoice_fields(content: bytes, mime_type: str) -> InvoiceExtraction:
    """Reads purchase value, IPI+freight, interstate ICMS and MVA from an invoice file."""
    if settings.OFFLINE_MODE or not settings.GEMINI_API_KEY:
        raise AIUnavailableError("Leitura de notas requer GEMINI_API_KEY e OFFLINE_MODE=false")

    parts = [
        {"inline_data": {"mime_type": mime_type, "data": base64.b64encode(content).decode("ascii")}},
        {"text": EXTRACTION_PROMPT},
    ]
    try:
        text = _gemini_text(parts, json_output=True)
    except (httpx.HTTPError, KeyError, IndexError) as exc:
        log_event("ai-bridge", "ERROR", "Falha na extração da nota", {"error": str(exc)})
        raise AIUnavailableError("Serviço de IA indisponível para leitura da nota") from exc

    try:
        extraction = InvoiceExtraction.model_validate(_parse_json_object(text))
    except ValidationError as exc:
        raise ExtractionError("Campos extraídos não são numéricos") from exc
    log_event("ai-bridge", "INFO", "Nota lida pela IA", {"campos": sorted(extraction.as_patch())})
    return extraction


def ask_advisor(question: str, snapshot: Dict[str, Any]) -> str:
    """Free-text tax question answered with the simulation snapshot as context."""
    if not settings.ai_enabled:
        raise AIUnavailableError("Nenhuma credencial de IA configurada")

    context = json.dumps(snapshot, ensure_ascii=False, default=str)
    try:
        if settings.GEMINI_API_KEY:
            return _gemini_text([{"text": f"{ADVISOR_PROMPT}\n\nSimulação: {context}\n\nPergunta: {question}"}])
        return _openai_text(
            [
                {"role": "system", "content": ADVISOR_PROMPT},
                {"role": "user", "content": f"Simulação: {context}\n\nPergunta: {question}"},
            ]
        )
    except (httpx.HTTPError, KeyError, IndexError) as exc:
        log_event("ai-bridge", "WARN", "Consulta à IA falhou", {"error": str(exc)})
        raise AIUnavailableError("Serviço de IA indisponível") from exc
