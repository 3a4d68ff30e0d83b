"""Static NCM/UF reference tables, loaded once at import and never mutated."""

from __future__ import annotations

import json
import re
import unicodedata
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Tuple

from backend.models import NCMEntry, UFEntry

DATA_PATH = Path(__file__).with_name("reference_data.json")
with DATA_PATH.open("r", encoding="utf-8") as handler:
    _RAW = json.load(handler)

DATA_VERSION: str = _RAW.get("version", "")
NCM_DATABASE: Tuple[NCMEntry, ...] = tuple(NCMEntry.model_validate(row) for row in _RAW.get("ncm", []))
UF_LIST: Tuple[UFEntry, ...] = tuple(UFEntry.model_validate(row) for row in _RAW.get("ufs", []))
SOUTH_SOUTHEAST: FrozenSet[str] = frozenset(_RAW.get("south_southeast", []))
NORTH_NORTHEAST_CENTER_WEST: FrozenSet[str] = frozenset(_RAW.get("north_northeast_center_west", []))

_UF_INDEX: Dict[str, UFEntry] = {uf.sigla: uf for uf in UF_LIST}
_NON_DIGIT_RE = re.compile(r"\D")


def _digits(code: str) -> str:
    return _NON_DIGIT_RE.sub("", code or "")


def _fold(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text or "")
    return "".join(ch for ch in normalized if not unicodedata.combining(ch)).casefold()


_NCM_INDEX: Dict[str, NCMEntry] = {}
for _entry in NCM_DATABASE:
    _NCM_INDEX.setdefault(_entry.codigo, _entry)
    _NCM_INDEX.setdefault(_digits(_entry.codigo), _entry)


def find_ncm(codigo: str) -> Optional[NCMEntry]:
    """Exact lookup by dotted (``2523.29.10``) or digits-only (``25232910``) code."""
    code = (codigo or "").strip()
    if not code:
        return None
    return _NCM_INDEX.get(code) or _NCM_INDEX.get(_digits(code))


def search_ncm(term: str, limit: int | None = None) -> Tuple[NCMEntry, ...]:
    """Matches by code prefix or description substring, ignoring case and accents."""
    needle = (term or "").strip()
    if not needle:
        matches = NCM_DATABASE
    else:
        needle_digits = _digits(needle)
        needle_text = _fold(needle)
        matches = tuple(
            entry
            for entry in NCM_DATABASE
            if (needle_digits and _digits(entry.codigo).startswith(needle_digits))
            or needle_text in _fold(entry.descricao)
        )
    return matches[:limit] if limit else matches


def get_uf(sigla: str) -> Optional[UFEntry]:
    return _UF_INDEX.get((sigla or "").strip().upper())


def is_known_state(sigla: str) -> bool:
    code = (sigla or "").strip().upper()
    return code in SOUTH_SOUTHEAST or code in NORTH_NORTHEAST_CENTER_WEST


def internal_icms_rate(sigla: str) -> Optional[float]:
    uf = get_uf(sigla)
    return uf.icms if uf else None
