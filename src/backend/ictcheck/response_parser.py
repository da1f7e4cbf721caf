"""
Turn a raw completion into a ContractAnalysis.

Two stages over the same JSON candidate:

  parse_strict    - the whole candidate decodes and has the expected shape
  recover_partial - salvage every complete item object from a truncated or
                    malformed payload, then recompute the score locally

Only a response from which no item at all can be salvaged is an error.
"""
import logging
import re
from datetime import date

import orjson
from json_repair import repair_json
from pydantic import ValidationError

from checklist import CHECKLIST
from compliance_rules import calculate_score, round_half_up
from errors import ResponseFormatError
from models import REQUIREMENT_STATUSES, AnalysisResultItem, ContractAnalysis, RecommendedClause

logger = logging.getLogger(__name__)

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)
_FENCED_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_LEADING_FENCE_RE = re.compile(r"^```(?:json)?\s*")
_TRAILING_FENCE_RE = re.compile(r"\s*```\s*$")

# A brace-balanced object with no nested braces; quoted strings may contain anything.
_FLAT_OBJECT_RE = re.compile(r'\{(?:[^{}"]|"(?:[^"\\]|\\.)*")*\}')
_GENERAL_CLAUSES_RE = re.compile(r'"generalClauses"\s*:\s*(\[(?:[^\[\]"]|"(?:[^"\\]|\\.)*")*\])')
_SUMMARY_RE = re.compile(r'"executiveSummary"\s*:\s*"((?:[^"\\]|\\.)*)"')


def _string_field(name: str) -> re.Pattern:
    return re.compile(r'"' + name + r'"\s*:\s*"((?:[^"\\]|\\.)*)"')


_FIELD_RES = {
    "requirementId": _string_field("requirementId"),
    "status": _string_field("status"),
    "comment": _string_field("comment"),
    "foundClause": _string_field("foundClause"),
}


def today() -> str:
    return date.today().strftime("%d/%m/%Y")


def _unescape(raw: str) -> str:
    try:
        return orjson.loads(f'"{raw}"')
    except orjson.JSONDecodeError:
        return raw.replace('\\"', '"').replace("\\n", "\n").replace("\\\\", "\\")


def extract_candidate(text: str) -> str:
    """Strip reasoning blocks and code fences, then cut from the first '{' to the last '}'."""
    text = _THINK_RE.sub("", text or "").strip()
    m = _FENCED_RE.search(text)
    if m:
        text = m.group(1)
    else:
        text = _TRAILING_FENCE_RE.sub("", _LEADING_FENCE_RE.sub("", text))
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text.strip()


def _validate_items(raw_items: list) -> list[AnalysisResultItem]:
    items: list[AnalysisResultItem] = []
    for raw in raw_items:
        try:
            items.append(AnalysisResultItem.model_validate(raw))
        except ValidationError as e:
            logger.warning("Dropping invalid analysis item %.120r: %s", raw, e.errors()[0]["msg"])
    return items


def _validate_recommendations(raw) -> list[RecommendedClause]:
    if not isinstance(raw, list):
        return []
    clauses = []
    for entry in raw:
        try:
            clauses.append(RecommendedClause.model_validate(entry))
        except ValidationError:
            logger.warning("Dropping invalid recommended clause %.120r", entry)
    return clauses


def _string_list(raw) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [str(x) for x in raw if x is not None]


def parse_strict(candidate: str, file_name: str = "Document") -> ContractAnalysis | None:
    """Return the analysis when the candidate is a well-formed payload, else None."""
    try:
        data = orjson.loads(candidate)
    except orjson.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    score = data.get("score")
    raw_items = data.get("items")
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not isinstance(raw_items, list):
        return None

    items = _validate_items(raw_items)
    if raw_items and not items:
        return None

    score = round_half_up(max(0.0, min(100.0, float(score))))
    summary = data.get("executiveSummary")
    return ContractAnalysis(
        file_name=file_name,
        date=today(),
        score=score,
        model_score=score,
        items=items,
        general_clauses=_string_list(data.get("generalClauses")),
        executive_summary=summary if isinstance(summary, str) else "",
        recommended_clauses=_validate_recommendations(data.get("recommendedClauses")),
    )


def _decode_fragment(fragment: str) -> dict | None:
    try:
        obj = orjson.loads(fragment)
    except orjson.JSONDecodeError:
        obj = {}
        for key, pattern in _FIELD_RES.items():
            m = pattern.search(fragment)
            if m:
                obj[key] = _unescape(m.group(1))
    return obj if isinstance(obj, dict) else None


def _recover_items(candidate: str) -> list[AnalysisResultItem]:
    items: list[AnalysisResultItem] = []
    for m in _FLAT_OBJECT_RE.finditer(candidate):
        obj = _decode_fragment(m.group(0))
        if not obj or not isinstance(obj.get("requirementId"), str):
            continue
        status = obj.get("status")
        if not isinstance(status, str) or status.strip().upper() not in REQUIREMENT_STATUSES:
            continue
        try:
            items.append(AnalysisResultItem.model_validate(obj))
        except ValidationError:
            continue
    return items


def _recover_general_clauses(candidate: str) -> list[str]:
    m = _GENERAL_CLAUSES_RE.search(candidate)
    if not m:
        return []
    try:
        return _string_list(orjson.loads(repair_json(m.group(1))))
    except orjson.JSONDecodeError:
        logger.warning("Could not salvage generalClauses from partial response")
        return []


def recover_partial(candidate: str, file_name: str = "Document") -> ContractAnalysis | None:
    """Salvage complete item objects from a damaged payload; None when nothing is found."""
    items = _recover_items(candidate)
    if not items:
        return None

    m = _SUMMARY_RE.search(candidate)
    summary = _unescape(m.group(1)) if m else ""
    warning = (
        f"⚠️ Analyse partielle : réponse du modèle incomplète, {len(items)} exigences "
        f"récupérées sur {len(CHECKLIST)}."
    )
    logger.warning("Recovered %d/%d items from a malformed model response", len(items), len(CHECKLIST))
    return ContractAnalysis(
        file_name=file_name,
        date=today(),
        score=calculate_score(items),
        model_score=None,
        items=items,
        general_clauses=_recover_general_clauses(candidate),
        executive_summary=f"{warning}\n\n{summary}" if summary else warning,
        is_partial=True,
    )


def parse_ai_response(text: str, file_name: str = "Document") -> ContractAnalysis:
    candidate = extract_candidate(text)
    analysis = parse_strict(candidate, file_name)
    if analysis is not None:
        return analysis
    logger.warning("Strict JSON parse failed (%d chars), attempting recovery", len(candidate))
    analysis = recover_partial(candidate, file_name)
    if analysis is None:
        raise ResponseFormatError(
            "Impossible d'interpréter la réponse du modèle : le contrat est peut-être trop long "
            "ou l'analyse trop complexe. Veuillez réessayer."
        )
    return analysis
