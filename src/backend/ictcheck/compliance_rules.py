"""
Deterministic business rules applied after the model has answered.

The model's own score and statuses are never trusted as-is: critical
requirements are clamped, the score is recomputed from the items, and the
lower of the two wins.
"""
import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from checklist import CRITICAL_REQUIREMENT_IDS, REQUIREMENTS_BY_ID
from models import AnalysisResultItem, ContractAnalysis, Requirement

logger = logging.getLogger(__name__)

CRITICALITY_WEIGHTS = {"CRITICAL": 3, "MAJOR": 2, "MINOR": 1}
STATUS_VALUES = {"COMPLIANT": 100, "IMPLICIT": 70, "PARTIAL": 30, "ABSENT": 0}

URGENCY_PREFIXES = {
    "CRITICAL": "[PRIORITÉ HAUTE] ",
    "MAJOR": "[PRIORITÉ MOYENNE] ",
    "MINOR": "",
}

SHORT_CRITERIA_CHARS = 60
EXCERPT_CHARS = 300
MAX_LISTED_ELEMENTS = 3

_ENUM_MARKER_RE = re.compile(r"\((?:\d+|[a-z])\)")
_ELEMENT_SPLIT_RE = re.compile(r"\s*[+,;]\s*")
_SIGNIFICANT_WORD_RE = re.compile(r"\w{4,}")

# Each cue captures the phrase naming what the clause is missing.
_PHRASE = r"([^.;,\n]{3,120})"
_MISSING_CUES = [
    re.compile(r"\bmanquen?t?\s+(?:de\s+|d')?" + _PHRASE, re.IGNORECASE),
    re.compile(r"\babsence\s+d(?:e\s+|')" + _PHRASE, re.IGNORECASE),
    re.compile(r"\bsans\s+" + _PHRASE, re.IGNORECASE),
    re.compile(r"\baucune?\s+([^.;,\n]{3,120}?\s+spécifiques?)", re.IGNORECASE),
    re.compile(r"\bne précise pas\s+" + _PHRASE, re.IGNORECASE),
    re.compile(r"\black(?:s|ing)?\s+" + _PHRASE, re.IGNORECASE),
    re.compile(r"\bmissing\s+" + _PHRASE, re.IGNORECASE),
    re.compile(r"\bwithout\s+" + _PHRASE, re.IGNORECASE),
    re.compile(r"\bno specific\s+" + _PHRASE, re.IGNORECASE),
]


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def critical_warning(requirement_id: str) -> str:
    return (
        f"⚠️ {requirement_id} : une clause générale de conformité est insuffisante pour cette exigence "
        f"critique, statut ramené de IMPLICIT à PARTIAL."
    )


# ---------- Critical clamp ----------
def enforce_critical_requirements(analysis: ContractAnalysis) -> ContractAnalysis:
    """Downgrade IMPLICIT to PARTIAL on the never-IMPLICIT requirements."""
    items: list[AnalysisResultItem] = []
    for item in analysis.items:
        if item.requirement_id in CRITICAL_REQUIREMENT_IDS and item.status == "IMPLICIT":
            logger.warning("Requirement %s cannot be IMPLICIT, downgrading to PARTIAL", item.requirement_id)
            warning = critical_warning(item.requirement_id)
            comment = f"{warning} {item.comment}".strip()
            item = item.model_copy(update={"status": "PARTIAL", "comment": comment})
        items.append(item)
    return analysis.model_copy(update={"items": items})


# ---------- Scoring ----------
def calculate_score(
    items: Iterable[AnalysisResultItem],
    catalog: Mapping[str, Requirement] = REQUIREMENTS_BY_ID,
) -> int:
    """
    Weighted score over the applicable items:
        100 * sum(value * weight) / sum(100 * weight)
    NA items are excluded; unknown ids weigh 1. No applicable item gives 0.
    """
    earned = 0
    possible = 0
    for item in items:
        if item.status == "NA":
            continue
        req = catalog.get(item.requirement_id)
        weight = CRITICALITY_WEIGHTS.get(req.criticality, 1) if req else 1
        earned += STATUS_VALUES.get(item.status, 0) * weight
        possible += 100 * weight
    if possible == 0:
        return 0
    return round_half_up(100 * earned / possible)


def validate_analysis(analysis: ContractAnalysis) -> ContractAnalysis:
    """Clamp critical statuses, then keep the more conservative of model and recomputed scores."""
    analysis = enforce_critical_requirements(analysis)
    recomputed = calculate_score(analysis.items)
    if analysis.model_score is None:
        score = recomputed
    else:
        score = min(analysis.model_score, recomputed)
        if score != analysis.model_score:
            logger.warning("Model score %d lowered to recomputed score %d", analysis.model_score, recomputed)
    return analysis.model_copy(update={"score": score})


# ---------- Recommendations ----------
def _criteria_core(criteria: str) -> str:
    """Drop the trailing grading rules ("PARTIEL si ...") from a criteria text."""
    if "PARTIEL si" in criteria:
        head, sep, _ = criteria.partition(". ")
        if sep:
            return head.strip()
    return criteria.strip()


def _enumerated_items(criteria: str) -> list[str]:
    parts = _ENUM_MARKER_RE.split(_criteria_core(criteria))
    if len(parts) < 3:
        return []
    items = [p.strip().rstrip(",;+").strip() for p in parts[1:]]
    return [i for i in items if i]


def _regulatory_excerpt(req: Requirement) -> str | None:
    text = req.regulatory_text.dora or req.regulatory_text.eba or req.regulatory_text.fr
    if not text:
        return None
    if len(text) > EXCERPT_CHARS:
        text = text[:EXCERPT_CHARS].rstrip() + "…"
    return text


def _bullets(lines: Iterable[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


def _absent_recommendation(req: Requirement) -> str:
    prefix = URGENCY_PREFIXES.get(req.criticality, "")
    head = f"{prefix}Ajouter une clause couvrant « {req.name} » ({req.reference})."
    sub_items = _enumerated_items(req.verification_criteria)
    if sub_items:
        return f"{head}\nÉléments à prévoir :\n{_bullets(sub_items)}"
    if len(req.verification_criteria) < SHORT_CRITERIA_CHARS:
        excerpt = _regulatory_excerpt(req)
        if excerpt:
            return f"{head}\n{req.verification_criteria}\nTexte de référence : « {excerpt} »"
    return f"{head}\nCritères à couvrir : {req.verification_criteria}"


def _missing_phrases(comment: str) -> list[str]:
    found: list[tuple[int, str]] = []
    for cue in _MISSING_CUES:
        for m in cue.finditer(comment):
            found.append((m.start(), m.group(1).strip()))
    phrases: list[str] = []
    for _, phrase in sorted(found):
        if phrase and phrase.lower() not in (p.lower() for p in phrases):
            phrases.append(phrase)
    return phrases[:MAX_LISTED_ELEMENTS]


def _unevidenced_elements(criteria: str, comment: str) -> list[str]:
    elements = _enumerated_items(criteria) or [
        e for e in _ELEMENT_SPLIT_RE.split(_criteria_core(criteria)) if e
    ]
    comment_words = set(_SIGNIFICANT_WORD_RE.findall(comment.lower()))
    missing = []
    for element in elements:
        words = set(_SIGNIFICANT_WORD_RE.findall(element.lower()))
        if words and not words & comment_words:
            missing.append(element)
    return missing[:MAX_LISTED_ELEMENTS]


def _partial_recommendation(req: Requirement, comment: str) -> str:
    head = f"Compléter la clause existante pour « {req.name} » ({req.reference})."
    phrases = _missing_phrases(comment)
    if phrases:
        return f"{head}\nÉléments manquants :\n{_bullets(phrases)}"
    elements = _unevidenced_elements(req.verification_criteria, comment)
    if elements:
        return f"{head}\nÉléments à vérifier ou compléter :\n{_bullets(elements)}"
    return (
        f"Compléter la clause existante afin de couvrir intégralement l'exigence {req.reference} : "
        f"{req.verification_criteria}"
    )


def generate_recommendation(req: Requirement, item: AnalysisResultItem) -> str | None:
    if item.status == "ABSENT":
        return _absent_recommendation(req)
    if item.status == "PARTIAL":
        return _partial_recommendation(req, item.comment)
    return None
