import logging
import re
from typing import Mapping, Sequence

from checklist import REQUIREMENTS_BY_ID
from compliance_rules import generate_recommendation
from models import ContractAnalysis, Finding, RecommendedClause, Report, Requirement

logger = logging.getLogger(__name__)

STATUS_MAP = {
    "COMPLIANT": "compliant",
    "PARTIAL": "partial",
    "IMPLICIT": "implicit",
    "ABSENT": "non-compliant",
    "NA": "not-applicable",
}

# Statuses that never carry a recommendation.
_NO_RECOMMENDATION = {"compliant", "not-applicable"}


def _id_token_re(requirement_id: str) -> re.Pattern:
    # "I.1" must not match inside "II.1" or "I.10".
    return re.compile(r"(?<![\w.])" + re.escape(requirement_id) + r"(?!\w|\.\d)")


def match_recommended_clause(
    clauses: Sequence[RecommendedClause],
    requirement_id: str,
    name: str | None = None,
) -> RecommendedClause | None:
    """
    Find the model-proposed clause for a requirement: explicit requirementId first,
    then an id token in the reference, then the requirement name in the title.
    """
    usable = [c for c in clauses if c.text_fr or c.text_en]
    for c in usable:
        if c.requirement_id and c.requirement_id.strip() == requirement_id:
            return c
    token = _id_token_re(requirement_id)
    for c in usable:
        if token.search(c.reference):
            return c
    if name:
        lowered = name.lower()
        for c in usable:
            if lowered in c.title.lower():
                return c
    return None


def _details(comment: str, found_clause: str | None) -> str:
    if not found_clause:
        return comment
    quoted = f"Clause trouvée : « {found_clause} »"
    return f"{comment}\n\n{quoted}" if comment else quoted


def transform_to_report(
    analysis: ContractAnalysis,
    catalog: Mapping[str, Requirement] = REQUIREMENTS_BY_ID,
) -> Report:
    findings: list[Finding] = []
    for item in analysis.items:
        req = catalog.get(item.requirement_id)
        if req is None:
            logger.warning("Unknown requirement id %r in analysis, reporting it as-is", item.requirement_id)
        status = STATUS_MAP[item.status]

        recommendation = None
        if status not in _NO_RECOMMENDATION:
            clause = match_recommended_clause(
                analysis.recommended_clauses, item.requirement_id, req.name if req else None
            )
            if clause is not None:
                recommendation = clause.text_fr or clause.text_en
            elif req is not None:
                recommendation = generate_recommendation(req, item)

        findings.append(Finding(
            requirement=req.name if req else item.requirement_id,
            requirement_id=item.requirement_id,
            status=status,
            details=_details(item.comment, item.found_clause),
            recommendation=recommendation,
            found_clause=item.found_clause,
            reference=req.reference if req else None,
            criticality=req.criticality if req else None,
            section=req.section if req else None,
        ))

    evaluated = len(analysis.items)
    applicable = sum(1 for i in analysis.items if i.status != "NA")
    line = (
        f"{applicable} exigences applicables sur {evaluated} évaluées "
        f"({evaluated - applicable} exclues comme non applicables)."
    )
    summary = f"{analysis.executive_summary}\n\n{line}" if analysis.executive_summary else line

    return Report(
        overall_score=analysis.score,
        summary=summary,
        findings=findings,
        is_partial=analysis.is_partial,
    )
