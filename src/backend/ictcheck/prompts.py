from typing import Iterable

from checklist import CHECKLIST, CRITICAL_REQUIREMENT_IDS
from models import Requirement

# Listed in catalog order.
_CRITICAL_IDS_TEXT = ", ".join(r.id for r in CHECKLIST if r.id in CRITICAL_REQUIREMENT_IDS)

ANALYSIS_SYSTEM = (
    "Tu es un auditeur expert en conformité réglementaire des contrats d'externalisation ICT "
    "(DORA article 30, orientations EBA/GL/2019/02, Arrêté du 3 novembre 2014).\n"
    "\n"
    "DOCUMENTS MULTIPLES :\n"
    "Le texte peut contenir plusieurs documents (contrat cadre, annexes, SLA, avenants) séparés par des "
    "en-têtes « === Document : ... === ». Ils forment UN SEUL contrat. Ne dégrade jamais l'exigence I.1 "
    "au motif que le contrat est réparti sur plusieurs fichiers.\n"
    "\n"
    "CLAUSES GÉNÉRALES DE CONFORMITÉ :\n"
    "Repère les clauses par lesquelles le prestataire s'engage à respecter « la réglementation applicable », "
    "« DORA », « les orientations EBA » ou équivalent. Liste-les dans generalClauses.\n"
    "\n"
    "STATUTS :\n"
    "- COMPLIANT : l'exigence est couverte explicitement et complètement.\n"
    "- IMPLICIT : l'exigence n'est couverte que par une clause générale de conformité.\n"
    "- PARTIAL : l'exigence est couverte en partie ; précise dans le commentaire ce qui manque.\n"
    "- ABSENT : aucune disposition ne couvre l'exigence.\n"
    "- NA : l'exigence ne s'applique pas à ce contrat.\n"
    "\n"
    "EXIGENCES JAMAIS IMPLICITES :\n"
    "Les exigences {critical_ids} ne peuvent JAMAIS être IMPLICIT. Si seule une clause générale les couvre, "
    "leur statut est PARTIAL au mieux.\n"
    "\n"
    "SCORE :\n"
    "Poids : CRITICAL = 3, MAJOR = 2, MINOR = 1. Valeurs : COMPLIANT = 100, IMPLICIT = 70, PARTIAL = 30, "
    "ABSENT = 0. Les exigences NA sont exclues.\n"
    "score = arrondi(100 × Σ(valeur × poids) / Σ(100 × poids))\n"
    "{critical_function_rule}"
    "\n"
    "FORMAT DE SORTIE :\n"
    "Réponds UNIQUEMENT avec un objet JSON valide, sans texte autour, de la forme :\n"
    "{{\n"
    '  "score": 0,\n'
    '  "items": [\n'
    '    {{"requirementId": "I.1", "status": "COMPLIANT", "comment": "...", "foundClause": "..."}}\n'
    "  ],\n"
    '  "generalClauses": ["..."],\n'
    '  "executiveSummary": "...",\n'
    '  "recommendedClauses": [\n'
    '    {{"requirementId": "I.7", "title": "...", "reference": "...", "textFr": "...", "textEn": "..."}}\n'
    "  ]\n"
    "}}\n"
    "Un élément items par exigence, dans l'ordre de la checklist. foundClause cite la clause trouvée "
    "(ou null). Les commentaires sont en français."
)

CRITICAL_FUNCTION_RULES = {
    True: "\nLe service soutient une fonction critique ou importante : les exigences de la section II "
          "et celles marquées CRITICAL_FUNCTIONS s'appliquent.\n",
    False: "\nLe service ne soutient PAS de fonction critique ou importante : marque NA toutes les "
           "exigences dont l'applicabilité est CRITICAL_FUNCTIONS.\n",
    None: "\nDétermine à partir du contrat si le service soutient une fonction critique ou importante ; "
          "sinon, marque NA les exigences dont l'applicabilité est CRITICAL_FUNCTIONS.\n",
}

ANALYSIS_USER = (
    "CONTRAT À ANALYSER :\n"
    "<<<\n{content}\n>>>\n"
    "\n"
    "CHECKLIST ({count} exigences) :\n"
    "{checklist}\n"
    "\n"
    "Évalue chaque exigence et renvoie le JSON demandé."
)


def format_requirement(req: Requirement) -> str:
    kw_fr = ", ".join(req.keywords.fr)
    kw_en = ", ".join(req.keywords.en)
    return (
        f"[{req.id}] {req.name}\n"
        f"  Référence : {req.reference}\n"
        f"  Applicabilité : {req.applicability} | Criticité : {req.criticality}\n"
        f"  Critères : {req.verification_criteria}\n"
        f"  Mots-clés FR : {kw_fr}\n"
        f"  Keywords EN : {kw_en}"
    )


def build_checklist_block(checklist: Iterable[Requirement]) -> str:
    return "\n\n".join(format_requirement(r) for r in checklist)


def build_prompt(
    content: str,
    checklist: Iterable[Requirement] = CHECKLIST,
    critical_function: bool | None = None,
) -> tuple[str, str]:
    """
    Return the (system, user) pair for one whole-contract analysis.
    The contract text is embedded verbatim; length checks happen in the analyzer.
    """
    checklist = list(checklist)
    system = ANALYSIS_SYSTEM.format(
        critical_ids=_CRITICAL_IDS_TEXT,
        critical_function_rule=CRITICAL_FUNCTION_RULES[critical_function],
    )
    user = ANALYSIS_USER.format(
        content=content,
        count=len(checklist),
        checklist=build_checklist_block(checklist),
    )
    return system, user
