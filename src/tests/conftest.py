"""
Shared fixtures for unit and integration tests.
"""

import os
import sys
import json
import pytest
from unittest.mock import MagicMock
from io import BytesIO

# ── Ensure backend modules are importable ──
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.join(ROOT, "backend", "ictcheck"))

# ── Fake .env values used by every test ──
ENV_DEFAULTS = {
    "LLM_TIMEOUT": "120",
    "LLM_MAX_OUTPUT_TOKENS": "16000",
    "LLM_MAX_ATTEMPTS": "1",
    "LLM_RETRY_WAIT": "0",
    "MIN_CONTENT_CHARS": "100",
    "MAX_CONTENT_CHARS": "120000",
    "LOG_LEVEL": "WARNING",
    "API_PORT": "8000",
    "CORS_ORIGINS": "*",
    "API_BASE": "http://127.0.0.1:8000",
    "ANALYZE_TIMEOUT": "300",
}


@pytest.fixture(autouse=True)
def mock_env(monkeypatch):
    """Inject all required env vars so modules never blow up on import."""
    for k, v in ENV_DEFAULTS.items():
        monkeypatch.setenv(k, v)


@pytest.fixture
def contract_text():
    """A contract long enough to pass the minimum length check."""
    return (
        "CONTRAT DE PRESTATION DE SERVICES INFORMATIQUES\n"
        "Article 1 - Objet. Le Prestataire fournit au Client des services d'hébergement et d'infogérance.\n"
        "Article 2 - Localisation. Les données sont hébergées en France (Paris) ; tout changement de "
        "localisation est notifié au Client avec un préavis de 3 mois.\n"
        "Article 3 - Conformité. Le Prestataire s'engage à respecter la réglementation applicable, "
        "notamment le règlement DORA.\n"
        "Article 4 - Résiliation. Chaque partie peut résilier le contrat en cas de manquement grave.\n"
    )


@pytest.fixture
def analyze_options():
    from models import AnalyzeOptions
    return AnalyzeOptions(provider="anthropic", api_key="sk-test", file_name="contrat.pdf")


@pytest.fixture
def make_payload():
    """Factory: build a model response payload (dict) from {requirement_id: status}."""
    def _make(statuses, score=100, summary="Synthèse.", **extra):
        payload = {
            "score": score,
            "items": [
                {"requirementId": rid, "status": st, "comment": f"Commentaire {rid}", "foundClause": None}
                for rid, st in statuses.items()
            ],
            "generalClauses": ["Article 3 - Conformité"],
            "executiveSummary": summary,
        }
        payload.update(extra)
        return payload
    return _make


@pytest.fixture
def clean_response(make_payload):
    """A well-formed JSON response covering a handful of requirements."""
    return json.dumps(make_payload(
        {"I.1": "COMPLIANT", "I.3": "COMPLIANT", "I.7": "ABSENT", "I.9": "PARTIAL", "II.4": "NA"},
        score=55,
    ), ensure_ascii=False)


@pytest.fixture
def fenced_response(make_payload):
    """JSON wrapped in a code fence with commentary before and after."""
    body = json.dumps(make_payload({"I.1": "COMPLIANT", "I.2": "ABSENT"}, score=40), indent=2)
    return (
        "Voici mon analyse du contrat :\n\n"
        f"```json\n{body}\n```\n\n"
        "N'hésitez pas si vous avez des questions."
    )


@pytest.fixture
def truncated_response():
    """Three complete items, then output cut in the middle of the fourth."""
    return (
        '{"score": 80, "items": [\n'
        '  {"requirementId": "I.1", "status": "COMPLIANT", "comment": "Contrat écrit unique.", "foundClause": "Article 1"},\n'
        '  {"requirementId": "I.2", "status": "PARTIAL", "comment": "Il manque le droit d\'opposition.", "foundClause": null},\n'
        '  {"requirementId": "I.3", "status": "ABSENT", "comment": "Aucune clause \\"localisation\\".", "foundClause": null},\n'
        '  {"requirementId": "I.4", "status": "COMPLIANT", "comment": "Les quatre piliers sont cou'
    )


@pytest.fixture
def mock_llm_client():
    """Return a MagicMock that behaves like an LLMClient."""
    client = MagicMock()
    client.name = "anthropic"
    client.timeout = 120
    return client


@pytest.fixture
def sample_pdf_bytes():
    """Build a minimal contract PDF in memory with reportlab."""
    from reportlab.lib.pagesizes import A4
    from reportlab.pdfgen import canvas

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(72, 780, "CONTRAT DE SERVICES TIC")
    c.drawString(72, 760, "Article 1 - Objet : hebergement et infogerance du systeme d'information.")
    c.drawString(72, 740, "Article 2 - Localisation : les donnees sont hebergees en France.")
    c.drawString(72, 720, "Article 3 - Audit : le Client dispose d'un droit d'audit illimite.")
    c.save()
    return buf.getvalue()
