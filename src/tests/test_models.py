"""
Unit tests for backend/ictcheck/models.py and errors.py

Covers:
  - camelCase aliases (input and output)
  - AnalysisResultItem normalisation
  - score bounds
  - error codes
"""

import pytest
from pydantic import ValidationError


# ═══════════════════════════════════════════
#  AnalysisResultItem
# ═══════════════════════════════════════════
class TestAnalysisResultItem:
    def test_accepts_camel_case(self):
        from models import AnalysisResultItem
        item = AnalysisResultItem.model_validate(
            {"requirementId": "I.1", "status": "COMPLIANT", "comment": "ok", "foundClause": "Art. 1"}
        )
        assert item.requirement_id == "I.1"
        assert item.found_clause == "Art. 1"

    def test_accepts_snake_case(self):
        from models import AnalysisResultItem
        item = AnalysisResultItem(requirement_id="I.1", status="NA")
        assert item.status == "NA"

    def test_rejects_unknown_status(self):
        from models import AnalysisResultItem
        with pytest.raises(ValidationError):
            AnalysisResultItem(requirement_id="I.1", status="NON_CONFORME")

    def test_null_comment_and_blank_clause(self):
        from models import AnalysisResultItem
        item = AnalysisResultItem.model_validate(
            {"requirementId": "I.1", "status": "absent", "comment": None, "foundClause": "  "}
        )
        assert item.status == "ABSENT"
        assert item.comment == ""
        assert item.found_clause is None


# ═══════════════════════════════════════════
#  ContractAnalysis / Report
# ═══════════════════════════════════════════
class TestAnalysisAndReport:
    def test_score_bounds(self):
        from models import ContractAnalysis
        with pytest.raises(ValidationError):
            ContractAnalysis(date="01/01/2026", score=101, items=[])
        with pytest.raises(ValidationError):
            ContractAnalysis(date="01/01/2026", score=-1, items=[])

    def test_defaults(self):
        from models import ContractAnalysis
        a = ContractAnalysis(date="01/01/2026", score=10, items=[])
        assert a.file_name == "Document"
        assert a.is_partial is False
        assert a.model_score is None
        assert a.general_clauses == [] and a.recommended_clauses == []

    def test_report_dumps_camel_case(self):
        from models import Finding, Report
        r = Report(overall_score=80, summary="s", findings=[
            Finding(requirement="Contrat écrit unique", status="compliant", details="d", requirement_id="I.1"),
        ])
        data = r.model_dump(by_alias=True)
        assert data["overallScore"] == 80
        assert data["findings"][0]["requirementId"] == "I.1"
        assert data["findings"][0]["foundClause"] is None

    def test_finding_status_closed(self):
        from models import Finding
        with pytest.raises(ValidationError):
            Finding(requirement="x", status="COMPLIANT", details="")


# ═══════════════════════════════════════════
#  Options / events
# ═══════════════════════════════════════════
class TestOptionsAndEvents:
    def test_request_from_camel_json(self):
        from models import AnalyzeRequest
        req = AnalyzeRequest.model_validate({
            "content": "texte", "provider": "gemini", "apiKey": "k", "fileName": "a.pdf",
            "criticalFunction": True,
        })
        assert req.api_key == "k"
        assert req.file_name == "a.pdf"
        assert req.critical_function is True
        assert req.model is None

    def test_unknown_provider_rejected(self):
        from models import AnalyzeOptions
        with pytest.raises(ValidationError):
            AnalyzeOptions(provider="mistral", api_key="k")

    def test_event_json(self):
        from models import AnalysisEvent
        e = AnalysisEvent(type="step", step=2, total_steps=4, label="Analyse", phase="analyzing")
        data = e.model_dump(by_alias=True, exclude_none=True)
        assert data["totalSteps"] == 4
        assert "timestamp" in data
        assert "data" not in data


# ═══════════════════════════════════════════
#  Errors
# ═══════════════════════════════════════════
class TestErrors:
    def test_codes(self):
        from errors import (
            ContentValidationError, UnknownProviderError, ProviderError,
            CompletionTimeoutError, ResponseFormatError, ICTCheckError,
        )
        assert ContentValidationError("m", "CONTENT_TOO_LONG").code == "CONTENT_TOO_LONG"
        assert UnknownProviderError("x").code == "UNKNOWN_PROVIDER"
        assert ProviderError("openai", 500, "e").code == "PROVIDER_ERROR"
        assert CompletionTimeoutError("openai", 5).code == "TIMEOUT"
        assert ResponseFormatError("m").code == "PARSE_ERROR"
        for cls in (UnknownProviderError, ProviderError, CompletionTimeoutError, ResponseFormatError):
            assert issubclass(cls, ICTCheckError)

    @pytest.mark.parametrize("status,transient", [(None, True), (429, True), (500, True), (503, True),
                                                  (400, False), (401, False), (404, False)])
    def test_transient(self, status, transient):
        from errors import ProviderError
        assert ProviderError("anthropic", status, "").transient is transient

    def test_provider_error_message_truncates_body(self):
        from errors import ProviderError
        e = ProviderError("gemini", 500, "x" * 2000)
        assert "HTTP 500" in str(e)
        assert len(e.body) == 2000
        assert len(str(e)) < 600
