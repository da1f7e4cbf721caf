import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


Criticality = Literal["CRITICAL", "MAJOR", "MINOR"]
Section = Literal["I", "II", "III", "IV"]
Applicability = Literal["ALL", "CRITICAL_FUNCTIONS", "EBA_ONLY", "FR_ONLY"]
RequirementStatus = Literal["COMPLIANT", "IMPLICIT", "PARTIAL", "ABSENT", "NA"]
FindingStatus = Literal["compliant", "partial", "implicit", "non-compliant", "not-applicable"]
Provider = Literal["anthropic", "gemini", "openai"]
EventType = Literal["start", "step", "chunk", "progress", "done", "error"]

REQUIREMENT_STATUSES: tuple[str, ...] = ("COMPLIANT", "IMPLICIT", "PARTIAL", "ABSENT", "NA")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (both accepted on input)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())


# ---------- Catalog ----------
class RegulatoryText(CamelModel):
    model_config = ConfigDict(frozen=True)

    dora: str | None = None
    eba: str | None = None
    fr: str | None = None


class Keywords(CamelModel):
    model_config = ConfigDict(frozen=True)

    fr: tuple[str, ...] = ()
    en: tuple[str, ...] = ()


class Requirement(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    section: Section
    section_name: str
    name: str
    reference: str
    criticality: Criticality
    applicability: Applicability
    regulatory_text: RegulatoryText
    keywords: Keywords
    verification_criteria: str
    notes: str | None = None
    is_new_dora: bool = False
    is_dora_enhanced: bool = False


# ---------- Analysis (model output) ----------
class AnalysisResultItem(CamelModel):
    requirement_id: str
    status: RequirementStatus
    comment: str = ""
    found_clause: str | None = None

    @field_validator("requirement_id", mode="before")
    @classmethod
    def _strip_id(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("comment", mode="before")
    @classmethod
    def _comment_or_empty(cls, v):
        return "" if v is None else v

    @field_validator("found_clause", mode="before")
    @classmethod
    def _blank_clause_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class RecommendedClause(CamelModel):
    title: str = ""
    reference: str = ""
    text_fr: str = ""
    text_en: str = ""
    requirement_id: str | None = None


class ContractAnalysis(CamelModel):
    file_name: str = "Document"
    date: str
    score: int = Field(ge=0, le=100)
    model_score: int | None = None
    items: list[AnalysisResultItem]
    general_clauses: list[str] = []
    executive_summary: str = ""
    recommended_clauses: list[RecommendedClause] = []
    is_partial: bool = False


# ---------- Report (external shape) ----------
class Finding(CamelModel):
    requirement: str
    status: FindingStatus
    details: str
    recommendation: str | None = None
    found_clause: str | None = None
    reference: str | None = None
    criticality: Criticality | None = None
    section: Section | None = None
    requirement_id: str | None = None


class Report(CamelModel):
    overall_score: int = Field(ge=0, le=100)
    summary: str
    findings: list[Finding]
    is_partial: bool = False


# ---------- Options / progress events ----------
class AnalyzeOptions(CamelModel):
    provider: Provider
    api_key: str
    model: str | None = None
    file_name: str = "Document"
    critical_function: bool | None = None


class AnalysisEvent(CamelModel):
    type: EventType
    timestamp: float = Field(default_factory=time.time)
    elapsed: float | None = None
    total_steps: int | None = None
    step: int | None = None
    label: str | None = None
    phase: Literal["analyzing", "parsing", "generating"] | None = None
    message: str | None = None
    percent: int | None = None
    content: str | None = None
    accumulated: str | None = None
    code: str | None = None
    data: Report | None = None
    raw: ContractAnalysis | None = None


# ---------- API ----------
class AnalyzeRequest(AnalyzeOptions):
    content: str


class AnalyzeResponse(Report):
    session_id: str
