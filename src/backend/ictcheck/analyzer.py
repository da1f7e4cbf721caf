# analyzer.py
import logging
import os
import time
from contextlib import closing
from typing import Callable

from dotenv import load_dotenv
from tenacity import before_sleep_log, retry, retry_if_exception, stop_after_attempt, wait_fixed

from compliance_rules import validate_analysis
from errors import (
    AnalysisCancelledError, CompletionTimeoutError, ContentValidationError, ICTCheckError, ProviderError,
)
from llm_client import LLMClient, get_client
from models import AnalysisEvent, AnalyzeOptions, ContractAnalysis, Report
from prompts import build_prompt
from report import transform_to_report
from response_parser import parse_ai_response

load_dotenv()

logger = logging.getLogger(__name__)

# ── Analyzer limits (from .env) ──
MIN_CONTENT_CHARS = int(os.getenv("MIN_CONTENT_CHARS", "100"))
MAX_CONTENT_CHARS = int(os.getenv("MAX_CONTENT_CHARS", "120000"))
LLM_MAX_ATTEMPTS = int(os.getenv("LLM_MAX_ATTEMPTS", "1"))
LLM_RETRY_WAIT = float(os.getenv("LLM_RETRY_WAIT", "2"))

TOTAL_STEPS = 4
PROGRESS_EVERY = 50
PROGRESS_CAP = 80

EventCallback = Callable[[AnalysisEvent], None]


# ---------- Input checks ----------
def validate_content(content: str) -> None:
    length = len((content or "").strip())
    if length < MIN_CONTENT_CHARS:
        raise ContentValidationError(
            f"Le contenu du contrat est trop court ({length} caractères, minimum {MIN_CONTENT_CHARS}).",
            code="CONTENT_TOO_SHORT",
        )
    if length > MAX_CONTENT_CHARS:
        raise ContentValidationError(
            f"Le contenu du contrat est trop long ({length} caractères, maximum {MAX_CONTENT_CHARS}).",
            code="CONTENT_TOO_LONG",
        )


# ---------- Completion (retried on transient failures only) ----------
def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, CompletionTimeoutError):
        return True
    return isinstance(exc, ProviderError) and exc.transient


@retry(
    stop=stop_after_attempt(LLM_MAX_ATTEMPTS),
    wait=wait_fixed(LLM_RETRY_WAIT),
    retry=retry_if_exception(_is_transient),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
def _complete(client: LLMClient, system: str, user: str, api_key: str, model: str | None) -> str:
    return client.complete(system, user, api_key, model)


# ---------- Public entrypoints ----------
def analyze_contract_raw(content: str, options: AnalyzeOptions) -> ContractAnalysis:
    """Validated analysis before report shaping: prompt, one completion, parse, business rules."""
    validate_content(content)
    system, user = build_prompt(content, critical_function=options.critical_function)
    client = get_client(options.provider)
    raw = _complete(client, system, user, options.api_key, options.model)
    logger.info("Received %d chars from %s", len(raw), options.provider)
    return validate_analysis(parse_ai_response(raw, options.file_name))


def analyze_contract(content: str, options: AnalyzeOptions) -> Report:
    return transform_to_report(analyze_contract_raw(content, options))


def _run_stream(
    content: str,
    options: AnalyzeOptions,
    on_event: EventCallback | None,
    include_raw: bool,
) -> tuple[ContractAnalysis, Report]:
    """
    Same pipeline over the streaming API, reporting progress through on_event:

      start -> step 1 (prompt) -> step 2 (model) -> chunk/progress... ->
      step 3 (parsing) -> step 4 (report) -> done

    Any failure emits a single error event and is re-raised. A callback that
    raises AnalysisCancelledError stops the run and closes the upstream stream.
    """
    started = time.monotonic()

    def emit(event_type: str, **fields) -> None:
        if on_event is not None:
            on_event(AnalysisEvent(type=event_type, elapsed=round(time.monotonic() - started, 3), **fields))

    try:
        validate_content(content)
    except ContentValidationError as e:
        emit("error", message=str(e), code=e.code)
        raise

    try:
        emit("start", total_steps=TOTAL_STEPS, message=f"Analyse de {options.file_name}")
        emit("step", step=1, total_steps=TOTAL_STEPS, label="Préparation du prompt", phase="analyzing")
        system, user = build_prompt(content, critical_function=options.critical_function)
        client = get_client(options.provider)

        emit("step", step=2, total_steps=TOTAL_STEPS, label="Analyse par le modèle", phase="analyzing")
        accumulated = ""
        with closing(client.stream(system, user, options.api_key, options.model)) as fragments:
            for count, fragment in enumerate(fragments, start=1):
                accumulated += fragment
                emit("chunk", content=fragment, accumulated=accumulated)
                if count % PROGRESS_EVERY == 0:
                    emit(
                        "progress",
                        phase="analyzing",
                        message=f"{len(accumulated)} caractères reçus",
                        percent=min(PROGRESS_CAP, 10 + len(accumulated) // 500),
                    )
        logger.info("Streamed %d chars from %s", len(accumulated), options.provider)

        emit("step", step=3, total_steps=TOTAL_STEPS, label="Interprétation de la réponse", phase="parsing")
        analysis = validate_analysis(parse_ai_response(accumulated, options.file_name))

        emit("step", step=4, total_steps=TOTAL_STEPS, label="Génération du rapport", phase="generating")
        report = transform_to_report(analysis)
    except AnalysisCancelledError:
        logger.info("Streamed analysis of %s cancelled by its consumer", options.file_name)
        raise
    except Exception as e:
        code = e.code if isinstance(e, ICTCheckError) else "INTERNAL_ERROR"
        logger.error("Analysis failed (%s): %s", code, e)
        emit("error", message=str(e), code=code)
        raise

    emit("done", percent=100, data=report, raw=analysis if include_raw else None)
    return analysis, report


def analyze_contract_stream(
    content: str,
    options: AnalyzeOptions,
    on_event: EventCallback | None = None,
    include_raw: bool = False,
) -> Report:
    """Streamed analysis; with include_raw the done event also carries the ContractAnalysis."""
    return _run_stream(content, options, on_event, include_raw)[1]


def analyze_contract_stream_raw(
    content: str,
    options: AnalyzeOptions,
    on_event: EventCallback | None = None,
) -> ContractAnalysis:
    """Streamed analysis returning the validated ContractAnalysis (general and recommended clauses kept)."""
    return _run_stream(content, options, on_event, include_raw=True)[0]
