import logging
import os
import queue
import threading
import uuid
from typing import List

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from analyzer import analyze_contract, analyze_contract_stream
from checklist import (
    CHECKLIST, get_requirements_by_applicability, get_requirements_by_criticality, get_requirements_by_section,
)
from errors import (
    AnalysisCancelledError, CompletionTimeoutError, ContentValidationError, ICTCheckError, ProviderError,
    ResponseFormatError, UnknownProviderError,
)
from llm_client import CLIENTS
from logging_config import setup_logging
from models import AnalysisEvent, AnalyzeOptions, AnalyzeRequest, AnalyzeResponse, Report, Requirement
from utils_pdf import documents_to_contract_text, load_docs_from_pdf_bytes, load_docs_from_text

load_dotenv()

# ── configurable via .env ──
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
API_PORT = int(os.getenv("API_PORT", "8000"))

TEXT_SUFFIXES = (".txt", ".md")

setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="ICT Contract Compliance Checker", version="3.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

ERROR_STATUS = (
    (ContentValidationError, 400),
    (UnknownProviderError, 400),
    (CompletionTimeoutError, 504),
    (ProviderError, 502),
    (ResponseFormatError, 502),
)


def _status_for(exc: ICTCheckError) -> int:
    for cls, status in ERROR_STATUS:
        if isinstance(exc, cls):
            return status
    return 500


@app.exception_handler(ICTCheckError)
async def ict_check_error_handler(request: Request, exc: ICTCheckError):
    status = _status_for(exc)
    logger.warning("%s %s -> %d %s: %s", request.method, request.url.path, status, exc.code, exc)
    return JSONResponse(status_code=status, content={"code": exc.code, "detail": str(exc)})


def _response(report: Report, session_id: str | None) -> AnalyzeResponse:
    return AnalyzeResponse(session_id=session_id or str(uuid.uuid4()), **report.model_dump())


@app.get("/health")
async def health():
    return {"status": "ok", "requirements": len(CHECKLIST), "providers": list(CLIENTS)}


@app.get("/checklist", response_model=List[Requirement])
async def checklist(section: str | None = None, criticality: str | None = None, applicability: str | None = None):
    reqs = list(CHECKLIST)
    if section:
        reqs = [r for r in reqs if r in get_requirements_by_section(section)]
    if criticality:
        reqs = [r for r in reqs if r in get_requirements_by_criticality(criticality.upper())]
    if applicability:
        reqs = [r for r in reqs if r in get_requirements_by_applicability(applicability.upper())]
    return reqs


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(req: AnalyzeRequest, session_id: str | None = None):
    """Blocking analysis; FastAPI runs sync endpoints in its threadpool."""
    report = analyze_contract(req.content, req)
    return _response(report, session_id)


async def _read_upload(file: UploadFile):
    name = file.filename or "document"
    data = await file.read()
    lowered = name.lower()
    if lowered.endswith(".pdf"):
        try:
            return await run_in_threadpool(load_docs_from_pdf_bytes, data, name)
        except Exception as e:
            raise HTTPException(status_code=400, detail=f"Could not read PDF {name}: {e}") from e
    if lowered.endswith(TEXT_SUFFIXES):
        return load_docs_from_text(data.decode("utf-8", errors="replace"), name)
    raise HTTPException(status_code=400, detail=f"Unsupported file type: {name}. Upload PDF, TXT or MD files.")


@app.post("/analyze/files", response_model=AnalyzeResponse)
async def analyze_files(
    files: List[UploadFile] = File(...),
    provider: str = Form(...),
    api_key: str = Form(..., alias="apiKey"),
    model: str | None = Form(None),
    critical_function: bool | None = Form(None, alias="criticalFunction"),
    session_id: str | None = None,
):
    """Merge every uploaded document into one contract text and analyze it."""
    if provider not in CLIENTS:
        raise UnknownProviderError(provider)
    docs = []
    for f in files:
        docs.extend(await _read_upload(f))
    names = [f.filename or "document" for f in files]
    options = AnalyzeOptions(
        provider=provider,
        api_key=api_key,
        model=model or None,
        file_name=", ".join(names),
        critical_function=critical_function,
    )
    content = documents_to_contract_text(docs)
    report = await run_in_threadpool(analyze_contract, content, options)
    return _response(report, session_id)


def _event_frames(req: AnalyzeRequest, include_raw: bool = False):
    """
    Run the analysis in a worker thread and yield one SSE frame per event.
    Closing this generator (client disconnect) cancels the worker, which
    closes the upstream completion stream at its next event.
    """
    events: "queue.Queue[AnalysisEvent | None]" = queue.Queue()
    cancelled = threading.Event()

    def forward(event: AnalysisEvent):
        if cancelled.is_set():
            raise AnalysisCancelledError("Client disconnected")
        events.put(event)

    def worker():
        try:
            analyze_contract_stream(req.content, req, on_event=forward, include_raw=include_raw)
        except AnalysisCancelledError:
            logger.info("Streamed analysis stopped after client disconnect")
        except ICTCheckError as e:
            logger.info("Streamed analysis ended with %s", e.code)
        except Exception:
            logger.exception("Streamed analysis crashed")
        finally:
            events.put(None)

    threading.Thread(target=worker, daemon=True).start()
    try:
        while True:
            event = events.get()
            if event is None:
                break
            # clients rebuild the text from the chunk contents
            payload = event.model_dump_json(by_alias=True, exclude_none=True, exclude={"accumulated"})
            yield f"data: {payload}\n\n"
    finally:
        cancelled.set()


@app.post("/analyze/stream")
def analyze_stream(req: AnalyzeRequest, include_raw: bool = False):
    """Server-sent events: one AnalysisEvent per frame, ending with done or error."""
    return StreamingResponse(
        _event_frames(req, include_raw),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=API_PORT)
