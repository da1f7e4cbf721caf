from io import BytesIO
from typing import Iterable, List

import pdfplumber
from langchain_core.documents import Document


def load_docs_from_pdf_bytes(pdf_bytes: bytes, source: str = "document.pdf") -> List[Document]:
    """Return one Document per non-empty page.
    Tables are appended to their page as rows joined by ' | ' so that
    contract annexes laid out as tables are not lost.
    """
    docs: List[Document] = []
    with pdfplumber.open(BytesIO(pdf_bytes)) as pdf:
        for i, page in enumerate(pdf.pages, start=1):
            txt = page.extract_text() or ""
            tables = page.extract_tables() or []
            rows = [" | ".join((c or "").strip() for c in row) for t in tables for row in t]
            table_text = "\n".join(r for r in rows if r.strip(" |"))
            if table_text:
                txt = f"{txt}\n{table_text}" if txt.strip() else table_text
            if txt.strip():
                docs.append(Document(page_content=txt, metadata={"source": source, "page": i}))
    return docs


def load_docs_from_text(text: str, source: str = "document.txt") -> List[Document]:
    if not text.strip():
        return []
    return [Document(page_content=text, metadata={"source": source, "page": 1})]


def documents_to_contract_text(docs: Iterable[Document]) -> str:
    """Merge documents into one contract text, one header per source file."""
    sections: List[str] = []
    current = None
    for d in docs:
        source = d.metadata.get("source", "Document")
        if source != current:
            sections.append(f"=== Document : {source} ===")
            current = source
        sections.append(d.page_content.strip())
    return "\n\n".join(sections)
