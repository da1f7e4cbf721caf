"""
Unit tests for backend/ictcheck/utils_pdf.py

Covers:
  - load_docs_from_pdf_bytes() with a real minimal PDF
  - load_docs_from_text()
  - documents_to_contract_text()  (multi-document merge)
  - Edge cases: non-PDF bytes, empty text
"""

import pytest
from langchain_core.documents import Document


def _import_utils():
    from utils_pdf import load_docs_from_pdf_bytes, load_docs_from_text, documents_to_contract_text
    return load_docs_from_pdf_bytes, load_docs_from_text, documents_to_contract_text


class TestLoadDocsFromPdfBytes:
    def test_returns_page_documents(self, sample_pdf_bytes):
        load, _, _ = _import_utils()
        docs = load(sample_pdf_bytes, source="contrat.pdf")
        assert len(docs) == 1
        assert docs[0].metadata == {"source": "contrat.pdf", "page": 1}

    def test_extracts_text(self, sample_pdf_bytes):
        load, _, _ = _import_utils()
        docs = load(sample_pdf_bytes)
        assert "CONTRAT DE SERVICES TIC" in docs[0].page_content
        assert "illimite" in docs[0].page_content

    def test_default_source(self, sample_pdf_bytes):
        load, _, _ = _import_utils()
        assert load(sample_pdf_bytes)[0].metadata["source"] == "document.pdf"

    def test_invalid_bytes_raises(self):
        load, _, _ = _import_utils()
        with pytest.raises(Exception):
            load(b"this is not a pdf")


class TestLoadDocsFromText:
    def test_single_document(self):
        _, load_text, _ = _import_utils()
        docs = load_text("Annexe SLA : disponibilité 99,9 %.", "sla.txt")
        assert len(docs) == 1
        assert docs[0].metadata["source"] == "sla.txt"

    def test_blank_text_gives_nothing(self):
        _, load_text, _ = _import_utils()
        assert load_text("   \n ", "vide.txt") == []


class TestDocumentsToContractText:
    def test_one_header_per_source(self):
        _, _, merge = _import_utils()
        docs = [
            Document(page_content="Page 1 du contrat", metadata={"source": "contrat.pdf", "page": 1}),
            Document(page_content="Page 2 du contrat", metadata={"source": "contrat.pdf", "page": 2}),
            Document(page_content="Annexe SLA", metadata={"source": "sla.md", "page": 1}),
        ]
        text = merge(docs)
        assert text.count("=== Document : contrat.pdf ===") == 1
        assert text.count("=== Document : sla.md ===") == 1
        assert text.index("Page 2 du contrat") < text.index("=== Document : sla.md ===")

    def test_empty(self):
        _, _, merge = _import_utils()
        assert merge([]) == ""
