"""Plain-text extraction from uploaded resume files (PDF, DOCX, TXT)."""

from __future__ import annotations

import logging
from enum import Enum
from io import BytesIO
from pathlib import Path

from career_match.errors import DocumentReadError, UnsupportedDocumentType

logger = logging.getLogger(__name__)


class DocumentType(str, Enum):
    PDF = "pdf"
    WORD = "word"
    TEXT = "text"


SUFFIX_TYPES: dict[str, DocumentType] = {
    ".pdf": DocumentType.PDF,
    ".docx": DocumentType.WORD,
    ".doc": DocumentType.WORD,
    ".txt": DocumentType.TEXT,
    ".md": DocumentType.TEXT,
}

ACCEPTED_SUFFIXES = sorted(s.lstrip(".") for s in SUFFIX_TYPES)


def detect_document_type(filename: str) -> DocumentType:
    """Map a filename to its document type, rejecting anything unsupported."""
    suffix = Path(filename).suffix.lower()
    try:
        return SUFFIX_TYPES[suffix]
    except KeyError:
        raise UnsupportedDocumentType(
            f"Unsupported file format: {suffix or filename!r}. Use PDF, DOCX, or TXT."
        ) from None


def extract_text(data: bytes, filename: str, max_bytes: int | None = None) -> str:
    """Extract raw text from file bytes.

    The type check runs before any parsing library is touched, so an
    unsupported upload never reaches the extractor.
    """
    doc_type = detect_document_type(filename)
    if max_bytes is not None and len(data) > max_bytes:
        raise DocumentReadError(
            f"File is too large ({len(data) // 1024} KB, limit {max_bytes // 1024} KB)."
        )

    logger.debug("Extracting %s text from %s (%d bytes)", doc_type.value, filename, len(data))
    try:
        if doc_type is DocumentType.PDF:
            return _read_pdf(data)
        if doc_type is DocumentType.WORD:
            return _read_docx(data)
        return data.decode("utf-8", errors="replace")
    except Exception as exc:
        logger.error("Text extraction failed for %s", filename, exc_info=True)
        raise DocumentReadError(f"Error reading {filename}: {exc}") from exc


def parse_document(file_path: str | Path, max_bytes: int | None = None) -> str:
    """Read a resume file from disk and return its raw text."""
    path = Path(file_path)
    detect_document_type(path.name)
    return extract_text(path.read_bytes(), path.name, max_bytes=max_bytes)


def _read_pdf(data: bytes) -> str:
    import fitz  # pymupdf

    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def _read_docx(data: bytes) -> str:
    from docx import Document

    doc = Document(BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
