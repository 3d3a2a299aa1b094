"""Syllabus Parser — pulls plain text out of an uploaded syllabus PDF (PyMuPDF)."""
from __future__ import annotations

import fitz

SYLLABUS_CHAR_LIMIT = 20_000
MIN_SYLLABUS_CHARS = 50


def extract_text_from_pdf(pdf_bytes: bytes, max_pages: int | None = None) -> str:
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        parts = []
        for i, page in enumerate(doc):
            if max_pages is not None and i >= max_pages:
                break
            parts.append(page.get_text())
    finally:
        doc.close()
    return "\n".join(parts).strip()


def extract_syllabus_text(pdf_bytes: bytes) -> str:
    """Text of a syllabus PDF, truncated to SYLLABUS_CHAR_LIMIT.

    Raises ValueError for unreadable files or scans with almost no text.
    """
    try:
        text = extract_text_from_pdf(pdf_bytes)
    except RuntimeError as exc:  # fitz file errors derive from RuntimeError
        raise ValueError("Could not read the uploaded PDF") from exc
    if len(text) < MIN_SYLLABUS_CHARS:
        raise ValueError("Could not extract enough text from PDF")
    return text[:SYLLABUS_CHAR_LIMIT]
