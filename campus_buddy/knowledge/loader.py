# campus_buddy/knowledge/loader.py

"""
Local text extraction for faculty uploads.

Pipeline contract:
storage download → loader (kind + local text) → DocumentAIClient → college_data.parsed_content

Formats we can read locally (plain text, PDF, DOCX) are extracted here;
the rest get a short description so the AI pass still has something to
structure.
"""

import io
import logging

import docx
from pypdf import PdfReader

from campus_buddy.config import MAX_DOCUMENT_CHARACTERS


logger = logging.getLogger(__name__)


TEXT = "text"
PDF = "pdf"
IMAGE = "image"
WORD = "word"
LEGACY_WORD = "legacy_word"
EXCEL = "excel"
POWERPOINT = "powerpoint"
GENERIC = "generic"


# ============================================================
# TYPE DETECTION
# ============================================================

def detect_kind(file_name: str, file_type: str) -> str:

    name = (file_name or "").lower()
    mime = (file_type or "").lower()

    if "text/" in mime or name.endswith(".txt"):
        return TEXT

    if name.endswith(".pdf"):
        return PDF

    if "image/" in mime:
        return IMAGE

    if name.endswith(".docx"):
        return WORD

    if name.endswith(".doc"):
        return LEGACY_WORD

    if name.endswith((".xlsx", ".xls")):
        return EXCEL

    if name.endswith((".pptx", ".ppt")):
        return POWERPOINT

    return GENERIC


# ============================================================
# SAFETY: CHARACTER LIMIT
# ============================================================

def enforce_character_limit(text: str) -> str:

    if not text:
        return ""

    if len(text) > MAX_DOCUMENT_CHARACTERS:
        return text[:MAX_DOCUMENT_CHARACTERS]

    return text


# ============================================================
# LOADERS
# ============================================================

def load_plain_text(data: bytes) -> str:

    return enforce_character_limit(data.decode("utf-8", errors="replace"))


def load_pdf_text(data: bytes) -> str:

    reader = PdfReader(io.BytesIO(data))

    parts = []

    for page in reader.pages:

        text = page.extract_text()

        if text:
            parts.append(text)

    return enforce_character_limit("\n".join(parts))


def load_docx_text(data: bytes) -> str:

    document = docx.Document(io.BytesIO(data))

    parts = [p.text for p in document.paragraphs if p.text.strip()]

    # Timetables and contact lists usually live in tables
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                parts.append(" | ".join(cells))

    return enforce_character_limit("\n".join(parts))


# ============================================================
# PLACEHOLDERS
# ============================================================

def describe_document(kind: str, file_name: str, file_type: str) -> str:

    if kind == PDF:
        return (
            f"PDF Document: {file_name}\nThis PDF contains structured academic "
            "information that needs to be processed for student queries."
        )

    if kind in (WORD, LEGACY_WORD):
        return (
            f"Word Document: {file_name}\nThis Microsoft Word document contains "
            "detailed academic information, possibly including tables, lists, "
            "and formatted content."
        )

    if kind == EXCEL:
        return (
            f"Excel Document: {file_name}\nThis spreadsheet contains structured "
            "data in tabular format, possibly including timetables, contact "
            "lists, or academic schedules."
        )

    if kind == POWERPOINT:
        return (
            f"PowerPoint Document: {file_name}\nThis presentation contains "
            "slides with academic information, possibly including visual "
            "elements, bullet points, and structured content."
        )

    return (
        f"Document: {file_name}\nFile type: {file_type}\nThis document "
        "contains information relevant to the college and academic queries."
    )


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def load_text(data: bytes, kind: str, file_name: str, file_type: str) -> str:
    """
    Best local text for a non-image upload.

    Extraction errors are logged and fall back to the description;
    images never come through here (they go to OCR).
    """

    if kind == TEXT:
        return load_plain_text(data)

    extracted = ""

    try:

        if kind == PDF:
            extracted = load_pdf_text(data)

        elif kind == WORD:
            extracted = load_docx_text(data)

    except Exception as e:

        logger.warning(
            "Local text extraction failed",
            extra={"file_name": file_name, "kind": kind, "error": str(e)},
        )

    if extracted.strip():
        return extracted

    return describe_document(kind, file_name, file_type)
